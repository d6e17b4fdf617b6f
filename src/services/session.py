"""Session bookkeeping: drawn prompts, slot statuses and completion.

The builder side (``reset``) replaces the prompt list; the submission side
(``mark_used``, ``advance``, ``complete``) records commits. Statuses are
exposed read-only.
"""

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from src.core.exceptions import InvalidStateError
from src.core.models import PromptStatus


class SessionState:
    """Aggregate state for one participant sitting.

    Args:
        prompts: The drawn session prompts.
        session_limit: Commits needed to complete the session.
    """

    def __init__(self, prompts: Sequence[str] = (), session_limit: int = 5) -> None:
        self.session_limit = session_limit
        self._prompts: tuple[str, ...] = tuple(prompts)
        self._statuses: dict[int, PromptStatus] = {}
        self._current_index = 0
        self._completed = False

    @property
    def prompts(self) -> tuple[str, ...]:
        return self._prompts

    @property
    def statuses(self) -> Mapping[int, PromptStatus]:
        return MappingProxyType(self._statuses)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def completed_count(self) -> int:
        return sum(1 for status in self._statuses.values() if status is PromptStatus.used)

    @property
    def target(self) -> int:
        """Commits that complete this session, capped by the number of prompts."""
        if not self._prompts:
            return self.session_limit
        return min(self.session_limit, len(self._prompts))

    @property
    def progress(self) -> float:
        if self.target <= 0:
            return 1.0
        return min(self.completed_count / self.target, 1.0)

    @property
    def current_prompt(self) -> str | None:
        """Prompt for the current slot, or None once the session is complete."""
        if self._completed or self._current_index >= len(self._prompts):
            return None
        return self._prompts[self._current_index]

    # -- submission side --

    def mark_used(self, index: int) -> None:
        if index in self._statuses:
            raise InvalidStateError(f"Slot {index} is already used")
        self._statuses[index] = PromptStatus.used

    def advance(self) -> None:
        self._current_index += 1

    def complete(self) -> None:
        self._completed = True

    # -- builder side --

    def reset(self, prompts: Sequence[str]) -> None:
        """Start over with a freshly drawn prompt list."""
        self._prompts = tuple(prompts)
        self._statuses.clear()
        self._current_index = 0
        self._completed = False
