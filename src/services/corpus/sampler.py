"""Random session draws from the prompt corpus."""

import random
from collections.abc import Sequence


def build_session(
    corpus: Sequence[str],
    draw_size: int,
    rng: random.Random | None = None,
) -> list[str]:
    """Shuffle a copy of the corpus and keep the first ``draw_size`` prompts.

    Args:
        corpus: The full prompt pool; left untouched.
        draw_size: Upper bound on the session length.
        rng: Random source (module-level ``random`` if not provided).

    Returns:
        ``min(draw_size, len(corpus))`` prompts drawn without replacement.
    """
    shuffled = list(corpus)
    (rng or random).shuffle(shuffled)
    return shuffled[: max(min(draw_size, len(shuffled)), 0)]
