"""
Submission transports.

A transport persists one audio/transcript pair under the dataset naming
convention ``audio/<id>.wav`` + ``transcription/<id>.txt``. Failures are
raised as exceptions; the pipeline decides what they mean.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


def submission_paths(identifier: str) -> tuple[str, str]:
    """Object keys for the audio file and the transcript of ``identifier``."""
    return f"audio/{identifier}.wav", f"transcription/{identifier}.txt"


class BaseTransport(ABC):
    """Interface that every submission backend must implement."""

    @abstractmethod
    async def commit(self, identifier: str, audio_bytes: bytes, transcript: str) -> None:
        """Persist the pair for ``identifier``.

        Args:
            identifier: The attempt's UOH identifier.
            audio_bytes: Complete WAV file.
            transcript: Prompt text the participant read.

        Raises:
            Exception: Any failure; nothing is considered committed.
        """


class SimulatedTransport(BaseTransport):
    """Logs the intended targets and waits out a fixed network delay."""

    def __init__(self, repo_url: str, delay: float = 0.8) -> None:
        self._repo_url = repo_url.rstrip("/")
        self._delay = delay

    async def commit(self, identifier: str, audio_bytes: bytes, transcript: str) -> None:
        audio_key, text_key = submission_paths(identifier)
        logger.info("Simulated upload to %s/%s (%d bytes)", self._repo_url, audio_key, len(audio_bytes))
        logger.info("Simulated upload to %s/%s", self._repo_url, text_key)
        await asyncio.sleep(self._delay)


class LocalDatasetTransport(BaseTransport):
    """Writes the pair below a local dataset root.

    The transcript is removed again if the audio write fails, so the
    directory only ever holds matched pairs.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _write_pair(self, identifier: str, audio_bytes: bytes, transcript: str) -> None:
        audio_key, text_key = submission_paths(identifier)
        audio_path = self._root / audio_key
        text_path = self._root / text_key
        if audio_path.exists() or text_path.exists():
            raise FileExistsError(f"Submission already exists for {identifier}")

        text_path.parent.mkdir(parents=True, exist_ok=True)
        audio_path.parent.mkdir(parents=True, exist_ok=True)
        text_path.write_text(transcript, encoding="utf-8")
        try:
            audio_path.write_bytes(audio_bytes)
        except OSError:
            text_path.unlink(missing_ok=True)
            raise

    async def commit(self, identifier: str, audio_bytes: bytes, transcript: str) -> None:
        await asyncio.to_thread(self._write_pair, identifier, audio_bytes, transcript)
        logger.info("Stored submission %s under %s", identifier, self._root)


def create_transport(kind: str, **kwargs) -> BaseTransport:
    """
    Factory function to create a transport based on configuration.

    Args:
        kind: Transport name ("simulated", "local")
        **kwargs: Transport-specific configuration

    Returns:
        BaseTransport implementation instance

    Raises:
        ValueError: If kind is unknown
    """
    if kind == "simulated":
        return SimulatedTransport(**kwargs)
    elif kind == "local":
        return LocalDatasetTransport(**kwargs)
    else:
        raise ValueError(f"Unknown submission transport: {kind}")
