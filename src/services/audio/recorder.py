"""Audio buffering for a single recording attempt.

Accumulates incoming PCM segments while capturing and finalizes them into
one WAV artifact when the take is stopped.
"""

from dataclasses import dataclass, field

from src.core.exceptions import InvalidStateError
from src.services.audio.processor import AudioProcessor


@dataclass
class RecordedArtifact:
    """A finished take: WAV bytes tied to the attempt's identifier.

    The artifact is released exactly once; after that its audio is gone.
    """

    identifier: str
    duration: float
    _wav: bytes = field(repr=False)
    released: bool = False

    @property
    def wav_bytes(self) -> bytes:
        if self.released:
            raise InvalidStateError("Recording has already been released")
        return self._wav

    @property
    def size(self) -> int:
        return 0 if self.released else len(self._wav)

    def release(self) -> bool:
        """Drop the audio. Returns False if it was already released."""
        if self.released:
            return False
        self._wav = b""
        self.released = True
        return True


class AudioBuffer:
    """Accumulates PCM segments pushed by the capture device.

    Empty segments are ignored. ``finalize()`` concatenates everything
    received so far into a ``RecordedArtifact``.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        self._segments: list[bytes] = []
        self._size = 0
        self._processor = AudioProcessor(sample_rate, sample_width, channels)

    @property
    def segment_count(self) -> int:
        return len(self._segments)

    @property
    def size_bytes(self) -> int:
        return self._size

    @property
    def buffered_duration(self) -> float:
        """Duration of currently buffered audio in seconds."""
        return self._size / (self._processor.sample_rate * self._processor.frame_size)

    def add_segment(self, data: bytes) -> None:
        """Append one PCM segment to the buffer."""
        if not data:
            return
        self._segments.append(bytes(data))
        self._size += len(data)

    def finalize(self, identifier: str) -> RecordedArtifact:
        """Join all segments into a WAV artifact and clear the buffer."""
        pcm = b"".join(self._segments)
        self.reset()
        return RecordedArtifact(
            identifier=identifier,
            duration=self._processor.duration(pcm),
            _wav=self._processor.to_wav_bytes(pcm),
        )

    def reset(self) -> None:
        """Clear the buffer."""
        self._segments.clear()
        self._size = 0
