"""Audio processing utilities for PCM data.

Converts device sample blocks to 16-bit PCM and wraps PCM in a WAV
container for playback and submission.
"""

import io
import wave

import numpy as np


class AudioProcessor:
    """Handles PCM audio data conversion.

    Provides utilities for converting float sample blocks to raw PCM bytes,
    measuring PCM duration, and encoding PCM as in-memory WAV.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        """Initialize the audio processor.

        Args:
            sample_rate: Audio sample rate in Hz (default: 16 kHz).
            sample_width: Bytes per sample (2 = 16-bit signed PCM).
            channels: Number of audio channels (1 = mono).
        """
        self.sample_rate = sample_rate
        self.sample_width = sample_width
        self.channels = channels

    @property
    def frame_size(self) -> int:
        return self.sample_width * self.channels

    def float_to_pcm(self, samples: np.ndarray) -> bytes:
        """Convert float32 samples in [-1.0, 1.0] to 16-bit signed PCM bytes.

        Args:
            samples: Array shaped ``(frames,)`` or ``(frames, channels)``.

        Returns:
            Little-endian interleaved PCM bytes.
        """
        clipped = np.clip(samples, -1.0, 1.0)
        return (clipped * 32767.0).astype("<i2").tobytes()

    def duration(self, pcm_data: bytes) -> float:
        """Duration in seconds of ``pcm_data``."""
        return len(pcm_data) / (self.sample_rate * self.frame_size)

    def to_wav_bytes(self, pcm_data: bytes) -> bytes:
        """Wrap raw PCM bytes in a WAV container.

        Trailing bytes that do not fill a whole frame are dropped.

        Args:
            pcm_data: Raw PCM bytes (16-bit, mono by default).

        Returns:
            The complete WAV file as bytes (header only if ``pcm_data`` is empty).
        """
        usable = len(pcm_data) - (len(pcm_data) % self.frame_size)
        out = io.BytesIO()
        with wave.open(out, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(self.sample_width)
            wf.setframerate(self.sample_rate)
            wf.writeframes(pcm_data[:usable])
        return out.getvalue()
