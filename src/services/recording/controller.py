"""Per-prompt recording lifecycle.

``RecordingController`` owns the capture handle and moves a single attempt
through ``idle → recording → review`` and back to ``idle`` (retake or
commit). Only one attempt is ever live.

Usage::

    controller = RecordingController(StreamCaptureDevice())
    await controller.start()
    artifact = await controller.stop()
    await controller.retake()
"""

import asyncio
import logging
from collections.abc import Callable

from src.core.models import RecorderResponse, RecorderState
from src.core.utils import format_elapsed
from src.services.audio.device import CaptureDevice, CaptureHandle
from src.services.audio.recorder import AudioBuffer, RecordedArtifact
from src.services.identifiers import generate_uoh_id
from src.services.recording.timer import ElapsedTimer

logger = logging.getLogger(__name__)


class RecordingController:
    """State machine for one recording attempt at a time.

    Args:
        device: Capture capability to acquire on each start.
        timer: Elapsed-time tracker (a fresh ``ElapsedTimer`` if omitted).
        id_factory: Mints the identifier for each attempt.
        sample_rate: PCM sample rate of incoming segments.
        channels: PCM channel count of incoming segments.
    """

    def __init__(
        self,
        device: CaptureDevice,
        timer: ElapsedTimer | None = None,
        id_factory: Callable[[], str] = generate_uoh_id,
        sample_rate: int = 16000,
        channels: int = 1,
    ) -> None:
        self._device = device
        self.timer = timer or ElapsedTimer()
        self._new_id = id_factory
        self._buffer = AudioBuffer(sample_rate=sample_rate, channels=channels)
        self._lock = asyncio.Lock()
        self._handle: CaptureHandle | None = None
        # Bumped by close(); a start() that spans a teardown gives its handle back
        self._generation = 0
        self.state = RecorderState.idle
        self.identifier: str | None = None
        self.artifact: RecordedArtifact | None = None

    @property
    def device(self) -> CaptureDevice:
        return self._device

    @property
    def buffered_bytes(self) -> int:
        return self._buffer.size_bytes

    async def start(self) -> bool:
        """Acquire the device and begin capturing.

        Returns:
            True if capture started, False if not idle (no-op) or if
            ``close()`` ran while the device was being acquired.

        Raises:
            DeviceDeniedError: If the device refuses; state stays ``idle``
                and no identifier is consumed.
        """
        async with self._lock:
            if self.state is not RecorderState.idle:
                return False

            self._buffer.reset()
            generation = self._generation
            handle = await self._device.acquire(self._buffer.add_segment)
            if generation != self._generation:
                self._device.release(handle)
                logger.info("Controller closed while acquiring the device; capture abandoned")
                return False
            self._handle = handle
            self.identifier = self._new_id()
            self.state = RecorderState.recording
            self.timer.reset()
            self.timer.start()
            logger.info("Recording started: %s", self.identifier)
            return True

    async def stop(self) -> RecordedArtifact | None:
        """Release the device and finalize the take for review.

        Returns:
            The finished artifact, or None if not recording (no-op).
        """
        async with self._lock:
            if self.state is not RecorderState.recording:
                return None

            self._release_device()
            self.timer.stop()
            self.artifact = self._buffer.finalize(self.identifier)
            self.state = RecorderState.review
            logger.info(
                "Recording stopped: %s (%.2fs, %d bytes)",
                self.identifier,
                self.artifact.duration,
                self.artifact.size,
            )
            return self.artifact

    async def retake(self) -> bool:
        """Discard the take under review and return to ``idle``."""
        async with self._lock:
            if self.state is not RecorderState.review:
                return False
            logger.info("Retake requested, discarding %s", self.identifier)
            self._discard()
            return True

    def reset(self) -> None:
        """Return to ``idle`` after a successful commit."""
        self._discard()

    def close(self) -> None:
        """Teardown: stop the timer and release every held resource."""
        self._generation += 1
        self.timer.close()
        self._release_device()
        self._buffer.reset()
        self._discard()

    def _release_device(self) -> None:
        if self._handle is not None:
            self._device.release(self._handle)
            self._handle = None

    def _discard(self) -> None:
        if self.artifact is not None:
            self.artifact.release()
            self.artifact = None
        self.identifier = None
        self.timer.reset()
        self.state = RecorderState.idle

    def snapshot(self) -> RecorderResponse:
        return RecorderResponse(
            state=self.state,
            identifier=self.identifier,
            elapsed=self.timer.elapsed,
            elapsed_display=format_elapsed(self.timer.elapsed),
            audio_bytes=self.artifact.size if self.artifact else self._buffer.size_bytes,
        )
