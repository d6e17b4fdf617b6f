"""Capture device capability.

A device is a two-phase resource: ``acquire()`` opens it and returns a
``CaptureHandle``, ``release()`` closes it. While open, audio arrives as
PCM segments pushed to the callback given at acquisition.
"""

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from src.core.exceptions import DeviceDeniedError
from src.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)

SegmentCallback = Callable[[bytes], None]

_handle_ids = itertools.count(1)


class CaptureHandle:
    """An open capture session owned by exactly one recorder."""

    def __init__(self, on_segment: SegmentCallback) -> None:
        self.handle_id = next(_handle_ids)
        self._on_segment = on_segment
        self.closed = False

    def push(self, segment: bytes) -> None:
        """Deliver one segment to the owner; dropped once closed or empty."""
        if self.closed or not segment:
            return
        self._on_segment(segment)

    def close(self) -> None:
        self.closed = True


class CaptureDevice(ABC):
    """Interface that every capture backend must implement."""

    @abstractmethod
    async def acquire(self, on_segment: SegmentCallback) -> CaptureHandle:
        """Open the device and start delivering segments.

        Args:
            on_segment: Called on the event loop with each PCM segment.

        Returns:
            The handle identifying this capture session.

        Raises:
            DeviceDeniedError: If the device is unavailable or access is refused.
        """

    @abstractmethod
    def release(self, handle: CaptureHandle) -> None:
        """Stop delivering segments and free the device. Safe to call twice."""


class StreamCaptureDevice(CaptureDevice):
    """Device fed by an external producer, e.g. the capture WebSocket.

    ``feed()`` forwards bytes to the open handle; with no open handle the
    bytes are dropped. ``enabled=False`` behaves like a refused permission.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._handle: CaptureHandle | None = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def acquire(self, on_segment: SegmentCallback) -> CaptureHandle:
        if not self.enabled:
            raise DeviceDeniedError()
        if self._handle is not None:
            raise DeviceDeniedError("Capture device is already in use")
        self._handle = CaptureHandle(on_segment)
        logger.debug("Stream capture handle %s opened", self._handle.handle_id)
        return self._handle

    def release(self, handle: CaptureHandle) -> None:
        handle.close()
        if self._handle is handle:
            self._handle = None
            logger.debug("Stream capture handle %s released", handle.handle_id)

    def feed(self, data: bytes) -> bool:
        """Push ``data`` to the open handle. Returns False if nothing is capturing."""
        if self._handle is None:
            return False
        self._handle.push(data)
        return True


class SoundDeviceCapture(CaptureDevice):
    """Local microphone capture using sounddevice.

    The PortAudio callback runs on a driver thread; blocks are converted to
    16-bit PCM and handed to the event loop with ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        device: int | None = None,
        block_ms: int = 100,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.blocksize = int(sample_rate * block_ms / 1000)
        self._processor = AudioProcessor(sample_rate, 2, channels)
        self._streams: dict[int, object] = {}

    async def acquire(self, on_segment: SegmentCallback) -> CaptureHandle:
        loop = asyncio.get_running_loop()
        handle = CaptureHandle(on_segment)

        def _callback(indata, frames, time_info, status) -> None:
            if status:
                logger.debug("sounddevice status: %s", status)
            # Copy decouples the segment from the driver buffer
            loop.call_soon_threadsafe(handle.push, self._processor.float_to_pcm(indata.copy()))

        def _open():
            import sounddevice as sd

            stream = sd.InputStream(
                samplerate=self.sample_rate,
                device=self.device,
                channels=self.channels,
                dtype="float32",
                blocksize=self.blocksize,
                callback=_callback,
            )
            stream.start()
            return stream

        try:
            stream = await asyncio.to_thread(_open)
        except Exception as exc:
            logger.warning("Microphone unavailable: %s", exc)
            raise DeviceDeniedError() from exc

        self._streams[handle.handle_id] = stream
        return handle

    def release(self, handle: CaptureHandle) -> None:
        handle.close()
        stream = self._streams.pop(handle.handle_id, None)
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception:
            logger.warning("Failed to close microphone stream %s", handle.handle_id)


def create_capture_device(backend: str, **kwargs) -> CaptureDevice:
    """
    Factory function to create a capture device based on backend name.

    Args:
        backend: Capture backend ("stream", "sounddevice")
        **kwargs: Backend-specific configuration

    Returns:
        CaptureDevice implementation instance

    Raises:
        ValueError: If backend is unknown
    """
    if backend == "stream":
        return StreamCaptureDevice(**kwargs)
    elif backend == "sounddevice":
        return SoundDeviceCapture(**kwargs)
    else:
        raise ValueError(f"Unknown capture backend: {backend}")
