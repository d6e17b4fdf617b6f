"""
Audio module - Capture devices, PCM buffering and WAV encoding.
"""

from .device import (
    CaptureDevice,
    CaptureHandle,
    SoundDeviceCapture,
    StreamCaptureDevice,
    create_capture_device,
)
from .processor import AudioProcessor
from .recorder import AudioBuffer, RecordedArtifact

__all__ = [
    "AudioProcessor",
    "AudioBuffer",
    "CaptureDevice",
    "CaptureHandle",
    "RecordedArtifact",
    "SoundDeviceCapture",
    "StreamCaptureDevice",
    "create_capture_device",
]
