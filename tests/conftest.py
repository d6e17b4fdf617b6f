"""Shared pytest fixtures for the collector test suite.

Provides PCM audio samples, a manually driven sleep for the elapsed-time
tracker, a stream capture device, and a fully wired ``CollectionSession``
backed by an in-memory corpus and a mock transport.
"""

import asyncio
import math
import random
import struct
from unittest.mock import AsyncMock

import pytest

from src.core.config import Settings
from src.services import orchestrator
from src.services.audio.device import CaptureDevice, CaptureHandle, StreamCaptureDevice
from src.services.corpus.loader import CorpusLoader
from src.services.recording.controller import RecordingController
from src.services.recording.timer import ElapsedTimer
from src.services.submission.transport import BaseTransport

# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono).

    Returns:
        bytes: Raw PCM audio data.
    """
    sample_rate = 16000
    duration = 1.0
    frequency = 440.0
    amplitude = 16000  # ~50% of max int16

    samples = []
    for i in range(int(sample_rate * duration)):
        value = int(amplitude * math.sin(2 * math.pi * frequency * i / sample_rate))
        samples.append(struct.pack("<h", value))
    return b"".join(samples)


# ---------------------------------------------------------------------------
# Timer Fixtures
# ---------------------------------------------------------------------------


class ManualSleep:
    """Stand-in for ``asyncio.sleep`` that only returns when advanced."""

    def __init__(self) -> None:
        self._permits = asyncio.Semaphore(0)

    async def __call__(self, _delay: float) -> None:
        await self._permits.acquire()

    async def advance(self, ticks: int = 1) -> None:
        """Let ``ticks`` sleeps complete and give the loop time to react."""
        for _ in range(ticks):
            self._permits.release()
            for _ in range(5):
                await asyncio.sleep(0)


@pytest.fixture
def manual_sleep():
    return ManualSleep()


@pytest.fixture
async def timer(manual_sleep):
    """ElapsedTimer whose seconds only pass via ``manual_sleep.advance``."""
    t = ElapsedTimer(sleep=manual_sleep)
    yield t
    t.close()


# ---------------------------------------------------------------------------
# Recording Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stream_device():
    return StreamCaptureDevice()


class GatedDevice(CaptureDevice):
    """Device whose acquisition blocks until the test opens ``gate``."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.acquiring = asyncio.Event()
        self.handle: CaptureHandle | None = None

    async def acquire(self, on_segment):
        self.acquiring.set()
        await self.gate.wait()
        self.handle = CaptureHandle(on_segment)
        return self.handle

    def release(self, handle: CaptureHandle) -> None:
        handle.close()


@pytest.fixture
def gated_device():
    return GatedDevice()


@pytest.fixture
async def controller(stream_device, timer):
    c = RecordingController(stream_device, timer=timer)
    yield c
    c.close()


@pytest.fixture
def mock_transport():
    """Transport mock whose commit succeeds immediately."""
    return AsyncMock(spec=BaseTransport)


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        corpus_url="http://corpus.test/prompts.csv",
        draw_size=20,
        session_limit=5,
        submit_delay=0.0,
        submissions_dir=str(tmp_path / "submissions"),
    )


@pytest.fixture
def corpus():
    return tuple(f"prompt {i}" for i in range(30))


@pytest.fixture
def mock_loader(corpus):
    loader = AsyncMock(spec=CorpusLoader)
    loader.load.return_value = corpus
    loader.used_fallback = False
    return loader


@pytest.fixture(autouse=True)
def _reset_collector():
    """Ensure the collector singleton is cleared before and after each test."""
    orchestrator._collector = None
    yield
    if orchestrator._collector is not None:
        orchestrator._collector.close()
    orchestrator._collector = None


@pytest.fixture
async def collector(mock_loader, controller, mock_transport, test_settings):
    """Initialized and registered CollectionSession with a fixed shuffle seed."""
    return await orchestrator.start_collector(
        loader=mock_loader,
        controller=controller,
        transport=mock_transport,
        settings=test_settings,
        rng=random.Random(7),
    )
