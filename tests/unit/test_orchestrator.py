"""Unit tests for the collection session orchestrator."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import (
    DeviceDeniedError,
    InvalidStateError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from src.core.models import PromptStatus, RecorderState
from src.services import orchestrator
from src.services.audio.device import StreamCaptureDevice
from src.services.orchestrator import CollectionSession

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _record_and_submit(collector, stream_device):
    await collector.start_recording()
    stream_device.feed(b"\x00\x01" * 160)
    await collector.stop_recording()
    return await collector.submit()


# ---------------------------------------------------------------------------
# Singleton lifecycle
# ---------------------------------------------------------------------------


async def test_start_collector_registers_singleton(collector, corpus):
    assert orchestrator.get_collector() is collector
    assert collector.corpus == corpus
    assert len(collector.state.prompts) == 20
    assert set(collector.state.prompts) <= set(corpus)


async def test_get_collector_before_start_raises():
    with pytest.raises(InvalidStateError):
        orchestrator.get_collector()


async def test_cleanup_releases_take_in_review(collector, stream_device):
    await collector.start_recording()
    artifact = await collector.controller.stop()
    await orchestrator.cleanup()
    assert artifact.released is True
    assert orchestrator._collector is None


async def test_cleanup_without_collector_is_noop():
    await orchestrator.cleanup()


# ---------------------------------------------------------------------------
# Session flow
# ---------------------------------------------------------------------------


async def test_full_session_completes(collector, stream_device):
    for _ in range(5):
        result = await _record_and_submit(collector, stream_device)
    assert result.session_completed is True

    snapshot = collector.snapshot()
    assert snapshot.completed is True
    assert snapshot.completed_count == 5
    assert snapshot.current_prompt is None
    assert snapshot.progress == 1.0

    with pytest.raises(InvalidStateError):
        await collector.start_recording()


async def test_retake_keeps_slot(collector, stream_device):
    prompt = collector.state.current_prompt
    await collector.start_recording()
    await collector.stop_recording()
    response = await collector.retake()
    assert response.state is RecorderState.idle
    assert collector.state.current_index == 0
    assert collector.state.statuses == {}
    assert collector.state.current_prompt == prompt


async def test_new_session_redraws_and_resets(collector, stream_device, mock_loader):
    await _record_and_submit(collector, stream_device)
    snapshot = await collector.new_session()
    assert snapshot.current_index == 0
    assert snapshot.statuses == {}
    assert snapshot.completed is False
    assert snapshot.session_size == 20
    # Corpus is reused, not fetched again
    mock_loader.load.assert_awaited_once()


async def test_new_session_while_recording_rejected(collector):
    await collector.start_recording()
    with pytest.raises(InvalidStateError):
        await collector.new_session()


async def test_new_session_discards_review(collector):
    await collector.start_recording()
    artifact = await collector.controller.stop()
    await collector.new_session()
    assert artifact.released is True
    assert collector.controller.state is RecorderState.idle


async def test_retake_during_submission_rejected(collector, stream_device, mock_transport):
    gate = asyncio.Event()

    async def slow_commit(*args):
        await gate.wait()

    mock_transport.commit.side_effect = slow_commit
    await collector.start_recording()
    await collector.stop_recording()
    pending = asyncio.create_task(collector.submit())
    await asyncio.sleep(0)

    assert collector.snapshot().submitting is True
    with pytest.raises(SubmissionInProgressError):
        await collector.retake()
    with pytest.raises(SubmissionInProgressError):
        await collector.new_session()

    gate.set()
    await pending
    assert collector.state.statuses == {0: PromptStatus.used}


async def test_recorded_audio_only_in_review(collector, stream_device):
    with pytest.raises(InvalidStateError):
        collector.recorded_audio()
    await collector.start_recording()
    await collector.stop_recording()
    assert collector.recorded_audio().startswith(b"RIFF")


async def test_reload_corpus_reports_fallback(collector, mock_loader):
    mock_loader.load.return_value = ("only one",)
    mock_loader.used_fallback = True
    response = await collector.reload_corpus()
    assert response.corpus_size == 1
    assert response.fallback is True
    # Current session is kept until a new one starts
    assert len(collector.state.prompts) == 20


async def test_small_corpus_session(mock_loader, controller, mock_transport, test_settings):
    mock_loader.load.return_value = ("a", "b", "c")
    collector = CollectionSession(
        loader=mock_loader,
        controller=controller,
        transport=mock_transport,
        settings=test_settings,
    )
    await collector.initialize()
    assert sorted(collector.state.prompts) == ["a", "b", "c"]
    snapshot = collector.snapshot()
    assert snapshot.session_limit == 5
    assert snapshot.target == 3


async def test_default_wiring_from_settings(test_settings, mock_loader):
    collector = CollectionSession(loader=mock_loader, settings=test_settings)
    await collector.initialize()
    assert collector.pipeline.in_flight is False
    assert collector.controller.state is RecorderState.idle
    collector.close()


async def test_device_denied_surfaces(mock_loader, mock_transport, test_settings):
    collector = CollectionSession(
        loader=mock_loader,
        device=StreamCaptureDevice(enabled=False),
        transport=mock_transport,
        settings=test_settings,
    )
    await collector.initialize()
    with pytest.raises(DeviceDeniedError):
        await collector.start_recording()
    assert collector.snapshot().recorder.state is RecorderState.idle
    assert collector.snapshot().recorder.identifier is None
    collector.close()


async def test_transport_failure_surfaces(collector, mock_transport):
    mock_transport.commit = AsyncMock(side_effect=OSError("disk full"))
    await collector.start_recording()
    await collector.stop_recording()
    with pytest.raises(SubmissionFailedError):
        await collector.submit()
    assert collector.controller.state is RecorderState.review


async def test_new_session_during_device_acquire(
    gated_device, mock_loader, mock_transport, test_settings
):
    collector = CollectionSession(
        loader=mock_loader,
        device=gated_device,
        transport=mock_transport,
        settings=test_settings,
    )
    await collector.initialize()
    pending = asyncio.create_task(collector.start_recording())
    await gated_device.acquiring.wait()

    await collector.new_session()
    gated_device.gate.set()
    recorder = await pending

    assert recorder.state is RecorderState.idle
    assert gated_device.handle.closed is True
    assert collector.controller.timer.running is False
    collector.close()
