"""Tests for the capture WebSocket endpoint."""

import asyncio

import pytest
from starlette.testclient import TestClient

from src.api.app import create_app
from src.services import orchestrator
from src.services.audio.device import SoundDeviceCapture, StreamCaptureDevice
from src.services.orchestrator import CollectionSession


@pytest.fixture
def app():
    return create_app()


def _register(device, mock_loader, mock_transport, test_settings):
    """Register a collector without running lifespan startup."""
    collector = CollectionSession(
        loader=mock_loader,
        device=device,
        transport=mock_transport,
        settings=test_settings,
    )
    orchestrator._collector = collector
    return collector


# ---------------------------------------------------------------------------
# WebSocket tests (use Starlette sync TestClient for WebSocket support)
# ---------------------------------------------------------------------------


def test_websocket_sends_connected_message(app, mock_loader, mock_transport, test_settings):
    _register(StreamCaptureDevice(), mock_loader, mock_transport, test_settings)
    client = TestClient(app)
    with client.websocket_connect("/ws/capture") as ws:
        msg = ws.receive_json()
        assert msg["type"] == "connected"
        assert msg["data"]["state"] == "idle"
        assert msg["data"]["sample_rate"] == 16000


def test_websocket_feeds_open_capture(app, mock_loader, mock_transport, test_settings):
    device = StreamCaptureDevice()
    _register(device, mock_loader, mock_transport, test_settings)
    segments = []
    handle = asyncio.run(device.acquire(segments.append))

    client = TestClient(app)
    with client.websocket_connect("/ws/capture") as ws:
        ws.receive_json()
        ws.send_bytes(b"\x01\x02")
        ws.send_bytes(b"\x03\x04")
        ws.send_text("status")
        status = ws.receive_json()

    device.release(handle)
    assert status["type"] == "status"
    assert status["data"]["received_bytes"] == 4
    assert segments == [b"\x01\x02", b"\x03\x04"]


def test_websocket_drops_bytes_while_idle(app, mock_loader, mock_transport, test_settings):
    """Audio sent with no recording active is dropped without error."""
    _register(StreamCaptureDevice(), mock_loader, mock_transport, test_settings)
    client = TestClient(app)
    with client.websocket_connect("/ws/capture") as ws:
        ws.receive_json()
        ws.send_bytes(b"\x00" * 1024)
        ws.send_text("status")
        status = ws.receive_json()

    assert status["data"]["state"] == "idle"
    assert status["data"]["received_bytes"] == 0
    assert status["data"]["dropped_bytes"] == 1024


def test_websocket_rejects_local_microphone_backend(
    app, mock_loader, mock_transport, test_settings
):
    _register(SoundDeviceCapture(), mock_loader, mock_transport, test_settings)
    client = TestClient(app)
    with client.websocket_connect("/ws/capture") as ws:
        msg = ws.receive_json()
        assert msg["type"] == "error"
        assert "does not accept streamed audio" in msg["data"]["detail"]


def test_websocket_without_collector_reports_error(app):
    client = TestClient(app)
    with client.websocket_connect("/ws/capture") as ws:
        msg = ws.receive_json()
        assert msg["type"] == "error"
        assert msg["data"]["detail"] == "Collector is not initialized"
