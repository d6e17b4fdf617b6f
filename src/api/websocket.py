"""WebSocket endpoint feeding the stream capture device.

The client streams raw PCM bytes (16-bit, mono, ``sample_rate`` Hz) while
a recording is active. Bytes arriving when nothing is capturing are
dropped. The server only sends JSON messages.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.core.exceptions import CollectorError
from src.core.models import WebSocketMessage, WebSocketMessageType
from src.services import orchestrator
from src.services.audio.device import StreamCaptureDevice

logger = logging.getLogger(__name__)

router = APIRouter()


async def _send(websocket: WebSocket, msg_type: WebSocketMessageType, **data) -> None:
    msg = WebSocketMessage(type=msg_type, data=data)
    await websocket.send_json(msg.model_dump(mode="json"))


@router.websocket("/ws/capture")
async def capture_ws(websocket: WebSocket) -> None:
    """Audio ingestion endpoint for browser-side microphones.

    Protocol:
        - Server sends: ``connected`` with the recorder state and sample rate.
        - Client sends: raw PCM bytes, or any text frame to request a
          ``status`` message (recorder state, bytes fed and dropped).
        - Server sends: ``error`` if the collector cannot accept streamed audio.
    """
    await websocket.accept()

    try:
        collector = orchestrator.get_collector()
    except CollectorError as exc:
        await _send(websocket, WebSocketMessageType.error, detail=exc.detail)
        await websocket.close()
        return

    device = collector.device
    if not isinstance(device, StreamCaptureDevice):
        await _send(
            websocket,
            WebSocketMessageType.error,
            detail="Capture backend does not accept streamed audio",
        )
        await websocket.close()
        return

    await _send(
        websocket,
        WebSocketMessageType.connected,
        state=collector.controller.state.value,
        sample_rate=collector.settings.sample_rate,
    )
    logger.info("Capture WebSocket connected")

    fed = dropped = 0
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            data = message.get("bytes")
            if data is not None:
                if device.feed(data):
                    fed += len(data)
                else:
                    dropped += len(data)
            else:
                # Any text frame is a status request
                await _send(
                    websocket,
                    WebSocketMessageType.status,
                    state=collector.controller.state.value,
                    received_bytes=fed,
                    dropped_bytes=dropped,
                )
    except WebSocketDisconnect:
        pass
    logger.info("Capture WebSocket closed (%d bytes fed, %d dropped while idle)", fed, dropped)
