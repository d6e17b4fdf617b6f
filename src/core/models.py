"""
Pydantic v2 models shared by the services and the API layer.

Recorder state, slot status, session snapshot, submission result,
WebSocket messages and the error envelope.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "1.0.4"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


class RecorderState(StrEnum):
    """States of the per-prompt recording lifecycle."""

    idle = "idle"
    recording = "recording"
    review = "review"


class PromptStatus(StrEnum):
    """Status tag stored in the slot status map."""

    used = "used"


class RecorderResponse(BaseModel):
    """Recorder view returned after start / stop / retake."""

    state: RecorderState
    identifier: str | None = None
    elapsed: int = 0
    elapsed_display: str = "00:00"
    audio_bytes: int = 0


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class SessionSnapshot(BaseModel):
    """GET /session response: everything a client needs to render a slot."""

    current_index: int
    current_prompt: str | None = None
    session_size: int
    completed_count: int
    session_limit: int
    # Commits that complete this session: min(session_limit, session_size)
    target: int
    progress: float = 0.0
    completed: bool = False
    statuses: dict[int, PromptStatus] = Field(default_factory=dict)
    recorder: RecorderResponse
    submitting: bool = False
    corpus_size: int = 0


class SubmissionResult(BaseModel):
    """Outcome of a successful commit."""

    identifier: str
    slot_index: int
    audio_path: str
    transcription_path: str
    completed_count: int
    session_completed: bool = False


class CorpusReloadResponse(BaseModel):
    """POST /corpus/reload response."""

    corpus_size: int
    fallback: bool = False


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


class WebSocketMessageType(StrEnum):
    """Discriminator for messages sent over the capture WebSocket."""

    connected = "connected"
    status = "status"
    error = "error"


class WebSocketMessage(BaseModel):
    """JSON message sent from server to client over WebSocket."""

    type: WebSocketMessageType
    data: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Error
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the API."""

    detail: str
    code: str
    timestamp: str
