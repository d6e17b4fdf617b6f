"""
Session and recording REST endpoints.

Thin wrappers over the active ``CollectionSession``; every state rule
lives in the services layer. Domain errors surface through the global
error handlers (403 device denied, 409 invalid state, 502 submission).
"""

from fastapi import APIRouter
from fastapi.responses import Response

from src.core.models import (
    CorpusReloadResponse,
    RecorderResponse,
    SessionSnapshot,
    SubmissionResult,
)
from src.services import orchestrator

router = APIRouter(tags=["session"])


@router.get("/session", response_model=SessionSnapshot)
async def get_session_snapshot():
    """Current prompt, slot statuses, progress and recorder state."""
    return orchestrator.get_collector().snapshot()


@router.post("/session", response_model=SessionSnapshot)
async def start_new_session():
    """Draw a fresh session from the loaded corpus."""
    return await orchestrator.get_collector().new_session()


@router.post("/corpus/reload", response_model=CorpusReloadResponse)
async def reload_corpus():
    """Fetch the prompt table again (takes effect on the next session)."""
    return await orchestrator.get_collector().reload_corpus()


@router.post("/recording/start", response_model=RecorderResponse)
async def start_recording():
    return await orchestrator.get_collector().start_recording()


@router.post("/recording/stop", response_model=RecorderResponse)
async def stop_recording():
    return await orchestrator.get_collector().stop_recording()


@router.post("/recording/retake", response_model=RecorderResponse)
async def retake_recording():
    return await orchestrator.get_collector().retake()


@router.post("/recording/submit", response_model=SubmissionResult)
async def submit_recording():
    """Commit the take in review and advance the session."""
    return await orchestrator.get_collector().submit()


@router.get("/recording/audio")
async def get_recording_audio():
    """Playback of the take currently in review as ``audio/wav``."""
    collector = orchestrator.get_collector()
    identifier = collector.controller.identifier
    return Response(
        content=collector.recorded_audio(),
        media_type="audio/wav",
        headers={"Content-Disposition": f'inline; filename="{identifier}.wav"'},
    )
