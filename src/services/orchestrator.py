"""Collection session orchestrator.

Wires the corpus loader, session builder, recording controller and
submission pipeline around one explicit ``SessionState``. A module-level
singleton ``CollectionSession`` serves the API layer.

Usage::

    from src.services.orchestrator import start_collector, get_collector, cleanup

    collector = await start_collector()
    await collector.start_recording()
    await collector.stop_recording()
    await collector.submit()
    await cleanup()
"""

import logging
import random

from src.core.config import Settings, get_settings
from src.core.exceptions import InvalidStateError, SubmissionInProgressError
from src.core.models import (
    CorpusReloadResponse,
    RecorderResponse,
    RecorderState,
    SessionSnapshot,
    SubmissionResult,
)
from src.services.audio.device import CaptureDevice, create_capture_device
from src.services.corpus import CorpusLoader, build_session
from src.services.recording.controller import RecordingController
from src.services.session import SessionState
from src.services.submission import BaseTransport, SubmissionPipeline, create_transport

logger = logging.getLogger(__name__)


def _default_device(settings: Settings) -> CaptureDevice:
    if settings.capture_backend == "sounddevice":
        return create_capture_device(
            "sounddevice",
            sample_rate=settings.sample_rate,
            channels=settings.channels,
            device=settings.capture_device,
        )
    return create_capture_device(settings.capture_backend)


def _default_transport(settings: Settings) -> BaseTransport:
    if settings.transport == "local":
        return create_transport("local", root=settings.submissions_dir)
    return create_transport(
        settings.transport,
        repo_url=settings.dataset_repo_url,
        delay=settings.submit_delay,
    )


class CollectionSession:
    """One participant-facing collection instrument.

    Args:
        loader: Corpus source (built from settings if omitted).
        device: Capture capability (built from settings if omitted).
        transport: Submission backend (built from settings if omitted).
        controller: Pre-built recording controller, mainly for tests.
        settings: Configuration; defaults to ``get_settings()``.
        rng: Random source for session draws.
    """

    def __init__(
        self,
        loader: CorpusLoader | None = None,
        device: CaptureDevice | None = None,
        transport: BaseTransport | None = None,
        controller: RecordingController | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._loader = loader or CorpusLoader()
        self._rng = rng
        self.corpus: tuple[str, ...] = ()
        self.state = SessionState(session_limit=self._settings.session_limit)
        self.controller = controller or RecordingController(
            device or _default_device(self._settings),
            sample_rate=self._settings.sample_rate,
            channels=self._settings.channels,
        )
        self.pipeline = SubmissionPipeline(
            transport or _default_transport(self._settings),
            repo_url=self._settings.dataset_repo_url,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def device(self) -> CaptureDevice:
        return self.controller.device

    async def initialize(self) -> None:
        """Load the corpus and draw the first session."""
        self.corpus = await self._loader.load()
        self._draw()

    def _draw(self) -> None:
        prompts = build_session(self.corpus, self._settings.draw_size, rng=self._rng)
        self.state.reset(prompts)
        logger.info("New session drawn: %d prompts from a corpus of %d", len(prompts), len(self.corpus))

    async def new_session(self) -> SessionSnapshot:
        """Discard progress and draw a fresh session from the loaded corpus."""
        if self.pipeline.in_flight:
            raise SubmissionInProgressError()
        if self.controller.state is RecorderState.recording:
            raise InvalidStateError("Stop the current recording before starting a new session")
        self.controller.close()
        self._draw()
        return self.snapshot()

    async def reload_corpus(self) -> CorpusReloadResponse:
        """Fetch the corpus again; the current session keeps its prompts."""
        self.corpus = await self._loader.load()
        return CorpusReloadResponse(
            corpus_size=len(self.corpus),
            fallback=self._loader.used_fallback,
        )

    async def start_recording(self) -> RecorderResponse:
        if self.state.completed:
            raise InvalidStateError("Session is complete; start a new session")
        await self.controller.start()
        return self.controller.snapshot()

    async def stop_recording(self) -> RecorderResponse:
        await self.controller.stop()
        return self.controller.snapshot()

    async def retake(self) -> RecorderResponse:
        if self.pipeline.in_flight:
            raise SubmissionInProgressError()
        await self.controller.retake()
        return self.controller.snapshot()

    async def submit(self) -> SubmissionResult:
        return await self.pipeline.submit(self.controller, self.state)

    def recorded_audio(self) -> bytes:
        """WAV bytes of the take currently in review."""
        artifact = self.controller.artifact
        if self.controller.state is not RecorderState.review or artifact is None:
            raise InvalidStateError("No recording available for playback")
        return artifact.wav_bytes

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            current_index=self.state.current_index,
            current_prompt=self.state.current_prompt,
            session_size=len(self.state.prompts),
            completed_count=self.state.completed_count,
            session_limit=self.state.session_limit,
            target=self.state.target,
            progress=self.state.progress,
            completed=self.state.completed,
            statuses=dict(self.state.statuses),
            recorder=self.controller.snapshot(),
            submitting=self.pipeline.in_flight,
            corpus_size=len(self.corpus),
        )

    def close(self) -> None:
        """Release the device, the timer and any take still under review."""
        self.controller.close()


# ---------------------------------------------------------------------------
# Module-level singleton management
# ---------------------------------------------------------------------------

_collector: CollectionSession | None = None


async def start_collector(**kwargs) -> CollectionSession:
    """Create, initialize and register the collector.

    An already running collector is closed and replaced.
    """
    global _collector
    if _collector is not None:
        _collector.close()

    collector = CollectionSession(**kwargs)
    await collector.initialize()
    _collector = collector
    logger.info("Collector ready with %d prompts", len(collector.corpus))
    return collector


def get_collector() -> CollectionSession:
    """Return the active collector.

    Raises:
        InvalidStateError: If ``start_collector`` has not run.
    """
    if _collector is None:
        raise InvalidStateError("Collector is not initialized")
    return _collector


async def cleanup() -> None:
    """Tear down the active collector (called during app shutdown)."""
    global _collector
    if _collector is None:
        return
    collector = _collector
    _collector = None
    collector.close()
    logger.info("Collector shut down")
