"""Commit of a reviewed recording.

``SubmissionPipeline.submit`` sends the take in review to the transport,
then marks the slot used and advances or completes the session. Only one
submission may be in flight; a failed one leaves everything as it was.
"""

import logging

from src.core.exceptions import (
    InvalidStateError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from src.core.models import RecorderState, SubmissionResult
from src.services.recording.controller import RecordingController
from src.services.session import SessionState
from src.services.submission.transport import BaseTransport, submission_paths

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """Commits recordings through a transport with a single in-flight guard.

    Args:
        transport: Persistence backend for the audio/transcript pair.
        repo_url: Dataset repository root, used for logging the targets.
    """

    def __init__(self, transport: BaseTransport, repo_url: str = "") -> None:
        self._transport = transport
        self._repo_url = repo_url
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(
        self, controller: RecordingController, state: SessionState
    ) -> SubmissionResult:
        """Commit the controller's take for the session's current slot.

        Raises:
            SubmissionInProgressError: Another submission has not finished.
            InvalidStateError: Nothing is in review or the session is complete.
            SubmissionFailedError: The transport failed; state is unchanged.
        """
        if self._in_flight:
            raise SubmissionInProgressError()
        artifact = controller.artifact
        if controller.state is not RecorderState.review or artifact is None:
            raise InvalidStateError("No recording in review to submit")
        if state.completed or state.current_prompt is None:
            raise InvalidStateError("Session is already complete")

        self._in_flight = True
        try:
            identifier = artifact.identifier
            slot = state.current_index
            transcript = state.current_prompt
            audio_key, text_key = submission_paths(identifier)
            logger.info("Submitting %s to %s", identifier, self._repo_url)
            logger.info("Path: /%s", audio_key)
            logger.info("Path: /%s", text_key)

            try:
                await self._transport.commit(identifier, artifact.wav_bytes, transcript)
            except Exception as exc:
                logger.exception("Submission error for %s", identifier)
                raise SubmissionFailedError(f"Submission failed for {identifier}: {exc}") from exc

            state.mark_used(slot)
            controller.reset()
            if state.completed_count >= state.target:
                state.complete()
                logger.info("Session complete after %d submissions", state.completed_count)
            else:
                state.advance()

            return SubmissionResult(
                identifier=identifier,
                slot_index=slot,
                audio_path=audio_key,
                transcription_path=text_key,
                completed_count=state.completed_count,
                session_completed=state.completed,
            )
        finally:
            self._in_flight = False
