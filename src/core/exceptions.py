"""
Collector exception hierarchy.

All application-specific exceptions inherit from CollectorError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class CollectorError(Exception):
    """Base exception for all collector errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "COLLECTOR_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class SourceUnavailableError(CollectorError):
    """Raised when the prompt corpus cannot be fetched or parsed.

    Never leaves the corpus loader: it is caught there and replaced by
    the built-in fallback prompts.
    """

    def __init__(self, detail: str = "Prompt corpus unavailable") -> None:
        super().__init__(
            detail=detail,
            code="SOURCE_UNAVAILABLE",
            status_code=503,
        )


class DeviceDeniedError(CollectorError):
    """Raised when the capture device is unavailable or access is refused."""

    def __init__(self, detail: str = "Microphone access is required.") -> None:
        super().__init__(
            detail=detail,
            code="DEVICE_DENIED",
            status_code=403,
        )


class SubmissionFailedError(CollectorError):
    """Raised when the transport fails to commit a recording."""

    def __init__(self, detail: str = "Submission failed") -> None:
        super().__init__(
            detail=detail,
            code="SUBMISSION_FAILED",
            status_code=502,
        )


class SubmissionInProgressError(CollectorError):
    """Raised when a submit is requested while another one is in flight."""

    def __init__(self) -> None:
        super().__init__(
            detail="A submission is already in progress",
            code="SUBMISSION_IN_PROGRESS",
            status_code=409,
        )


class InvalidStateError(CollectorError):
    """Raised when an action is not possible in the current session state."""

    def __init__(self, detail: str = "Action not allowed in the current state") -> None:
        super().__init__(detail=detail, code="INVALID_STATE", status_code=409)
