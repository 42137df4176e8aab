"""Typed errors raised by the analysis services.

Routers do not catch these one by one; main.py registers a single handler
that maps `code` to an HTTP status.
"""

from typing import Any


class AnalysisServiceError(Exception):
    """Base exception for analysis service errors."""

    code = "analysis_error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


class RequestNotFoundError(AnalysisServiceError):
    """Analysis request (or one of its dependent rows) not found."""

    code = "not_found"


class InvalidTransitionError(AnalysisServiceError):
    """Lifecycle event is not legal from the request's current status."""

    code = "invalid_transition"

    def __init__(self, current_status: str, event: str, message: str | None = None):
        super().__init__(
            message or f"Cannot apply '{event}' while request is '{current_status}'",
            current_status=current_status,
            event=event,
        )
        self.current_status = current_status
        self.event = event


class PreconditionFailedError(AnalysisServiceError):
    """A data dependency of the operation is missing."""

    code = "precondition_failed"


class ScoreValidationError(AnalysisServiceError):
    """Point value outside [0, 10] or an unknown pattern/region key."""

    code = "validation_error"
