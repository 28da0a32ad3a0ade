"""Error taxonomy shared by the verification and moderation cores.

Every failure is scoped to a single request.  The HTTP layer maps the four
families onto status codes: ``NotFoundError`` -> 404, ``InvalidError`` -> 400,
``ConflictError`` -> 409, ``UnavailableError`` -> 500.
"""

from __future__ import annotations


class JobguardError(Exception):
    """Base class for all domain errors."""

    code = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


# -- NotFound ----------------------------------------------------------------


class NotFoundError(JobguardError):
    code = "not_found"


class SubjectNotFound(NotFoundError):
    code = "subject_not_found"


class JobNotFound(NotFoundError):
    code = "job_not_found"


# -- Invalid -----------------------------------------------------------------


class InvalidError(JobguardError):
    code = "invalid"


class NoDestinationConfigured(InvalidError):
    code = "no_destination_configured"


class InvalidOrExpiredCode(InvalidError):
    code = "invalid_or_expired_code"


class InvalidReason(InvalidError):
    code = "invalid_reason"


class InvalidDecision(InvalidError):
    code = "invalid_decision"


class InvalidTransition(InvalidError):
    """A job status change that the lifecycle table does not allow."""

    code = "invalid_transition"

    def __init__(self, job_id: str, from_status: str, to_status: str) -> None:
        super().__init__(
            f"Job '{job_id}' cannot move from '{from_status}' to '{to_status}'"
        )
        self.job_id = job_id
        self.from_status = from_status
        self.to_status = to_status


# -- Conflict ----------------------------------------------------------------


class ConflictError(JobguardError):
    code = "conflict"


class NotFlagged(ConflictError):
    code = "not_flagged"


# -- Unavailable -------------------------------------------------------------


class UnavailableError(JobguardError):
    code = "unavailable"


class DispatchError(UnavailableError):
    """The notification gateway did not accept a message."""

    code = "dispatch_failed"


class ConfigError(ValueError):
    """Raised when a configuration value cannot be parsed."""
