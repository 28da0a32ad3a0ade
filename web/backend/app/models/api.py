"""Pydantic models for API request/response serialization.

These models mirror the jobguard dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Verification models
# ---------------------------------------------------------------------------


class CodeSentResponse(BaseModel):
    """Outcome of a code request.  ``delivered=False`` means the code was
    issued and is still valid, but the gateway did not take the message."""

    success: bool = True
    message: str = ""
    channel: str
    expires_at: str
    delivered: bool = True


class ConfirmCodeRequest(BaseModel):
    code: str = ""


class VerificationStatusResponse(BaseModel):
    """Mirrors jobguard.verification.models.VerificationStatus."""

    subject_id: str
    email_verified: bool = False
    phone_verified: bool = False
    pending: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# User models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public representation of a user."""

    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    role: str = "jobseeker"
    email_verified: bool = False
    phone_verified: bool = False
    is_approved: bool = False
    created_at: str = ""


class EmployerApprovalRequest(BaseModel):
    approved: bool = True


class EmployerApprovalResponse(BaseModel):
    employer: UserResponse
    activated_jobs: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Job and moderation models
# ---------------------------------------------------------------------------


class JobCreateRequest(BaseModel):
    title: str
    company: str = ""
    location: str = ""
    description: str = ""


class JobResponse(BaseModel):
    """Mirrors jobguard.directory.models.Job."""

    id: str
    employer_id: str
    title: str
    company: str = ""
    location: str = ""
    description: str = ""
    status: str
    created_at: str = ""
    updated_at: str = ""


class FlagJobRequest(BaseModel):
    reason: Optional[str] = None


class FlagJobResponse(BaseModel):
    """Mirrors jobguard.moderation.models.ReportOutcome."""

    message: str = "Job flagged for review"
    job_id: str
    report_count: int
    status: str
    flagged_now: bool = False


class FlagReportResponse(BaseModel):
    """Mirrors jobguard.moderation.models.FlagReport."""

    id: str
    job_id: str
    reporter_id: str
    reason: str
    created_at: str


class DecisionRequest(BaseModel):
    decision: str = ""


class ErrorResponse(BaseModel):
    detail: str
    code: str = ""


def error_responses(*codes: int) -> dict[int, dict]:
    """OpenAPI ``responses=`` entries documenting the error body for *codes*."""
    return {code: {"model": ErrorResponse} for code in codes}
