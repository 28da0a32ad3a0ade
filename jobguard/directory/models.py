"""Directory models for users, employers and job postings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    """Role hierarchy: admin > employer > jobseeker."""

    admin = "admin"
    employer = "employer"
    jobseeker = "jobseeker"

    @property
    def level(self) -> int:
        """Return numeric level for comparison (higher = more privileges)."""
        return {
            Role.admin: 30,
            Role.employer: 20,
            Role.jobseeker: 10,
        }[self]


class JobStatus(str, Enum):
    """Visibility state of a job posting.  Written only by the lifecycle gate."""

    pending = "pending"
    active = "active"
    flagged = "flagged"
    closed = "closed"


@dataclass
class User:
    """A platform user with contact details and trust flags."""

    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    role: Role = Role.jobseeker
    email_verified: bool = False
    phone_verified: bool = False
    is_approved: bool = False  # employers only
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()
        if isinstance(self.role, str):
            self.role = Role(self.role)

    def destination(self, channel: str) -> str:
        """Return the contact address for *channel* ("email" or "phone")."""
        return self.email if channel == "email" else self.phone


@dataclass
class Job:
    """A job posting."""

    id: str
    employer_id: str
    title: str
    company: str = ""
    location: str = ""
    description: str = ""
    status: JobStatus = JobStatus.pending
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()
        if not self.updated_at:
            self.updated_at = self.created_at
        if isinstance(self.status, str):
            self.status = JobStatus(self.status)
