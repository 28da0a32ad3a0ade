"""Data models for the job moderation system."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from jobguard.directory.models import JobStatus


class Decision(str, Enum):
    """An admin's resolution of a flagged job."""

    approve = "approve"
    remove = "remove"


@dataclass
class FlagReport:
    """A single community report against a job.  Append-only."""

    id: str
    job_id: str
    reporter_id: str
    reason: str
    created_at: str


@dataclass
class ReportOutcome:
    """Result of recording a flag report."""

    job_id: str
    report_count: int
    status: JobStatus
    flagged_now: bool = False  # True only for the report that moved the job to flagged
