"""Job lifecycle gate -- the only writer of ``Job.status``.

Allowed transitions and the trigger that may request each one:

=========  =========  ==================
From       To         Trigger
=========  =========  ==================
(new)      pending    employer not approved
(new)      active     employer approved
pending    active     employer_approved
active     flagged    flag_threshold
flagged    active     admin_approve
flagged    closed     admin_remove
closed     active     reopen
=========  =========  ==================

Anything else raises ``InvalidTransition`` and leaves the status unchanged.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from jobguard.directory.models import Job, JobStatus, Role
from jobguard.directory.store import JobDirectory, UserDirectory
from jobguard.errors import InvalidError, InvalidTransition, SubjectNotFound

logger = structlog.get_logger()

TRANSITIONS: dict[tuple[JobStatus, JobStatus], str] = {
    (JobStatus.pending, JobStatus.active): "employer_approved",
    (JobStatus.active, JobStatus.flagged): "flag_threshold",
    (JobStatus.flagged, JobStatus.active): "admin_approve",
    (JobStatus.flagged, JobStatus.closed): "admin_remove",
    (JobStatus.closed, JobStatus.active): "reopen",
}


class JobLifecycleGate:
    """Owns the job status state machine."""

    def __init__(self, jobs: JobDirectory, users: UserDirectory) -> None:
        self._jobs = jobs
        self._users = users

    # ------------------------------------------------------------------
    # Creation and employer approval
    # ------------------------------------------------------------------

    def create_job(
        self,
        employer_id: str,
        title: str,
        company: str = "",
        location: str = "",
        description: str = "",
    ) -> Job:
        """Create a job; it starts ``active`` only if the employer is approved."""
        employer = self._users.require_user(employer_id)
        if employer.role != Role.employer:
            raise InvalidError(f"User '{employer_id}' is not an employer")
        if not title.strip():
            raise InvalidError("Job title is required")

        job = Job(
            id=str(uuid.uuid4()),
            employer_id=employer_id,
            title=title.strip(),
            company=company,
            location=location,
            description=description,
            status=JobStatus.active if employer.is_approved else JobStatus.pending,
        )
        self._jobs.insert_job(job)
        logger.info("lifecycle.created", job_id=job.id, employer_id=employer_id, status=job.status.value)
        return job

    def approve_employer(self, employer_id: str, approved: bool = True) -> list[Job]:
        """Set the employer's approval and activate their pending jobs.

        Returns the jobs moved ``pending -> active``.  Revoking approval only
        clears the flag.
        """
        employer = self._users.get_user(employer_id)
        if employer is None or employer.role != Role.employer:
            raise SubjectNotFound(f"Employer '{employer_id}' not found")

        self._users.set_approval(employer_id, approved)
        if not approved:
            logger.info("lifecycle.approval_revoked", employer_id=employer_id)
            return []

        activated = self._jobs.transition_where(employer_id, JobStatus.pending, JobStatus.active)
        logger.info(
            "lifecycle.cascade",
            employer_id=employer_id,
            activated=[j.id for j in activated],
        )
        return activated

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def transition(
        self,
        job_id: str,
        to_status: JobStatus,
        trigger: str,
        expected: Optional[JobStatus] = None,
    ) -> Job:
        """Apply a single guarded transition.

        *expected* pins the source status; without it the current status is
        read first.  The write is a compare-and-set, so a concurrent change
        surfaces as ``InvalidTransition`` rather than being overwritten.
        """
        from_status = expected or self._jobs.require_job(job_id).status
        if TRANSITIONS.get((from_status, to_status)) != trigger:
            raise InvalidTransition(job_id, from_status.value, to_status.value)

        updated = self._jobs.compare_and_set_status(job_id, from_status, to_status)
        if updated is None:
            current = self._jobs.require_job(job_id).status
            raise InvalidTransition(job_id, current.value, to_status.value)

        logger.info(
            "lifecycle.transition",
            job_id=job_id,
            from_status=from_status.value,
            to_status=to_status.value,
            trigger=trigger,
        )
        return updated

    def flag(self, job_id: str) -> bool:
        """Move an ``active`` job to ``flagged``.

        Returns True if this call made the change, False if the job was
        already flagged.  Any other source status raises ``InvalidTransition``.
        """
        try:
            self.transition(job_id, JobStatus.flagged, "flag_threshold", expected=JobStatus.active)
        except InvalidTransition as e:
            if e.from_status == JobStatus.flagged.value:
                return False
            raise
        return True

    def reopen(self, job_id: str) -> Job:
        return self.transition(job_id, JobStatus.active, "reopen", expected=JobStatus.closed)

    def flagged_jobs(self) -> list[Job]:
        """Jobs waiting for an admin decision."""
        return self._jobs.list_jobs(status=JobStatus.flagged)
