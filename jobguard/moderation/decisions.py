"""Admin decisions on flagged jobs."""

from __future__ import annotations

import structlog

from jobguard.directory.models import Job, JobStatus
from jobguard.directory.store import JobDirectory
from jobguard.errors import InvalidDecision, InvalidTransition, NotFlagged
from jobguard.moderation.lifecycle import JobLifecycleGate
from jobguard.moderation.models import Decision
from jobguard.moderation.tracker import ModerationTracker

logger = structlog.get_logger()


class AdminDecisionHandler:
    """Resolve a flagged job: ``approve`` restores it, ``remove`` closes it."""

    def __init__(self, jobs: JobDirectory, gate: JobLifecycleGate, tracker: ModerationTracker) -> None:
        self._jobs = jobs
        self._gate = gate
        self._tracker = tracker

    def decide(self, job_id: str, decision: Decision | str, admin_id: str = "") -> Job:
        """Apply *decision* to a flagged job.

        ``approve`` also clears the job's flag reports so a later, independent
        flagging cycle starts from zero.  Raises ``NotFlagged`` unless the job
        is currently flagged.

        Runs under the tracker's lock: reports arriving meanwhile wait, then
        count against the cleared cycle.
        """
        try:
            decision = Decision(decision)
        except ValueError:
            raise InvalidDecision("Valid decision (approve or remove) is required") from None

        if decision == Decision.approve:
            target, trigger = JobStatus.active, "admin_approve"
        else:
            target, trigger = JobStatus.closed, "admin_remove"

        with self._tracker.transaction():
            job = self._jobs.require_job(job_id)
            if job.status != JobStatus.flagged:
                raise NotFlagged(f"Job '{job_id}' is {job.status.value}, not flagged")

            if decision == Decision.approve:
                self._tracker.reset(job_id)
            try:
                updated = self._gate.transition(job_id, target, trigger, expected=JobStatus.flagged)
            except InvalidTransition as e:
                raise NotFlagged(f"Job '{job_id}' is {e.from_status}, not flagged") from None

        logger.info(
            "moderation.decision",
            job_id=job_id,
            decision=decision.value,
            admin_id=admin_id,
            status=updated.status.value,
        )
        return updated
