"""Flag report tracking with a per-job counter and threshold transition.

Reports are kept in ``~/.jobguard/moderation/reports.json`` and counters in
``counters.json``.  Appending a report and incrementing the counter happen in
one store transaction, so concurrent reporters each see a distinct count.
Reports are not deduplicated per reporter.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict

import structlog

from jobguard.directory.models import JobStatus
from jobguard.directory.store import JobDirectory
from jobguard.errors import InvalidReason, InvalidTransition
from jobguard.moderation.lifecycle import JobLifecycleGate
from jobguard.moderation.models import FlagReport, ReportOutcome
from jobguard.storage import JsonFileStore

logger = structlog.get_logger()

DEFAULT_THRESHOLD = 3


class ModerationTracker(JsonFileStore):
    """Records flag reports and asks the gate to flag a job at the threshold."""

    default_subdir = "moderation"

    def __init__(
        self,
        jobs: JobDirectory,
        gate: JobLifecycleGate,
        base_dir=None,
        threshold: int = DEFAULT_THRESHOLD,
        clock=None,
    ) -> None:
        super().__init__(base_dir, clock)
        self._jobs = jobs
        self._gate = gate
        self._threshold = threshold
        self._reports_path = self._base / "reports.json"
        self._counters_path = self._base / "counters.json"

    @property
    def threshold(self) -> int:
        return self._threshold

    # -- persistence ---------------------------------------------------------

    def _append_and_count(self, report: FlagReport) -> int:
        with self.transaction():
            reports = self._read_json(self._reports_path)
            reports.append(asdict(report))
            self._write_json(self._reports_path, reports)

            counters = self._read_json(self._counters_path, default={})
            count = int(counters.get(report.job_id, 0)) + 1
            counters[report.job_id] = count
            self._write_json(self._counters_path, counters)
        return count

    # -- public API ----------------------------------------------------------

    def report_job(self, job_id: str, reporter_id: str, reason: str) -> ReportOutcome:
        """Record a report and flag the job once the threshold is reached.

        The count and the threshold check run under the store lock, which
        ``AdminDecisionHandler`` also holds while it clears a job's reports.
        """
        reason = (reason or "").strip()
        if not reason:
            raise InvalidReason("Reason for flagging is required")
        job = self._jobs.require_job(job_id)

        report = FlagReport(
            id=str(uuid.uuid4()),
            job_id=job_id,
            reporter_id=reporter_id,
            reason=reason,
            created_at=self.now().isoformat(),
        )
        flagged_now = False
        status = job.status
        with self.transaction():
            count = self._append_and_count(report)
            logger.info("moderation.reported", job_id=job_id, reporter_id=reporter_id, count=count)

            if count >= self._threshold:
                current = self._jobs.require_job(job_id).status
                if current == JobStatus.active:
                    try:
                        flagged_now = self._gate.flag(job_id)
                    except InvalidTransition as e:
                        # Status moved away from active between the read and the write.
                        logger.info("moderation.threshold_skipped", job_id=job_id, status=e.from_status)
                    if flagged_now:
                        logger.info("moderation.threshold_reached", job_id=job_id, count=count)
                status = self._jobs.require_job(job_id).status

        return ReportOutcome(
            job_id=job_id,
            report_count=count,
            status=status,
            flagged_now=flagged_now,
        )

    def report_count(self, job_id: str) -> int:
        counters = self._read_json(self._counters_path, default={})
        return int(counters.get(job_id, 0))

    def reports_for(self, job_id: str) -> list[FlagReport]:
        """Return the job's reports, oldest first."""
        return [
            FlagReport(**d)
            for d in self._read_json(self._reports_path)
            if d.get("job_id") == job_id
        ]

    def reset(self, job_id: str) -> int:
        """Clear the job's counter and report history.  Returns reports removed."""
        with self.transaction():
            reports = self._read_json(self._reports_path)
            kept = [d for d in reports if d.get("job_id") != job_id]
            self._write_json(self._reports_path, kept)

            counters = self._read_json(self._counters_path, default={})
            counters.pop(job_id, None)
            self._write_json(self._counters_path, counters)
        return len(reports) - len(kept)
