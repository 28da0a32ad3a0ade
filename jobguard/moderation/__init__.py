"""Job moderation: community flag reports, the job lifecycle gate, admin decisions."""

from jobguard.moderation.decisions import AdminDecisionHandler
from jobguard.moderation.lifecycle import JobLifecycleGate
from jobguard.moderation.models import Decision, FlagReport, ReportOutcome
from jobguard.moderation.tracker import ModerationTracker

__all__ = [
    "AdminDecisionHandler",
    "Decision",
    "FlagReport",
    "JobLifecycleGate",
    "ModerationTracker",
    "ReportOutcome",
]
