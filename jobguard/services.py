"""Wiring of stores and services for one data directory.

The API and the CLI both build their collaborators here; nothing in the core
holds module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from jobguard.config import Settings
from jobguard.directory.store import JobDirectory, UserDirectory
from jobguard.moderation.decisions import AdminDecisionHandler
from jobguard.moderation.lifecycle import JobLifecycleGate
from jobguard.moderation.tracker import ModerationTracker
from jobguard.notifications.dispatcher import NotificationDispatcher, build_dispatcher
from jobguard.storage import Clock
from jobguard.verification.service import VerificationService
from jobguard.verification.store import VerificationStore


@dataclass
class Services:
    settings: Settings
    users: UserDirectory
    jobs: JobDirectory
    codes: VerificationStore
    verification: VerificationService
    gate: JobLifecycleGate
    tracker: ModerationTracker
    decisions: AdminDecisionHandler


def build_services(
    settings: Settings,
    dispatcher: Optional[NotificationDispatcher] = None,
    clock: Optional[Clock] = None,
) -> Services:
    """Create every store under ``settings.data_dir`` and the services over them."""
    root = settings.data_path
    users = UserDirectory(root / "directory", clock=clock)
    jobs = JobDirectory(root / "directory", clock=clock)
    codes = VerificationStore(root / "verification", clock=clock)
    gate = JobLifecycleGate(jobs, users)
    tracker = ModerationTracker(
        jobs,
        gate,
        base_dir=root / "moderation",
        threshold=settings.flag_threshold,
        clock=clock,
    )
    return Services(
        settings=settings,
        users=users,
        jobs=jobs,
        codes=codes,
        verification=VerificationService(
            codes,
            users,
            dispatcher or build_dispatcher(settings),
            settings=settings,
        ),
        gate=gate,
        tracker=tracker,
        decisions=AdminDecisionHandler(jobs, gate, tracker),
    )
