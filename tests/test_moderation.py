"""Tests for flag tracking, the job lifecycle gate, and admin decisions."""

import tempfile
import threading
from pathlib import Path

import pytest

from jobguard.directory.models import Job, JobStatus, Role, User
from jobguard.directory.store import JobDirectory, UserDirectory
from jobguard.errors import (
    InvalidDecision,
    InvalidError,
    InvalidReason,
    InvalidTransition,
    JobNotFound,
    NotFlagged,
    SubjectNotFound,
)
from jobguard.moderation.decisions import AdminDecisionHandler
from jobguard.moderation.lifecycle import JobLifecycleGate
from jobguard.moderation.tracker import ModerationTracker


def _setup(tmpdir: str, approved: bool = True):
    users = UserDirectory(Path(tmpdir) / "directory")
    jobs = JobDirectory(Path(tmpdir) / "directory")
    users.create_user(User(id="e1", name="Acme", email="hr@acme.test", role=Role.employer, is_approved=approved))
    users.create_user(User(id="r1", role=Role.jobseeker))
    gate = JobLifecycleGate(jobs, users)
    tracker = ModerationTracker(jobs, gate, base_dir=Path(tmpdir) / "moderation")
    handler = AdminDecisionHandler(jobs, gate, tracker)
    return users, jobs, gate, tracker, handler


# --- Job creation and employer approval ---


def test_new_job_status_follows_employer_approval():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, _, gate, _, _ = _setup(tmpdir, approved=True)
        assert gate.create_job("e1", "Engineer").status == JobStatus.active

        users.create_user(User(id="e2", role=Role.employer))
        assert gate.create_job("e2", "Designer").status == JobStatus.pending


def test_create_job_requires_employer():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, _, _ = _setup(tmpdir)
        with pytest.raises(InvalidError):
            gate.create_job("r1", "Engineer")
        with pytest.raises(SubjectNotFound):
            gate.create_job("ghost", "Engineer")


def test_approval_cascade_moves_only_pending_jobs():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, jobs, gate, _, _ = _setup(tmpdir, approved=False)
        pending = [gate.create_job("e1", f"Job {i}") for i in range(3)]
        already_active = jobs.insert_job(Job(id="j-active", employer_id="e1", title="Live", status=JobStatus.active))
        before = jobs.get_job(already_active.id).updated_at

        activated = gate.approve_employer("e1")

        assert sorted(j.id for j in activated) == sorted(j.id for j in pending)
        assert jobs.get_job(already_active.id).updated_at == before
        assert all(j.status == JobStatus.active for j in jobs.list_jobs(employer_id="e1"))
        assert users.get_user("e1").is_approved


def test_approval_cascade_leaves_other_employers_alone():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, jobs, gate, _, _ = _setup(tmpdir, approved=False)
        users.create_user(User(id="e2", role=Role.employer))
        other = gate.create_job("e2", "Other")
        gate.create_job("e1", "Mine")

        gate.approve_employer("e1")
        assert jobs.get_job(other.id).status == JobStatus.pending


def test_revoking_approval_does_not_touch_jobs():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, jobs, gate, _, _ = _setup(tmpdir, approved=True)
        job = gate.create_job("e1", "Engineer")
        assert gate.approve_employer("e1", approved=False) == []
        assert not users.get_user("e1").is_approved
        assert gate.create_job("e1", "Another").status == JobStatus.pending
        assert jobs.get_job(job.id).status == JobStatus.active


def test_approve_unknown_or_non_employer():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, _, _ = _setup(tmpdir)
        with pytest.raises(SubjectNotFound):
            gate.approve_employer("ghost")
        with pytest.raises(SubjectNotFound):
            gate.approve_employer("r1")


def test_pending_employers_listing():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, _, _, _, _ = _setup(tmpdir, approved=False)
        assert [u.id for u in users.list_pending_employers()] == ["e1"]


# --- Gate transitions ---


def test_unlisted_transitions_are_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, _, _ = _setup(tmpdir, approved=False)
        job = gate.create_job("e1", "Engineer")

        with pytest.raises(InvalidTransition):
            gate.flag(job.id)  # pending -> flagged
        with pytest.raises(InvalidTransition):
            gate.transition(job.id, JobStatus.closed, "admin_remove")
        with pytest.raises(InvalidTransition):
            gate.transition(job.id, JobStatus.active, "reopen")
        assert jobs.get_job(job.id).status == JobStatus.pending


def test_flag_is_idempotent():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, _, _ = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        assert gate.flag(job.id) is True
        assert gate.flag(job.id) is False


def test_reopen_closed_job():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, _, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        gate.flag(job.id)
        handler.decide(job.id, "remove")
        assert gate.reopen(job.id).status == JobStatus.active
        with pytest.raises(InvalidTransition):
            gate.reopen(job.id)


# --- Flag reports ---


def test_threshold_exactness():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, _ = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")

        first = tracker.report_job(job.id, "r1", "spam")
        second = tracker.report_job(job.id, "r2", "spam")
        assert not first.flagged_now and not second.flagged_now
        assert jobs.get_job(job.id).status == JobStatus.active

        third = tracker.report_job(job.id, "r3", "scam")
        assert third.flagged_now
        assert third.status == JobStatus.flagged

        fourth = tracker.report_job(job.id, "r4", "still a scam")
        assert not fourth.flagged_now
        assert fourth.report_count == 4
        assert fourth.status == JobStatus.flagged


def test_same_reporter_counts_every_time():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, _ = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        for _ in range(3):
            tracker.report_job(job.id, "r1", "spam")
        assert jobs.get_job(job.id).status == JobStatus.flagged
        assert len(tracker.reports_for(job.id)) == 3


def test_report_requires_reason_and_job():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, tracker, _ = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        with pytest.raises(InvalidReason):
            tracker.report_job(job.id, "r1", "   ")
        with pytest.raises(JobNotFound):
            tracker.report_job("missing", "r1", "spam")
        assert tracker.report_count(job.id) == 0


def test_reports_on_pending_job_do_not_transition():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, tracker, _ = _setup(tmpdir, approved=False)
        job = gate.create_job("e1", "Engineer")
        for i in range(4):
            outcome = tracker.report_job(job.id, f"r{i}", "spam")
        assert outcome.status == JobStatus.pending
        assert outcome.report_count == 4


def test_concurrent_reports_flag_once():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, _ = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")

        outcomes = []
        barrier = threading.Barrier(6)

        def worker(i: int):
            barrier.wait()
            outcomes.append(tracker.report_job(job.id, f"r{i}", "spam"))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(o.report_count for o in outcomes) == [1, 2, 3, 4, 5, 6]
        assert sum(o.flagged_now for o in outcomes) == 1
        assert jobs.get_job(job.id).status == JobStatus.flagged


# --- Admin decisions ---


def test_decision_requires_flagged_job():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, _, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        with pytest.raises(NotFlagged):
            handler.decide(job.id, "approve")
        assert jobs.get_job(job.id).status == JobStatus.active


def test_invalid_decision():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, gate, _, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        gate.flag(job.id)
        with pytest.raises(InvalidDecision):
            handler.decide(job.id, "delete")
        with pytest.raises(JobNotFound):
            handler.decide("missing", "approve")


def test_approve_restores_and_resets_cycle():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        for i in range(3):
            tracker.report_job(job.id, f"r{i}", "spam")

        restored = handler.decide(job.id, "approve", admin_id="admin")
        assert restored.status == JobStatus.active
        assert tracker.report_count(job.id) == 0
        assert tracker.reports_for(job.id) == []

        tracker.report_job(job.id, "r1", "spam")
        tracker.report_job(job.id, "r2", "spam")
        assert jobs.get_job(job.id).status == JobStatus.active
        assert tracker.report_job(job.id, "r3", "spam").flagged_now


def test_flag_then_remove_scenario():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        for reporter in ["r1", "r2", "r3"]:
            tracker.report_job(job.id, reporter, "looks fake")
        assert jobs.get_job(job.id).status == JobStatus.flagged

        assert handler.decide(job.id, "remove").status == JobStatus.closed
        with pytest.raises(NotFlagged):
            handler.decide(job.id, "approve")
        assert jobs.get_job(job.id).status == JobStatus.closed


def test_report_just_before_reset_does_not_reflag(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        for reporter in ["r1", "r2", "r3"]:
            tracker.report_job(job.id, reporter, "spam")

        original_reset = tracker.reset

        def report_then_reset(job_id):
            tracker.report_job(job_id, "r4", "spam")
            return original_reset(job_id)

        monkeypatch.setattr(tracker, "reset", report_then_reset)
        assert handler.decide(job.id, "approve").status == JobStatus.active
        assert jobs.get_job(job.id).status == JobStatus.active
        assert tracker.report_count(job.id) == 0


def test_report_racing_approval_starts_new_cycle(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        _, jobs, gate, tracker, handler = _setup(tmpdir)
        job = gate.create_job("e1", "Engineer")
        for reporter in ["r1", "r2", "r3"]:
            tracker.report_job(job.id, reporter, "spam")

        outcomes = []
        racer = threading.Thread(target=lambda: outcomes.append(tracker.report_job(job.id, "r4", "spam")))
        original_transition = gate.transition

        def transition_then_report(*args, **kwargs):
            updated = original_transition(*args, **kwargs)
            # The racing report must wait for the decision to finish.
            racer.start()
            racer.join(timeout=0.2)
            return updated

        monkeypatch.setattr(gate, "transition", transition_then_report)
        handler.decide(job.id, "approve")
        racer.join()

        assert outcomes[0].report_count == 1
        assert not outcomes[0].flagged_now
        assert jobs.get_job(job.id).status == JobStatus.active
        assert tracker.report_count(job.id) == 1
