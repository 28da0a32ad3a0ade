"""File-based JSON storage for users and job postings.

Provides a DB-ready interface backed by JSON files under ~/.jobguard/directory/.
Job status changes go through :meth:`JobDirectory.compare_and_set_status` and
:meth:`JobDirectory.transition_where`; callers outside the lifecycle gate
should not use them.
"""

from __future__ import annotations

from typing import Optional

from jobguard.directory.models import Job, JobStatus, Role, User
from jobguard.errors import JobNotFound, SubjectNotFound
from jobguard.storage import JsonFileStore

_TRUST_FIELDS = {"email": "email_verified", "phone": "phone_verified"}


class UserDirectory(JsonFileStore):
    """File-based storage for user records.

    Storage path: ``~/.jobguard/directory/`` with:
    - ``users.json`` -- list of user dicts
    """

    default_subdir = "directory"

    def __init__(self, base_dir=None, clock=None) -> None:
        super().__init__(base_dir, clock)
        self._users_path = self._base / "users.json"

    @staticmethod
    def _user_from_dict(d: dict) -> User:
        role_val = d.get("role", "jobseeker")
        try:
            role = Role(role_val)
        except ValueError:
            role = Role.jobseeker
        return User(
            id=d["id"],
            name=d.get("name", ""),
            email=d.get("email", ""),
            phone=d.get("phone", ""),
            role=role,
            email_verified=bool(d.get("email_verified", False)),
            phone_verified=bool(d.get("phone_verified", False)),
            is_approved=bool(d.get("is_approved", False)),
            created_at=d.get("created_at", ""),
        )

    @staticmethod
    def _user_to_dict(u: User) -> dict:
        return {
            "id": u.id,
            "name": u.name,
            "email": u.email,
            "phone": u.phone,
            "role": u.role.value,
            "email_verified": u.email_verified,
            "phone_verified": u.phone_verified,
            "is_approved": u.is_approved,
            "created_at": u.created_at,
        }

    # ------------------------------------------------------------------
    # User CRUD
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Persist a new user, replacing any record with the same id."""
        with self.transaction():
            users = [d for d in self._read_json(self._users_path) if d["id"] != user.id]
            users.append(self._user_to_dict(user))
            self._write_json(self._users_path, users)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        for d in self._read_json(self._users_path):
            if d["id"] == user_id:
                return self._user_from_dict(d)
        return None

    def require_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise SubjectNotFound(f"User '{user_id}' not found")
        return user

    def list_users(self) -> list[User]:
        return [self._user_from_dict(d) for d in self._read_json(self._users_path)]

    def list_pending_employers(self) -> list[User]:
        """Return employers still awaiting admin approval."""
        return [
            u for u in self.list_users()
            if u.role == Role.employer and not u.is_approved
        ]

    # ------------------------------------------------------------------
    # Trust flags and approval
    # ------------------------------------------------------------------

    def _update(self, user_id: str, **changes) -> User:
        with self.transaction():
            users = self._read_json(self._users_path)
            for d in users:
                if d["id"] == user_id:
                    d.update(changes)
                    self._write_json(self._users_path, users)
                    return self._user_from_dict(d)
        raise SubjectNotFound(f"User '{user_id}' not found")

    def set_trust_flag(self, user_id: str, channel: str) -> User:
        """Mark *channel* as verified for the user.  There is no reverse."""
        return self._update(user_id, **{_TRUST_FIELDS[channel]: True})

    def set_approval(self, user_id: str, approved: bool) -> User:
        return self._update(user_id, is_approved=approved)


class JobDirectory(JsonFileStore):
    """File-based storage for job postings.

    Storage path: ``~/.jobguard/directory/`` with:
    - ``jobs.json`` -- list of job dicts
    """

    default_subdir = "directory"

    def __init__(self, base_dir=None, clock=None) -> None:
        super().__init__(base_dir, clock)
        self._jobs_path = self._base / "jobs.json"

    @staticmethod
    def _job_from_dict(d: dict) -> Job:
        return Job(
            id=d["id"],
            employer_id=d["employer_id"],
            title=d.get("title", ""),
            company=d.get("company", ""),
            location=d.get("location", ""),
            description=d.get("description", ""),
            status=JobStatus(d.get("status", "pending")),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
        )

    @staticmethod
    def _job_to_dict(j: Job) -> dict:
        return {
            "id": j.id,
            "employer_id": j.employer_id,
            "title": j.title,
            "company": j.company,
            "location": j.location,
            "description": j.description,
            "status": j.status.value,
            "created_at": j.created_at,
            "updated_at": j.updated_at,
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_job(self, job_id: str) -> Optional[Job]:
        for d in self._read_json(self._jobs_path):
            if d["id"] == job_id:
                return self._job_from_dict(d)
        return None

    def require_job(self, job_id: str) -> Job:
        job = self.get_job(job_id)
        if job is None:
            raise JobNotFound(f"Job '{job_id}' not found")
        return job

    def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        employer_id: Optional[str] = None,
    ) -> list[Job]:
        """Return jobs, optionally filtered by status and employer."""
        jobs = [self._job_from_dict(d) for d in self._read_json(self._jobs_path)]
        if status is not None:
            jobs = [j for j in jobs if j.status == status]
        if employer_id is not None:
            jobs = [j for j in jobs if j.employer_id == employer_id]
        return jobs

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_job(self, job: Job) -> Job:
        with self.transaction():
            jobs = self._read_json(self._jobs_path)
            jobs.append(self._job_to_dict(job))
            self._write_json(self._jobs_path, jobs)
        return job

    def compare_and_set_status(
        self,
        job_id: str,
        expected: JobStatus,
        new: JobStatus,
    ) -> Optional[Job]:
        """Set the status to *new* only if it is currently *expected*.

        Returns the updated job, or ``None`` if the current status differs.
        Raises ``JobNotFound`` for an unknown id.
        """
        with self.transaction():
            jobs = self._read_json(self._jobs_path)
            for d in jobs:
                if d["id"] != job_id:
                    continue
                if d.get("status") != expected.value:
                    return None
                d["status"] = new.value
                d["updated_at"] = self.now().isoformat()
                self._write_json(self._jobs_path, jobs)
                return self._job_from_dict(d)
        raise JobNotFound(f"Job '{job_id}' not found")

    def transition_where(
        self,
        employer_id: str,
        from_status: JobStatus,
        to_status: JobStatus,
    ) -> list[Job]:
        """Move every job of *employer_id* in *from_status* to *to_status*.

        The set is taken while the store lock is held, so each matching job
        is moved exactly once.
        """
        changed: list[Job] = []
        with self.transaction():
            jobs = self._read_json(self._jobs_path)
            stamp = self.now().isoformat()
            for d in jobs:
                if d["employer_id"] == employer_id and d.get("status") == from_status.value:
                    d["status"] = to_status.value
                    d["updated_at"] = stamp
                    changed.append(self._job_from_dict(d))
            if changed:
                self._write_json(self._jobs_path, jobs)
        return changed
