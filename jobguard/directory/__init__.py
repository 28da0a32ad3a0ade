"""User and job directories -- the records the trust core reads and updates."""

from jobguard.directory.models import Job, JobStatus, Role, User
from jobguard.directory.store import JobDirectory, UserDirectory

__all__ = ["Job", "JobDirectory", "JobStatus", "Role", "User", "UserDirectory"]
