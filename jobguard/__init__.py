"""Jobguard -- trust and moderation core for a job board.

Contact verification by one-time passcode and the job-listing moderation
state machine, with a FastAPI surface under ``web/backend/app``.
"""

__version__ = "0.1.0"
