"""Data models for contact verification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Channel(str, Enum):
    email = "email"
    phone = "phone"


@dataclass
class VerificationRecord:
    """The single outstanding code for a (subject, channel) pair."""

    subject_id: str
    channel: Channel
    code: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass
class CodeRequestResult:
    """Outcome of issuing a code.

    The code is stored before dispatch is attempted, so ``delivered=False``
    still leaves a valid, verifiable code behind.
    """

    subject_id: str
    channel: Channel
    expires_at: datetime
    delivered: bool = True
    delivery_error: str = ""


@dataclass
class VerificationStatus:
    """Trust flags plus which channels have a code outstanding."""

    subject_id: str
    email_verified: bool = False
    phone_verified: bool = False
    pending: list[Channel] = field(default_factory=list)
