"""One-time-passcode verification of user contact channels."""

from jobguard.verification.codes import generate_code
from jobguard.verification.models import Channel, CodeRequestResult, VerificationRecord, VerificationStatus
from jobguard.verification.service import VerificationService
from jobguard.verification.store import VerificationStore

__all__ = [
    "Channel",
    "CodeRequestResult",
    "VerificationRecord",
    "VerificationService",
    "VerificationStatus",
    "VerificationStore",
    "generate_code",
]
