"""Verification service: issue a code, deliver it, verify it, set the trust flag.

Per (subject, channel) the flow is ``NoCode -> CodeIssued`` on request,
``CodeIssued -> CodeIssued`` when a newer request supersedes the code, and
``CodeIssued -> NoCode`` on successful verification or expiry.  A verified
trust flag is never cleared here.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Callable, Optional

import structlog

from jobguard.config import Settings
from jobguard.directory.models import User
from jobguard.directory.store import UserDirectory
from jobguard.errors import DispatchError, InvalidOrExpiredCode, NoDestinationConfigured
from jobguard.notifications.dispatcher import NotificationDispatcher
from jobguard.verification.codes import generate_code
from jobguard.verification.models import Channel, CodeRequestResult, VerificationStatus
from jobguard.verification.store import VerificationStore

logger = structlog.get_logger()


class VerificationService:
    """Orchestrates the generate -> dispatch -> verify -> trust-flag flow."""

    def __init__(
        self,
        store: VerificationStore,
        users: UserDirectory,
        dispatcher: NotificationDispatcher,
        settings: Optional[Settings] = None,
        code_factory: Optional[Callable[[int], str]] = None,
    ) -> None:
        self._store = store
        self._users = users
        self._dispatcher = dispatcher
        self._settings = settings or Settings()
        self._code_factory = code_factory or generate_code

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self._settings.code_ttl_minutes)

    def _message(self, code: str) -> str:
        return (
            f"Your {self._settings.sender_name} verification code is: {code}. "
            f"It will expire in {self._settings.code_ttl_minutes} minutes."
        )

    async def request_code(self, subject_id: str, channel: Channel | str) -> CodeRequestResult:
        """Issue a fresh code for the channel and try to deliver it.

        The stored code supersedes any earlier one and stays valid even if
        delivery fails; that case is reported through ``delivered=False``.
        """
        channel = Channel(channel)
        user = self._users.require_user(subject_id)
        destination = user.destination(channel.value)
        if not destination:
            raise NoDestinationConfigured(
                f"No {channel.value} associated with this account"
            )

        code = self._code_factory(self._settings.code_length)
        record = self._store.put(subject_id, channel, code, self.ttl)
        logger.info(
            "verification.code_issued",
            subject_id=subject_id,
            channel=channel.value,
            expires_at=record.expires_at.isoformat(),
        )

        result = CodeRequestResult(
            subject_id=subject_id,
            channel=channel,
            expires_at=record.expires_at,
        )
        try:
            await self._dispatcher.send(channel.value, destination, self._message(code))
        except DispatchError as e:
            logger.warning(
                "verification.dispatch_failed",
                subject_id=subject_id,
                channel=channel.value,
                error=e.message,
            )
            result.delivered = False
            result.delivery_error = e.message
        return result

    def verify_code(self, subject_id: str, channel: Channel | str, submitted_code: str) -> User:
        """Consume the code and set the channel's trust flag.

        Raises ``InvalidOrExpiredCode`` for a wrong, expired, already used or
        malformed code; no trust state changes in that case.
        """
        channel = Channel(channel)
        self._users.require_user(subject_id)

        submitted = (submitted_code or "").strip()
        if not submitted.isdigit() or len(submitted) != self._settings.code_length:
            logger.info("verification.rejected", subject_id=subject_id, channel=channel.value, reason="malformed")
            raise InvalidOrExpiredCode("Invalid or expired verification code")

        if not self._store.consume(subject_id, channel, submitted):
            logger.info("verification.rejected", subject_id=subject_id, channel=channel.value)
            raise InvalidOrExpiredCode("Invalid or expired verification code")

        user = self._users.set_trust_flag(subject_id, channel.value)
        logger.info("verification.verified", subject_id=subject_id, channel=channel.value)
        return user

    def status(self, subject_id: str) -> VerificationStatus:
        user = self._users.require_user(subject_id)
        return VerificationStatus(
            subject_id=subject_id,
            email_verified=user.email_verified,
            phone_verified=user.phone_verified,
            pending=[c for c in Channel if self._store.get(subject_id, c) is not None],
        )
