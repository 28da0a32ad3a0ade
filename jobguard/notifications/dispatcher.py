"""Notification dispatchers.

``HttpDispatcher`` posts messages to an email or SMS gateway over HTTP.
When no gateway is configured the application falls back to
``LogDispatcher``, which only logs the message so codes can be read from the
server log in development.
"""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
import structlog

from jobguard.config import Settings
from jobguard.errors import DispatchError

logger = structlog.get_logger()


class NotificationDispatcher(Protocol):
    """Best-effort delivery of a message to an email address or phone number."""

    async def send(self, channel: str, destination: str, message: str) -> None:
        """Deliver *message*.  Raises ``DispatchError`` on failure."""
        ...


class LogDispatcher:
    """Demo-mode dispatcher: writes the message to the log instead of sending."""

    async def send(self, channel: str, destination: str, message: str) -> None:
        logger.info("notification.logged", channel=channel, destination=destination, message=message)


class HttpDispatcher:
    """Deliver messages by POSTing JSON to per-channel gateway URLs.

    Payload: ``{"to": ..., "subject": ..., "body": ...}`` (``subject`` only
    for email).  A bearer token is sent when configured.
    """

    def __init__(
        self,
        email_url: str = "",
        sms_url: str = "",
        token: str = "",
        timeout: float = 10.0,
        sender_name: str = "Job Portal",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._urls = {"email": email_url, "phone": sms_url}
        self._token = token
        self._timeout = timeout
        self._sender_name = sender_name
        self._transport = transport

    async def send(self, channel: str, destination: str, message: str) -> None:
        url = self._urls.get(channel, "")
        if not url:
            raise DispatchError(f"No gateway configured for channel '{channel}'")

        payload = {"to": destination, "body": message}
        if channel == "email":
            payload["subject"] = f"{self._sender_name}: verify your email address"
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise DispatchError(f"Gateway request failed: {e}") from e

        if resp.status_code >= 300:
            raise DispatchError(f"Gateway returned HTTP {resp.status_code}")


def build_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Return the dispatcher the settings call for."""
    if settings.is_demo_mode:
        return LogDispatcher()
    return HttpDispatcher(
        email_url=settings.email_gateway_url,
        sms_url=settings.sms_gateway_url,
        token=settings.gateway_token,
        timeout=settings.dispatch_timeout,
        sender_name=settings.sender_name,
    )
