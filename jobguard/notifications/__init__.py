"""Outbound email/SMS delivery for verification codes."""

from jobguard.notifications.dispatcher import (
    HttpDispatcher,
    LogDispatcher,
    NotificationDispatcher,
    build_dispatcher,
)

__all__ = ["HttpDispatcher", "LogDispatcher", "NotificationDispatcher", "build_dispatcher"]
