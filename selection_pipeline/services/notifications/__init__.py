"""Outbound notification senders."""

from typing import Optional

from selection_pipeline.core.config import settings
from selection_pipeline.services.notifications.base import NotificationSender, SendResult
from selection_pipeline.services.notifications.log_sender import LoggingNotificationSender

SENDERS = {
    LoggingNotificationSender.channel: LoggingNotificationSender,
}


def get_notification_sender(channel: Optional[str] = None) -> NotificationSender:
    """Build the sender configured by NOTIFICATION_SENDER."""
    channel = channel or settings.NOTIFICATION_SENDER
    try:
        return SENDERS[channel]()
    except KeyError:
        raise ValueError(f"Unknown notification sender: {channel}") from None


__all__ = [
    "LoggingNotificationSender",
    "NotificationSender",
    "SendResult",
    "get_notification_sender",
]
