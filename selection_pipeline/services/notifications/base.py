"""
Base interface for outbound notification senders.
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None


class NotificationSender(Protocol):
    """Interface for notification channels (email, chat, ...)."""

    channel: str

    async def send(self, recipient: str, subject: str, body: str) -> SendResult:
        ...
