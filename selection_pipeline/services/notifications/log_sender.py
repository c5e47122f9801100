"""
Notification sender that writes messages to the application log.
"""

import logging
import uuid

from selection_pipeline.services.notifications.base import NotificationSender, SendResult

logger = logging.getLogger(__name__)


class LoggingNotificationSender(NotificationSender):
    channel = "log"

    async def send(self, recipient: str, subject: str, body: str) -> SendResult:
        message_id = f"log-{uuid.uuid4().hex[:12]}"
        logger.info("Notification %s to %s: %s (%d chars)", message_id, recipient, subject, len(body))
        return SendResult(success=True, message_id=message_id)
