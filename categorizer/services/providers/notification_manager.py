import asyncio
import logging

from categorizer.schemas.notifications import NotificationSchema
from categorizer.services.providers.protocols.notification_manager import INotificationManager

logger = logging.getLogger(__name__)

MAX_PENDING_NOTIFICATIONS = 100


class AsyncioNotificationManager(INotificationManager):
    def __init__(self):
        self.queue: asyncio.Queue[NotificationSchema] = asyncio.Queue(
            maxsize=MAX_PENDING_NOTIFICATIONS
        )

    async def send(self, notification: NotificationSchema):
        if self.queue.full():
            # nobody is listening, drop the oldest message
            self.queue.get_nowait()
        self.queue.put_nowait(notification)
        logger.debug("Notification queued: %s", notification.text)

    async def pop(self) -> NotificationSchema:
        return await self.queue.get()
