from typing import Protocol

from categorizer.schemas.notifications import NotificationSchema


class INotificationManager(Protocol):
    async def send(self, notification: NotificationSchema): ...

    async def pop(self) -> NotificationSchema: ...
