import asyncio

from categorizer.schemas.notifications import NotificationSchema
from categorizer.services.providers import notification_manager
from categorizer.services.providers.notification_manager import AsyncioNotificationManager


def test_notifications_are_delivered_in_order():
    async def scenario():
        manager = AsyncioNotificationManager()
        await manager.send(NotificationSchema(text="first", type="classifier"))
        await manager.send(NotificationSchema(text="second", type="classifier", level="success"))
        return [await manager.pop(), await manager.pop()]

    first, second = asyncio.run(scenario())

    assert first.text == "first"
    assert second.level == "success"


def test_full_queue_drops_oldest(monkeypatch):
    monkeypatch.setattr(notification_manager, "MAX_PENDING_NOTIFICATIONS", 2)

    async def scenario():
        manager = AsyncioNotificationManager()
        for text in ("a", "b", "c"):
            await manager.send(NotificationSchema(text=text, type="classifier"))
        return [(await manager.pop()).text for _ in range(2)]

    assert asyncio.run(scenario()) == ["b", "c"]
