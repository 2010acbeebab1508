import logging

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from categorizer.services.providers.protocols.notification_manager import INotificationManager


router = APIRouter(prefix="/notifications")
logger = logging.getLogger(__name__)


@router.websocket("")
@inject
async def notifications_ws(
    socket: WebSocket,
    notifications: FromDishka[INotificationManager],
):
    await socket.accept()
    logger.info("Client connected to notifications socket")
    try:
        while True:
            notification = await notifications.pop()
            await socket.send_json(notification.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.info("Client disconnected from notifications socket")
