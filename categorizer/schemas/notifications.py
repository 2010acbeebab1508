from typing import Literal

from categorizer.schemas.base import BaseSchema


class NotificationSchema(BaseSchema):
    text: str
    type: str
    level: Literal["success", "error", "info"] = "info"
