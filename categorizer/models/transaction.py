from datetime import date

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from categorizer.models.base import BaseModel


class Transaction(BaseModel):
    __tablename__ = "transactions"

    date: Mapped[date]
    description: Mapped[str] = mapped_column(String(512), default="")
    amount: Mapped[float]

    # label set by the user; the only one used for training
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    predicted_category: Mapped[str | None] = mapped_column(String(64), nullable=True)
