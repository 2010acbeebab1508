import contextlib
from datetime import date, datetime
from uuid import UUID

from pydantic import field_validator

from categorizer.schemas.base import BaseSchema


class TransactionCreateSchema(BaseSchema):
    date: date
    description: str = ""
    amount: float
    category: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: str):
        if isinstance(v, str):
            with contextlib.suppress(ValueError):
                return datetime.strptime(v, "%d/%m/%Y").date()
        return v

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: str | None):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TransactionSchema(TransactionCreateSchema):
    id: UUID
    predicted_category: str | None = None
    created_at: datetime
    updated_at: datetime


class TransactionImportResponseSchema(BaseSchema):
    count: int
