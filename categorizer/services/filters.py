from typing import Annotated, Any

from annotated_types import Ge, Le
from fastapi.params import Depends, Query
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from categorizer.schemas.base import BaseSchema
from collections.abc import Sequence
from dataclasses import dataclass


class PaginatedSchema(BaseSchema):
    limit: Annotated[int, Ge(ge=1), Le(le=100)] = 10
    offset: Annotated[int, Ge(ge=0)] = 0


def get_pagination(
    limit: Annotated[int, Query()] = 10,
    offset: Annotated[int, Query()] = 0,
):
    return PaginatedSchema(
        limit=limit,
        offset=offset,
    )


Paginated = Annotated[PaginatedSchema, Depends(get_pagination)]


class PaginatedResponseSchema[T](BaseSchema):
    items: list[T]
    total: int
    limit: int
    offset: int


@dataclass
class PaginatedResponse[T]:
    items: list[T]
    total: int
    limit: int
    offset: int

    @classmethod
    async def of(
        cls,
        session: AsyncSession,
        query: Select[Any],
        page: PaginatedSchema | None = None,
        default_ordering: ColumnElement | Sequence[ColumnElement] | None = None,
    ) -> "PaginatedResponse[T]":
        page = page or PaginatedSchema()
        total = await session.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        items = await session.scalars(apply_pagination(query, page, default_ordering))
        return cls(
            items=list(items),
            total=total or 0,
            limit=page.limit,
            offset=page.offset,
        )


def apply_pagination[T: tuple[Any, ...]](
    query: Select[T],
    page: PaginatedSchema,
    default_ordering: ColumnElement | Sequence[ColumnElement] | None = None,
) -> Select[T]:
    query = query.offset(page.offset).limit(page.limit)
    if default_ordering is not None:
        if not isinstance(default_ordering, Sequence):
            default_ordering = [default_ordering]
        query = query.order_by(*default_ordering)
    return query
