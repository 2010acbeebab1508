import logging
from typing import Annotated

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, BackgroundTasks, UploadFile
from fastapi.params import File
from pydantic import TypeAdapter
from starlette import status

from categorizer.schemas.transactions import (
    TransactionImportResponseSchema,
    TransactionSchema,
)
from categorizer.services.classifier.watcher import RecordCountWatcher
from categorizer.services.filters import Paginated, PaginatedResponseSchema
from categorizer.services.transactions import (
    TransactionImporter,
    TransactionRetrieveInteractor,
)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    route_class=DishkaRoute,
)
logger = logging.getLogger(__name__)


@router.post("/import", status_code=status.HTTP_201_CREATED)
async def import_transactions(
    service: FromDishka[TransactionImporter],
    watcher: FromDishka[RecordCountWatcher],
    background_tasks: BackgroundTasks,
    file: Annotated[UploadFile, File()],
) -> TransactionImportResponseSchema:
    transactions = await service(file)
    background_tasks.add_task(watcher)
    return TransactionImportResponseSchema(count=len(transactions))


@router.get("")
async def list_transactions(
    service: FromDishka[TransactionRetrieveInteractor],
    page: Paginated,
) -> PaginatedResponseSchema[TransactionSchema]:
    transactions = await service.all(page=page)
    return TypeAdapter(PaginatedResponseSchema[TransactionSchema]).validate_python(
        transactions, from_attributes=True
    )
