import csv
import logging
from io import StringIO
from uuid import UUID

from dishka import Provider, Scope, provide
from fastapi import UploadFile
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from categorizer.models.transaction import Transaction
from categorizer.schemas.notifications import NotificationSchema
from categorizer.schemas.transactions import TransactionCreateSchema
from categorizer.services.classifier.lifecycle import ClassifierLifecycleManager
from categorizer.services.errors import InvalidImportFileError
from categorizer.services.filters import PaginatedResponse, PaginatedSchema
from categorizer.services.providers.protocols.notification_manager import INotificationManager
from categorizer.services.providers.protocols.transaction_source import ITransactionSource
from categorizer.settings.classifier import ClassifierSettings

logger = logging.getLogger(__name__)


class SqlTransactionSource(ITransactionSource):
    """Read-only view of stored transactions for the classifier."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def records(self) -> list[Transaction]:
        async with self.session_maker() as session:
            transactions = await session.scalars(
                select(Transaction).order_by(Transaction.date, Transaction.created_at)
            )
            return list(transactions)

    async def count(self) -> int:
        async with self.session_maker() as session:
            value = await session.scalar(select(func.count()).select_from(Transaction))
            return int(value or 0)


class TransactionRetrieveInteractor:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def all(self, page: PaginatedSchema | None = None) -> PaginatedResponse[Transaction]:
        return await PaginatedResponse.of(
            self.session,
            select(Transaction),
            page=page,
            default_ordering=(Transaction.date.desc(), Transaction.created_at.desc()),
        )


class TransactionBulkCreateInteractor:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _map(self, transaction: TransactionCreateSchema) -> Transaction:
        return Transaction(
            date=transaction.date,
            description=transaction.description,
            amount=transaction.amount,
            category=transaction.category,
        )

    async def create(
        self, transactions: list[TransactionCreateSchema]
    ) -> list[Transaction]:
        transactions_db = [self._map(transaction) for transaction in transactions]
        self.session.add_all(transactions_db)
        await self.session.commit()
        return transactions_db


class TransactionImporter:
    def __init__(self, create_interactor: TransactionBulkCreateInteractor):
        self.create_interactor = create_interactor

    async def __call__(self, file: UploadFile) -> list[Transaction]:
        logger.info("Importing transactions from %s", file.filename)
        content = await file.read()
        try:
            reader = csv.DictReader(StringIO(content.decode("utf-8-sig")), delimiter=",")
            transactions = TypeAdapter(list[TransactionCreateSchema]).validate_python(
                list(reader)
            )
        except (UnicodeDecodeError, csv.Error, ValidationError) as exc:
            logger.warning("Rejected transactions file %s: %s", file.filename, exc)
            raise InvalidImportFileError() from exc
        return await self.create_interactor.create(transactions)


class TransactionBackgroundCategorizer:
    """Fills ``predicted_category`` for transactions the user has not labelled."""

    def __init__(
        self,
        session: AsyncSession,
        manager: ClassifierLifecycleManager,
        notifications: INotificationManager,
        settings: ClassifierSettings,
    ):
        self.session = session
        self.manager = manager
        self.notifications = notifications
        self.settings = settings

    async def __call__(self) -> int:
        if not self.manager.is_model_trained:
            return 0
        transactions = list(
            await self.session.scalars(
                select(Transaction)
                .where(Transaction.category.is_(None))
                .where(Transaction.predicted_category.is_(None))
                .limit(self.settings.background_batch_size)
            )
        )
        if not transactions:
            return 0
        logger.info("Found %s uncategorized transactions", len(transactions))
        updates: dict[UUID, str] = {}
        for transaction in transactions:
            category = await self.manager.try_predict_category(transaction.description)
            # left empty so the next run retries it
            if category is not None:
                updates[transaction.id] = category
        if not updates:
            return 0
        for transaction_id, category in updates.items():
            await self.session.execute(
                update(Transaction)
                .where(Transaction.id == transaction_id)
                .values(predicted_category=category)
            )
        await self.session.commit()
        await self.notifications.send(
            NotificationSchema(
                text=f"Categorized {len(updates)} transactions",
                type="transaction-categorizer",
                level="info",
            )
        )
        return len(updates)


class TransactionServicesProvider(Provider):
    scope = Scope.REQUEST

    retrieve = provide(TransactionRetrieveInteractor)
    importer = provide(TransactionImporter)
    background_categorizer = provide(TransactionBackgroundCategorizer)
    bulk_create = provide(TransactionBulkCreateInteractor)
