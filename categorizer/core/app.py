import asyncio
import contextlib
import logging
import operator
from typing import Any, Awaitable, Callable

from apscheduler.schedulers.base import BaseScheduler
from dishka import AsyncContainer, Scope
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from categorizer.core.db import create_schema
from categorizer.deps import create_container
from categorizer.routes import router as api_router
from categorizer.services.classifier.lifecycle import ClassifierLifecycleManager
from categorizer.services.classifier.watcher import RecordCountWatcher
from categorizer.services.exception_handler import register_exception_handlers
from categorizer.services.transactions import TransactionBackgroundCategorizer
from categorizer.settings.app import AppSettings
from categorizer.settings.classifier import ClassifierSettings
from categorizer.settings.db import DatabaseSettings


logger = logging.getLogger(__name__)


async def service_runner[T](
    container: AsyncContainer,
    target: type[T],
    action: Callable[[T], Awaitable[Any]],
) -> None:
    async with container(scope=Scope.REQUEST) as request_container:
        service = await request_container.get(target)
        try:
            await action(service)
        except Exception:
            logger.exception("Background service error")


async def initialize_classifier(container: AsyncContainer) -> None:
    manager = await container.get(ClassifierLifecycleManager)
    try:
        await manager.initialize()
    except Exception:
        logger.exception("Classifier initialization failed")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    container: AsyncContainer = app.state.dishka_container
    db_settings = await container.get(DatabaseSettings)
    if db_settings.create_schema:
        await create_schema(await container.get(AsyncEngine))

    classifier_settings = await container.get(ClassifierSettings)
    initialization = asyncio.create_task(initialize_classifier(container))

    scheduler = await container.get(BaseScheduler)
    scheduler.start()
    scheduler.add_job(
        service_runner,
        args=(container, RecordCountWatcher, operator.attrgetter("__call__")),
        trigger="interval",
        id="classifier-record-count-watcher",
        seconds=classifier_settings.watch_interval_seconds,
    )
    scheduler.add_job(
        service_runner,
        args=(
            container,
            TransactionBackgroundCategorizer,
            operator.attrgetter("__call__"),
        ),
        trigger="interval",
        id="background-transaction-categorizer",
        minutes=1,
    )
    yield
    scheduler.shutdown(wait=False)
    if not initialization.done():
        # training has no abort path, let it finish before the container closes
        await initialization
    await container.close()


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    container = container or create_container()
    settings = asyncio.run(container.get(AppSettings))
    app = FastAPI(lifespan=lifespan, title=settings.app_name)
    register_exception_handlers(app)
    setup_dishka(container, app=app)
    app.include_router(api_router)
    return app
