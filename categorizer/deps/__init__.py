from collections.abc import Iterable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler
from dishka import AsyncContainer, Provider, Scope, make_async_container
from dishka.integrations.fastapi import FastapiProvider
from pydantic_settings import BaseSettings

from categorizer.deps.classifier import ClassifierProvider
from categorizer.deps.db import DbConnectionProvider
from categorizer.services.providers.category_classifier import TransactionClassifierFactory
from categorizer.services.providers.notification_manager import AsyncioNotificationManager
from categorizer.services.providers.protocols.category_classifier import IClassifierFactory
from categorizer.services.providers.protocols.notification_manager import INotificationManager
from categorizer.services.providers.protocols.transaction_source import ITransactionSource
from categorizer.services.transactions import SqlTransactionSource, TransactionServicesProvider
from categorizer.settings.app import AppSettings
from categorizer.settings.classifier import ClassifierSettings
from categorizer.settings.db import DatabaseSettings


class AppProvider(Provider):
    def register_settings(self, settings: type[BaseSettings]):
        self.provide(lambda: settings(), scope=Scope.APP, provides=settings)

    def register_instance[T](self, instance: T, provides: type[T]):
        self.provide(lambda: instance, scope=Scope.APP, provides=provides)


def create_app_provider(*settings: BaseSettings) -> AppProvider:
    """Settings are read from the environment unless an instance is passed explicitly."""
    overrides = {type(instance): instance for instance in settings}
    provider = AppProvider()
    for settings_type in (DatabaseSettings, AppSettings, ClassifierSettings):
        if settings_type in overrides:
            provider.register_instance(overrides[settings_type], settings_type)
        else:
            provider.register_settings(settings_type)

    provider.provide(
        TransactionClassifierFactory, provides=IClassifierFactory, scope=Scope.APP
    )
    provider.provide(
        SqlTransactionSource, provides=ITransactionSource, scope=Scope.APP
    )
    provider.provide(
        lambda: AsyncIOScheduler(), provides=BaseScheduler, scope=Scope.APP
    )
    provider.provide(
        AsyncioNotificationManager, provides=INotificationManager, scope=Scope.APP
    )
    return provider


def create_container(
    *settings: BaseSettings, providers: Iterable[Provider] = ()
) -> AsyncContainer:
    container = make_async_container(
        create_app_provider(*settings),
        DbConnectionProvider(),
        ClassifierProvider(),
        TransactionServicesProvider(),
        FastapiProvider(),
        *providers,
    )
    return container
