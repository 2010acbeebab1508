from typing import AsyncIterable

from dishka import Provider, Scope, provide

from categorizer.services.classifier.context import ClassifierContext
from categorizer.services.classifier.lifecycle import ClassifierLifecycleManager
from categorizer.services.classifier.watcher import RecordCountWatcher
from categorizer.services.providers.protocols.category_classifier import IClassifierFactory
from categorizer.services.providers.protocols.notification_manager import INotificationManager
from categorizer.services.providers.protocols.transaction_source import ITransactionSource
from categorizer.settings.classifier import ClassifierSettings


class ClassifierProvider(Provider):
    scope = Scope.APP

    @provide
    async def get_context(
        self,
        settings: ClassifierSettings,
        factory: IClassifierFactory,
        source: ITransactionSource,
        notifications: INotificationManager,
    ) -> AsyncIterable[ClassifierContext]:
        async with ClassifierContext(settings, factory, source, notifications) as context:
            yield context

    @provide
    def get_manager(self, context: ClassifierContext) -> ClassifierLifecycleManager:
        return context.manager()

    watcher = provide(RecordCountWatcher)
