import logging
from collections.abc import Sequence

from categorizer.services.classifier.lifecycle import ClassifierLifecycleManager
from categorizer.services.classifier.registry import ClassifierRegistry
from categorizer.services.errors import ClassifierContextError
from categorizer.services.providers.protocols.category_classifier import IClassifierFactory
from categorizer.services.providers.protocols.notification_manager import INotificationManager
from categorizer.services.providers.protocols.transaction_source import ITransactionSource
from categorizer.settings.classifier import ClassifierSettings

logger = logging.getLogger(__name__)


class ClassifierContext:
    """
    Process-scoped owner of the classifier registry and lifecycle managers.

    Managers are only available between :meth:`open` and :meth:`close`
    (or inside ``async with``); asking for one outside that window raises
    :class:`ClassifierContextError`.
    """

    def __init__(
        self,
        settings: ClassifierSettings,
        factory: IClassifierFactory,
        source: ITransactionSource,
        notifications: INotificationManager,
    ):
        self.settings = settings
        self.factory = factory
        self.source = source
        self.notifications = notifications
        self._registry: ClassifierRegistry | None = None
        self._managers: dict[tuple[str, ...], ClassifierLifecycleManager] = {}

    @property
    def is_open(self) -> bool:
        return self._registry is not None

    @property
    def registry(self) -> ClassifierRegistry:
        if self._registry is None:
            raise ClassifierContextError("ClassifierContext is not opened")
        return self._registry

    def open(self) -> "ClassifierContext":
        if self._registry is None:
            self._registry = ClassifierRegistry(self.factory)
            logger.info("Classifier context opened")
        return self

    def close(self) -> None:
        self._managers.clear()
        self._registry = None
        logger.info("Classifier context closed")

    async def __aenter__(self) -> "ClassifierContext":
        return self.open()

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    def manager(self, vocabulary: Sequence[str] | None = None) -> ClassifierLifecycleManager:
        if self._registry is None:
            raise ClassifierContextError(
                "Classifier manager must be used within an opened ClassifierContext"
            )
        key = tuple(vocabulary or self.settings.categories)
        manager = self._managers.get(key)
        if manager is None:
            manager = ClassifierLifecycleManager(
                self._registry,
                key,
                self.source,
                self.notifications,
                fallback_category=self.settings.fallback_category,
                auto_train_threshold=self.settings.auto_train_threshold,
                min_training_pairs=self.settings.min_training_pairs,
            )
            self._managers[key] = manager
        return manager
