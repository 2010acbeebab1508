import logging

from categorizer.services.classifier.lifecycle import ClassifierLifecycleManager
from categorizer.services.providers.protocols.transaction_source import ITransactionSource

logger = logging.getLogger(__name__)


class RecordCountWatcher:
    """Polls the transaction count and forwards changes to the lifecycle manager."""

    def __init__(self, source: ITransactionSource, manager: ClassifierLifecycleManager):
        self.source = source
        self.manager = manager

    async def __call__(self) -> None:
        count = await self.source.count()
        await self.manager.on_record_count_changed(count)
