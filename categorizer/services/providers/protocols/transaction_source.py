from collections.abc import Sequence
from typing import Protocol

from categorizer.services.classifier.curator import TransactionRecord


class ITransactionSource(Protocol):
    async def records(self) -> Sequence[TransactionRecord]: ...

    async def count(self) -> int: ...
