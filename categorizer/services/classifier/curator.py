from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol


class TransactionRecord(Protocol):
    description: str | None
    category: str | None


@dataclass(frozen=True, slots=True)
class TrainingPair:
    description: str
    category: str


def curate(
    records: Iterable[TransactionRecord], vocabulary: Sequence[str]
) -> list[TrainingPair]:
    """
    Turns raw transaction records into training pairs.

    Records without a description, or with a category outside ``vocabulary``,
    are dropped. Input order is preserved; duplicates are kept as is.
    """
    allowed = set(vocabulary)
    pairs: list[TrainingPair] = []
    for record in records:
        description = (record.description or "").strip()
        if not description:
            continue
        if record.category not in allowed:
            continue
        pairs.append(TrainingPair(description=description, category=record.category))
    return pairs
