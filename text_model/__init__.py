"""Классификатор описаний транзакций: токенизация, нейросеть и сохранение модели."""

from .errors import (
    ModelError,
    ModelLoadError,
    PersistenceError,
    PredictionError,
    TrainingError,
)
from .model import TransactionClassifier

__all__ = [
    "TransactionClassifier",
    "ModelError",
    "ModelLoadError",
    "TrainingError",
    "PersistenceError",
    "PredictionError",
]
