from collections.abc import Sequence
from typing import Protocol

from categorizer.services.classifier.curator import TrainingPair


class ICategoryClassifier(Protocol):
    """Blocking model operations over a fixed category vocabulary."""

    def load_model(self) -> bool: ...

    def build_model(self) -> None: ...

    def train_model(self, pairs: Sequence[TrainingPair]) -> None: ...

    def save_model(self) -> None: ...

    def predict_category(self, description: str) -> str: ...


class IClassifierFactory(Protocol):
    def __call__(self, vocabulary: tuple[str, ...]) -> ICategoryClassifier: ...
