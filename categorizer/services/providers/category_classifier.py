from pathlib import Path

from text_model import TransactionClassifier

from categorizer.services.providers.protocols.category_classifier import (
    ICategoryClassifier,
    IClassifierFactory,
)
from categorizer.settings.classifier import ClassifierSettings


class TransactionClassifierFactory(IClassifierFactory):
    def __init__(self, settings: ClassifierSettings):
        self.model_dir: Path = settings.model_dir

    def __call__(self, vocabulary: tuple[str, ...]) -> ICategoryClassifier:
        return TransactionClassifier(vocabulary, model_dir=self.model_dir)
