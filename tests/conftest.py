import threading
from dataclasses import dataclass, field

import pytest

from categorizer.services.classifier.context import ClassifierContext
from categorizer.services.classifier.lifecycle import ClassifierLifecycleManager
from categorizer.services.classifier.registry import ClassifierRegistry
from categorizer.settings.classifier import ClassifierSettings
from text_model.errors import PersistenceError, PredictionError, TrainingError

VOCABULARY = ("Food", "Transport", "Other")


@dataclass
class Record:
    description: str | None
    category: str | None


class MemorySource:
    def __init__(self, records=()):
        self.items = list(records)

    async def records(self):
        return list(self.items)

    async def count(self):
        return len(self.items)


class CollectingNotifications:
    def __init__(self):
        self.sent = []

    async def send(self, notification):
        self.sent.append(notification)

    async def pop(self):
        return self.sent.pop(0)

    @property
    def texts(self):
        return [notification.text for notification in self.sent]


@dataclass
class FakeClassifier:
    vocabulary: tuple[str, ...]
    persisted: bool = False
    fail_on: set[str] = field(default_factory=set)
    prediction: str = "Food"
    gate: threading.Event | None = None
    calls: list[str] = field(default_factory=list)
    trained_on: list = field(default_factory=list)

    def load_model(self):
        self.calls.append("load")
        if "load" in self.fail_on:
            raise OSError("corrupt artifact")
        return self.persisted

    def build_model(self):
        self.calls.append("build")
        if "build" in self.fail_on:
            raise RuntimeError("cannot build")

    def train_model(self, pairs):
        self.calls.append("train")
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if "train" in self.fail_on:
            raise TrainingError("diverged")
        self.trained_on = list(pairs)

    def save_model(self):
        self.calls.append("save")
        if "save" in self.fail_on:
            raise PersistenceError("disk full")
        self.persisted = True

    def predict_category(self, description):
        self.calls.append("predict")
        if "predict" in self.fail_on:
            raise PredictionError("boom")
        return self.prediction


class FakeFactory:
    def __init__(self, **options):
        self.options = options
        self.created: list[FakeClassifier] = []

    def __call__(self, vocabulary):
        classifier = FakeClassifier(vocabulary, **self.options)
        self.created.append(classifier)
        return classifier


@pytest.fixture
def source():
    return MemorySource()


@pytest.fixture
def notifications():
    return CollectingNotifications()


@pytest.fixture
def make_manager(source, notifications):
    def factory(**options):
        classifier_factory = FakeFactory(**options)
        manager = ClassifierLifecycleManager(
            ClassifierRegistry(classifier_factory),
            VOCABULARY,
            source,
            notifications,
        )
        return manager, classifier_factory

    return factory


@pytest.fixture
def make_context(source, notifications, tmp_path):
    def factory(classifier_factory=None):
        settings = ClassifierSettings(categories=VOCABULARY, model_dir=tmp_path / "models")
        return ClassifierContext(
            settings, classifier_factory or FakeFactory(), source, notifications
        )

    return factory
