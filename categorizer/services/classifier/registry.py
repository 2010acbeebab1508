import logging
from collections.abc import Sequence

from categorizer.services.classifier.handle import ClassifierHandle
from categorizer.services.providers.protocols.category_classifier import IClassifierFactory

logger = logging.getLogger(__name__)


class ClassifierRegistry:
    """Keyed cache of classifier handles: one handle per ordered vocabulary."""

    def __init__(self, factory: IClassifierFactory):
        self._factory = factory
        self._handles: dict[tuple[str, ...], ClassifierHandle] = {}

    def get(self, vocabulary: Sequence[str]) -> ClassifierHandle:
        key = tuple(vocabulary)
        handle = self._handles.get(key)
        if handle is None:
            logger.info("Creating classifier for vocabulary %s", list(key))
            handle = ClassifierHandle(self._factory(key), key)
            self._handles[key] = handle
        return handle

    def __contains__(self, vocabulary: Sequence[str]) -> bool:
        return tuple(vocabulary) in self._handles

    def __len__(self) -> int:
        return len(self._handles)
