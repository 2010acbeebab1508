import asyncio
import logging
from collections.abc import Callable, Sequence

from categorizer.services.classifier.curator import TrainingPair
from categorizer.services.classifier.results import Err, Ok, Result
from categorizer.services.errors import CapabilityFailure
from categorizer.services.providers.protocols.category_classifier import ICategoryClassifier

logger = logging.getLogger(__name__)


class ClassifierHandle:
    """
    The single live classifier for one category vocabulary.

    Every operation runs in a worker thread so the event loop stays
    responsive, and all operations on one handle are serialized by a lock:
    the underlying model is not assumed to tolerate concurrent access, so a
    prediction waits for a running training step to finish. Failures are
    returned as :class:`Err` values instead of being raised.
    """

    def __init__(self, classifier: ICategoryClassifier, vocabulary: tuple[str, ...]):
        self.classifier = classifier
        self.vocabulary = vocabulary
        self._lock = asyncio.Lock()

    async def _run[T](self, operation: str, func: Callable[..., T], *args) -> Result[T]:
        async with self._lock:
            try:
                value = await asyncio.to_thread(func, *args)
            except Exception as exc:
                logger.exception("Classifier operation '%s' failed", operation)
                return Err(CapabilityFailure(operation, str(exc) or type(exc).__name__))
        return Ok(value)

    async def load(self) -> Result[bool]:
        return await self._run("load", self.classifier.load_model)

    async def build(self) -> Result[None]:
        return await self._run("build", self.classifier.build_model)

    async def train(self, pairs: Sequence[TrainingPair]) -> Result[None]:
        return await self._run("train", self.classifier.train_model, list(pairs))

    async def save(self) -> Result[None]:
        return await self._run("save", self.classifier.save_model)

    async def predict(self, description: str) -> Result[str]:
        result = await self._run("predict", self.classifier.predict_category, description)
        match result:
            case Ok(category) if category not in self.vocabulary:
                return Err(
                    CapabilityFailure("predict", f"category {category!r} is not in the vocabulary")
                )
        return result
