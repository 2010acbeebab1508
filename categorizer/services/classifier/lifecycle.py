import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import StrEnum

from categorizer.schemas.notifications import NotificationSchema
from categorizer.services.classifier.curator import TrainingPair, curate
from categorizer.services.classifier.handle import ClassifierHandle
from categorizer.services.classifier.registry import ClassifierRegistry
from categorizer.services.classifier.results import Err, Ok
from categorizer.services.errors import DataInsufficiencyError
from categorizer.services.providers.protocols.notification_manager import INotificationManager
from categorizer.services.providers.protocols.transaction_source import ITransactionSource

logger = logging.getLogger(__name__)

TRAINED_MESSAGE = "Model trained successfully!"
FAILED_MESSAGE = "Failed to train model"


class LifecyclePhase(StrEnum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    IDLE_UNTRAINED = "idle_untrained"
    IDLE_TRAINED = "idle_trained"
    TRAINING = "training"


class TrainingOutcome(StrEnum):
    TRAINED = "trained"
    INSUFFICIENT_DATA = "insufficient_data"
    FAILED = "failed"
    ALREADY_TRAINING = "already_training"
    NO_CLASSIFIER = "no_classifier"


@dataclass(frozen=True, slots=True)
class LifecycleState:
    has_classifier: bool = False
    is_model_trained: bool = False
    is_training: bool = False
    phase: LifecyclePhase = LifecyclePhase.UNINITIALIZED


type StateObserver = Callable[[LifecycleState], object]


class ClassifierLifecycleManager:
    """
    Decides when the classifier for one vocabulary is loaded, trained,
    persisted and asked for predictions.

    ``train_model`` and ``predict_category`` never raise: training reports a
    :class:`TrainingOutcome` plus an advisory notification, and prediction
    falls back to ``fallback_category`` whenever the model cannot be trusted.
    ``is_training`` doubles as the gate that keeps a second training run from
    starting while one is in flight.
    """

    def __init__(
        self,
        registry: ClassifierRegistry,
        vocabulary: Sequence[str],
        source: ITransactionSource,
        notifications: INotificationManager,
        *,
        fallback_category: str = "Other",
        auto_train_threshold: int = 5,
        min_training_pairs: int = 3,
    ):
        if not vocabulary:
            raise ValueError("Category vocabulary must not be empty")
        self.registry = registry
        self.vocabulary = tuple(vocabulary)
        self.source = source
        self.notifications = notifications
        self.fallback_category = fallback_category
        self.auto_train_threshold = auto_train_threshold
        self.min_training_pairs = min_training_pairs

        self._handle: ClassifierHandle | None = None
        self._state = LifecycleState()
        self._observers: list[StateObserver] = []
        self._last_record_count: int | None = None
        self._initializing = False

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def handle(self) -> ClassifierHandle | None:
        return self._handle

    @property
    def is_model_trained(self) -> bool:
        return self._state.is_model_trained

    @property
    def is_training(self) -> bool:
        return self._state.is_training

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Registers ``observer`` for state snapshots. Returns an unsubscribe callable."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _update(self, **changes) -> None:
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for observer in list(self._observers):
            try:
                observer(new_state)
            except Exception:
                logger.exception("Classifier state observer failed")

    def _idle_phase(self) -> LifecyclePhase:
        if self._state.is_model_trained:
            return LifecyclePhase.IDLE_TRAINED
        return LifecyclePhase.IDLE_UNTRAINED

    async def _notify(self, text: str, level: str) -> None:
        try:
            await self.notifications.send(
                NotificationSchema(text=text, type="classifier", level=level)
            )
        except Exception:
            logger.exception("Failed to deliver notification %r", text)

    async def initialize(self) -> None:
        """
        Loads a persisted model, or trains one when enough transactions exist.

        Safe to call repeatedly: once the model is trained (or while a
        training run or another initialization is in progress) the call does
        nothing.
        """
        if self._state.is_model_trained or self._state.is_training or self._initializing:
            logger.debug("Classifier already initialized, nothing to do")
            return
        self._initializing = True
        try:
            handle = self.registry.get(self.vocabulary)
            self._update(phase=LifecyclePhase.LOADING)
            match await handle.load():
                case Ok(True):
                    logger.info("Persisted classifier model loaded, skipping training")
                    self._update(is_model_trained=True, phase=LifecyclePhase.IDLE_TRAINED)
                case Ok(_) | Err(_):
                    await self._train_if_enough_records(handle)
            self._handle = handle
            self._update(has_classifier=True, phase=self._idle_phase())
        finally:
            self._initializing = False

    async def _train_if_enough_records(self, handle: ClassifierHandle) -> None:
        try:
            count = await self.source.count()
        except Exception:
            logger.exception("Failed to count available transactions")
            self._update(phase=self._idle_phase())
            return
        self._last_record_count = count
        if count > self.auto_train_threshold:
            logger.info("No persisted model, auto-training on %d transactions", count)
            await self._train(handle)
        else:
            logger.info(
                "No persisted model and only %d transactions available, waiting for more",
                count,
            )
            self._update(phase=self._idle_phase())

    async def on_record_count_changed(self, count: int) -> None:
        """
        Re-runs the initialize decision when the number of transactions changes.

        A change seen while a training run or an initialization is in flight
        is not recorded, so the next report of the same count re-evaluates it.
        """
        if count == self._last_record_count:
            return
        if self._state.is_training or self._initializing:
            logger.debug("Transaction count changed to %d while busy, deferring", count)
            return
        logger.debug("Transaction count changed: %s -> %d", self._last_record_count, count)
        self._last_record_count = count
        await self.initialize()

    async def train_model(self) -> TrainingOutcome:
        handle = self._handle
        if handle is None:
            logger.info("Training requested before the classifier is ready, ignoring")
            return TrainingOutcome.NO_CLASSIFIER
        return await self._train(handle)

    async def _train(self, handle: ClassifierHandle) -> TrainingOutcome:
        if self._state.is_training:
            logger.info("Training already in progress, ignoring request")
            return TrainingOutcome.ALREADY_TRAINING
        self._update(is_training=True, phase=LifecyclePhase.TRAINING)
        try:
            return await self._run_training(handle)
        finally:
            self._update(is_training=False, phase=self._idle_phase())

    async def _curated_pairs(self) -> list[TrainingPair]:
        records = await self.source.records()
        pairs = curate(records, self.vocabulary)
        if len(pairs) < self.min_training_pairs:
            raise DataInsufficiencyError(
                f"Need at least {self.min_training_pairs} transactions to train the model"
            )
        return pairs

    async def _run_training(self, handle: ClassifierHandle) -> TrainingOutcome:
        try:
            pairs = await self._curated_pairs()
        except DataInsufficiencyError as exc:
            logger.warning("Not enough training data: %s", exc.detail)
            await self._notify(exc.detail, level="error")
            return TrainingOutcome.INSUFFICIENT_DATA
        except Exception:
            logger.exception("Failed to read transactions for training")
            await self._notify(FAILED_MESSAGE, level="error")
            return TrainingOutcome.FAILED

        logger.info("Training model with %d transactions", len(pairs))
        steps = (handle.build, lambda: handle.train(pairs), handle.save)
        for step in steps:
            match await step():
                case Err(reason):
                    logger.error("Training aborted: %s", reason.detail)
                    await self._notify(FAILED_MESSAGE, level="error")
                    return TrainingOutcome.FAILED

        self._update(is_model_trained=True)
        await self._notify(TRAINED_MESSAGE, level="success")
        return TrainingOutcome.TRAINED

    async def try_predict_category(self, description: str) -> str | None:
        """Returns the model's category, or ``None`` when the model cannot be trusted."""
        handle = self._handle
        if handle is None or not self._state.is_model_trained:
            return None
        match await handle.predict(description):
            case Ok(category):
                return category
            case Err(reason):
                logger.warning("Prediction failed: %s", reason.detail)
        return None

    async def predict_category(self, description: str) -> str:
        category = await self.try_predict_category(description)
        if category is None:
            return self.fallback_category
        return category
