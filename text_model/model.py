import hashlib
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Protocol, Sequence

import joblib

from . import config
from .errors import ModelLoadError, PersistenceError, PredictionError, TrainingError
from .nn_model import TorchTextClassifier

logger = logging.getLogger(__name__)

__all__ = ["TransactionClassifier", "LabeledDescription"]


class LabeledDescription(Protocol):
    """Пример для обучения: описание транзакции и её категория."""

    description: str
    category: str


class TransactionClassifier:
    """
    Классификатор описаний транзакций с фиксированным словарём категорий.

    Жизненный цикл: ``load_model`` (поднять сохранённый артефакт) либо
    ``build_model`` -> ``train_model`` -> ``save_model``; после этого доступен
    ``predict_category``. Все методы синхронные и могут работать долго.

    ``build_model`` готовит новую модель-кандидата, а активная модель
    заменяется только после успешного ``train_model``: неудачное
    переобучение не ломает уже работающие предсказания.
    """

    def __init__(
        self,
        categories: Sequence[str],
        model_dir: Path | str | None = None,
        **estimator_params: Any,
    ):
        if not categories:
            raise ValueError("Category vocabulary must not be empty.")
        self.categories = tuple(categories)
        self.model_dir = self._resolve_path(model_dir, config.MODEL_DIR)
        self.model_path = self.model_dir / f"description_classifier_{self.vocabulary_key}.joblib"
        self.estimator_params = estimator_params
        self.model: TorchTextClassifier | None = None
        self._candidate: TorchTextClassifier | None = None
        self.is_trained = False

    @property
    def vocabulary_key(self) -> str:
        digest = hashlib.sha1("\n".join(self.categories).encode("utf-8"))
        return digest.hexdigest()[:12]

    @staticmethod
    def _resolve_path(user_path: Path | str | None, default_path: Path) -> Path:
        return Path(user_path) if user_path is not None else default_path

    def load_model(self) -> bool:
        """Загружает сохранённую модель. False, если артефакта нет или он от другого словаря."""
        if not self.model_path.exists():
            logger.info("No persisted model at %s", self.model_path)
            return False
        try:
            payload: Dict[str, Any] = joblib.load(self.model_path)
        except Exception as exc:
            raise ModelLoadError(f"Cannot read model artifact at {self.model_path}") from exc

        if tuple(payload.get("categories", ())) != self.categories:
            logger.warning(
                "Persisted model at %s was trained on a different vocabulary, ignoring it",
                self.model_path,
            )
            return False
        model = payload.get("model")
        if not isinstance(model, TorchTextClassifier):
            raise ModelLoadError(f"Unexpected model type in {self.model_path}: {type(model)!r}")

        self.model = model
        self.is_trained = True
        logger.info("Transaction classifier loaded from %s", self.model_path)
        return True

    def build_model(self) -> None:
        """Создаёт новую необученную модель-кандидата."""
        self._candidate = TorchTextClassifier(categories=self.categories, **self.estimator_params)

    def train_model(self, pairs: Iterable[LabeledDescription]) -> None:
        candidate = self._candidate
        if candidate is None:
            raise TrainingError("Model is not built. Call build_model() first.")
        pairs = list(pairs)
        if not pairs:
            raise TrainingError("No training examples provided.")
        unknown = {pair.category for pair in pairs} - set(self.categories)
        if unknown:
            raise TrainingError(f"Categories outside the vocabulary: {sorted(unknown)}")

        logger.info("Training description classifier on %d examples", len(pairs))
        try:
            candidate.fit(
                [pair.description for pair in pairs],
                [pair.category for pair in pairs],
            )
        except Exception as exc:
            raise TrainingError(f"Model fitting failed: {exc}") from exc
        finally:
            self._candidate = None
        self.model = candidate
        self.is_trained = True

    def save_model(self) -> None:
        if self.model is None or not self.is_trained:
            raise PersistenceError("Nothing to save: model is not trained.")
        payload = {
            "model": self.model,
            "categories": list(self.categories),
            "version": config.ARTIFACT_VERSION,
        }
        try:
            self.model_dir.mkdir(parents=True, exist_ok=True)
            joblib.dump(payload, self.model_path)
        except Exception as exc:
            raise PersistenceError(f"Cannot write model artifact to {self.model_path}") from exc
        logger.info("Transaction classifier saved to %s", self.model_path)

    def predict_category(self, description: str) -> str:
        """Предсказывает наиболее вероятную категорию для описания."""
        if self.model is None or not self.is_trained:
            raise PredictionError("Model is not trained.")
        try:
            pred = self.model.predict([description])[0]
        except Exception as exc:
            raise PredictionError(f"Prediction failed: {exc}") from exc
        return str(pred)
