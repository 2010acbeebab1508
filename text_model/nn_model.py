"""Рекуррентная сеть и sklearn-совместимая обёртка для классификации описаний."""

from __future__ import annotations

import logging
import random
from typing import Sequence

import numpy as np
import torch
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.preprocessing import LabelEncoder
from sklearn.utils.validation import check_is_fitted
from torch import nn
from torch.nn.utils.rnn import pack_padded_sequence
from torch.utils.data import DataLoader, TensorDataset

from . import config
from .tokenizer import PAD_INDEX, DescriptionTokenizer

logger = logging.getLogger(__name__)


class DescriptionNet(nn.Module):
    """Embedding -> GRU -> Linear над последовательностью токенов."""

    def __init__(
        self,
        vocab_size: int,
        num_classes: int,
        embedding_dim: int = config.EMBEDDING_DIM,
        hidden_dim: int = config.HIDDEN_DIM,
        dropout: float = config.DROPOUT,
    ) -> None:
        super().__init__()
        self.embedding = nn.Embedding(vocab_size, embedding_dim, padding_idx=PAD_INDEX)
        self.rnn = nn.GRU(embedding_dim, hidden_dim, batch_first=True)
        self.dropout = nn.Dropout(dropout) if dropout and dropout > 0 else nn.Identity()
        self.head = nn.Linear(hidden_dim, num_classes)

    def forward(self, tokens: torch.Tensor) -> torch.Tensor:
        lengths = (tokens != PAD_INDEX).sum(dim=1).clamp(min=1).cpu()
        embedded = self.embedding(tokens)
        packed = pack_padded_sequence(
            embedded, lengths, batch_first=True, enforce_sorted=False
        )
        _, hidden = self.rnn(packed)
        return self.head(self.dropout(hidden[-1]))


class TorchTextClassifier(BaseEstimator, ClassifierMixin):
    """
    Sklearn-совместимый классификатор текстов на PyTorch.

    Набор классов фиксируется в конструкторе (``categories``): энкодер меток
    обучается на полном словаре категорий, а не на встреченных в выборке,
    поэтому выход сети всегда соответствует одному и тому же словарю.
    """

    def __init__(
        self,
        categories: Sequence[str] = (),
        max_length: int = config.MAX_SEQUENCE_LENGTH,
        embedding_dim: int = config.EMBEDDING_DIM,
        hidden_dim: int = config.HIDDEN_DIM,
        dropout: float = config.DROPOUT,
        batch_size: int = config.BATCH_SIZE,
        lr: float = config.LEARNING_RATE,
        max_epochs: int = config.MAX_EPOCHS,
        weight_decay: float = 1e-4,
        random_state: int | None = config.RANDOM_STATE,
        device: str | None = None,
        verbose: bool = False,
    ) -> None:
        self.categories = categories
        self.max_length = max_length
        self.embedding_dim = embedding_dim
        self.hidden_dim = hidden_dim
        self.dropout = dropout
        self.batch_size = batch_size
        self.lr = lr
        self.max_epochs = max_epochs
        self.weight_decay = weight_decay
        self.random_state = random_state
        self.device = device
        self.verbose = verbose

    # ---- sklearn API ----
    def fit(self, X: Sequence[str], y: Sequence[str]) -> "TorchTextClassifier":
        texts = list(X)
        labels = np.asarray(list(y))
        if len(texts) != labels.shape[0]:
            raise ValueError("X и y должны иметь одинаковое количество строк.")
        if not texts:
            raise ValueError("Нельзя обучить модель на пустой выборке.")
        if not self.categories:
            raise ValueError("Не задан словарь категорий.")

        self._set_random_seed()
        self._label_encoder = LabelEncoder().fit(list(self.categories))
        self.classes_ = self._label_encoder.classes_
        y_encoded = self._label_encoder.transform(labels)
        num_classes = len(self.classes_)

        self._tokenizer = DescriptionTokenizer(max_length=self.max_length).fit(texts)
        X_tokens = self._tokenizer.encode(texts)

        self._model = DescriptionNet(
            vocab_size=self._tokenizer.vocab_size,
            num_classes=num_classes,
            embedding_dim=self.embedding_dim,
            hidden_dim=self.hidden_dim,
            dropout=self.dropout,
        )
        device = self._get_device()
        self._model.to(device)
        class_weights = self._compute_class_weights(y_encoded, num_classes)
        weight_tensor = torch.from_numpy(class_weights.astype(np.float32)).to(device)

        optimizer = torch.optim.Adam(
            self._model.parameters(),
            lr=self.lr,
            weight_decay=self.weight_decay,
        )
        loss_fn = nn.CrossEntropyLoss(weight=weight_tensor)
        loader = DataLoader(
            TensorDataset(
                torch.from_numpy(X_tokens),
                torch.from_numpy(y_encoded.astype(np.int64)),
            ),
            batch_size=self.batch_size,
            shuffle=True,
        )

        self._loss_history: list[float] = []
        for epoch in range(self.max_epochs):
            self._model.train()
            epoch_loss = 0.0
            total_samples = 0
            for batch_x, batch_y in loader:
                batch_x = batch_x.to(device)
                batch_y = batch_y.to(device)

                optimizer.zero_grad()
                loss = loss_fn(self._model(batch_x), batch_y)
                loss.backward()
                optimizer.step()

                epoch_loss += loss.item() * batch_x.size(0)
                total_samples += batch_x.size(0)

            avg_loss = epoch_loss / max(total_samples, 1)
            self._loss_history.append(avg_loss)
            if self.verbose:
                logger.info("Epoch %d/%d, loss=%.4f", epoch + 1, self.max_epochs, avg_loss)

        # Храним модель на CPU для сериализации и инференса
        self._model.eval()
        self._model.to(torch.device("cpu"))
        self._inference_device = torch.device("cpu")
        return self

    def predict(self, X: Sequence[str]) -> np.ndarray:
        logits = self._predict_logits(X)
        pred_idx = np.argmax(logits, axis=1)
        return self._label_encoder.inverse_transform(pred_idx)

    def predict_proba(self, X: Sequence[str]) -> np.ndarray:
        logits = self._predict_logits(X)
        logits = logits - logits.max(axis=1, keepdims=True)
        exp_scores = np.exp(logits)
        sums = exp_scores.sum(axis=1, keepdims=True)
        return exp_scores / np.clip(sums, a_min=1e-12, a_max=None)

    # ---- internal helpers ----
    def _predict_logits(self, X: Sequence[str]) -> np.ndarray:
        check_is_fitted(self, attributes=["_model", "_label_encoder", "_tokenizer"])
        texts = list(X)
        if not texts:
            return np.empty((0, len(self.classes_)), dtype=np.float32)
        tokens = torch.from_numpy(self._tokenizer.encode(texts))
        loader = DataLoader(TensorDataset(tokens), batch_size=self.batch_size, shuffle=False)

        outputs: list[np.ndarray] = []
        self._model.eval()
        with torch.no_grad():
            for (batch_x,) in loader:
                batch_x = batch_x.to(self._inference_device)
                outputs.append(self._model(batch_x).cpu().numpy())
        return np.vstack(outputs)

    def _compute_class_weights(self, y_encoded: np.ndarray, num_classes: int) -> np.ndarray:
        total = len(y_encoded)
        counts = np.bincount(y_encoded, minlength=num_classes)
        weights = np.zeros(num_classes, dtype=np.float64)
        for idx, count in enumerate(counts):
            if count:
                weights[idx] = total / (num_classes * count)
        return weights

    def _get_device(self) -> torch.device:
        if self.device:
            return torch.device(self.device)
        if torch.cuda.is_available():
            return torch.device("cuda")
        return torch.device("cpu")

    def _set_random_seed(self) -> None:
        if self.random_state is None:
            return
        random.seed(self.random_state)
        np.random.seed(self.random_state)
        torch.manual_seed(self.random_state)
        if torch.cuda.is_available():
            torch.cuda.manual_seed_all(self.random_state)
