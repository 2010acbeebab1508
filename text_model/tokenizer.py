"""Токенизация описаний транзакций в последовательности индексов."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Sequence

import numpy as np

__all__ = ["DescriptionTokenizer", "PAD_INDEX", "OOV_INDEX"]

PAD_INDEX = 0
OOV_INDEX = 1

_TOKEN_RE = re.compile(r"[^\W_]+", re.UNICODE)


class DescriptionTokenizer:
    """
    Словарь слов, построенный по обучающим описаниям.

    Индексы 0 и 1 зарезервированы под паддинг и неизвестные слова, поэтому
    пустое или полностью незнакомое описание всё равно кодируется валидной
    последовательностью.
    """

    def __init__(self, max_length: int, min_count: int = 1) -> None:
        if max_length < 1:
            raise ValueError("max_length must be positive.")
        self.max_length = max_length
        self.min_count = min_count
        self.word_index: dict[str, int] = {}

    @staticmethod
    def tokenize(text: str) -> list[str]:
        return _TOKEN_RE.findall(text.lower())

    @property
    def vocab_size(self) -> int:
        return len(self.word_index) + 2

    def fit(self, texts: Iterable[str]) -> "DescriptionTokenizer":
        counts: Counter[str] = Counter()
        for text in texts:
            counts.update(self.tokenize(text))
        words = sorted(
            (word for word, count in counts.items() if count >= self.min_count),
            key=lambda word: (-counts[word], word),
        )
        self.word_index = {word: idx + 2 for idx, word in enumerate(words)}
        return self

    def encode(self, texts: Sequence[str]) -> np.ndarray:
        encoded = np.full((len(texts), self.max_length), PAD_INDEX, dtype=np.int64)
        for row, text in enumerate(texts):
            ids = [self.word_index.get(token, OOV_INDEX) for token in self.tokenize(text)]
            ids = ids[: self.max_length] or [OOV_INDEX]
            encoded[row, : len(ids)] = ids
        return encoded
