"""Обучение классификатора описаний по CSV-выгрузке транзакций."""
import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import pandas as pd
from sklearn.metrics import classification_report
from sklearn.model_selection import train_test_split

from . import config
from .model import TransactionClassifier

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Description", "Category")


@dataclass(frozen=True)
class _Example:
    description: str
    category: str


def _load_dataset(path: Path, categories: Sequence[str]) -> pd.DataFrame:
    df = pd.read_csv(path, dtype="string")

    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        raise ValueError(f"В датасете отсутствуют обязательные столбцы: {missing_columns}")
    logger.info("Загружено %d строк.", len(df))

    df["Description"] = df["Description"].str.strip()
    df = df[df["Description"].notna() & (df["Description"] != "")]
    df = df[df["Category"].isin(list(categories))]
    logger.info("Пригодно для обучения %d строк.", len(df))
    return df


def _to_examples(df: pd.DataFrame) -> list[_Example]:
    return [
        _Example(description=str(description), category=str(category))
        for description, category in zip(df["Description"], df["Category"])
    ]


def _log_holdout_report(df: pd.DataFrame, categories: Sequence[str], model_dir: Path) -> None:
    counts = df["Category"].value_counts()
    stratify = df["Category"] if counts.min() >= 2 else None
    train_df, test_df = train_test_split(
        df,
        test_size=config.TEST_SIZE,
        random_state=config.RANDOM_STATE,
        stratify=stratify,
    )
    clf = TransactionClassifier(categories, model_dir=model_dir)
    clf.build_model()
    clf.train_model(_to_examples(train_df))
    y_pred = [clf.predict_category(text) for text in test_df["Description"]]
    report = classification_report(test_df["Category"], y_pred, zero_division=0)
    logger.info("=== Classification report ===\n%s", report)


def train_model(
    data_path: Path | str,
    model_dir: Path | str | None = None,
    categories: Sequence[str] = config.DEFAULT_CATEGORIES,
    evaluate: bool = True,
) -> TransactionClassifier:
    """Обучает модель на всех пригодных строках CSV и сохраняет её."""
    df = _load_dataset(Path(data_path), categories)
    if df.empty:
        raise ValueError("Нет ни одной строки с описанием и допустимой категорией.")
    model_dir = Path(model_dir) if model_dir is not None else config.MODEL_DIR

    if evaluate and len(df) >= config.MIN_EVALUATION_SIZE:
        _log_holdout_report(df, categories, model_dir)

    clf = TransactionClassifier(categories, model_dir=model_dir)
    clf.build_model()
    clf.train_model(_to_examples(df))
    clf.save_model()
    logger.info("Модель сохранена в %s", clf.model_path)
    return clf


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Обучение классификатора описаний транзакций.")
    parser.add_argument("--data", type=str, required=True, help="Путь к CSV с колонками Description, Category.")
    parser.add_argument("--model-dir", type=str, help="Каталог для сохранения модели.", default=None)
    parser.add_argument(
        "--categories",
        type=str,
        default=",".join(config.DEFAULT_CATEGORIES),
        help="Список категорий через запятую (порядок важен).",
    )
    parser.add_argument("--no-eval", action="store_true", help="Не считать метрики на отложенной выборке.")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    args = _build_arg_parser().parse_args()
    categories = [item.strip() for item in args.categories.split(",") if item.strip()]
    train_model(
        data_path=args.data,
        model_dir=args.model_dir,
        categories=categories,
        evaluate=not args.no_eval,
    )


if __name__ == "__main__":
    main()
