from dataclasses import dataclass

import joblib
import numpy as np
import pytest

from text_model import TransactionClassifier
from text_model.errors import ModelLoadError, PersistenceError, PredictionError, TrainingError
from text_model.nn_model import TorchTextClassifier
from text_model.tokenizer import OOV_INDEX, PAD_INDEX, DescriptionTokenizer

CATEGORIES = ("Food", "Transport", "Other")
FAST = {"max_epochs": 40, "batch_size": 8, "random_state": 123, "device": "cpu"}


@dataclass(frozen=True)
class Pair:
    description: str
    category: str


def _pairs():
    food = ["Coffee shop", "Pizza place", "Grocery store", "Bakery downtown", "Coffee beans"]
    transport = ["Gas station", "Bus ticket", "Metro card", "Taxi ride", "Gas refill"]
    return [Pair(text, "Food") for text in food] + [Pair(text, "Transport") for text in transport]


def test_tokenizer_pads_and_marks_unknown_words():
    tokenizer = DescriptionTokenizer(max_length=4).fit(["coffee shop", "Coffee beans"])

    encoded = tokenizer.encode(["Coffee SHOP!", "", "unknown words here and more"])

    assert encoded.shape == (3, 4)
    assert encoded[0, 0] == tokenizer.word_index["coffee"]
    assert encoded[0, 2] == PAD_INDEX
    assert list(encoded[1]) == [OOV_INDEX, PAD_INDEX, PAD_INDEX, PAD_INDEX]
    assert list(encoded[2]) == [OOV_INDEX] * 4


def test_torch_text_classifier_fit_predict(tmp_path):
    pairs = _pairs()
    texts = [pair.description for pair in pairs]
    labels = [pair.category for pair in pairs]
    clf = TorchTextClassifier(categories=CATEGORIES, **FAST)
    clf.fit(texts, labels)

    preds = clf.predict(texts[:4])
    assert preds.shape == (4,)
    assert set(preds).issubset(set(CATEGORIES))
    assert set(clf.classes_) == set(CATEGORIES)

    proba = clf.predict_proba(texts[:4])
    assert proba.shape == (4, len(CATEGORIES))
    np.testing.assert_allclose(proba.sum(axis=1), 1.0, atol=1e-4)

    model_path = tmp_path / "text_classifier.joblib"
    joblib.dump(clf, model_path)
    loaded = joblib.load(model_path)
    np.testing.assert_array_equal(loaded.predict(texts[:4]), preds)


def test_transaction_classifier_save_and_load(tmp_path):
    clf = TransactionClassifier(CATEGORIES, model_dir=tmp_path, **FAST)
    assert clf.load_model() is False

    clf.build_model()
    clf.train_model(_pairs())
    clf.save_model()
    expected = clf.predict_category("Coffee shop")

    restored = TransactionClassifier(CATEGORIES, model_dir=tmp_path)
    assert restored.load_model() is True
    assert restored.predict_category("Coffee shop") == expected
    assert expected in CATEGORIES
    assert set(restored.model.classes_) == set(CATEGORIES)


def test_load_rejects_corrupt_or_foreign_artifact(tmp_path):
    clf = TransactionClassifier(CATEGORIES, model_dir=tmp_path, **FAST)
    clf.build_model()
    clf.train_model(_pairs())
    clf.save_model()

    other = TransactionClassifier(CATEGORIES, model_dir=tmp_path)
    other.model_path.write_bytes(b"")
    with pytest.raises(ModelLoadError):
        other.load_model()

    clf.save_model()
    reordered = TransactionClassifier(("Transport", "Food", "Other"), model_dir=tmp_path)
    reordered.model_path = clf.model_path
    assert reordered.load_model() is False


def test_operations_out_of_order_raise(tmp_path):
    clf = TransactionClassifier(CATEGORIES, model_dir=tmp_path, **FAST)

    with pytest.raises(TrainingError):
        clf.train_model(_pairs())
    with pytest.raises(PersistenceError):
        clf.save_model()
    with pytest.raises(PredictionError):
        clf.predict_category("Coffee shop")

    clf.build_model()
    with pytest.raises(TrainingError):
        clf.train_model([])


def test_unknown_category_is_rejected(tmp_path):
    clf = TransactionClassifier(CATEGORIES, model_dir=tmp_path, **FAST)
    clf.build_model()

    with pytest.raises(TrainingError):
        clf.train_model([Pair("Salary", "Income")])


def test_failed_retrain_keeps_previous_model(tmp_path):
    clf = TransactionClassifier(CATEGORIES, model_dir=tmp_path, **FAST)
    clf.build_model()
    clf.train_model(_pairs())
    before = clf.predict_category("Bus ticket")

    clf.build_model()
    with pytest.raises(TrainingError):
        clf.train_model([Pair("Salary", "Income")])

    assert clf.is_trained
    assert clf.predict_category("Bus ticket") == before
