from categorizer.services.classifier.curator import TrainingPair, curate
from conftest import VOCABULARY, Record


def test_curate_drops_blank_and_unknown_records_in_order():
    records = [
        Record("  Coffee shop ", "Food"),
        Record("", "Food"),
        Record(None, "Transport"),
        Record("Cinema", "Entertainment"),
        Record("Gas station", "Transport"),
        Record("Mystery", None),
        Record("   ", "Other"),
    ]

    pairs = curate(records, VOCABULARY)

    assert pairs == [
        TrainingPair("Coffee shop", "Food"),
        TrainingPair("Gas station", "Transport"),
    ]


def test_curate_keeps_duplicates():
    records = [
        Record("Coffee shop", "Food"),
        Record("Coffee shop", "Food"),
        Record("Gas station", "Transport"),
        Record("", "Food"),
    ]

    pairs = curate(records, VOCABULARY)

    assert len(pairs) == 3
    assert pairs[0] == pairs[1]


def test_curate_empty_input():
    assert curate([], VOCABULARY) == []
