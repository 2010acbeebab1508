from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

MODEL_DIR = BASE_DIR / "models"

RANDOM_STATE = 42
MAX_SEQUENCE_LENGTH = 20
EMBEDDING_DIM = 32
HIDDEN_DIM = 32
DROPOUT = 0.1
BATCH_SIZE = 32
LEARNING_RATE = 5e-3
MAX_EPOCHS = 60
ARTIFACT_VERSION = 1

DEFAULT_CATEGORIES = (
    "Food",
    "Transport",
    "Shopping",
    "Bills",
    "Entertainment",
    "Health",
    "Income",
    "Other",
)
TEST_SIZE = 0.2
MIN_EVALUATION_SIZE = 20
