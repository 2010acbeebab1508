from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from text_model import config as classifier_config


class ClassifierSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_", protected_namespaces=())

    categories: tuple[str, ...] = Field(
        default=classifier_config.DEFAULT_CATEGORIES, min_length=1
    )
    fallback_category: str = "Other"
    model_dir: Path = classifier_config.MODEL_DIR
    # auto-train on startup only when strictly more records than this exist
    auto_train_threshold: int = 5
    min_training_pairs: int = 3
    watch_interval_seconds: int = 30
    background_batch_size: int = 50
