from categorizer.schemas.base import BaseSchema
from categorizer.services.classifier.lifecycle import LifecyclePhase, TrainingOutcome


class ClassifierStateSchema(BaseSchema):
    has_classifier: bool
    is_model_trained: bool
    is_training: bool
    phase: LifecyclePhase


class PredictRequestSchema(BaseSchema):
    description: str


class PredictResponseSchema(BaseSchema):
    category: str


class TrainResponseSchema(BaseSchema):
    outcome: TrainingOutcome
    state: ClassifierStateSchema
