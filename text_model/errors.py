class ModelError(Exception):
    """Базовая ошибка классификатора описаний."""


class ModelLoadError(ModelError):
    pass


class TrainingError(ModelError):
    pass


class PersistenceError(ModelError):
    pass


class PredictionError(ModelError):
    pass
