class BaseServiceError(Exception):
    detail: str = "Unknown service error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.detail
        super().__init__(self.detail)


class DataInsufficiencyError(BaseServiceError):
    detail = "Need at least 3 transactions to train the model"


class CapabilityFailure(BaseServiceError):
    detail = "Classifier operation failed"

    def __init__(self, operation: str, detail: str | None = None) -> None:
        self.operation = operation
        super().__init__(detail or f"Classifier operation '{operation}' failed")


class ClassifierContextError(RuntimeError):
    """Manager accessed outside of an opened ClassifierContext. A programming error."""


class InvalidImportFileError(BaseServiceError):
    detail = "Transactions file could not be parsed"
