from dataclasses import dataclass

from categorizer.services.errors import CapabilityFailure


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    reason: CapabilityFailure


type Result[T] = Ok[T] | Err
