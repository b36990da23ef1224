from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class DetectionResult(Generic[T]):
    value: T
    confidence: float  # 0.0-1.0, pattern-match strength
