"""Result data structure shared by all collectors."""

from dataclasses import dataclass
from typing import Any, Optional
import time


@dataclass
class CategoryResult:
    """Outcome of one collector invocation: a payload or a failure cause."""

    category: str
    target_name: str
    payload: Any = None
    error: Optional[str] = None
    timestamp: Optional[float] = None

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = time.time()

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, category: str, target_name: str, payload: Any) -> "CategoryResult":
        return cls(category=category, target_name=target_name, payload=payload)

    @classmethod
    def failure(cls, category: str, target_name: str, error: str) -> "CategoryResult":
        return cls(category=category, target_name=target_name, error=error or "unknown error")
