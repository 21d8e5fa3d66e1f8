"""Target collection status."""

from enum import Enum
from typing import Optional


class TargetStatus(Enum):
    """Terminal status of one target's collection."""

    SUCCESS = "Success"
    ERROR = "Error"

    def describe(self, cause: Optional[str] = None) -> str:
        """
        Render the status as stored on a TargetRecord.

        Returns:
            str: "Success", or "Error: <cause>" for errors
        """
        if self is TargetStatus.ERROR:
            return f"{self.value}: {cause or 'unknown error'}"
        return self.value

    @classmethod
    def is_error(cls, status: str) -> bool:
        return status.startswith(cls.ERROR.value)
