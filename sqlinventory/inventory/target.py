"""Target server identifiers."""

from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_INSTANCE_NAME = "MSSQLSERVER"


@dataclass(frozen=True)
class Target:
    """
    One requested server, ``host`` or ``host\\instance``.

    ``resolved_name`` is filled in by name resolution and falls back to the
    host string when resolution fails.
    """

    raw: str
    host: str
    instance_name: str = DEFAULT_INSTANCE_NAME
    resolved_name: Optional[str] = None
    default_instance_name: str = DEFAULT_INSTANCE_NAME

    @classmethod
    def parse(cls, raw: str, default_instance_name: str = DEFAULT_INSTANCE_NAME) -> "Target":
        """
        Parse a target string.

        Args:
            raw: "host" or "host\\instance"
            default_instance_name: Instance name used when none is given

        Returns:
            Target: Parsed target

        Raises:
            ValueError: If the string or one of its parts is empty
        """
        text = (raw or "").strip()
        if not text:
            raise ValueError("Target must be a non-empty string")

        if "\\" in text:
            host, instance = text.split("\\", 1)
            host, instance = host.strip(), instance.strip()
            if not host or not instance:
                raise ValueError(f"Malformed target '{text}': expected host\\instance")
        else:
            host, instance = text, default_instance_name

        return cls(
            raw=text,
            host=host,
            instance_name=instance,
            default_instance_name=default_instance_name
        )

    @property
    def is_default_instance(self) -> bool:
        return self.instance_name.upper() == self.default_instance_name.upper()

    @property
    def server_address(self) -> str:
        """Address handed to the SQL driver."""
        if self.is_default_instance:
            return self.host
        return f"{self.host}\\{self.instance_name}"

    @property
    def identity(self) -> str:
        """Best known name for the machine."""
        return self.resolved_name or self.host

    def with_resolved_name(self, resolved_name: str) -> "Target":
        return replace(self, resolved_name=resolved_name)
