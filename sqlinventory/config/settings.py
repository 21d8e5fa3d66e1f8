"""Environment settings."""

import os
from typing import Optional, Tuple


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set
            required: Whether the variable is required

        Returns:
            str: Environment variable value

        Raises:
            ValueError: If required variable is not set
        """
        value = os.getenv(key, default)
        if required and not value:
            raise ValueError(f"Required environment variable not set: {key}")
        return value or ""

    @staticmethod
    def sql_credentials() -> Optional[Tuple[str, str]]:
        """
        Return (user, password) for SQL authentication.

        Returns:
            Tuple or None when either MSSQL_USER or MSSQL_PASSWORD is unset,
            meaning the connection falls back to Windows authentication.
        """
        user = Settings.get("MSSQL_USER")
        password = Settings.get("MSSQL_PASSWORD")
        if user and password:
            return user, password
        return None

    @staticmethod
    def ssh_password() -> Optional[str]:
        """Password for host-facts SSH sessions when no key file is configured."""
        return Settings.get("INVENTORY_SSH_PASSWORD") or None
