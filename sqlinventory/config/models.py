"""Pydantic configuration models for the inventory collector."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class OutputMode(str, Enum):
    """Export format for the collected run."""

    JSON = "Json"
    CSV = "Csv"
    NONE = "None"

    @classmethod
    def parse(cls, value: str) -> "OutputMode":
        """Case-insensitive lookup; raises ValueError on unknown modes."""
        for mode in cls:
            if mode.value.lower() == str(value).strip().lower():
                return mode
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown output mode '{value}' (expected one of: {allowed})")


class ConnectionConfig(BaseModel):
    """SQL Server connection settings handed to the ODBC driver."""
    driver: str = "ODBC Driver 18 for SQL Server"
    port: Optional[int] = None  # Default-instance targets only; named instances resolve through SQL Browser
    database: str = "master"
    encrypt: bool = True
    trust_server_certificate: bool = True
    timeout_seconds: int = Field(default=15, ge=1)
    trusted_connection: Optional[bool] = None  # None: decided by MSSQL_USER/MSSQL_PASSWORD


class HostFactsConfig(BaseModel):
    """SSH access used to query Windows hosts for OS and disk facts."""
    enabled: bool = True
    username: str = "Administrator"
    port: int = 22
    ssh_key_path: Optional[str] = None
    timeout_seconds: int = Field(default=30, ge=1)


class CollectionConfig(BaseModel):
    """Collection behaviour shared by all targets."""
    max_workers: int = Field(default=1, ge=1, le=64)
    backup_window_days: int = Field(default=30, ge=1)
    wait_stats_top: int = Field(default=20, ge=1)
    default_instance_name: str = "MSSQLSERVER"


class OutputConfig(BaseModel):
    """Where and how the run is exported."""
    mode: OutputMode = OutputMode.JSON
    directory: str = "."
    prefix: str = "SQLInventory"
    pretty: bool = True

    @field_validator('mode', mode='before')
    @classmethod
    def parse_mode(cls, v):
        """Accept mode names in any case."""
        if isinstance(v, OutputMode):
            return v
        return OutputMode.parse(v)

    @field_validator('prefix')
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefix becomes part of file names."""
        if not v or any(ch in v for ch in '\\/:*?"<>|'):
            raise ValueError('Output prefix must be a non-empty file-name-safe string')
        return v


class InventoryConfig(BaseModel):
    """Root configuration model for an inventory run."""
    targets: List[str] = Field(default_factory=list)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    host_facts: HostFactsConfig = Field(default_factory=HostFactsConfig)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator('targets')
    @classmethod
    def validate_targets(cls, v: List[str]) -> List[str]:
        """Strip whitespace and reject blank entries."""
        cleaned = [t.strip() for t in v]
        if any(not t for t in cleaned):
            raise ValueError('Target entries must be non-empty')
        return cleaned
