"""Pydantic record models for collected inventory data."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..config.models import OutputMode


# ---------------------------------------------------------------------------
# Host facts
# ---------------------------------------------------------------------------

class DiskInfo(BaseModel):
    """A fixed local disk."""
    letter: Optional[str] = None
    file_system: Optional[str] = None
    size_gb: Optional[float] = None
    free_gb: Optional[float] = None


class HostFacts(BaseModel):
    """Operating system and hardware summary."""
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    os_architecture: Optional[str] = None
    total_memory_gb: Optional[float] = None
    physical_processors: Optional[int] = None
    logical_processors: Optional[int] = None
    disks: List[DiskInfo] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# SQL engine facts
# ---------------------------------------------------------------------------

class SqlCoreFacts(BaseModel):
    """Core engine properties of one SQL Server instance."""
    server_name: Optional[str] = None
    instance_name: Optional[str] = None
    edition: Optional[str] = None
    version: Optional[str] = None
    product_level: Optional[str] = None
    update_level: Optional[str] = None
    collation: Optional[str] = None
    authentication_mode: Optional[str] = None
    min_server_memory_mb: Optional[int] = None
    max_server_memory_mb: Optional[int] = None
    sql_service_account: Optional[str] = None
    agent_service_account: Optional[str] = None


class ConfigurationSetting(BaseModel):
    name: str
    value: Optional[int] = None


class DatabaseInfo(BaseModel):
    name: str
    recovery_model: Optional[str] = None
    compatibility_level: Optional[int] = None
    state: Optional[str] = None
    create_date: Optional[datetime] = None
    size_mb: Optional[float] = None


class DatabaseFile(BaseModel):
    database_name: str
    logical_name: Optional[str] = None
    physical_name: Optional[str] = None
    file_type: Optional[str] = None
    size_mb: Optional[float] = None
    growth: Optional[int] = None
    is_percent_growth: Optional[bool] = None
    max_size: Optional[int] = None


class TempDbFile(BaseModel):
    file_name: Optional[str] = None
    physical_name: Optional[str] = None
    size_mb: Optional[float] = None
    growth: Optional[int] = None
    is_percent_growth: Optional[bool] = None


class AvailabilityReplica(BaseModel):
    group_name: Optional[str] = None
    replica_server_name: Optional[str] = None
    role: Optional[str] = None
    availability_mode: Optional[str] = None
    synchronization_state: Optional[str] = None


class ReplicationInfo(BaseModel):
    database_name: str
    is_published: bool = False
    is_subscribed: bool = False
    is_distributor: bool = False


class BackupInfo(BaseModel):
    database_name: str
    last_full_backup: Optional[datetime] = None
    last_log_backup: Optional[datetime] = None


class ServerRoleMember(BaseModel):
    login_name: str
    role_name: str


class WaitStat(BaseModel):
    wait_type: str
    waiting_tasks_count: Optional[int] = None
    wait_time_ms: Optional[int] = None


class NetworkEndpoint(BaseModel):
    local_net_address: Optional[str] = None
    local_tcp_port: Optional[int] = None


class AgentJob(BaseModel):
    job_name: str
    enabled: Optional[bool] = None
    next_run_date: Optional[int] = None
    next_run_time: Optional[int] = None


class LoginInfo(BaseModel):
    name: str
    type_desc: Optional[str] = None
    create_date: Optional[datetime] = None
    is_disabled: Optional[bool] = None


class LinkedServer(BaseModel):
    name: str
    product: Optional[str] = None
    provider: Optional[str] = None
    data_source: Optional[str] = None
    catalog: Optional[str] = None


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class TargetRecord(BaseModel):
    """
    Everything collected for one requested target.

    Every category field starts at a neutral default; a category that failed
    leaves its field untouched, so a failed category and an empty one look
    the same here. Per-category failures are reported in RunSummary.
    """
    server: str
    host_name: Optional[str] = None
    instance_name: Optional[str] = None
    resolved_name: Optional[str] = None
    collected_at: datetime
    status: str = "Success"

    host: HostFacts = Field(default_factory=HostFacts)
    sql: SqlCoreFacts = Field(default_factory=SqlCoreFacts)
    configuration: List[ConfigurationSetting] = Field(default_factory=list)
    databases: List[DatabaseInfo] = Field(default_factory=list)
    database_files: List[DatabaseFile] = Field(default_factory=list)
    tempdb_files: List[TempDbFile] = Field(default_factory=list)
    availability_groups: List[AvailabilityReplica] = Field(default_factory=list)
    replication: List[ReplicationInfo] = Field(default_factory=list)
    backups: List[BackupInfo] = Field(default_factory=list)
    server_roles: List[ServerRoleMember] = Field(default_factory=list)
    wait_stats: List[WaitStat] = Field(default_factory=list)
    network: List[NetworkEndpoint] = Field(default_factory=list)
    spns: List[str] = Field(default_factory=list)
    agent_jobs: List[AgentJob] = Field(default_factory=list)
    logins: List[LoginInfo] = Field(default_factory=list)
    linked_servers: List[LinkedServer] = Field(default_factory=list)


class RunSummary(BaseModel):
    """Run-level status counts."""
    total: int = 0
    succeeded: int = 0
    errored: int = 0
    category_failures: Dict[str, List[str]] = Field(default_factory=dict)


class CollectionRun(BaseModel):
    """Ordered records of one invocation plus the chosen output mode."""
    started_at: datetime
    output_mode: OutputMode = OutputMode.JSON
    records: List[TargetRecord] = Field(default_factory=list)
    summary: RunSummary = Field(default_factory=RunSummary)
