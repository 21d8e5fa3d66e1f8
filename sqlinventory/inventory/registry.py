"""Ordered registry of collection categories."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from ..collectors.agent_collector import AgentJobsCollector
from ..collectors.base import BaseCollector
from ..collectors.database_collector import (
    AvailabilityGroupCollector,
    BackupHistoryCollector,
    DatabaseFilesCollector,
    DatabasesCollector,
    ReplicationCollector,
    TempDbCollector,
)
from ..collectors.engine_collector import (
    ConfigurationCollector,
    NetworkCollector,
    SqlCoreCollector,
    WaitStatsCollector,
)
from ..collectors.host_collector import HostFactsCollector, HostFactsProvider
from ..collectors.security_collector import (
    LinkedServersCollector,
    LoginsCollector,
    ServerRolesCollector,
)
from ..collectors.spn_collector import SpnCollector, SpnLookup
from ..collectors.sql_executor import SqlQueryExecutor
from ..config.models import CollectionConfig
from ..models.records import TargetRecord

# Returns collector keyword arguments, or None when the category does not apply
ParamsBuilder = Callable[[TargetRecord, datetime], Optional[Dict[str, Any]]]


def no_params(record: TargetRecord, run_started_at: datetime) -> Dict[str, Any]:
    return {}


def reference_time_params(record: TargetRecord, run_started_at: datetime) -> Dict[str, Any]:
    return {"reference_time": run_started_at}


def service_account_params(record: TargetRecord, run_started_at: datetime) -> Optional[Dict[str, Any]]:
    """SPN lookup only runs once the core facts produced a service account."""
    account = (record.sql.sql_service_account or "").strip()
    if not account:
        return None
    return {"account": account}


@dataclass(frozen=True)
class Category:
    """One registered category: who collects it and where it lands."""

    name: str
    field: str
    collector: BaseCollector
    build_params: ParamsBuilder = no_params

    def merge(self, record: TargetRecord, payload: Any) -> None:
        setattr(record, self.field, payload)


def build_default_registry(
    executor: SqlQueryExecutor,
    host_provider: Optional[HostFactsProvider],
    spn_lookup: Optional[SpnLookup],
    config: CollectionConfig,
    logger: logging.Logger
) -> List[Category]:
    """
    Build the standard category list in collection order.

    Args:
        executor: SQL query executor shared by all query collectors
        host_provider: Host facts source, or None to skip host facts
        spn_lookup: SPN source, or None to skip SPN lookup
        config: Collection settings (backup window, wait stats limit)
        logger: Parent logger

    Returns:
        List[Category]: Registry in execution order
    """
    categories: List[Category] = []

    if host_provider is not None:
        categories.append(Category("os", "host", HostFactsCollector(host_provider, logger)))

    categories.extend([
        Category("sql_core", "sql", SqlCoreCollector(executor, logger)),
        Category("configuration", "configuration", ConfigurationCollector(executor, logger)),
        Category("databases", "databases", DatabasesCollector(executor, logger)),
        Category("database_files", "database_files", DatabaseFilesCollector(executor, logger)),
        Category("tempdb", "tempdb_files", TempDbCollector(executor, logger)),
        Category("availability_groups", "availability_groups", AvailabilityGroupCollector(executor, logger)),
        Category("replication", "replication", ReplicationCollector(executor, logger)),
        Category(
            "backups",
            "backups",
            BackupHistoryCollector(executor, logger, window_days=config.backup_window_days),
            reference_time_params,
        ),
        Category("server_roles", "server_roles", ServerRolesCollector(executor, logger)),
        Category("wait_stats", "wait_stats", WaitStatsCollector(executor, logger, top=config.wait_stats_top)),
        Category("network", "network", NetworkCollector(executor, logger)),
    ])

    if spn_lookup is not None:
        categories.append(Category("spns", "spns", SpnCollector(spn_lookup, logger), service_account_params))

    categories.extend([
        Category("agent_jobs", "agent_jobs", AgentJobsCollector(executor, logger)),
        Category("logins", "logins", LoginsCollector(executor, logger)),
        Category("linked_servers", "linked_servers", LinkedServersCollector(executor, logger)),
    ])

    return categories


def validate_registry(categories: List[Category]) -> None:
    """
    Reject duplicate names, unknown record fields, and SPN lookup ordered before core facts.

    Raises:
        ValueError: If the registry is inconsistent
    """
    names = [c.name for c in categories]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate category names in registry: {names}")

    for category in categories:
        if category.field not in TargetRecord.model_fields:
            raise ValueError(f"Category '{category.name}' targets unknown field '{category.field}'")

    if "spns" in names:
        if "sql_core" not in names or names.index("spns") < names.index("sql_core"):
            raise ValueError("Category 'spns' must run after 'sql_core'")
