"""Database-level inventory: databases, files, TempDB, HA and backups."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..models.records import (
    AvailabilityReplica,
    BackupInfo,
    DatabaseFile,
    DatabaseInfo,
    ReplicationInfo,
    TempDbFile,
)
from .base import QueryCollector


def _naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting to UTC; SQL Server returns naive datetimes."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class DatabasesCollector(QueryCollector):
    """One row per database, size summed over its files."""

    name = "databases"
    model = DatabaseInfo
    query = """
SELECT
    d.name,
    d.recovery_model_desc AS recovery_model,
    d.compatibility_level,
    d.state_desc AS state,
    d.create_date,
    CAST(mf.size * 8.0 / 1024 AS decimal(18, 2)) AS file_size_mb
FROM sys.databases d
JOIN sys.master_files mf ON mf.database_id = d.database_id
ORDER BY d.name, mf.file_id
"""

    def _transform(self, rows: List[Dict[str, Any]], **params) -> List[DatabaseInfo]:
        databases: Dict[str, DatabaseInfo] = {}
        for row in rows:
            size = float(row.get("file_size_mb") or 0)
            db = databases.get(row["name"])
            if db is None:
                fields = {k: v for k, v in row.items() if k != "file_size_mb"}
                databases[row["name"]] = DatabaseInfo(**fields, size_mb=round(size, 2))
            else:
                db.size_mb = round((db.size_mb or 0) + size, 2)
        return list(databases.values())


class DatabaseFilesCollector(QueryCollector):
    """Every data and log file on the instance."""

    name = "database_files"
    model = DatabaseFile
    query = """
SELECT
    DB_NAME(mf.database_id) AS database_name,
    mf.name AS logical_name,
    mf.physical_name,
    mf.type_desc AS file_type,
    CAST(mf.size * 8.0 / 1024 AS decimal(18, 2)) AS size_mb,
    mf.growth,
    mf.is_percent_growth,
    mf.max_size
FROM sys.master_files mf
ORDER BY database_name, mf.file_id
"""


class TempDbCollector(QueryCollector):
    """TempDB file layout."""

    name = "tempdb"
    model = TempDbFile
    database = "tempdb"
    query = """
SELECT
    name AS file_name,
    physical_name,
    CAST(size * 8.0 / 1024 AS decimal(18, 2)) AS size_mb,
    growth,
    is_percent_growth
FROM sys.database_files
ORDER BY file_id
"""


class AvailabilityGroupCollector(QueryCollector):
    """Availability group replicas and their current state."""

    name = "availability_groups"
    model = AvailabilityReplica
    query = """
SELECT
    ag.name AS group_name,
    ar.replica_server_name,
    ars.role_desc AS role,
    ar.availability_mode_desc AS availability_mode,
    ars.synchronization_health_desc AS synchronization_state
FROM sys.availability_groups ag
JOIN sys.availability_replicas ar ON ar.group_id = ag.group_id
LEFT JOIN sys.dm_hadr_availability_replica_states ars ON ars.replica_id = ar.replica_id
ORDER BY ag.name, ar.replica_server_name
"""


class ReplicationCollector(QueryCollector):
    """Databases taking part in replication."""

    name = "replication"
    model = ReplicationInfo
    query = """
SELECT name AS database_name, is_published, is_subscribed, is_distributor
FROM sys.databases
WHERE is_published = 1 OR is_subscribed = 1 OR is_distributor = 1
ORDER BY name
"""

    def _transform(self, rows: List[Dict[str, Any]], **params) -> List[ReplicationInfo]:
        records = [ReplicationInfo(**row) for row in rows]
        return [r for r in records if r.is_published or r.is_subscribed or r.is_distributor]


class BackupHistoryCollector(QueryCollector):
    """Most recent full and log backup per database inside the window."""

    name = "backups"
    model = BackupInfo
    query = """
SELECT bs.database_name, bs.type AS backup_type, MAX(bs.backup_finish_date) AS backup_finish_date
FROM msdb.dbo.backupset bs
WHERE bs.type IN ('D', 'L') AND bs.backup_finish_date >= ?
GROUP BY bs.database_name, bs.type
ORDER BY bs.database_name
"""

    def __init__(self, executor, logger, window_days: int = 30):
        super().__init__(executor, logger)
        self.window_days = window_days

    def cutoff(self, reference_time: Optional[datetime] = None) -> datetime:
        reference = reference_time or datetime.now(timezone.utc)
        return _naive_utc(reference) - timedelta(days=self.window_days)

    def query_params(self, reference_time: Optional[datetime] = None, **params) -> Tuple:
        return (self.cutoff(reference_time),)

    def _transform(
        self,
        rows: List[Dict[str, Any]],
        reference_time: Optional[datetime] = None,
        **params
    ) -> List[BackupInfo]:
        cutoff = self.cutoff(reference_time)
        backups: Dict[str, BackupInfo] = {}

        for row in rows:
            finished = row.get("backup_finish_date")
            if finished is None or _naive_utc(finished) < cutoff:
                continue

            field = {"D": "last_full_backup", "L": "last_log_backup"}.get(row.get("backup_type"))
            if field is None:
                continue

            info = backups.setdefault(row["database_name"], BackupInfo(database_name=row["database_name"]))
            current = getattr(info, field)
            if current is None or finished > current:
                setattr(info, field, finished)

        return list(backups.values())
