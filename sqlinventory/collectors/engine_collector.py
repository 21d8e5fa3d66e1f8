"""Instance-level SQL Server engine facts."""

from typing import Any, Dict, List

from ..models.records import ConfigurationSetting, NetworkEndpoint, SqlCoreFacts, WaitStat
from .base import QueryCollector


class SqlCoreCollector(QueryCollector):
    """Version, edition, collation, memory limits and service accounts."""

    name = "sql_core"
    model = SqlCoreFacts
    query = """
SELECT
    CAST(SERVERPROPERTY('ServerName') AS nvarchar(256)) AS server_name,
    CAST(ISNULL(SERVERPROPERTY('InstanceName'), 'MSSQLSERVER') AS nvarchar(256)) AS instance_name,
    CAST(SERVERPROPERTY('Edition') AS nvarchar(256)) AS edition,
    CAST(SERVERPROPERTY('ProductVersion') AS nvarchar(128)) AS version,
    CAST(SERVERPROPERTY('ProductLevel') AS nvarchar(128)) AS product_level,
    CAST(SERVERPROPERTY('ProductUpdateLevel') AS nvarchar(128)) AS update_level,
    CAST(SERVERPROPERTY('Collation') AS nvarchar(128)) AS collation,
    CASE CAST(SERVERPROPERTY('IsIntegratedSecurityOnly') AS int)
        WHEN 1 THEN 'Windows' ELSE 'Mixed' END AS authentication_mode,
    (SELECT CAST(value_in_use AS int) FROM sys.configurations
        WHERE name = 'min server memory (MB)') AS min_server_memory_mb,
    (SELECT CAST(value_in_use AS int) FROM sys.configurations
        WHERE name = 'max server memory (MB)') AS max_server_memory_mb,
    (SELECT TOP 1 service_account FROM sys.dm_server_services
        WHERE servicename LIKE 'SQL Server (%') AS sql_service_account,
    (SELECT TOP 1 service_account FROM sys.dm_server_services
        WHERE servicename LIKE 'SQL Server Agent%') AS agent_service_account
"""

    def _transform(self, rows: List[Dict[str, Any]], **params) -> SqlCoreFacts:
        if not rows:
            raise ValueError("SERVERPROPERTY query returned no rows")
        return SqlCoreFacts(**rows[0])


class ConfigurationCollector(QueryCollector):
    """Parallelism settings from sys.configurations."""

    name = "configuration"
    model = ConfigurationSetting
    settings = ("cost threshold for parallelism", "max degree of parallelism")
    query = """
SELECT name, CAST(value_in_use AS int) AS value
FROM sys.configurations
WHERE name IN ('cost threshold for parallelism', 'max degree of parallelism')
ORDER BY name
"""

    def _transform(self, rows: List[Dict[str, Any]], **params) -> List[ConfigurationSetting]:
        return [ConfigurationSetting(**row) for row in rows if row.get("name") in self.settings]


class WaitStatsCollector(QueryCollector):
    """Top waits by accumulated wait time."""

    name = "wait_stats"
    model = WaitStat

    def __init__(self, executor, logger, top: int = 20):
        super().__init__(executor, logger)
        self.top = top

    def build_query(self, **params) -> str:
        return (
            f"SELECT TOP ({int(self.top)}) wait_type, waiting_tasks_count, wait_time_ms\n"
            "FROM sys.dm_os_wait_stats\n"
            "ORDER BY wait_time_ms DESC"
        )

    def _transform(self, rows: List[Dict[str, Any]], **params) -> List[WaitStat]:
        ordered = sorted(rows, key=lambda r: r.get("wait_time_ms") or 0, reverse=True)
        return [WaitStat(**row) for row in ordered[:self.top]]


class NetworkCollector(QueryCollector):
    """Local address and port of the collector's own session."""

    name = "network"
    model = NetworkEndpoint
    query = """
SELECT local_net_address, local_tcp_port
FROM sys.dm_exec_connections
WHERE session_id = @@SPID
"""
