"""Tests for instance-level engine collectors."""

from sqlinventory.collectors.engine_collector import (
    ConfigurationCollector,
    NetworkCollector,
    SqlCoreCollector,
    WaitStatsCollector,
)
from sqlinventory.inventory.target import Target

# Fixtures imported from conftest.py: executor, logger

TARGET = Target.parse("SQL01\\INST1")


def test_core_facts_from_first_row(executor, logger):
    executor.execute.return_value = [{
        "server_name": "SQL01\\INST1",
        "instance_name": "INST1",
        "edition": "Standard Edition (64-bit)",
        "version": "15.0.4355.3",
        "product_level": "RTM",
        "update_level": "CU25",
        "collation": "Latin1_General_CI_AS",
        "authentication_mode": "Windows",
        "min_server_memory_mb": 0,
        "max_server_memory_mb": 2147483647,
        "sql_service_account": "NT Service\\MSSQL$INST1",
        "agent_service_account": "NT Service\\SQLAgent$INST1",
    }]

    result = SqlCoreCollector(executor, logger).collect(TARGET)

    assert result.ok
    assert result.payload.version == "15.0.4355.3"
    assert result.payload.max_server_memory_mb == 2147483647
    assert result.payload.sql_service_account == "NT Service\\MSSQL$INST1"


def test_core_facts_without_rows_fails(executor, logger):
    executor.execute.return_value = []

    result = SqlCoreCollector(executor, logger).collect(TARGET)

    assert not result.ok
    assert "no rows" in result.error


def test_configuration_keeps_parallelism_settings_only(executor, logger):
    executor.execute.return_value = [
        {"name": "cost threshold for parallelism", "value": 50},
        {"name": "max degree of parallelism", "value": 8},
        {"name": "xp_cmdshell", "value": 0},
    ]

    result = ConfigurationCollector(executor, logger).collect(TARGET)

    assert [(s.name, s.value) for s in result.payload] == [
        ("cost threshold for parallelism", 50),
        ("max degree of parallelism", 8),
    ]


def test_wait_stats_top_n_by_wait_time(executor, logger):
    executor.execute.return_value = [
        {"wait_type": f"WAIT_{i}", "waiting_tasks_count": i, "wait_time_ms": i * 100}
        for i in range(30)
    ]
    collector = WaitStatsCollector(executor, logger, top=20)

    result = collector.collect(TARGET)

    assert len(result.payload) == 20
    assert result.payload[0].wait_type == "WAIT_29"
    assert result.payload[-1].wait_type == "WAIT_10"
    assert "TOP (20)" in executor.execute.call_args.args[1]


def test_network_endpoint(executor, logger):
    executor.execute.return_value = [{"local_net_address": "10.0.0.15", "local_tcp_port": 1433}]

    result = NetworkCollector(executor, logger).collect(TARGET)

    assert result.payload[0].local_tcp_port == 1433
