"""Shared pytest configuration and fixtures."""

from datetime import datetime, timezone
from typing import Any, List
from unittest.mock import MagicMock

import pytest

from sqlinventory.collectors.base import BaseCollector
from sqlinventory.collectors.sql_executor import SqlQueryExecutor
from sqlinventory.inventory.registry import Category, service_account_params
from sqlinventory.inventory.resolver import NameResolver
from sqlinventory.models.records import DatabaseInfo, DiskInfo, HostFacts, LoginInfo, SqlCoreFacts
from sqlinventory.utils.logger import setup_logger


RUN_STARTED_AT = datetime(2024, 6, 30, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def run_started_at():
    return RUN_STARTED_AT


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    return lambda: RUN_STARTED_AT


@pytest.fixture
def executor():
    """SqlQueryExecutor stand-in; set execute.return_value per test."""
    return MagicMock(spec=SqlQueryExecutor)


class StaticResolver(NameResolver):
    """Resolver that appends a fixed domain without touching DNS."""

    def __init__(self, logger, domain: str = "contoso.com"):
        super().__init__(logger)
        self.domain = domain

    def resolve(self, host: str) -> str:
        return f"{host}.{self.domain}".lower()


@pytest.fixture
def resolver(logger):
    return StaticResolver(logger)


class StubCollector(BaseCollector):
    """Collector returning a fixed payload or raising a fixed error."""

    def __init__(self, name: str, logger, payload: Any = None, error: Exception = None, calls: List = None):
        super().__init__(logger)
        self.name = name
        self.payload = payload
        self.error = error
        self.calls = calls if calls is not None else []

    def _collect(self, target, **params):
        self.calls.append((self.name, target.raw, dict(params)))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def make_stub():
    def factory(name, logger, payload=None, error=None, calls=None):
        return StubCollector(name, logger, payload=payload, error=error, calls=calls)
    return factory


def sample_host_facts() -> HostFacts:
    return HostFacts(
        os_name="Microsoft Windows Server 2022 Standard",
        os_version="10.0.20348",
        os_architecture="64-bit",
        total_memory_gb=64.0,
        physical_processors=2,
        logical_processors=16,
        disks=[DiskInfo(letter="C:", file_system="NTFS", size_gb=126.5, free_gb=40.2)],
    )


def sample_core_facts(account: str = "CONTOSO\\svc_sql") -> SqlCoreFacts:
    return SqlCoreFacts(
        server_name="SQL01",
        instance_name="MSSQLSERVER",
        edition="Enterprise Edition (64-bit)",
        version="16.0.4135.4",
        product_level="RTM",
        update_level="CU14",
        collation="SQL_Latin1_General_CP1_CI_AS",
        authentication_mode="Mixed",
        min_server_memory_mb=0,
        max_server_memory_mb=57344,
        sql_service_account=account,
        agent_service_account="CONTOSO\\svc_agent",
    )


@pytest.fixture
def host_facts():
    return sample_host_facts()


@pytest.fixture
def core_facts():
    return sample_core_facts()


@pytest.fixture
def stub_categories(logger, make_stub, host_facts, core_facts):
    """
    Registry of stubs covering host facts, core facts, a list category and SPNs.

    Returns (categories, calls) where calls records every collector invocation.
    """
    calls: List = []

    def build(sql_error: Exception = None, host_error: Exception = None) -> List[Category]:
        return [
            Category("os", "host", make_stub("os", logger, payload=host_facts, error=host_error, calls=calls)),
            Category("sql_core", "sql", make_stub("sql_core", logger, payload=core_facts, error=sql_error, calls=calls)),
            Category("databases", "databases", make_stub(
                "databases", logger, payload=[DatabaseInfo(name="master"), DatabaseInfo(name="Sales")], error=sql_error, calls=calls
            )),
            Category(
                "spns", "spns",
                make_stub("spns", logger, payload=["MSSQLSvc/sql01.contoso.com:1433"], calls=calls),
                service_account_params,
            ),
            Category("logins", "logins", make_stub(
                "logins", logger, payload=[LoginInfo(name="sa", type_desc="SQL_LOGIN")], error=sql_error, calls=calls
            )),
        ]

    return build, calls

