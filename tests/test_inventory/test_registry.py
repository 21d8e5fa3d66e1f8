"""Tests for the category registry."""

from unittest.mock import MagicMock

import pytest

from sqlinventory.collectors.host_collector import HostFactsProvider
from sqlinventory.collectors.spn_collector import SpnLookup
from sqlinventory.config.models import CollectionConfig
from sqlinventory.inventory.registry import (
    Category,
    build_default_registry,
    service_account_params,
    validate_registry,
)
from sqlinventory.models.records import SqlCoreFacts, TargetRecord

FULL_ORDER = [
    "os", "sql_core", "configuration", "databases", "database_files", "tempdb",
    "availability_groups", "replication", "backups", "server_roles", "wait_stats",
    "network", "spns", "agent_jobs", "logins", "linked_servers",
]


def test_default_registry_order(executor, logger):
    categories = build_default_registry(
        executor, MagicMock(spec=HostFactsProvider), MagicMock(spec=SpnLookup), CollectionConfig(), logger
    )

    assert [c.name for c in categories] == FULL_ORDER
    validate_registry(categories)


def test_registry_fields_exist_on_record(executor, logger):
    categories = build_default_registry(
        executor, MagicMock(spec=HostFactsProvider), MagicMock(spec=SpnLookup), CollectionConfig(), logger
    )
    for category in categories:
        assert category.field in TargetRecord.model_fields


def test_registry_without_host_collaborators(executor, logger):
    categories = build_default_registry(executor, None, None, CollectionConfig(), logger)

    names = [c.name for c in categories]
    assert "os" not in names
    assert "spns" not in names
    assert len(names) == len(FULL_ORDER) - 2


def test_registry_passes_collection_settings(executor, logger):
    config = CollectionConfig(backup_window_days=7, wait_stats_top=5)
    categories = {c.name: c for c in build_default_registry(executor, None, None, config, logger)}

    assert categories["backups"].collector.window_days == 7
    assert categories["wait_stats"].collector.top == 5


def test_service_account_params(run_started_at):
    record = TargetRecord(server="SQL01", collected_at=run_started_at)
    assert service_account_params(record, run_started_at) is None

    record.sql = SqlCoreFacts(sql_service_account=" CONTOSO\\svc_sql ")
    assert service_account_params(record, run_started_at) == {"account": "CONTOSO\\svc_sql"}


def test_validate_rejects_duplicates(logger, make_stub):
    stub = make_stub("databases", logger, payload=[])
    with pytest.raises(ValueError, match="Duplicate"):
        validate_registry([Category("databases", "databases", stub), Category("databases", "databases", stub)])


def test_validate_rejects_unknown_field(logger, make_stub):
    with pytest.raises(ValueError, match="unknown field"):
        validate_registry([Category("extra", "not_a_field", make_stub("extra", logger))])


def test_category_merge_assigns_field(run_started_at, logger, make_stub):
    record = TargetRecord(server="SQL01", collected_at=run_started_at)
    Category("spns", "spns", make_stub("spns", logger)).merge(record, ["MSSQLSvc/a"])
    assert record.spns == ["MSSQLSvc/a"]
