"""Tests for SPN lookup."""

from unittest.mock import MagicMock, patch

import pytest

from sqlinventory.collectors.spn_collector import SpnCollector, SshSetspnLookup
from sqlinventory.config.models import HostFactsConfig
from sqlinventory.inventory.target import Target

SETSPN_OUTPUT = """Registered ServicePrincipalNames for CN=svc_sql,OU=Service Accounts,DC=contoso,DC=com:
        MSSQLSvc/sql01.contoso.com:1433
        MSSQLSvc/sql01.contoso.com
"""


def test_parse_setspn_output():
    assert SshSetspnLookup.parse_setspn_output(SETSPN_OUTPUT) == [
        "MSSQLSvc/sql01.contoso.com:1433",
        "MSSQLSvc/sql01.contoso.com",
    ]


def test_parse_setspn_output_without_registrations():
    output = "Registered ServicePrincipalNames for CN=svc_sql,OU=Service Accounts,DC=contoso,DC=com:\n"
    assert SshSetspnLookup.parse_setspn_output(output) == []


def test_lookup_runs_setspn_on_target_host(logger):
    lookup = SshSetspnLookup(HostFactsConfig(), logger)

    with patch("sqlinventory.collectors.spn_collector.SSHHelper") as mock_ssh:
        mock_ssh.create_client.return_value = MagicMock()
        mock_ssh.exec_command.return_value = SETSPN_OUTPUT

        spns = lookup.lookup("CONTOSO\\svc_sql", "SQL01")

        assert len(spns) == 2
        assert mock_ssh.exec_command.call_args.args[1] == 'setspn -L "CONTOSO\\svc_sql"'
        mock_ssh.close_client.assert_called_once()


def test_lookup_rejects_shell_metacharacters(logger):
    lookup = SshSetspnLookup(HostFactsConfig(), logger)

    with pytest.raises(ValueError):
        lookup.lookup('svc" & whoami', "SQL01")


def test_collector_without_account_returns_empty(logger):
    spn_lookup = MagicMock()

    result = SpnCollector(spn_lookup, logger).collect(Target.parse("SQL01"))

    assert result.ok
    assert result.payload == []
    spn_lookup.lookup.assert_not_called()


def test_collector_lookup_failure(logger):
    spn_lookup = MagicMock()
    spn_lookup.lookup.side_effect = RuntimeError("Command failed with exit code 1: Could not find account")

    result = SpnCollector(spn_lookup, logger).collect(Target.parse("SQL01"), account="CONTOSO\\svc_sql")

    assert not result.ok
    assert "Could not find account" in result.error
