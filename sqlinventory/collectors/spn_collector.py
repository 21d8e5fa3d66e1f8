"""Service principal names registered for the SQL Server service account."""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..config.models import HostFactsConfig
from ..inventory.target import Target
from .base import BaseCollector
from .ssh_helper import SSHHelper


class SpnLookup(ABC):
    """Source of SPNs for an account."""

    @abstractmethod
    def lookup(self, account: str, host: str) -> List[str]:
        """
        Return SPNs registered for account.

        Args:
            account: Service account, e.g. "CONTOSO\\svc_sql"
            host: Domain-joined machine to run the lookup from
        """
        pass


class SshSetspnLookup(SpnLookup):
    """Run ``setspn -L`` on the target host over SSH."""

    def __init__(
        self,
        config: HostFactsConfig,
        logger: logging.Logger,
        password: Optional[str] = None
    ):
        self.config = config
        self.password = password
        self.logger = logger.getChild(self.__class__.__name__)

    def lookup(self, account: str, host: str) -> List[str]:
        if any(ch in account for ch in '"&|<>^'):
            raise ValueError(f"Refusing to look up account with shell metacharacters: {account!r}")

        client = None
        try:
            client = SSHHelper.create_client(host, self.config, self.logger, password=self.password)
            output = SSHHelper.exec_command(
                client,
                f'setspn -L "{account}"',
                timeout=self.config.timeout_seconds,
                logger=self.logger
            )
        finally:
            if client:
                SSHHelper.close_client(client, self.logger)

        return self.parse_setspn_output(output)

    @staticmethod
    def parse_setspn_output(output: str) -> List[str]:
        """
        Extract SPNs from setspn output.

        Example output:
            Registered ServicePrincipalNames for CN=svc_sql,OU=Service,DC=contoso,DC=com:
                    MSSQLSvc/sql01.contoso.com:1433
                    MSSQLSvc/sql01.contoso.com
        """
        spns = []
        in_list = False
        for line in output.splitlines():
            if line.startswith("Registered ServicePrincipalNames"):
                in_list = True
                continue
            if in_list and line[:1].isspace() and line.strip():
                spns.append(line.strip())
        return spns


class SpnCollector(BaseCollector):
    """SPNs for the SQL Server service account found by the core facts."""

    name = "spns"

    def __init__(self, lookup: SpnLookup, logger: logging.Logger):
        super().__init__(logger)
        self.spn_lookup = lookup

    def _collect(self, target: Target, account: str = "", **params) -> List[str]:
        if not account:
            return []
        return self.spn_lookup.lookup(account, target.host)
