"""Host OS, hardware and disk facts."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging

from ..config.models import HostFactsConfig
from ..inventory.target import Target
from ..models.records import DiskInfo, HostFacts
from .base import BaseCollector
from .ssh_helper import SSHHelper

GB = 1024 ** 3

HOST_FACTS_SCRIPT = """
$os = Get-CimInstance -ClassName Win32_OperatingSystem
$cs = Get-CimInstance -ClassName Win32_ComputerSystem
$disks = @(Get-CimInstance -ClassName Win32_LogicalDisk -Filter 'DriveType=3' | ForEach-Object {
    [pscustomobject]@{ Letter = $_.DeviceID; FileSystem = $_.FileSystem; Size = $_.Size; FreeSpace = $_.FreeSpace }
})
[pscustomobject]@{
    Caption = $os.Caption
    Version = $os.Version
    OSArchitecture = $os.OSArchitecture
    TotalPhysicalMemory = $cs.TotalPhysicalMemory
    NumberOfProcessors = $cs.NumberOfProcessors
    NumberOfLogicalProcessors = $cs.NumberOfLogicalProcessors
    Disks = $disks
} | ConvertTo-Json -Depth 4 -Compress
"""


def _to_gb(value: Any) -> Optional[float]:
    try:
        return round(int(value) / GB, 2) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


class HostFactsProvider(ABC):
    """Source of OS/hardware facts for a host address."""

    @abstractmethod
    def get_host_facts(self, host: str) -> HostFacts:
        """
        Return facts for host.

        Raises:
            Exception: If the host is unreachable or access is denied
        """
        pass


class SshCimHostFactsProvider(HostFactsProvider):
    """Query CIM classes over SSH with PowerShell."""

    def __init__(
        self,
        config: HostFactsConfig,
        logger: logging.Logger,
        password: Optional[str] = None
    ):
        self.config = config
        self.password = password
        self.logger = logger.getChild(self.__class__.__name__)

    def get_host_facts(self, host: str) -> HostFacts:
        client = None
        try:
            client = SSHHelper.create_client(host, self.config, self.logger, password=self.password)
            output = SSHHelper.run_powershell(
                client,
                HOST_FACTS_SCRIPT,
                timeout=self.config.timeout_seconds,
                logger=self.logger
            )
        finally:
            if client:
                SSHHelper.close_client(client, self.logger)

        rows = SSHHelper.loads_json_array(output)
        if not rows:
            raise ValueError(f"No host facts returned by {host}")
        return self.parse_host_facts(rows[0])

    @staticmethod
    def parse_host_facts(data: Dict[str, Any]) -> HostFacts:
        """
        Map the PowerShell object onto HostFacts.

        Args:
            data: Decoded ConvertTo-Json object

        Returns:
            HostFacts: Parsed facts
        """
        raw_disks = data.get("Disks") or []
        if isinstance(raw_disks, dict):
            raw_disks = [raw_disks]

        disks = [
            DiskInfo(
                letter=d.get("Letter"),
                file_system=d.get("FileSystem"),
                size_gb=_to_gb(d.get("Size")),
                free_gb=_to_gb(d.get("FreeSpace")),
            )
            for d in raw_disks
        ]

        return HostFacts(
            os_name=(data.get("Caption") or "").strip() or None,
            os_version=data.get("Version"),
            os_architecture=data.get("OSArchitecture"),
            total_memory_gb=_to_gb(data.get("TotalPhysicalMemory")),
            physical_processors=data.get("NumberOfProcessors"),
            logical_processors=data.get("NumberOfLogicalProcessors"),
            disks=disks,
        )


class HostFactsCollector(BaseCollector):
    """OS/hardware summary for the target's host."""

    name = "os"

    def __init__(self, provider: HostFactsProvider, logger: logging.Logger):
        super().__init__(logger)
        self.provider = provider

    def _collect(self, target: Target, **params) -> HostFacts:
        return self.provider.get_host_facts(target.host)
