"""Write a collection run to JSON or CSV."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.models import OutputConfig, OutputMode
from ..models.records import CollectionRun, TargetRecord

# Scalar projection written to CSV; list-valued categories are left out
CSV_COLUMNS = [
    "server",
    "resolved_name",
    "status",
    "collected_at",
    "os_name",
    "os_version",
    "os_architecture",
    "total_memory_gb",
    "physical_processors",
    "logical_processors",
    "sql_server_name",
    "sql_instance_name",
    "edition",
    "version",
    "product_level",
    "update_level",
    "collation",
    "authentication_mode",
    "min_server_memory_mb",
    "max_server_memory_mb",
    "sql_service_account",
    "agent_service_account",
]

EXTENSIONS = {OutputMode.JSON: "json", OutputMode.CSV: "csv"}


class ExportError(Exception):
    """Serialisation or file write failure."""


def run_file_name(prefix: str, started_at: datetime, extension: str) -> str:
    """Return '<prefix>_<YYYYmmdd_HHMMSS>.<extension>'."""
    return f"{prefix}_{started_at.strftime('%Y%m%d_%H%M%S')}.{extension}"


def csv_row(record: TargetRecord) -> Dict[str, Any]:
    """Flatten the scalar fields of a record into one CSV row."""
    host = record.host
    sql = record.sql
    return {
        "server": record.server,
        "resolved_name": record.resolved_name,
        "status": record.status,
        "collected_at": record.collected_at.isoformat(),
        "os_name": host.os_name,
        "os_version": host.os_version,
        "os_architecture": host.os_architecture,
        "total_memory_gb": host.total_memory_gb,
        "physical_processors": host.physical_processors,
        "logical_processors": host.logical_processors,
        "sql_server_name": sql.server_name,
        "sql_instance_name": sql.instance_name,
        "edition": sql.edition,
        "version": sql.version,
        "product_level": sql.product_level,
        "update_level": sql.update_level,
        "collation": sql.collation,
        "authentication_mode": sql.authentication_mode,
        "min_server_memory_mb": sql.min_server_memory_mb,
        "max_server_memory_mb": sql.max_server_memory_mb,
        "sql_service_account": sql.sql_service_account,
        "agent_service_account": sql.agent_service_account,
    }


class RunExporter:
    """Persist a CollectionRun according to the output configuration."""

    def __init__(self, config: OutputConfig, logger: logging.Logger):
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)

    def output_path(self, mode: OutputMode, started_at: datetime) -> Path:
        return Path(self.config.directory) / run_file_name(
            self.config.prefix, started_at, EXTENSIONS[mode]
        )

    def export(self, run: CollectionRun) -> Optional[Path]:
        """
        Export the run in its output mode.

        Args:
            run: Finished collection run

        Returns:
            Path of the written file, or None for OutputMode.NONE

        Raises:
            ExportError: If serialisation or writing fails
        """
        mode = run.output_mode
        if mode == OutputMode.NONE:
            self.logger.info("Output mode None: skipping file export")
            return None

        path = self.output_path(mode, run.started_at)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if mode == OutputMode.CSV:
                self.write_csv(run.records, path)
            else:
                self.write_json(run.records, path)
        except (OSError, TypeError, ValueError) as e:
            raise ExportError(f"Could not write {mode.value} export to '{path}': {e}") from e

        self.logger.info(f"Exported {len(run.records)} record(s) to {path}")
        return path

    def write_json(self, records: List[TargetRecord], path: Path) -> None:
        indent = 2 if self.config.pretty else None
        payload = [record.model_dump(mode="json") for record in records]
        path.write_text(
            json.dumps(payload, indent=indent, ensure_ascii=False),
            encoding="utf-8"
        )

    def write_csv(self, records: List[TargetRecord], path: Path) -> None:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS, extrasaction="ignore", restval="")
            writer.writeheader()
            for record in records:
                writer.writerow(csv_row(record))
