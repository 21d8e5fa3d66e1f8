"""Command-line entry point for the SQL Server inventory collector."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .collectors.host_collector import SshCimHostFactsProvider
from .collectors.spn_collector import SshSetspnLookup
from .collectors.ssh_helper import SSHHelper
from .collectors.sql_executor import SqlQueryExecutor
from .config.loader import ConfigLoader
from .config.models import InventoryConfig, OutputMode
from .config.settings import Settings
from .inventory.aggregator import RunAggregator
from .inventory.orchestrator import TargetOrchestrator, utc_now
from .inventory.registry import build_default_registry
from .inventory.resolver import NameResolver
from .models.records import CollectionRun
from .report.exporter import ExportError, RunExporter, run_file_name
from .report.summary import format_run_summary
from .utils.logger import add_transcript_handler, setup_logger


class InventoryApp:
    """
    Inventory application.

    Wires collaborators, collectors and the registry together, runs one
    collection over the target list, exports it and prints a summary.
    """

    def __init__(self, config: InventoryConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize inventory application.

        Args:
            config: Validated configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or setup_logger("sqlinventory")

        credentials = Settings.sql_credentials()
        self.executor = SqlQueryExecutor(config.connection, self.logger, credentials=credentials)
        if not SqlQueryExecutor.is_available():
            self.logger.warning("pyodbc not installed, SQL categories will fail")

        host_provider = None
        spn_lookup = None
        if config.host_facts.enabled:
            if not SSHHelper.is_available():
                self.logger.warning("paramiko not installed, OS and SPN categories will fail")
            ssh_password = Settings.ssh_password()
            host_provider = SshCimHostFactsProvider(config.host_facts, self.logger, password=ssh_password)
            spn_lookup = SshSetspnLookup(config.host_facts, self.logger, password=ssh_password)
        else:
            self.logger.info("Host facts disabled: skipping OS and SPN categories")

        self.categories = build_default_registry(
            self.executor,
            host_provider,
            spn_lookup,
            config.collection,
            self.logger
        )
        self.orchestrator = TargetOrchestrator(
            self.categories,
            NameResolver(self.logger),
            self.logger,
            default_instance_name=config.collection.default_instance_name
        )
        self.aggregator = RunAggregator(
            self.orchestrator,
            self.logger,
            max_workers=config.collection.max_workers
        )
        self.exporter = RunExporter(config.output, self.logger)

        self.logger.info(f"Initialized {len(self.categories)} collection categories")

    def run(self, targets: List[str]) -> CollectionRun:
        """
        Execute one inventory run.

        The transcript is always written; export failures are logged and the
        collected run is still returned.

        Args:
            targets: Target strings in report order

        Returns:
            CollectionRun: Collected records
        """
        started_at = utc_now()
        transcript_path = os.path.join(
            self.config.output.directory,
            run_file_name(self.config.output.prefix, started_at, "log")
        )
        transcript = add_transcript_handler(self.logger, transcript_path)

        try:
            self.logger.info("=" * 60)
            self.logger.info("SQL Server inventory")
            self.logger.info(f"Transcript: {transcript_path}")
            self.logger.info("=" * 60)

            run = self.aggregator.run_sync(
                targets,
                output_mode=self.config.output.mode,
                started_at=started_at
            )

            try:
                self.exporter.export(run)
            except ExportError as e:
                self.logger.error(str(e), exc_info=True)

            return run

        finally:
            self.logger.removeHandler(transcript)
            transcript.close()


def collect_targets(
    config: InventoryConfig,
    servers: Optional[List[str]] = None,
    servers_file: Optional[str] = None
) -> List[str]:
    """
    Combine config, file and command-line targets in that order.

    Raises:
        FileNotFoundError: If servers_file doesn't exist
        ValueError: If no targets are given or one is blank
    """
    targets = list(config.targets)
    if servers_file:
        targets.extend(ConfigLoader.load_targets_file(servers_file))
    if servers:
        targets.extend(servers)

    targets = [t.strip() for t in targets]
    if any(not t for t in targets):
        raise ValueError("Target entries must be non-empty")
    if not targets:
        raise ValueError("No targets given: use --servers, --servers-file or 'targets' in the config file")
    return targets


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='sqlinventory',
        description='SQL Server host and instance inventory collector',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inventory two servers, JSON export (default)
  sqlinventory --servers SQL01 "SQL02\\REPORTING"

  # Server list from a file, CSV summary
  sqlinventory --servers-file servers.txt --output-mode Csv

  # Console output only, four targets at a time
  sqlinventory --config config/config.yaml --output-mode None --max-workers 4
        """
    )

    parser.add_argument('--config', help='Path to YAML configuration file')
    parser.add_argument('--servers', nargs='+', metavar='SERVER', help='Targets as host or host\\instance')
    parser.add_argument('--servers-file', metavar='PATH', help='File with one target per line')
    parser.add_argument(
        '--output-mode',
        help='Json (default), Csv or None'
    )
    parser.add_argument('--output-dir', metavar='PATH', help='Directory for export and transcript files')
    parser.add_argument('--max-workers', type=int, help='Targets collected concurrently (default: 1)')
    parser.add_argument(
        '--no-host-facts',
        action='store_true',
        help='Skip OS/disk facts and SPN lookup (no SSH to hosts)'
    )
    parser.add_argument(
        '--log-level',
        default=Settings.get('LOG_LEVEL', 'INFO').upper(),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> InventoryConfig:
    """Load the config file and apply command-line overrides."""
    config = ConfigLoader.load_from_file(args.config)

    if args.output_mode is not None:
        config.output.mode = OutputMode.parse(args.output_mode)
    if args.output_dir:
        config.output.directory = args.output_dir
    if args.max_workers is not None:
        config.collection = config.collection.model_copy(update={"max_workers": args.max_workers})
    if args.no_host_facts:
        config.host_facts.enabled = False

    # Re-validate so overrides get the same checks as the file
    return InventoryConfig.model_validate(config.model_dump())


def main(argv=None) -> int:
    """
    CLI entry point.

    Returns:
        int: Process exit code
    """
    args = parse_args(argv)
    logger = setup_logger("sqlinventory", args.log_level)

    try:
        config = build_config(args)
        targets = collect_targets(config, args.servers, args.servers_file)
    except Exception as e:
        logger.error(f"Invalid configuration or target list: {e}")
        return 1

    app = InventoryApp(config, logger)
    try:
        run = app.run(targets)
    except OSError as e:
        logger.error(f"Cannot write run files to '{config.output.directory}': {e}")
        return 1

    print(format_run_summary(run))
    return 0


if __name__ == '__main__':
    sys.exit(main())
