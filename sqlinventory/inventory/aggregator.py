"""Run-level aggregation over the full target list."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, List, Optional, Sequence
import logging

from ..config.models import OutputMode
from ..models.records import CollectionRun, RunSummary, TargetRecord
from ..utils.status import TargetStatus
from .orchestrator import TargetOrchestrator, utc_now


class RunAggregator:
    """
    Drive the orchestrator over every target and assemble the run.

    Targets are collected in a bounded thread pool; results are placed by
    input index, so output order always matches input order no matter
    which target finishes first.
    """

    def __init__(
        self,
        orchestrator: TargetOrchestrator,
        logger: logging.Logger,
        max_workers: int = 1,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize aggregator.

        Args:
            orchestrator: Per-target orchestrator
            logger: Logger instance
            max_workers: Targets collected concurrently (1 = sequential)
            clock: Source of the run start timestamp
        """
        self.orchestrator = orchestrator
        self.max_workers = max(1, max_workers)
        self.clock = clock
        self.logger = logger.getChild(self.__class__.__name__)

    async def run(
        self,
        targets: Sequence[str],
        output_mode: OutputMode = OutputMode.JSON,
        started_at: Optional[datetime] = None
    ) -> CollectionRun:
        """
        Collect every target.

        Args:
            targets: Target strings in the order they should be reported
            output_mode: Export mode recorded on the run
            started_at: Run start time (defaults to now)

        Returns:
            CollectionRun: One record per target, in input order
        """
        started_at = started_at or self.clock()
        targets = list(targets)
        self.logger.info(
            f"Collecting {len(targets)} target(s) with {min(self.max_workers, max(len(targets), 1))} worker(s)"
        )

        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="inventory") as pool:
            tasks = [
                loop.run_in_executor(pool, self.orchestrator.collect_with_failures, target, started_at)
                for target in targets
            ]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        records: List[TargetRecord] = []
        summary = RunSummary(total=len(targets))

        for i, result in enumerate(results):
            if isinstance(result, BaseException):
                # The orchestrator never raises; this covers worker-level faults
                self.logger.error(f"Worker for target {targets[i]!r} failed: {result}")
                record = TargetRecord(
                    server=str(targets[i]),
                    collected_at=self.clock(),
                    status=TargetStatus.ERROR.describe(str(result))
                )
                failed: List[str] = []
            else:
                record, failed = result

            records.append(record)
            if failed:
                summary.category_failures[record.server] = failed
            if TargetStatus.is_error(record.status):
                summary.errored += 1
            else:
                summary.succeeded += 1

        self.logger.info(
            f"Collection complete: {summary.succeeded} succeeded, {summary.errored} errored, "
            f"{len(summary.category_failures)} with category failures"
        )

        return CollectionRun(
            started_at=started_at,
            output_mode=output_mode,
            records=records,
            summary=summary
        )

    def run_sync(
        self,
        targets: Sequence[str],
        output_mode: OutputMode = OutputMode.JSON,
        started_at: Optional[datetime] = None
    ) -> CollectionRun:
        """Blocking wrapper around run() for callers without an event loop."""
        return asyncio.run(self.run(targets, output_mode=output_mode, started_at=started_at))
