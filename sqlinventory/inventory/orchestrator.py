"""Per-target collection across every registered category."""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
import logging

from ..models.records import TargetRecord
from ..utils.status import TargetStatus
from .registry import Category, validate_registry
from .resolver import NameResolver
from .target import DEFAULT_INSTANCE_NAME, Target


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TargetOrchestrator:
    """
    Collect one target, category by category.

    Every category attempt is isolated: a failure leaves that category's
    field at its default and collection moves on. Only a fault while
    setting up the target's identity marks the record as an error, and in
    that case no category is attempted.
    """

    def __init__(
        self,
        categories: List[Category],
        resolver: NameResolver,
        logger: logging.Logger,
        default_instance_name: str = DEFAULT_INSTANCE_NAME,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize orchestrator.

        Args:
            categories: Registry in execution order
            resolver: Name resolver for the target's host
            logger: Logger instance
            default_instance_name: Instance name for targets without one
            clock: Source of collection timestamps
        """
        validate_registry(categories)
        self.categories = categories
        self.resolver = resolver
        self.default_instance_name = default_instance_name
        self.clock = clock
        self.logger = logger.getChild(self.__class__.__name__)

    def collect(self, raw_target: str, run_started_at: Optional[datetime] = None) -> TargetRecord:
        """
        Collect one target.

        Args:
            raw_target: "host" or "host\\instance"
            run_started_at: Reference time for windowed categories

        Returns:
            TargetRecord: Populated record (never raises)
        """
        record, _ = self.collect_with_failures(raw_target, run_started_at)
        return record

    def collect_with_failures(
        self,
        raw_target: str,
        run_started_at: Optional[datetime] = None
    ) -> Tuple[TargetRecord, List[str]]:
        """
        Collect one target and report which categories failed.

        Returns:
            Tuple[TargetRecord, List[str]]: Record and failed category names
        """
        run_started_at = run_started_at or self.clock()
        record = TargetRecord(server=str(raw_target), collected_at=self.clock())
        failed: List[str] = []

        try:
            target = self._resolve_identity(raw_target)
        except Exception as e:
            record.status = TargetStatus.ERROR.describe(str(e))
            self.logger.error(f"Target {raw_target!r} failed before collection: {e}", exc_info=True)
            return record, failed

        record.host_name = target.host
        record.instance_name = target.instance_name
        record.resolved_name = target.identity
        self.logger.info(f"Collecting {target.raw} ({target.identity})")

        for category in self.categories:
            if not self._run_category(category, target, record, run_started_at):
                failed.append(category.name)

        record.status = TargetStatus.SUCCESS.describe()
        if failed:
            self.logger.warning(
                f"{target.raw}: {len(failed)} categor{'y' if len(failed) == 1 else 'ies'} failed: {', '.join(failed)}"
            )
        else:
            self.logger.info(f"{target.raw}: all categories collected")

        return record, failed

    def _resolve_identity(self, raw_target: str) -> Target:
        target = Target.parse(raw_target, default_instance_name=self.default_instance_name)
        return target.with_resolved_name(self.resolver.resolve(target.host))

    def _run_category(
        self,
        category: Category,
        target: Target,
        record: TargetRecord,
        run_started_at: datetime
    ) -> bool:
        """Attempt one category; returns False when it failed."""
        try:
            params = category.build_params(record, run_started_at)
            if params is None:
                self.logger.debug(f"{target.raw}: skipping {category.name}, prerequisites missing")
                return True

            result = category.collector.collect(target, **params)
            if not result.ok:
                self.logger.warning(f"{target.raw}: {category.name} failed: {result.error}")
                return False

            category.merge(record, result.payload)
            return True

        except Exception as e:
            self.logger.warning(f"{target.raw}: {category.name} failed: {e}", exc_info=True)
            return False
