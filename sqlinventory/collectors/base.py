"""Base collector classes for all inventory categories."""

from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, Dict, List, Optional, Type
import logging

from pydantic import BaseModel

from ..inventory.target import Target
from ..utils.results import CategoryResult
from .sql_executor import SqlQueryExecutor


def safe_collect(func):
    """
    Decorator that turns any collector exception into a failure result.

    Args:
        func: Collector method returning a payload

    Returns:
        Wrapped function that always returns a CategoryResult
    """
    @wraps(func)
    def wrapper(self, target: Target, **params):
        try:
            payload = func(self, target, **params)
            return CategoryResult.success(self.name, target.raw, payload)
        except Exception as e:
            self.logger.debug(f"{self.name} failed for {target.raw}: {e}", exc_info=True)
            return CategoryResult.failure(self.name, target.raw, f"{type(e).__name__}: {e}")
    return wrapper


class BaseCollector(ABC):
    """Abstract base class for all category collectors."""

    name: str = "base"

    def __init__(self, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            logger: Logger instance
        """
        self.logger = logger.getChild(self.__class__.__name__)

    @safe_collect
    def collect(self, target: Target, **params) -> CategoryResult:
        """
        Collect this category for one target.

        Returns:
            CategoryResult: Payload on success, failure cause otherwise.
            Never raises.
        """
        return self._collect(target, **params)

    @abstractmethod
    def _collect(self, target: Target, **params) -> Any:
        """
        Implement in subclass to return the category payload.

        Raises:
            Exception: Any collection error (converted by collect)
        """
        pass


class QueryCollector(BaseCollector):
    """
    Collector backed by a single read-only T-SQL query.

    Subclasses set ``query`` with column aliases matching ``model`` field
    names; rows are turned into model instances by ``_transform``.
    """

    query: str = ""
    database: Optional[str] = None
    model: Optional[Type[BaseModel]] = None

    def __init__(self, executor: SqlQueryExecutor, logger: logging.Logger):
        super().__init__(logger)
        self.executor = executor

    def build_query(self, **params) -> str:
        return self.query

    def query_params(self, **params) -> tuple:
        return ()

    def _collect(self, target: Target, **params) -> Any:
        rows = self.executor.execute(
            target,
            self.build_query(**params),
            database=self.database,
            params=self.query_params(**params),
        )
        self.logger.debug(f"{self.name}: {len(rows)} row(s) from {target.raw}")
        return self._transform(rows, **params)

    def _transform(self, rows: List[Dict[str, Any]], **params) -> Any:
        return [self.model(**row) for row in rows]
