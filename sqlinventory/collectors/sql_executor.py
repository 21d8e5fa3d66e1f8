"""SQL Server query execution through pyodbc."""

import logging
from typing import Any, Dict, List, Optional, Tuple

try:
    import pyodbc
except ImportError:
    pyodbc = None

from ..config.models import ConnectionConfig
from ..inventory.target import Target


def _odbc_value(value: str) -> str:
    """Brace an ODBC attribute value, doubling any closing brace inside it."""
    return "{" + value.replace("}", "}}") + "}"


class SqlQueryExecutor:
    """Run read-only queries against a target instance and return rows as dicts."""

    def __init__(
        self,
        config: ConnectionConfig,
        logger: logging.Logger,
        credentials: Optional[Tuple[str, str]] = None
    ):
        """
        Initialize query executor.

        Args:
            config: Connection settings
            logger: Logger instance
            credentials: (user, password) for SQL authentication, or None
                for Windows authentication
        """
        self.config = config
        self.credentials = credentials
        self.logger = logger.getChild(self.__class__.__name__)

    def connection_string(self, target: Target, database: Optional[str] = None) -> str:
        """
        Build the ODBC connection string for a target.

        Args:
            target: Parsed target
            database: Database to connect to (defaults to config.database)

        Returns:
            str: ODBC connection string
        """
        server = target.server_address
        if self.config.port:
            if target.is_default_instance:
                server = f"{target.host},{self.config.port}"
            else:
                # Named instances resolve their own port through SQL Browser
                self.logger.debug(
                    f"Ignoring connection.port {self.config.port} for named instance {target.server_address}"
                )

        parts = [
            f"DRIVER={{{self.config.driver}}}",
            f"SERVER={server}",
            f"DATABASE={database or self.config.database}",
            f"Encrypt={'yes' if self.config.encrypt else 'no'}",
            f"TrustServerCertificate={'yes' if self.config.trust_server_certificate else 'no'}",
            "ApplicationIntent=ReadOnly",
        ]

        trusted = self.config.trusted_connection
        if trusted is None:
            trusted = self.credentials is None

        if trusted:
            parts.append("Trusted_Connection=yes")
        elif self.credentials:
            user, password = self.credentials
            parts.append(f"UID={_odbc_value(user)}")
            parts.append(f"PWD={_odbc_value(password)}")

        return ";".join(parts) + ";"

    def execute(
        self,
        target: Target,
        query: str,
        database: Optional[str] = None,
        params: tuple = ()
    ) -> List[Dict[str, Any]]:
        """
        Execute a query and fetch every row.

        Args:
            target: Parsed target
            query: T-SQL text, '?' parameter markers allowed
            database: Database context (defaults to config.database)
            params: Query parameters

        Returns:
            List[Dict[str, Any]]: Rows keyed by column name

        Raises:
            ImportError: If pyodbc is not installed
            pyodbc.Error: On connection, permission or query errors
        """
        if pyodbc is None:
            raise ImportError("pyodbc library required for SQL Server queries")

        db_name = database or self.config.database
        self.logger.debug(f"Querying {target.server_address} [{db_name}]")

        conn = pyodbc.connect(
            self.connection_string(target, db_name),
            timeout=self.config.timeout_seconds,
            readonly=True
        )
        try:
            cursor = conn.cursor()
            cursor.execute(query, *params)
            if cursor.description is None:
                return []
            columns = [col[0] for col in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

        except pyodbc.Error as e:
            self.logger.debug(f"Query failed on {target.server_address} [{db_name}]: {e}")
            raise

        finally:
            conn.close()

    @staticmethod
    def is_available() -> bool:
        """
        Check if pyodbc is available.

        Returns:
            bool: True if pyodbc is installed
        """
        return pyodbc is not None
