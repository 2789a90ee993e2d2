"""PostgreSQL client for running credential statements.

Opens one connection per operation against a named database from the
configured DSN map, runs the rendered statements and converts driver
errors into OperationResult via `classify_postgres_error`.
"""

from typing import Dict, List, Optional

import psycopg
from psycopg import errors as pg_errors
import structlog

from infrastructure.operations.classifiers import classify_postgres_error
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class PostgresClient:
    """Client for executing role statements on configured PostgreSQL databases.

    Args:
        connections: mapping of database name to libpq DSN
        connect_timeout: seconds to wait for a connection

    Example:
        client = PostgresClient({"orders": "postgresql://broker@db/orders"})
        result = client.execute("orders", ['CREATE ROLE "v-acme-ro-x1" LOGIN'])
    """

    def __init__(
        self, connections: Dict[str, str], connect_timeout: int = 5
    ) -> None:
        self._connections = dict(connections)
        self._connect_timeout = connect_timeout
        self._logger = logger.bind(component="postgres_client")

    @property
    def databases(self) -> List[str]:
        return sorted(self._connections)

    def _dsn(self, database: str) -> Optional[str]:
        return self._connections.get(database)

    def _connect(self, dsn: str, autocommit: bool = False) -> psycopg.Connection:
        return psycopg.connect(
            dsn, connect_timeout=self._connect_timeout, autocommit=autocommit
        )

    def execute(
        self,
        database: str,
        statements: List[str],
        transactional: bool = True,
        ignore_missing: bool = False,
    ) -> OperationResult:
        """Execute statements against a configured database.

        Args:
            database: key into the connection map
            statements: fully rendered SQL statements
            transactional: run all statements in one transaction; any failure
                rolls every statement back
            ignore_missing: in non-transactional mode, treat UndefinedObject
                errors as already applied and continue

        Returns:
            OperationResult with data {"executed": int, "skipped": int}
        """
        dsn = self._dsn(database)
        if dsn is None:
            return OperationResult.permanent_error(
                f"Unknown database: {database}", error_code="UNKNOWN_DATABASE"
            )
        if not statements:
            return OperationResult.success(
                data={"executed": 0, "skipped": 0}, message="No statements to run"
            )

        try:
            if transactional:
                with self._connect(dsn) as conn:
                    with conn.transaction():
                        for statement in statements:
                            conn.execute(statement)
                executed, skipped = len(statements), 0
            else:
                executed, skipped = self._execute_autocommit(
                    dsn, statements, ignore_missing
                )
        except Exception as e:  # pylint: disable=broad-except
            result = classify_postgres_error(e)
            # Statements can embed generated passwords; never log them
            self._logger.error(
                "postgres_execute_failed",
                database=database,
                error_code=result.error_code,
                error_type=type(e).__name__,
            )
            return result

        return OperationResult.success(
            data={"executed": executed, "skipped": skipped},
            message=f"Executed {executed} statement(s) on {database}",
        )

    def _execute_autocommit(
        self, dsn: str, statements: List[str], ignore_missing: bool
    ) -> tuple[int, int]:
        executed = skipped = 0
        with self._connect(dsn, autocommit=True) as conn:
            for statement in statements:
                try:
                    conn.execute(statement)
                    executed += 1
                except pg_errors.UndefinedObject:
                    if not ignore_missing:
                        raise
                    skipped += 1
        return executed, skipped

    def healthcheck(self, database: str) -> OperationResult:
        """Run `SELECT 1` on the named database."""
        dsn = self._dsn(database)
        if dsn is None:
            return OperationResult.permanent_error(
                f"Unknown database: {database}", error_code="UNKNOWN_DATABASE"
            )
        try:
            with self._connect(dsn) as conn:
                conn.execute("SELECT 1")
        except Exception as e:  # pylint: disable=broad-except
            return classify_postgres_error(e)
        return OperationResult.success(message=f"{database} reachable")
