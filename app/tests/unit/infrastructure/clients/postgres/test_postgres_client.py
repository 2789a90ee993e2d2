"""Unit tests for the PostgreSQL client using a mocked psycopg.connect."""

from unittest.mock import MagicMock, call, patch

import psycopg
import pytest
from psycopg import errors as pg_errors

from infrastructure.clients.postgres import PostgresClient
from infrastructure.operations.status import OperationStatus

DSN = "postgresql://broker@localhost/acme"


@pytest.fixture
def mock_connect():
    with patch("infrastructure.clients.postgres.client.psycopg.connect") as connect:
        yield connect


@pytest.fixture
def conn(mock_connect):
    connection = MagicMock()
    mock_connect.return_value.__enter__.return_value = connection
    return connection


@pytest.fixture
def client():
    return PostgresClient({"acme": DSN}, connect_timeout=3)


@pytest.mark.unit
class TestPostgresClientExecute:
    def test_unknown_database_is_permanent(self, client, mock_connect):
        result = client.execute("missing", ["SELECT 1"])

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "UNKNOWN_DATABASE"
        mock_connect.assert_not_called()

    def test_empty_statements_skip_connection(self, client, mock_connect):
        result = client.execute("acme", [])

        assert result.is_success
        mock_connect.assert_not_called()

    def test_transactional_runs_all_statements(self, client, mock_connect, conn):
        result = client.execute("acme", ["CREATE ROLE a", "GRANT r TO a"])

        assert result.is_success
        assert result.data == {"executed": 2, "skipped": 0}
        mock_connect.assert_called_once_with(DSN, connect_timeout=3, autocommit=False)
        conn.transaction.assert_called_once()
        conn.execute.assert_has_calls([call("CREATE ROLE a"), call("GRANT r TO a")])

    def test_transactional_failure_is_classified(self, client, conn):
        conn.execute.side_effect = [None, pg_errors.InsufficientPrivilege("denied")]

        result = client.execute("acme", ["CREATE ROLE a", "GRANT r TO a"])

        assert result.status == OperationStatus.UNAUTHORIZED

    def test_connection_failure_is_transient(self, client, mock_connect):
        mock_connect.side_effect = psycopg.OperationalError("connection refused")

        result = client.execute("acme", ["CREATE ROLE a"])

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.is_retryable

    def test_autocommit_skips_missing_objects(self, client, mock_connect, conn):
        conn.execute.side_effect = [pg_errors.UndefinedObject("no role"), None]

        result = client.execute(
            "acme",
            ["REVOKE r FROM a", "DROP ROLE IF EXISTS a"],
            transactional=False,
            ignore_missing=True,
        )

        assert result.is_success
        assert result.data == {"executed": 1, "skipped": 1}
        mock_connect.assert_called_once_with(DSN, connect_timeout=3, autocommit=True)

    def test_autocommit_missing_object_fails_without_flag(self, client, conn):
        conn.execute.side_effect = pg_errors.UndefinedObject("no role")

        result = client.execute("acme", ["REVOKE r FROM a"], transactional=False)

        assert result.status == OperationStatus.NOT_FOUND
        assert result.error_code == "UNDEFINED_OBJECT"

    def test_databases_listed_sorted(self):
        client = PostgresClient({"b": DSN, "a": DSN})
        assert client.databases == ["a", "b"]


@pytest.mark.unit
class TestPostgresClientHealthcheck:
    def test_healthcheck_success(self, client, conn):
        assert client.healthcheck("acme").is_success
        conn.execute.assert_called_once_with("SELECT 1")

    def test_healthcheck_failure(self, client, mock_connect):
        mock_connect.side_effect = psycopg.OperationalError("timeout")
        assert client.healthcheck("acme").status == OperationStatus.TRANSIENT_ERROR
