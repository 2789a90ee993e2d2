import pytest

from infrastructure.operations import OperationResult, OperationStatus


@pytest.mark.unit
class TestOperationResult:
    def test_success_defaults(self):
        res = OperationResult.success(data={"a": 1})
        assert res.is_success
        assert not res.is_retryable
        assert res.data == {"a": 1}
        assert res.message == "ok"

    def test_transient_error_is_retryable(self):
        res = OperationResult.transient_error("db down", error_code="CONNECTION_ERROR")
        assert res.status == OperationStatus.TRANSIENT_ERROR
        assert res.is_retryable
        assert not res.is_success

    def test_permanent_error(self):
        res = OperationResult.permanent_error("bad sql", error_code="42601")
        assert res.status == OperationStatus.PERMANENT_ERROR
        assert res.error_code == "42601"
        assert not res.is_retryable

    def test_not_found_and_unauthorized_codes(self):
        assert OperationResult.not_found("x").error_code == "NOT_FOUND"
        assert OperationResult.unauthorized("x").error_code == "FORBIDDEN"
        assert (
            OperationResult.unauthorized("x").status == OperationStatus.UNAUTHORIZED
        )

    def test_error_carries_retry_after_and_data(self):
        res = OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "throttled",
            error_code="ThrottlingException",
            retry_after=30,
            data={"attempt": 2},
        )
        assert res.retry_after == 30
        assert res.data == {"attempt": 2}
