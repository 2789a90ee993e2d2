from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from infrastructure.clients.aws import client as aws_client
from infrastructure.operations.status import OperationStatus


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "UpdateItem")


@pytest.fixture
def fake_boto_client(monkeypatch):
    """Patch get_boto3_client to return one MagicMock client."""
    client = MagicMock()
    client.can_paginate.return_value = False
    monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **kw: client)
    monkeypatch.setattr(aws_client.time, "sleep", lambda _s: None)
    return client


@pytest.mark.unit
class TestExecuteAwsApiCall:
    def test_calculate_retry_delay(self):
        assert aws_client._calculate_retry_delay(0) == pytest.approx(0.5)
        assert aws_client._calculate_retry_delay(3, backoff_factor=1.0) == 8.0

    def test_success_returns_response(self, fake_boto_client):
        fake_boto_client.get_item.return_value = {"Item": {"lease_id": {"S": "x"}}}

        res = aws_client.execute_aws_api_call(
            "dynamodb", "get_item", TableName="t", Key={"lease_id": {"S": "x"}}
        )

        assert res.is_success
        assert res.data == {"Item": {"lease_id": {"S": "x"}}}
        fake_boto_client.get_item.assert_called_once_with(
            TableName="t", Key={"lease_id": {"S": "x"}}
        )

    def test_transient_error_retried_then_succeeds(self, fake_boto_client):
        fake_boto_client.put_item.side_effect = [
            _client_error("ThrottlingException"),
            {"ok": True},
        ]

        res = aws_client.execute_aws_api_call("dynamodb", "put_item", max_retries=2)

        assert res.is_success
        assert fake_boto_client.put_item.call_count == 2

    def test_transient_error_exhausts_retries(self, fake_boto_client):
        fake_boto_client.put_item.side_effect = _client_error("ThrottlingException")

        res = aws_client.execute_aws_api_call("dynamodb", "put_item", max_retries=1)

        assert res.status == OperationStatus.TRANSIENT_ERROR
        assert fake_boto_client.put_item.call_count == 2

    def test_conditional_check_failure_not_retried(self, fake_boto_client):
        fake_boto_client.update_item.side_effect = _client_error(
            "ConditionalCheckFailedException"
        )

        res = aws_client.execute_aws_api_call("dynamodb", "update_item")

        assert res.status == OperationStatus.PERMANENT_ERROR
        assert res.error_code == "ConditionalCheckFailedException"
        assert fake_boto_client.update_item.call_count == 1

    def test_paginated_call_flattens_items(self, fake_boto_client):
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Items": [{"n": 1}], "Count": 1},
            {"Items": [{"n": 2}, {"n": 3}], "Count": 2},
        ]
        fake_boto_client.can_paginate.return_value = True
        fake_boto_client.get_paginator.return_value = paginator

        res = aws_client.execute_aws_api_call(
            "dynamodb", "scan", force_paginate=True, keys=["Items"], TableName="t"
        )

        assert res.data == [{"n": 1}, {"n": 2}, {"n": 3}]
        paginator.paginate.assert_called_once_with(TableName="t")


@pytest.mark.unit
class TestGetBoto3Client:
    def test_passes_session_and_client_config(self, monkeypatch):
        session = MagicMock()
        session_cls = MagicMock(return_value=session)
        monkeypatch.setattr(aws_client.boto3, "Session", session_cls)

        aws_client.get_boto3_client(
            "dynamodb",
            session_config={"region_name": "ca-central-1"},
            client_config={"endpoint_url": "http://localhost:8000"},
        )

        session_cls.assert_called_once_with(region_name="ca-central-1")
        session.client.assert_called_once_with(
            "dynamodb", endpoint_url="http://localhost:8000"
        )
