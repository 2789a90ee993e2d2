"""AWS clients used by the credential broker.

Only DynamoDB is needed, as the shared lease store backend:

    from infrastructure.clients.aws import DynamoDBClient, SessionProvider

    client = DynamoDBClient(SessionProvider(region="ca-central-1"))
    result = client.get_item("credential_broker_leases", {"lease_id": {"S": lease_id}})
"""

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import SessionProvider

__all__ = [
    "DynamoDBClient",
    "SessionProvider",
]
