"""Session provider for AWS client operations.

Centralizes the region and endpoint configuration used to build boto3
sessions and clients, so per-service clients don't duplicate it.
"""

from typing import Any, Dict, Optional

from infrastructure.clients.aws.client import get_boto3_client


class SessionProvider:
    """Provider for AWS session configuration.

    Args:
        region: AWS region for all clients (e.g., 'ca-central-1')
        endpoint_url: Custom endpoint URL (DynamoDB Local, LocalStack)
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url

    def build_client_kwargs(self) -> Dict[str, Any]:
        """Build session and client configuration kwargs for boto3.

        Returns:
            Dict with session_config and client_config for passing to
            execute_aws_api_call
        """
        session_config: Dict[str, Any] = {}
        client_config: Dict[str, Any] = {}

        if self.region:
            session_config["region_name"] = self.region
            client_config["region_name"] = self.region

        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url

        return {
            "session_config": session_config or None,
            "client_config": client_config or None,
        }

    def get_boto3_client(self, service_name: str) -> Any:
        """Get a fully-configured boto3 client for the given service."""
        kw = self.build_client_kwargs()
        return get_boto3_client(
            service_name,
            session_config=kw["session_config"],
            client_config=kw["client_config"],
        )
