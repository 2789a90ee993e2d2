"""Infrastructure modules for the credential broker.

Centralized infrastructure components:
- configuration: Settings management (Settings and its sections)
- clients: AWS (DynamoDB) and PostgreSQL clients returning OperationResult
- logging: structlog setup, processors and request context
- operations: Operation results and error classification
- security: JWT validation, JWKS management and workload identity
- services: Dependency injection providers (get_settings, get_broker, ...)
"""

# Configuration
from infrastructure.configuration import Settings

# Logging
from infrastructure.logging import get_module_logger, logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Security
from infrastructure.security import JWKSManager, WorkloadIdentity, validate_jwt_token

__all__ = [
    # Configuration
    "Settings",
    # Logging
    "get_module_logger",
    "logger",
    # Operations
    "OperationResult",
    "OperationStatus",
    # Security
    "JWKSManager",
    "WorkloadIdentity",
    "validate_jwt_token",
]
