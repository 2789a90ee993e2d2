"""Structured logging infrastructure.

Centralized structlog configuration and helpers for the credential broker.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request-scoped logging
    - get_correlation_id() / set_correlation_id() / clear_request_context()

Processors:
    - add_app_info(), mask_sensitive_data(), truncate_large_values()
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_logger,
    get_module_logger,
    logger,
)
from infrastructure.logging.context import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
    set_correlation_id,
)
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_logger",
    "get_module_logger",
    "logger",
    # Context
    "bind_request_context",
    "get_correlation_id",
    "set_correlation_id",
    "clear_request_context",
    # Formatters
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
