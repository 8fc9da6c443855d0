"""Shared utilities for the keychain transaction form."""

from keychain_tx.shared.config import FormConfig
from keychain_tx.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from keychain_tx.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)

__all__ = [
    "FormConfig",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
