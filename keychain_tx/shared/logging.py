"""Logging for the keychain transaction form.

Records go to ``keychain-tx.log`` inside the application directory and,
optionally, to stdout. Access seeds, origin keys and other secrets are
redacted before a record is written, whichever format is selected.

Environment variables:

- ``KEYCHAIN_TX_LOG_LEVEL``: DEBUG, INFO, WARNING, ERROR or CRITICAL
- ``KEYCHAIN_TX_LOG_STDOUT``: mirror records on stdout when truthy
- ``KEYCHAIN_TX_LOG_FORMAT``: ``json`` for one JSON object per line
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from keychain_tx.shared.config import resolve_app_dir

LOG_FILENAME = "keychain-tx.log"
REDACTED = "[REDACTED]"

_TRUTHY = {"1", "true", "yes", "on"}


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        return logging.getLevelName(self.value)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path = field(default_factory=resolve_app_dir)
    json_format: bool = False
    redact: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        raw_level = os.getenv("KEYCHAIN_TX_LOG_LEVEL", LogLevel.INFO.value)
        level = LogLevel.__members__.get(raw_level.strip().upper(), LogLevel.INFO)
        return cls(
            log_level=level,
            log_to_stdout=_env_flag("KEYCHAIN_TX_LOG_STDOUT"),
            log_dir=resolve_app_dir(),
            json_format=os.getenv("KEYCHAIN_TX_LOG_FORMAT", "").strip().lower() == "json",
        )


# Hex private keys carry a one or two byte curve/origin prefix.
_KEY_VALUE = re.compile(
    r"((?:private|origin)[_-]?key['\"]?\s*[:=]\s*['\"]?)[0-9a-f]{64,68}",
    re.IGNORECASE,
)
_SECRET_VALUE = re.compile(
    r"((?:seed|secret)['\"]?\s*[:=]\s*['\"]?)[^\s'\",}]+",
    re.IGNORECASE,
)
_SECRET_FIELDS = ("seed", "secret", "private_key", "privatekey", "origin_key")


def sanitize_message(message: str) -> str:
    """Replace secret values embedded in ``message`` with a marker."""
    if not message:
        return message
    message = _KEY_VALUE.sub(r"\1" + REDACTED, message)
    return _SECRET_VALUE.sub(r"\1" + REDACTED, message)


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_message(value)
    if isinstance(value, dict):
        return sanitize_dict(value)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` with secret fields masked, recursively."""
    return {
        key: REDACTED
        if any(name in key.lower() for name in _SECRET_FIELDS)
        else _redact_value(value)
        for key, value in data.items()
    }


# (pattern, message, suggestion), first match wins.
FRIENDLY_ERRORS: list[tuple[re.Pattern[str], str, str | None]] = [
    (
        re.compile(r"timeout|timed out"),
        "The node did not answer in time.",
        "Try again later or pick another endpoint.",
    ),
    (
        re.compile(r"connection refused|cannot connect|connection error"),
        "Unable to reach the node.",
        "Check the endpoint URL and your connection.",
    ),
    (
        re.compile(r"keychain|access key"),
        "The keychain could not be loaded for this seed.",
        "Verify the access seed.",
    ),
    (
        re.compile(r"unknown service|service .* not found"),
        "The keychain has no such service.",
        "Check the service name.",
    ),
    (
        re.compile(r"insufficient (?:funds|balance)"),
        "Insufficient funds for this transaction.",
        None,
    ),
    (
        re.compile(r"invalid.*signature|signature.*invalid"),
        "The node rejected the transaction signature.",
        None,
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    text = str(error).lower()
    for pattern, message, suggestion in FRIENDLY_ERRORS:
        if pattern.search(text):
            return message, suggestion
    return "An unexpected error occurred.", None


def format_error_for_user(error: Exception | str) -> str:
    message, suggestion = get_user_friendly_error(error)
    return f"{message} {suggestion}" if suggestion else message


def _record_context(record: logging.LogRecord, redact: bool) -> dict[str, Any]:
    context = getattr(record, "context", None)
    if not isinstance(context, dict) or not context:
        return {}
    return sanitize_dict(context) if redact else dict(context)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, redact: bool = True):
        super().__init__()
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_message(message) if self.redact else message,
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = _record_context(record, self.redact)
        if context:
            payload["context"] = context
        if record.exc_info:
            trace = self.formatException(record.exc_info)
            payload["exception"] = sanitize_message(trace) if self.redact else trace
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``time - logger - LEVEL - message`` with trailing context pairs."""

    def __init__(self, redact: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _record_context(record, self.redact)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            line = f"{line} [{pairs}]"
        return sanitize_message(line) if self.redact else line


class ContextAdapter(logging.LoggerAdapter):
    """Attaches a ``context`` mapping to every record it emits."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None):
        super().__init__(logger, dict(context or {}))

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if self.extra:
            extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **values: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**self.extra, **values})


_logging_initialized = False


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install handlers on the root logger once per process."""
    global _logging_initialized
    if _logging_initialized:
        return

    config = config or LoggingConfig.from_environment()
    formatter: logging.Formatter = (
        StructuredFormatter(redact=config.redact)
        if config.json_format
        else HumanReadableFormatter(redact=config.redact)
    )

    handlers: list[logging.Handler] = []
    if config.log_to_file:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(config.log_dir / LOG_FILENAME, encoding="utf-8")
        )
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(config.log_level.numeric)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _logging_initialized = True


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextAdapter:
    return ContextAdapter(logging.getLogger(name), context)


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "ContextAdapter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "format_error_for_user",
    "setup_logging",
    "get_logger",
]
