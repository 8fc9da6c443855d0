"""Configuration for the keychain transaction form."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from keychain_tx.shared.network import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

APP_DIR_ENV = "KEYCHAIN_TX_DIR"
ORIGIN_KEY_ENV = "KEYCHAIN_TX_ORIGIN_KEY"
SERVICE_ENV = "KEYCHAIN_TX_SERVICE"

# Software origin key published for development networks.
DEFAULT_ORIGIN_PRIVATE_KEY = (
    "01019280BDB84B8F8AEDBA205FE3552689964A5626EE2C60AA10E3BF22A91A036009"
)

DEFAULT_ENDPOINT_PRESETS: dict[str, str] = {
    "Local": "http://localhost:4000",
    "Testnet": "https://testnet.archethic.net",
    "Mainnet": "https://mainnet.archethic.net",
    "Custom": "",
}

DEFAULT_SERVICE_NAME = "uco"
DEFAULT_DISPATCH_RETRIES = 1
DEFAULT_DISPATCH_TIMEOUT_MS = 1000


def resolve_app_dir(app_dir: str | Path | None = None) -> Path:
    if app_dir:
        return Path(app_dir).expanduser()
    env_dir = os.getenv(APP_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".archethic-keychain-tx"


@dataclass
class FormConfig:
    endpoint_presets: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_ENDPOINT_PRESETS)
    )
    default_service_name: str = DEFAULT_SERVICE_NAME
    origin_private_key: str = DEFAULT_ORIGIN_PRIVATE_KEY
    dispatch_retries: int = DEFAULT_DISPATCH_RETRIES
    dispatch_timeout_ms: int = DEFAULT_DISPATCH_TIMEOUT_MS
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    @property
    def origin_private_key_bytes(self) -> bytes:
        return bytes.fromhex(self.origin_private_key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint_presets": self.endpoint_presets,
            "default_service_name": self.default_service_name,
            "origin_private_key": self.origin_private_key,
            "dispatch": {
                "retries": self.dispatch_retries,
                "timeout_ms": self.dispatch_timeout_ms,
            },
            "timeout": {
                "connect_timeout": self.timeout_config.connect_timeout,
                "read_timeout": self.timeout_config.read_timeout,
            },
            "retry": {
                "max_retries": self.retry_config.max_retries,
                "base_delay": self.retry_config.base_delay,
                "max_delay": self.retry_config.max_delay,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormConfig":
        config = cls()
        presets = data.get("endpoint_presets")
        if isinstance(presets, dict):
            config.endpoint_presets = {**DEFAULT_ENDPOINT_PRESETS, **presets}
        config.default_service_name = data.get(
            "default_service_name", DEFAULT_SERVICE_NAME
        )
        config.origin_private_key = data.get(
            "origin_private_key", DEFAULT_ORIGIN_PRIVATE_KEY
        )
        dispatch_cfg = data.get("dispatch", {})
        config.dispatch_retries = int(
            dispatch_cfg.get("retries", DEFAULT_DISPATCH_RETRIES)
        )
        config.dispatch_timeout_ms = int(
            dispatch_cfg.get("timeout_ms", DEFAULT_DISPATCH_TIMEOUT_MS)
        )
        timeout_cfg = data.get("timeout", {})
        if timeout_cfg:
            config.timeout_config = TimeoutConfig(
                connect_timeout=timeout_cfg.get("connect_timeout", 5.0),
                read_timeout=timeout_cfg.get("read_timeout", 15.0),
            )
        retry_cfg = data.get("retry", {})
        if retry_cfg:
            config.retry_config = RetryConfig(
                max_retries=retry_cfg.get("max_retries", 2),
                base_delay=retry_cfg.get("base_delay", 0.5),
                max_delay=retry_cfg.get("max_delay", 10.0),
            )
        return config

    def apply_environment(self) -> "FormConfig":
        origin_key = os.getenv(ORIGIN_KEY_ENV)
        if origin_key:
            self.origin_private_key = origin_key.strip()
        service = os.getenv(SERVICE_ENV)
        if service:
            self.default_service_name = service.strip()
        return self

    @classmethod
    def load(cls, app_dir: str | Path | None = None) -> "FormConfig":
        """Read ``config.json`` from the application directory.

        A missing file is created with the defaults. Environment overrides are
        applied last and never written back.
        """
        directory = resolve_app_dir(app_dir)
        directory.mkdir(parents=True, exist_ok=True)
        config_file = directory / "config.json"

        if config_file.exists():
            try:
                with open(config_file, "r") as f:
                    config = cls.from_dict(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning("Failed to read %s, using defaults: %s", config_file, e)
                config = cls()
        else:
            config = cls()
            config.save(directory)

        return config.apply_environment()

    def save(self, app_dir: str | Path | None = None) -> None:
        config_file = resolve_app_dir(app_dir) / "config.json"
        with open(config_file, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
