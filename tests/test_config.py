"""Unit tests for form configuration loading."""

import json

import pytest

from keychain_tx.shared.config import (
    DEFAULT_ENDPOINT_PRESETS,
    DEFAULT_ORIGIN_PRIVATE_KEY,
    FormConfig,
    resolve_app_dir,
)


@pytest.mark.unit
class TestFormConfig:
    def test_defaults(self):
        config = FormConfig()
        assert config.default_service_name == "uco"
        assert config.dispatch_retries == 1
        assert config.dispatch_timeout_ms == 1000
        assert config.endpoint_presets == DEFAULT_ENDPOINT_PRESETS
        assert len(config.origin_private_key_bytes) == 34

    def test_resolve_app_dir_from_environment(self, isolate_app_dir):
        assert resolve_app_dir() == isolate_app_dir

    def test_load_writes_defaults(self, isolate_app_dir):
        config = FormConfig.load()
        config_file = isolate_app_dir / "config.json"
        assert config_file.exists()
        assert json.loads(config_file.read_text())["default_service_name"] == "uco"
        assert config.origin_private_key == DEFAULT_ORIGIN_PRIVATE_KEY

    def test_load_existing_file(self, isolate_app_dir):
        (isolate_app_dir / "config.json").write_text(
            json.dumps(
                {
                    "endpoint_presets": {"Local": "http://127.0.0.1:4000"},
                    "dispatch": {"retries": 3, "timeout_ms": 500},
                    "timeout": {"connect_timeout": 1.0, "read_timeout": 2.0},
                }
            )
        )
        config = FormConfig.load()
        assert config.endpoint_presets["Local"] == "http://127.0.0.1:4000"
        assert config.endpoint_presets["Testnet"] == DEFAULT_ENDPOINT_PRESETS["Testnet"]
        assert config.dispatch_retries == 3
        assert config.dispatch_timeout_ms == 500
        assert config.timeout_config.request_timeout == (1.0, 2.0)

    def test_corrupt_file_falls_back_to_defaults(self, isolate_app_dir):
        (isolate_app_dir / "config.json").write_text("{not json")
        assert FormConfig.load().dispatch_retries == 1

    def test_environment_overrides(self, isolate_app_dir, monkeypatch):
        monkeypatch.setenv("KEYCHAIN_TX_ORIGIN_KEY", " 0001" + "ab" * 32 + " ")
        monkeypatch.setenv("KEYCHAIN_TX_SERVICE", "alice")
        config = FormConfig.load()
        assert config.origin_private_key == "0001" + "ab" * 32
        assert config.default_service_name == "alice"
        saved = json.loads((isolate_app_dir / "config.json").read_text())
        assert saved["origin_private_key"] == DEFAULT_ORIGIN_PRIVATE_KEY

    def test_dict_roundtrip(self):
        config = FormConfig(default_service_name="bob", dispatch_retries=4)
        restored = FormConfig.from_dict(config.to_dict())
        assert restored.default_service_name == "bob"
        assert restored.dispatch_retries == 4
        assert restored.retry_config.max_retries == config.retry_config.max_retries
