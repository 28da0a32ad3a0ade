"""Tests for settings loading."""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from jobguard.config import Settings, load_settings
from jobguard.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ["CONFIG", "DATA_DIR", "FLAG_THRESHOLD", "CODE_TTL_MINUTES", "SMS_GATEWAY_URL", "EMAIL_GATEWAY_URL"]:
        monkeypatch.delenv(f"JOBGUARD_{name}", raising=False)


def test_defaults():
    settings = Settings()
    assert settings.code_length == 6
    assert settings.code_ttl_minutes == 10
    assert settings.flag_threshold == 3
    assert settings.is_demo_mode


def test_yaml_then_env_override(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"
        path.write_text(yaml.dump({"flag_threshold": 5, "sender_name": "Acme Jobs", "unknown": 1}))
        monkeypatch.setenv("JOBGUARD_FLAG_THRESHOLD", "4")
        monkeypatch.setenv("JOBGUARD_DATA_DIR", tmpdir)

        settings = load_settings(path)
        assert settings.flag_threshold == 4
        assert settings.sender_name == "Acme Jobs"
        assert settings.data_path == Path(tmpdir)


def test_config_path_from_env(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "jobguard.yaml"
        path.write_text(yaml.dump({"code_ttl_minutes": 15}))
        monkeypatch.setenv("JOBGUARD_CONFIG", str(path))

        assert load_settings().code_ttl_minutes == 15


def test_empty_env_value_keeps_default(monkeypatch):
    monkeypatch.setenv("JOBGUARD_FLAG_THRESHOLD", "")
    assert load_settings().flag_threshold == 3


def test_gateway_disables_demo_mode(monkeypatch):
    monkeypatch.setenv("JOBGUARD_SMS_GATEWAY_URL", "https://sms.example/send")
    assert not load_settings().is_demo_mode


def test_invalid_values(monkeypatch):
    monkeypatch.setenv("JOBGUARD_CODE_TTL_MINUTES", "ten")
    with pytest.raises(ConfigError):
        load_settings()

    with pytest.raises(ValidationError):
        Settings(flag_threshold=0)
    with pytest.raises(ValidationError):
        Settings(code_length=3)


def test_yaml_must_be_a_mapping():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_settings(path)
