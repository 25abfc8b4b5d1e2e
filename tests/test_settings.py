"""Tests for proxy settings."""

import pytest
import yaml

from gemini_balance.core.exceptions import ConfigurationError
from gemini_balance.settings import (
    ProxySettings,
    load_settings,
    settings_from_config,
)

ENV_VARS = [
    "GEMINI_BALANCE_HOST",
    "GEMINI_BALANCE_PORT",
    "GEMINI_BALANCE_BACKEND_ORIGIN",
    "GEMINI_BALANCE_TIMEOUT",
    "GEMINI_BALANCE_PUBLIC_BASE_URL",
    "GEMINI_BALANCE_DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = settings_from_config({})

    assert settings.backend_origin == "https://generativelanguage.googleapis.com"
    assert settings.listen_port == 8000
    assert settings.timeout_seconds is None
    assert settings.public_base_url is None
    assert settings.credential_header == "x-goog-api-key"
    assert settings.request_excluded_headers == frozenset(
        {"host", "connection", "origin", "referer", "user-agent", "accept-encoding"}
    )
    assert settings.response_excluded_headers == frozenset(
        {"transfer-encoding", "connection", "keep-alive", "content-encoding"}
    )


def test_reads_proxy_settings_section():
    settings = settings_from_config(
        {
            "proxy_settings": {
                "server": {"host": "127.0.0.1", "port": "9100"},
                "backend": {"origin": "http://backend.local:8080/", "timeout_seconds": 12},
                "public_base_url": "https://proxy.example",
                "verify": {"path": "v1/models", "timeout_seconds": 5},
                "logging": {"debug": "yes"},
            }
        }
    )

    assert settings.listen_host == "127.0.0.1"
    assert settings.listen_port == 9100
    assert settings.backend_origin == "http://backend.local:8080"
    assert settings.timeout_seconds == 12.0
    assert settings.public_base_url == "https://proxy.example"
    assert settings.verify_path == "/v1/models"
    assert settings.verify_timeout_seconds == 5.0
    assert settings.debug is True


def test_environment_overrides_config(monkeypatch):
    monkeypatch.setenv("GEMINI_BALANCE_PORT", "7000")
    monkeypatch.setenv("GEMINI_BALANCE_BACKEND_ORIGIN", "https://mirror.example")
    monkeypatch.setenv("GEMINI_BALANCE_TIMEOUT", "2.5")
    monkeypatch.setenv("GEMINI_BALANCE_DEBUG", "off")

    settings = settings_from_config(
        {"proxy_settings": {"server": {"port": 9100}, "logging": {"debug": True}}}
    )

    assert settings.listen_port == 7000
    assert settings.backend_origin == "https://mirror.example"
    assert settings.timeout_seconds == 2.5
    assert settings.debug is False


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("GEMINI_BALANCE_PORT", "not-a-port")

    settings = settings_from_config({"proxy_settings": {"backend": {"timeout_seconds": "soon"}}})

    assert settings.listen_port == 8000
    assert settings.timeout_seconds is None


@pytest.mark.parametrize(
    "origin",
    ["generativelanguage.googleapis.com", "ftp://backend.local", "https://backend.local/v1beta"],
)
def test_rejects_invalid_backend_origin(origin):
    with pytest.raises(ConfigurationError):
        ProxySettings(backend_origin=origin)


def test_settings_are_immutable():
    settings = ProxySettings()
    with pytest.raises(AttributeError):
        settings.backend_origin = "https://elsewhere.example"


def test_load_settings_from_file(tmp_path):
    path = tmp_path / "config_default.yaml"
    path.write_text(
        yaml.safe_dump({"proxy_settings": {"index_message": "hello"}}), encoding="utf-8"
    )

    assert load_settings(str(path)).index_message == "hello"


def test_load_settings_falls_back_to_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings == ProxySettings()
