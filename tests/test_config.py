"""Tests for settings loading"""
from decimal import Decimal

import pytest

from pos_terminal.config import ConfigError, Settings, load_settings

ENV_KEYS = [
    "POS_API_URL",
    "REACT_APP_API_URL",
    "POS_TAX_RATE",
    "POS_CURRENCY",
    "POS_HTTP_TIMEOUT",
    "POS_BACKEND",
    "POS_HOST",
    "POS_PORT",
    "POS_LOG_LEVEL",
    "POS_LOG_JSON",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        # setenv first so values loaded from .env files are undone on teardown
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    empty = tmp_path / ".env"
    empty.write_text("")
    return empty


def test_defaults(clean_env):
    settings = load_settings(clean_env)

    assert settings == Settings()
    assert settings.tax_rate == Decimal("0.16")
    assert settings.currency == "KES"
    assert settings.api_url == "http://localhost:5003/api"


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("POS_API_URL", "https://pos.example.com/api/")
    monkeypatch.setenv("POS_TAX_RATE", "0.08")
    monkeypatch.setenv("POS_CURRENCY", "usd")
    monkeypatch.setenv("POS_PORT", "9000")
    monkeypatch.setenv("POS_LOG_JSON", "true")

    settings = load_settings(clean_env)

    assert settings.api_url == "https://pos.example.com/api"
    assert settings.tax_rate == Decimal("0.08")
    assert settings.currency == "USD"
    assert settings.port == 9000
    assert settings.log_json is True


def test_legacy_api_url_variable(clean_env, monkeypatch):
    monkeypatch.setenv("REACT_APP_API_URL", "http://10.0.0.5:5003/api")
    assert load_settings(clean_env).api_url == "http://10.0.0.5:5003/api"


def test_dotenv_file_is_read(tmp_path):
    env_file = tmp_path / "pos.env"
    env_file.write_text("POS_BACKEND=memory\nPOS_TAX_RATE=0\n")

    settings = load_settings(env_file)

    assert settings.backend == "memory"
    assert settings.tax_rate == Decimal("0")


@pytest.mark.parametrize(
    "key, value",
    [
        ("POS_TAX_RATE", "1.5"),
        ("POS_TAX_RATE", "sixteen"),
        ("POS_TAX_RATE", "NaN"),
        ("POS_TAX_RATE", "Infinity"),
        ("POS_CURRENCY", "KSH1"),
        ("POS_BACKEND", "grpc"),
        ("POS_HTTP_TIMEOUT", "0"),
        ("POS_PORT", "eighty"),
        ("POS_API_URL", "localhost:5003"),
    ],
)
def test_invalid_values(clean_env, monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigError):
        load_settings(clean_env)
