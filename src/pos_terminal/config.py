from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[2]


class ConfigError(RuntimeError):
    pass


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError as e:
        raise ConfigError(f"{keys[0]} must be an integer, got {v!r}") from e


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError as e:
        raise ConfigError(f"{keys[0]} must be a number, got {v!r}") from e


def _get_decimal(*keys: str, default: str) -> Decimal:
    v = _get_env(*keys, default=default) or default
    try:
        value = Decimal(v)
    except InvalidOperation as e:
        raise ConfigError(f"{keys[0]} must be a decimal, got {v!r}") from e
    if not value.is_finite():
        raise ConfigError(f"{keys[0]} must be a finite decimal, got {v!r}")
    return value


def _get_bool(*keys: str, default: bool) -> bool:
    v = _get_env(*keys)
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    api_url: str = "http://localhost:5003/api"
    tax_rate: Decimal = Decimal("0.16")
    currency: str = "KES"
    http_timeout: float = 10.0
    backend: str = "http"  # http | memory
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_json: bool = False


def load_settings(env_file: str | Path | None = None) -> Settings:
    load_dotenv(dotenv_path=env_file or ROOT_DIR / ".env")

    settings = Settings(
        api_url=(_get_env("POS_API_URL", "REACT_APP_API_URL", default=Settings.api_url) or "").rstrip("/"),
        tax_rate=_get_decimal("POS_TAX_RATE", default=str(Settings.tax_rate)),
        currency=(_get_env("POS_CURRENCY", default=Settings.currency) or "").upper(),
        http_timeout=_get_float("POS_HTTP_TIMEOUT", default=Settings.http_timeout),
        backend=(_get_env("POS_BACKEND", default=Settings.backend) or "").lower(),
        host=_get_env("POS_HOST", default=Settings.host) or Settings.host,
        port=_get_int("POS_PORT", default=Settings.port),
        log_level=(_get_env("POS_LOG_LEVEL", default=Settings.log_level) or "").upper(),
        log_json=_get_bool("POS_LOG_JSON", default=Settings.log_json),
    )
    _validate(settings)
    return settings


def _validate(s: Settings) -> None:
    if not (Decimal("0") <= s.tax_rate < Decimal("1")):
        raise ConfigError(f"POS_TAX_RATE must be in [0, 1), got {s.tax_rate}")
    if len(s.currency) != 3 or not s.currency.isalpha():
        raise ConfigError(f"POS_CURRENCY must be a 3-letter code, got {s.currency!r}")
    if s.backend not in {"http", "memory"}:
        raise ConfigError(f"POS_BACKEND must be 'http' or 'memory', got {s.backend!r}")
    if s.http_timeout <= 0:
        raise ConfigError("POS_HTTP_TIMEOUT must be > 0")
    if s.backend == "http" and not s.api_url.startswith(("http://", "https://")):
        raise ConfigError(f"POS_API_URL must be an http(s) URL, got {s.api_url!r}")
