"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from selfheal.models.config import APIConfig, EngineConfig, LogConfig, SelfHealConfig

_DURATION_RE = re.compile(r"^([0-9]+)(s|m|h)$")
_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600}


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"SELFHEAL_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_duration(value: str) -> str:
    if not _DURATION_RE.match(value):
        raise ValueError(f"Invalid duration format: {value}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def parse_duration(value: str) -> int:
    """Convert a duration such as ``"3m"`` or ``"90s"`` to seconds."""
    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid duration format: {value}")
    return int(match.group(1)) * _DURATION_UNITS[match.group(2)]


def load_config() -> SelfHealConfig:
    """Load configuration from SELFHEAL_* environment variables.

    The listening port also honours a bare ``PORT`` variable, which is what
    the deployment manifests set.
    """
    default_port = int(os.environ.get("PORT", "8080"))
    return SelfHealConfig(
        engine=EngineConfig(
            cooldown_window=_validate_duration(_env("COOLDOWN_WINDOW", "3m")),
            call_timeout_seconds=_env_int("CALL_TIMEOUT", 10, min_val=1, max_val=120),
            max_replicas=_env_int("MAX_REPLICAS", 0, min_val=0),
            counters_log_interval=_env_int("COUNTERS_LOG_INTERVAL", 60, min_val=0),
        ),
        api=APIConfig(
            port=_env_int("API_PORT", default_port, min_val=1, max_val=65535),
            max_body_bytes=_env_int("MAX_BODY_BYTES", 1024 * 1024, min_val=1024),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
