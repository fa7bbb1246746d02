"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class EngineConfig:
    """Recovery engine configuration."""

    cooldown_window: str = "3m"
    call_timeout_seconds: int = 10
    max_replicas: int = 0
    counters_log_interval: int = 60


@dataclass
class APIConfig:
    """Webhook ingress configuration."""

    port: int = 8080
    max_body_bytes: int = 1024 * 1024


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class SelfHealConfig:
    """Top-level configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
