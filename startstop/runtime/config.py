"""Lifecycle runtime configuration sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from startstop.api.logging import LoggingConfig

DEFAULT_TIMEOUT_SECONDS = 15.0
STOP_POLICY_FAIL_FAST = "fail_fast"
STOP_POLICY_BEST_EFFORT = "best_effort"
STOP_POLICIES: tuple[str, ...] = (STOP_POLICY_FAIL_FAST, STOP_POLICY_BEST_EFFORT)


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0.0 else default


@dataclass(frozen=True, slots=True)
class LifecycleConfig:
    """Immutable start/stop phase configuration."""

    start_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    stop_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    stop_policy: str = STOP_POLICY_FAIL_FAST  # fail_fast|best_effort
    parallel_levels: bool = False
    max_workers: int = 4
    log_level: str = "INFO"
    log_format: str = "text"  # text|json
    log_file: str | None = None
    log_file_format: str = "json"  # text|json

    def __post_init__(self) -> None:
        if self.stop_policy not in STOP_POLICIES:
            raise ValueError(f"unknown stop policy: {self.stop_policy}")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    @property
    def fail_fast_stop(self) -> bool:
        return self.stop_policy == STOP_POLICY_FAIL_FAST

    def logging_config(self) -> LoggingConfig:
        """Return the logging pipeline settings carried by this config."""
        return LoggingConfig(
            level_name=self.log_level,
            console_format=self.log_format,
            file_path=self.log_file,
            file_format=self.log_file_format,
        )


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with package-prefixed override."""
    value = os.getenv("STARTSTOP_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper()


def _format(name: str, default: str) -> str:
    raw = os.getenv(name, default).strip().lower()
    return raw if raw in {"text", "json"} else default


def _stop_policy(name: str) -> str:
    raw = os.getenv(name, STOP_POLICY_FAIL_FAST).strip().lower().replace("-", "_")
    return raw if raw in STOP_POLICIES else STOP_POLICY_FAIL_FAST


def load_lifecycle_config() -> LifecycleConfig:
    """Load immutable lifecycle configuration from env vars."""
    return LifecycleConfig(
        start_timeout_seconds=_seconds("STARTSTOP_START_TIMEOUT_S", DEFAULT_TIMEOUT_SECONDS),
        stop_timeout_seconds=_seconds("STARTSTOP_STOP_TIMEOUT_S", DEFAULT_TIMEOUT_SECONDS),
        stop_policy=_stop_policy("STARTSTOP_STOP_POLICY"),
        parallel_levels=_flag("STARTSTOP_PARALLEL_LEVELS", False),
        max_workers=max(1, _int("STARTSTOP_MAX_WORKERS", 4)),
        log_level=resolve_log_level_name(),
        log_format=_format("STARTSTOP_LOG_FORMAT", "text"),
        log_file=os.getenv("STARTSTOP_LOG_FILE", "").strip() or None,
        log_file_format=_format("STARTSTOP_LOG_FILE_FORMAT", "json"),
    )
