"""Startup-time helpers for safe config logging."""

import os

from paycli.common.config import CommonSettings
from paycli.common.logging import logger


SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _redacted(name: str, value: str | None) -> str:
    if value is None:
        return "<unset>"
    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    return value


def startup_summary(config: CommonSettings, env_keys: list[str]) -> dict[str, str]:
    """Effective settings plus the raw env overrides an operator asked about."""

    summary = {
        name: _redacted(name, None if value is None else str(value))
        for name, value in config.model_dump().items()
    }
    for key in env_keys:
        summary[f"env.{key}"] = _redacted(key, os.getenv(key))
    return summary


def log_startup_config(config: CommonSettings, env_keys: list[str]) -> dict[str, str]:
    """Log the startup configuration once, secrets redacted."""

    summary = startup_summary(config, env_keys)
    logger.info("startup_config=%s", summary)
    return summary
