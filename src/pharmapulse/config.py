"""
Runtime configuration read from environment variables.

Usage:
    settings = Settings.from_env()
    container.config.from_dict(settings.to_dict())
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import TypeVar

from pharmapulse.core.exceptions import ConfigurationError
from pharmapulse.infrastructure.cache.cache_store import (
    DEFAULT_CHECK_PERIOD,
    DEFAULT_MAX_ENTRIES,
    DEFAULT_TTL,
)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000

N = TypeVar("N", int, float)


def _number(env: Mapping[str, str], name: str, default: N, cast: type[N]) -> N:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cache_ttl_default: float = DEFAULT_TTL
    cache_check_period: float = DEFAULT_CHECK_PERIOD
    cache_max_entries: int = DEFAULT_MAX_ENTRIES
    cache_ttl_drugs: float = 3600.0
    cache_ttl_news: float = 1800.0
    news_api_key: str | None = None
    http_timeout: float = 15.0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from the process environment (or a given mapping).

        Raises:
            ConfigurationError: a numeric variable is malformed or not positive
        """
        env = os.environ if env is None else env
        return cls(
            host=env.get("PHARMAPULSE_HOST") or DEFAULT_HOST,
            port=_number(env, "PORT", DEFAULT_PORT, int),
            cache_ttl_default=_number(env, "CACHE_TTL_DEFAULT", DEFAULT_TTL, float),
            cache_check_period=_number(env, "CACHE_CHECK_PERIOD", DEFAULT_CHECK_PERIOD, float),
            cache_max_entries=_number(env, "CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES, int),
            cache_ttl_drugs=_number(env, "CACHE_TTL_DRUGS", 3600.0, float),
            cache_ttl_news=_number(env, "CACHE_TTL_NEWS", 1800.0, float),
            news_api_key=env.get("NEWS_API_KEY") or None,
            http_timeout=_number(env, "HTTP_TIMEOUT", 15.0, float),
        )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


__all__ = ["Settings"]
