from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from .errors import ConfigurationError
from .rules import DEFAULT_CHUNK_SIZE


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    chunk_size: int = field(default_factory=lambda: _env_int("CSVROWS_CHUNK_SIZE", DEFAULT_CHUNK_SIZE))
    log_level: str = field(default_factory=lambda: (os.getenv("CSVROWS_LOG_LEVEL") or "INFO").strip().upper() or "INFO")
    log_json: bool = field(default_factory=lambda: _env_flag("CSVROWS_LOG_JSON", False))

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ConfigurationError(f"CSVROWS_CHUNK_SIZE must be positive, got {self.chunk_size}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings from the environment, read on first use."""
    return Settings()
