"""Process-wide access to the loaded configuration."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from cachetools.func import lru_cache  # type: ignore

from helm_tenancy.app.runtime.config.config_data import ConfigData
from helm_tenancy.app.runtime.config.config_loader import load_config

_config_override: ContextVar[ConfigData | None] = ContextVar(
    "config_override", default=None
)


@lru_cache(maxsize=1)
def _load_default_config() -> ConfigData:
    return load_config()


def get_config() -> ConfigData:
    """Return the active configuration.

    An override installed with ``with_context`` wins over the configuration
    loaded from disk, which is read once per process.
    """
    override = _config_override.get()
    if override is not None:
        return override
    return _load_default_config()


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[ConfigData]:
    """Temporarily replace the active configuration."""
    token = _config_override.set(config_override)
    try:
        yield get_config()
    finally:
        _config_override.reset(token)


def reset_config_cache() -> None:
    """Drop the cached configuration so the next access reloads it."""
    _load_default_config.cache_clear()
