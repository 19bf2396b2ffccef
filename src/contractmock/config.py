"""Server configuration.

MockConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``MockConfig.from_env()`` layers ``MOCK_SERVER_*``
environment variables (and an optional ``.env`` file) over the defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from contractmock.errors import ConfigurationError

# Environment variable -> MockConfig field
ENV_VARS: dict[str, str] = {
    "MOCK_SERVER_HOST": "host",
    "MOCK_SERVER_PORT": "port",
    "MOCK_SERVER_PACTS_DIR": "pacts_dir",
    "MOCK_SERVER_CUSTOM_ROUTES": "custom_routes",
    "MOCK_SERVER_LOG_LEVEL": "log_level",
    "MOCK_SERVER_WORKERS": "workers",
}

_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclass(frozen=True, slots=True)
class MockConfig:
    """Mock server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = MockConfig(port=30090, pacts_dir="build/pacts")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 30080
    workers: int = 1

    # Contracts: one subdirectory per provider, one JSON file per consumer
    pacts_dir: str | Path = "pacts"

    # Optional JSON file of custom interactions (same shape as a contract)
    custom_routes: str | Path | None = None

    # Diagnostics
    log_level: str = "info"
    banner: bool = True

    # Which fields came from the environment (for the startup echo)
    env_sources: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            msg = f"Port must be between 1 and 65535, got {self.port}"
            raise ConfigurationError(msg)
        if self.workers < 1:
            msg = f"Worker count must be at least 1, got {self.workers}"
            raise ConfigurationError(msg)
        if self.log_level.lower() not in _LOG_LEVELS:
            msg = (
                f"Unknown log level {self.log_level!r}. "
                f"Expected one of: {', '.join(sorted(_LOG_LEVELS))}"
            )
            raise ConfigurationError(msg)

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        env_file: str | Path | None = ".env",
        **overrides: Any,
    ) -> MockConfig:
        """Build a config from ``MOCK_SERVER_*`` variables.

        When *env* is omitted, ``os.environ`` is used after loading
        *env_file* with python-dotenv (existing variables win). Keyword
        *overrides* that are not ``None`` take precedence over both.
        """
        if env is None:
            if env_file is not None and Path(env_file).is_file():
                load_dotenv(env_file, override=False)
            env = os.environ

        values: dict[str, Any] = {}
        for var, field_name in ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            values[field_name] = _coerce(var, field_name, raw)

        explicit = {k: v for k, v in overrides.items() if v is not None}
        sources = frozenset(values) - set(explicit)
        values.update(explicit)
        return cls(**values, env_sources=sources)

    def with_overrides(self, **overrides: Any) -> MockConfig:
        """Return a copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes, env_sources=self.env_sources - set(changes))


def _coerce(var: str, field_name: str, raw: str) -> Any:
    if field_name in ("port", "workers"):
        try:
            return int(raw)
        except ValueError:
            msg = f"{var} must be an integer, got {raw!r}"
            raise ConfigurationError(msg) from None
    return raw
