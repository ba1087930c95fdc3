"""
Settings schema (``ledger_config.schema``).

Frozen dataclasses produced by ``ledger_config.loader``.  Validation lives
in ``__post_init__`` so an invalid value never produces a settings object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    def __post_init__(self):
        if not self.url:
            raise ValueError("database.url cannot be empty")
        for name in ("pool_size", "max_overflow", "pool_timeout", "pool_recycle"):
            if getattr(self, name) < 0:
                raise ValueError(f"database.{name} cannot be negative")


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"

    def __post_init__(self):
        if not isinstance(logging.getLevelName(self.level.upper()), int):
            raise ValueError(f"Unknown log level: {self.level!r}")


@dataclass(frozen=True)
class LedgerSettings:
    """Root settings object."""

    database: DatabaseSettings
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    # Keyword arguments for ledger_reports.ReportingConfig.from_dict
    reporting: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    source: str | None = None
