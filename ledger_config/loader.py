"""
Settings Loader (``ledger_config.loader``).

Responsibility
--------------
Load a YAML settings file, apply environment overrides and parse the
result into ``ledger_config.schema`` dataclasses.  Runtime callers go
through ``ledger_config.get_active_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` from the schema.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from ledger_config.schema import DatabaseSettings, LedgerSettings, LoggingSettings

ENV_DATABASE_URL = "LEDGER_DATABASE_URL"
ENV_DATABASE_URL_FALLBACK = "DATABASE_URL"
ENV_LOG_LEVEL = "LEDGER_LOG_LEVEL"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Return a copy of data with environment overrides applied."""
    result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in data.items()}

    url = environ.get(ENV_DATABASE_URL) or environ.get(ENV_DATABASE_URL_FALLBACK)
    if url:
        result.setdefault("database", {})["url"] = url

    level = environ.get(ENV_LOG_LEVEL)
    if level:
        result.setdefault("logging", {})["level"] = level

    return result


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    return DatabaseSettings(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 20)),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        pool_recycle=int(data.get("pool_recycle", 1800)),
    )


def parse_settings(data: dict[str, Any], source: str | None = None) -> LedgerSettings:
    """
    Parse a settings dict.

    Preconditions:
        - ``data["database"]["url"]`` is present.
    """
    reporting = data.get("reporting") or {}
    if not isinstance(reporting, dict):
        raise ValueError("reporting must be a mapping")
    return LedgerSettings(
        database=parse_database(data["database"]),
        logging=LoggingSettings(level=str((data.get("logging") or {}).get("level", "INFO"))),
        reporting=MappingProxyType(dict(reporting)),
        source=source,
    )
