"""
ledger_config -- single public entrypoint for ledger settings.

Responsibility:
    ``get_active_settings()`` is the one place that reads settings files
    and environment variables.  Everything else receives the resulting
    ``LedgerSettings`` (or the pieces of it it needs).

Architecture position:
    Configuration.  Sits beside ``ledger_kernel``; the kernel never imports
    from ``ledger_config``.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from ledger_config.loader import apply_env_overrides, load_yaml_file, parse_settings
from ledger_config.schema import DatabaseSettings, LedgerSettings, LoggingSettings

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> LedgerSettings:
    """The ONLY public settings entrypoint.

    Args:
        path: YAML settings file.  Defaults to ledger_config/sets/default.yaml.
        environ: Environment mapping for overrides.  Defaults to os.environ.
    """
    settings_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    data = apply_env_overrides(
        load_yaml_file(settings_path),
        os.environ if environ is None else environ,
    )
    settings = parse_settings(data, source=str(settings_path))

    _logger.info(
        "ledger_settings_loaded",
        extra={
            "source": settings.source,
            "log_level": settings.logging.level,
            "reporting_keys": sorted(settings.reporting),
        },
    )
    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "DatabaseSettings",
    "LedgerSettings",
    "LoggingSettings",
    "get_active_settings",
]
