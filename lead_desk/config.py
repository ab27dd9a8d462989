"""Configuration helpers for the lead desk toolkit."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from .models import Vocabulary
from .sorting import DEFAULT_PREFERENCES_PATH

LOGGER = logging.getLogger(__name__)

SCRIPT_URL_ENV = "LEAD_DESK_SCRIPT_URL"


class ConfigurationError(RuntimeError):
    """Raised when the desk settings are missing, unreadable or inconsistent."""


# Settings file suffix -> parser returning the decoded document.
_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".json": json.loads,
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Read the desk settings file. An empty document yields an empty mapping."""

    settings_path = Path(path)
    parser = _PARSERS.get(settings_path.suffix.lower())
    if parser is None:
        raise ConfigurationError(
            f"Cannot read settings from '{settings_path.name}'; use one of {sorted(_PARSERS)}"
        )
    if not settings_path.is_file():
        raise ConfigurationError(f"Settings file '{settings_path}' does not exist")

    try:
        document = parser(settings_path.read_text(encoding="utf-8"))
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Settings file '{settings_path}' could not be parsed: {exc}") from exc

    if document is None:
        LOGGER.debug("Settings file %s is empty", settings_path)
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Settings file '{settings_path}' must hold a mapping of sections")
    return document


@dataclass(frozen=True)
class StoreSettings:
    script_url: Optional[str] = None
    settings_url: Optional[str] = None
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class DashboardSettings:
    hour_bucket: int = 1
    trend_days: int = 30


@dataclass(frozen=True)
class AppConfig:
    """Typed view over the configuration mapping."""

    store: StoreSettings = field(default_factory=StoreSettings)
    vocabulary: Vocabulary = field(default_factory=Vocabulary)
    dashboard: DashboardSettings = field(default_factory=DashboardSettings)
    preferences_path: Path = DEFAULT_PREFERENCES_PATH

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], *, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        data = data or {}
        environ = os.environ if environ is None else environ

        store_cfg = _section(data, "store")
        script_url = environ.get(SCRIPT_URL_ENV) or store_cfg.get("script_url")
        try:
            timeout = float(store_cfg.get("timeout_seconds", 15) or 15)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("store.timeout_seconds must be a number") from exc
        store = StoreSettings(
            script_url=script_url or None,
            settings_url=store_cfg.get("settings_url") or None,
            timeout_seconds=timeout,
        )

        dashboard_cfg = _section(data, "dashboard")
        try:
            dashboard = DashboardSettings(
                hour_bucket=int(dashboard_cfg.get("hour_bucket", 1)),
                trend_days=int(dashboard_cfg.get("trend_days", 30)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("dashboard.hour_bucket and dashboard.trend_days must be integers") from exc
        if dashboard.hour_bucket not in (1, 3, 6, 12):
            raise ConfigurationError(f"dashboard.hour_bucket must be 1, 3, 6 or 12, got {dashboard.hour_bucket}")

        preferences = data.get("preferences_path")
        return cls(
            store=store,
            vocabulary=Vocabulary.from_mapping(_section(data, "vocabulary")),
            dashboard=dashboard,
            preferences_path=Path(preferences).expanduser() if preferences else DEFAULT_PREFERENCES_PATH,
        )

    @classmethod
    def load(cls, path: str | Path | None = None) -> "AppConfig":
        if path is None:
            LOGGER.debug("No configuration file given, using defaults")
            return cls.from_mapping({})
        return cls.from_mapping(load_configuration(path))


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section


__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DashboardSettings",
    "StoreSettings",
    "load_configuration",
]
