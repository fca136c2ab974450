"""Configuration management for the storefront account service."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from datetime import timedelta
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path
from .messages import SUPPORTED_LOCALES
from .passwords import DEFAULT_ROUNDS

_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the storefront service."""

    database_path: Path
    locale: str = "en"
    session_ttl_hours: float = 8.0
    secure_cookies: bool = True
    expose_reset_codes: bool = True
    password_rounds: int = DEFAULT_ROUNDS

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(hours=self.session_ttl_hours)

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw mapping data such as a YAML document."""
        known = {item.name for item in fields(Settings)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_db_path = data.get("database_path")
        if raw_db_path:
            db_path = Path(str(raw_db_path)).expanduser()
            if not db_path.is_absolute() and base_path is not None:
                db_path = base_path / db_path
            database_path = db_path.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        settings = Settings(database_path=database_path)
        overrides: Dict[str, object] = {}
        if "locale" in data:
            overrides["locale"] = str(data["locale"]).strip().lower()
        if "session_ttl_hours" in data:
            overrides["session_ttl_hours"] = float(data["session_ttl_hours"])  # type: ignore[arg-type]
        if "secure_cookies" in data:
            overrides["secure_cookies"] = _parse_bool(data["secure_cookies"])
        if "expose_reset_codes" in data:
            overrides["expose_reset_codes"] = _parse_bool(data["expose_reset_codes"])
        if "password_rounds" in data:
            overrides["password_rounds"] = int(data["password_rounds"])  # type: ignore[arg-type]
        return replace(settings, **overrides).validated()

    def validated(self) -> "Settings":
        if self.locale not in SUPPORTED_LOCALES:
            raise ValueError(
                f"Unsupported locale '{self.locale}'; expected one of {', '.join(SUPPORTED_LOCALES)}"
            )
        if self.session_ttl_hours <= 0:
            raise ValueError("Session TTL must be positive")
        if self.password_rounds < 1:
            raise ValueError("Password rounds must be positive")
        return self


def _load_yaml(config_path: Path) -> Dict[str, object]:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return raw


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from defaults, an optional YAML file and the environment.

    ``STOREFRONT_CONFIG`` names the YAML file. Individual ``STOREFRONT_*``
    variables take precedence over values from the file.
    """

    env = os.environ if environ is None else environ

    data: Dict[str, object] = {}
    base_path: Optional[Path] = None
    config_file = env.get("STOREFRONT_CONFIG")
    if config_file:
        config_path = Path(config_file).expanduser().resolve(strict=False)
        data.update(_load_yaml(config_path))
        base_path = config_path.parent

    env_map = {
        "STOREFRONT_DB_PATH": "database_path",
        "STOREFRONT_LOCALE": "locale",
        "STOREFRONT_SESSION_TTL_HOURS": "session_ttl_hours",
        "STOREFRONT_SESSION_SECURE": "secure_cookies",
        "STOREFRONT_EXPOSE_RESET_CODES": "expose_reset_codes",
        "STOREFRONT_PASSWORD_ROUNDS": "password_rounds",
    }
    for variable, key in env_map.items():
        value = env.get(variable)
        if value is not None and value.strip():
            data[key] = value.strip()

    if "database_path" in data and env.get("STOREFRONT_DB_PATH"):
        # Environment paths are relative to the working directory, not the YAML file.
        data["database_path"] = str(resolve_database_path(str(data["database_path"])))

    return Settings.from_dict(data, base_path=base_path)


__all__ = ["Settings", "load_settings"]
