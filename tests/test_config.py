from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from storefront.config import Settings, load_settings
from storefront.passwords import DEFAULT_ROUNDS


def test_defaults_without_environment() -> None:
    settings = load_settings({})

    assert settings.locale == "en"
    assert settings.secure_cookies is True
    assert settings.expose_reset_codes is True
    assert settings.password_rounds == DEFAULT_ROUNDS
    assert settings.session_ttl == timedelta(hours=8)
    assert settings.database_path.name == "storefront.sqlite3"


def test_environment_overrides(tmp_path: Path) -> None:
    settings = load_settings(
        {
            "STOREFRONT_DB_PATH": str(tmp_path / "shop.sqlite3"),
            "STOREFRONT_LOCALE": "RU",
            "STOREFRONT_SESSION_SECURE": "off",
            "STOREFRONT_EXPOSE_RESET_CODES": "no",
            "STOREFRONT_SESSION_TTL_HOURS": "2",
            "STOREFRONT_PASSWORD_ROUNDS": "1000",
        }
    )

    assert settings.database_path == (tmp_path / "shop.sqlite3").resolve()
    assert settings.locale == "ru"
    assert settings.secure_cookies is False
    assert settings.expose_reset_codes is False
    assert settings.session_ttl == timedelta(hours=2)
    assert settings.password_rounds == 1000


def test_yaml_file_is_applied_before_environment(tmp_path: Path) -> None:
    config_path = tmp_path / "storefront.yaml"
    config_path.write_text(
        "database_path: data/shop.sqlite3\nlocale: ru\nsecure_cookies: false\n",
        encoding="utf-8",
    )

    settings = load_settings({"STOREFRONT_CONFIG": str(config_path), "STOREFRONT_LOCALE": "en"})

    assert settings.database_path == (tmp_path / "data" / "shop.sqlite3").resolve()
    assert settings.locale == "en"
    assert settings.secure_cookies is False


def test_unknown_yaml_keys_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "storefront.yaml"
    config_path.write_text("reset_code_ttl: 5\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings({"STOREFRONT_CONFIG": str(config_path)})


def test_unsupported_locale_is_rejected() -> None:
    with pytest.raises(ValueError):
        Settings.from_dict({"locale": "de"})
