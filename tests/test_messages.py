from __future__ import annotations

import pytest

from storefront.messages import SUPPORTED_LOCALES, negotiate_locale, render
from storefront.results import ResultKind, WorkflowResult


@pytest.mark.parametrize("locale", SUPPORTED_LOCALES)
def test_every_kind_has_a_message(locale: str) -> None:
    for kind in ResultKind:
        assert render(WorkflowResult(kind), locale)


def test_messages_are_decoupled_from_kinds() -> None:
    result = WorkflowResult(ResultKind.INVALID_CREDENTIALS)

    assert render(result, "en") == "Invalid email or password."
    assert render(result, "ru") == "Неверный email или пароль"


def test_templates_receive_context() -> None:
    assert render(WorkflowResult(ResultKind.PASSWORD_TOO_SHORT), "en", min_length=6).endswith(
        "at least 6 characters long."
    )


def test_missing_field_uses_display_label() -> None:
    result = WorkflowResult(ResultKind.MISSING_FIELD, field="company_name")

    english = render(result, "en")
    russian = render(result, "ru")

    assert english == "Please fill in the Company / store name field."
    assert russian == "Заполните поле Название компании/магазина."
    assert "company_name" not in english
    assert "company_name" not in russian


def test_unlabelled_field_falls_back_to_its_name() -> None:
    result = WorkflowResult(ResultKind.MISSING_FIELD, field="nickname")
    assert render(result, "en") == "Please fill in the nickname field."


def test_unknown_locale_falls_back_to_default() -> None:
    result = WorkflowResult(ResultKind.EMAIL_TAKEN)
    assert render(result, "de") == render(result, "en")


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, "en"),
        ("ru-RU,ru;q=0.9,en;q=0.8", "ru"),
        ("de-DE, en;q=0.5, ru;q=0.7", "ru"),
        ("fr, *;q=0.1", "en"),
    ],
)
def test_accept_language_negotiation(header, expected) -> None:
    assert negotiate_locale(header) == expected
