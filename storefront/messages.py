"""Localized display strings for workflow outcomes."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from .results import ResultKind, WorkflowResult

DEFAULT_LOCALE = "en"

_CATALOGUES: Dict[str, Dict[ResultKind, str]] = {
    "en": {
        ResultKind.REGISTRATION_SUBMITTED: "Registration request sent. Please wait for administrator approval.",
        ResultKind.AUTHENTICATED: "Signed in.",
        ResultKind.RESET_CODE_ISSUED: "A reset code has been issued for {email}.",
        ResultKind.PASSWORD_RESET: "Your password has been changed. You can now sign in.",
        ResultKind.MISSING_FIELD: "Please fill in the {field} field.",
        ResultKind.PASSWORD_MISMATCH: "Passwords do not match.",
        ResultKind.PASSWORD_TOO_SHORT: "Password must be at least {min_length} characters long.",
        ResultKind.PASSWORD_TOO_LONG: "Password is too long.",
        ResultKind.EMAIL_TAKEN: "An account with this email already exists.",
        ResultKind.REGISTRATION_PENDING: "Your registration request is awaiting administrator approval.",
        ResultKind.REGISTRATION_REJECTED: "Your registration request was rejected.",
        ResultKind.INVALID_CREDENTIALS: "Invalid email or password.",
        ResultKind.ACCOUNT_NOT_FOUND: "No account with this email was found.",
        ResultKind.RESET_CODE_INVALID: "The reset code is invalid or has expired.",
        ResultKind.REGISTRATION_FAILED: "Registration failed. Please try again later.",
        ResultKind.LOGIN_FAILED: "Sign-in failed. Please try again later.",
        ResultKind.RESET_REQUEST_FAILED: "Could not send a reset code. Please try again later.",
        ResultKind.RESET_REDEEM_FAILED: "Could not change the password. Please try again later.",
    },
    "ru": {
        ResultKind.REGISTRATION_SUBMITTED: "Запрос на регистрацию отправлен! Ожидайте одобрения администратора.",
        ResultKind.AUTHENTICATED: "Вход выполнен.",
        ResultKind.RESET_CODE_ISSUED: "Код сброса отправлен на {email}.",
        ResultKind.PASSWORD_RESET: "Пароль изменен. Теперь вы можете войти.",
        ResultKind.MISSING_FIELD: "Заполните поле {field}.",
        ResultKind.PASSWORD_MISMATCH: "Пароли не совпадают",
        ResultKind.PASSWORD_TOO_SHORT: "Пароль должен содержать минимум {min_length} символов",
        ResultKind.PASSWORD_TOO_LONG: "Пароль слишком длинный",
        ResultKind.EMAIL_TAKEN: "Пользователь с таким email уже существует",
        ResultKind.REGISTRATION_PENDING: "Ваш запрос на регистрацию ожидает одобрения администратором",
        ResultKind.REGISTRATION_REJECTED: "Ваш запрос на регистрацию был отклонен",
        ResultKind.INVALID_CREDENTIALS: "Неверный email или пароль",
        ResultKind.ACCOUNT_NOT_FOUND: "Пользователь с таким email не найден",
        ResultKind.RESET_CODE_INVALID: "Код сброса недействителен или истек",
        ResultKind.REGISTRATION_FAILED: "Ошибка регистрации. Попробуйте позже.",
        ResultKind.LOGIN_FAILED: "Ошибка входа. Попробуйте позже.",
        ResultKind.RESET_REQUEST_FAILED: "Ошибка отправки кода. Попробуйте позже.",
        ResultKind.RESET_REDEEM_FAILED: "Ошибка смены пароля. Попробуйте позже.",
    },
}

_FIELD_LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "name": "Full name",
        "email": "Email",
        "password": "Password",
        "confirm_password": "Confirm password",
        "company_name": "Company / store name",
        "address": "Address",
        "phone_number": "Phone number",
        "code": "Reset code",
        "new_password": "New password",
    },
    "ru": {
        "name": "ФИО",
        "email": "Email",
        "password": "Пароль",
        "confirm_password": "Подтверждение пароля",
        "company_name": "Название компании/магазина",
        "address": "Адрес",
        "phone_number": "Номер телефона",
        "code": "Код сброса",
        "new_password": "Новый пароль",
    },
}

SUPPORTED_LOCALES = tuple(sorted(_CATALOGUES))


def normalise_locale(value: Optional[str], default: str = DEFAULT_LOCALE) -> str:
    """Map a locale tag such as ``ru-RU`` to a supported catalogue name."""

    if not value:
        return default
    primary = value.strip().lower().replace("_", "-").split("-", 1)[0]
    return primary if primary in _CATALOGUES else default


def negotiate_locale(accept_language: Optional[str], default: str = DEFAULT_LOCALE) -> str:
    """Pick the first supported locale from an ``Accept-Language`` header."""

    if not accept_language:
        return default
    for candidate in _parse_accept_language(accept_language):
        primary = normalise_locale(candidate, default="")
        if primary:
            return primary
    return default


def _parse_accept_language(header: str) -> Iterable[str]:
    weighted = []
    for position, part in enumerate(header.split(",")):
        tag, _, params = part.strip().partition(";")
        if not tag or tag == "*":
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        weighted.append((-quality, position, tag))
    return [tag for _, _, tag in sorted(weighted)]


def render(result: WorkflowResult, locale: str = DEFAULT_LOCALE, *, min_length: int = 6) -> str:
    """Return the display string for ``result`` in ``locale``."""

    if locale not in _CATALOGUES:
        locale = DEFAULT_LOCALE
    template = _CATALOGUES[locale][result.kind]
    field = result.field or ""
    label = _FIELD_LABELS[locale].get(field, field)
    email = result.account.email if result.account is not None else ""
    return template.format(field=label, min_length=min_length, email=email)


__all__ = [
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "negotiate_locale",
    "normalise_locale",
    "render",
]
