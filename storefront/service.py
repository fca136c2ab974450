"""HTTP API for storefront registration, login and password recovery."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .accounts import PASSWORD_MIN_LENGTH, AccountService
from .config import Settings, load_settings
from .database import Database
from .messages import negotiate_locale, render
from .models import RegistrationForm
from .passwords import PasswordHasher
from .results import ResultKind, WorkflowResult
from .sessions import InMemorySessionStore, SessionStore
from .store import AccountStore

logger = logging.getLogger("storefront.service")

SESSION_COOKIE_NAME = "sf_session"

_STATUS_BY_KIND: Dict[ResultKind, int] = {
    ResultKind.REGISTRATION_SUBMITTED: status.HTTP_201_CREATED,
    ResultKind.AUTHENTICATED: status.HTTP_200_OK,
    ResultKind.RESET_CODE_ISSUED: status.HTTP_200_OK,
    ResultKind.PASSWORD_RESET: status.HTTP_200_OK,
    ResultKind.MISSING_FIELD: status.HTTP_400_BAD_REQUEST,
    ResultKind.PASSWORD_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ResultKind.PASSWORD_TOO_SHORT: status.HTTP_400_BAD_REQUEST,
    ResultKind.PASSWORD_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    ResultKind.RESET_CODE_INVALID: status.HTTP_400_BAD_REQUEST,
    ResultKind.EMAIL_TAKEN: status.HTTP_409_CONFLICT,
    ResultKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ResultKind.REGISTRATION_PENDING: status.HTTP_403_FORBIDDEN,
    ResultKind.REGISTRATION_REJECTED: status.HTTP_403_FORBIDDEN,
    ResultKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultKind.REGISTRATION_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ResultKind.LOGIN_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ResultKind.RESET_REQUEST_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ResultKind.RESET_REDEEM_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class RegisterRequest(BaseModel):
    name: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=1024)
    confirm_password: str = Field(default="", max_length=1024)
    company_name: str = Field(default="", max_length=255)
    address: str = Field(default="", max_length=512)
    phone_number: str = Field(default="", max_length=64)


class LoginRequest(BaseModel):
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=1024)


class ResetRequest(BaseModel):
    email: str = Field(default="", max_length=255)


class RedeemRequest(BaseModel):
    email: str = Field(default="", max_length=255)
    code: str = Field(default="", max_length=32)
    new_password: str = Field(default="", max_length=1024)
    confirm_password: str = Field(default="", max_length=1024)


class AccountView(BaseModel):
    id: int
    name: str
    email: str
    company_name: str
    address: str
    phone_number: str
    status: str
    created_at: datetime


class OutcomeResponse(BaseModel):
    kind: str
    message: str
    field: Optional[str] = None
    account: Optional[AccountView] = None
    reset_code: Optional[str] = None
    expires_at: Optional[datetime] = None


def _locale_for(request: Request, settings: Settings) -> str:
    return negotiate_locale(request.headers.get("accept-language"), default=settings.locale)


def register_account_routes(
    app: FastAPI,
    service: AccountService,
    *,
    settings: Settings,
    session_store: SessionStore,
) -> None:
    """Expose the account workflows as JSON endpoints on ``app``."""

    def _outcome(request: Request, result: WorkflowResult) -> JSONResponse:
        body = OutcomeResponse(
            kind=result.kind.value,
            message=render(result, _locale_for(request, settings), min_length=PASSWORD_MIN_LENGTH),
            field=result.field,
        )
        if result.account is not None and result.kind is not ResultKind.RESET_CODE_ISSUED:
            body.account = AccountView(**result.account.public_view())
        if result.kind is ResultKind.RESET_CODE_ISSUED:
            body.expires_at = result.expires_at
            if settings.expose_reset_codes:
                body.reset_code = result.reset_code
        return JSONResponse(
            body.model_dump(mode="json", exclude_none=True),
            status_code=_STATUS_BY_KIND[result.kind],
        )

    def _session_payload(request: Request) -> Optional[Dict[str, object]]:
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            return None
        return session_store.get(token)

    def _unauthenticated() -> JSONResponse:
        return JSONResponse(
            {"kind": "not_signed_in", "message": "Sign in to continue."},
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/v1/auth/register")
    async def register(request: Request, payload: RegisterRequest) -> JSONResponse:
        result = await service.register(
            RegistrationForm(
                name=payload.name,
                email=payload.email,
                password=payload.password,
                confirm_password=payload.confirm_password,
                company_name=payload.company_name,
                address=payload.address,
                phone_number=payload.phone_number,
            )
        )
        return _outcome(request, result)

    @app.post("/v1/auth/login")
    async def login(request: Request, payload: LoginRequest) -> JSONResponse:
        result = await service.login(payload.email, payload.password)
        response = _outcome(request, result)
        if result.kind is not ResultKind.AUTHENTICATED or result.account is None:
            return response

        existing_token = request.cookies.get(SESSION_COOKIE_NAME)
        if existing_token:
            session_store.clear(existing_token)

        token = session_store.set(result.account.public_view())
        response.set_cookie(
            SESSION_COOKIE_NAME,
            token,
            max_age=int(settings.session_ttl.total_seconds()),
            secure=settings.secure_cookies,
            httponly=True,
            samesite="lax",
            path="/",
        )
        return response

    @app.post("/v1/auth/logout")
    async def logout(request: Request) -> JSONResponse:
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if token:
            session_store.clear(token)
        response = JSONResponse({"status": "signed_out"})
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")
        return response

    @app.get("/v1/auth/me")
    async def current_account(request: Request) -> JSONResponse:
        payload = _session_payload(request)
        if payload is None:
            return _unauthenticated()
        return JSONResponse({"account": payload})

    @app.post("/v1/auth/password-reset")
    async def request_password_reset(request: Request, payload: ResetRequest) -> JSONResponse:
        result = await service.request_password_reset(payload.email)
        return _outcome(request, result)

    @app.post("/v1/auth/password-reset/redeem")
    async def redeem_reset_code(request: Request, payload: RedeemRequest) -> JSONResponse:
        result = await service.redeem_reset_code(
            payload.email,
            payload.code,
            payload.new_password,
            payload.confirm_password,
        )
        return _outcome(request, result)

    @app.get("/v1/catalog/access")
    async def catalog_access(request: Request) -> JSONResponse:
        payload = _session_payload(request)
        if payload is None:
            return _unauthenticated()
        return JSONResponse({"status": "granted", "account_id": payload.get("id")})


def create_app(
    *,
    database: Database | None = None,
    settings: Settings | None = None,
    session_store: SessionStore | None = None,
    hasher: PasswordHasher | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the storefront accounts."""

    app_settings = settings or load_settings()
    db = database or Database(app_settings.database_path)
    db.initialize()

    if not app_settings.secure_cookies:
        logger.warning(
            "Session cookies are not marked as secure. Only disable secure cookies for"
            " local development."
        )
    if app_settings.expose_reset_codes:
        logger.warning(
            "Reset codes are returned to the requester in-app. Disable expose_reset_codes"
            " once an out-of-band delivery channel is available."
        )

    sessions = session_store or InMemorySessionStore(ttl=app_settings.session_ttl)
    service = AccountService(
        AccountStore(db),
        hasher or PasswordHasher(rounds=app_settings.password_rounds),
    )

    app = FastAPI(
        title="Storefront Accounts API",
        version="0.1.0",
        description="Registration, approval-gated login and password recovery for the storefront catalog.",
    )
    app.state.database = db
    app.state.settings = app_settings
    app.state.session_store = sessions
    app.state.account_service = service

    register_account_routes(app, service, settings=app_settings, session_store=sessions)
    return app


__all__ = ["SESSION_COOKIE_NAME", "create_app", "register_account_routes"]
