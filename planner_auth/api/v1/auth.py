"""Account endpoints (register, activate, login, logout, password reset) and auth dependencies."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from planner_auth.core.cookies import CookieCodec
from planner_auth.core.database import get_db
from planner_auth.core.errors import AccessDeniedError, TokenMissingError
from planner_auth.core.security import TokenCodec
from planner_auth.schemas.auth import (
    AccountSnapshot,
    ActivateRequest,
    ErrorResponse,
    Identity,
    LoginRequest,
    RegisterRequest,
    ResendActivationRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
)
from planner_auth.services.accounts import AccountService
from planner_auth.services.notifications import Notifier

logger = logging.getLogger(__name__)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Business rule violated"},
        401: {"model": ErrorResponse, "description": "Authentication failed"},
        403: {"model": ErrorResponse, "description": "Missing authority"},
    }
)

AUTHORITY_USER = "USER"
AUTHORITY_ADMIN = "ADMIN"


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_cookie_codec(request: Request) -> CookieCodec:
    return request.app.state.cookie_codec


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_account_service(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    token_codec: Annotated[TokenCodec, Depends(get_token_codec)],
    cookie_codec: Annotated[CookieCodec, Depends(get_cookie_codec)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> AccountService:
    return AccountService(
        db=db,
        token_codec=token_codec,
        cookie_codec=cookie_codec,
        notifier=notifier,
        default_role=request.app.state.settings.DEFAULT_ROLE,
    )


def get_current_identity(request: Request) -> Identity:
    """Dependency: the identity the authentication middleware attached. Raises TokenMissing if none."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise TokenMissingError()
    return identity


def require_authority(authority: str) -> Callable[..., Identity]:
    """Dependency factory: require an authenticated identity holding `authority`."""

    def dependency(identity: Annotated[Identity, Depends(get_current_identity)]) -> Identity:
        if not identity.has_authority(authority):
            logger.warning("Account id=%s lacks authority %s", identity.id, authority)
            raise AccessDeniedError()
        return identity

    return dependency


require_user = require_authority(AUTHORITY_USER)
require_admin = require_authority(AUTHORITY_ADMIN)

AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


@router.put("/register", response_class=Response)
def register(body: RegisterRequest, service: AccountServiceDep) -> Response:
    """Create an inactive account and email its activation link."""
    service.register(body)
    return Response(status_code=200)


@router.post("/activate-account", response_model=bool)
def activate_account(body: ActivateRequest, service: AccountServiceDep) -> bool:
    """Activate the account owning the activation token. Fails if it is already active."""
    return service.activate(body.uuid)


@router.post("/login", response_model=AccountSnapshot)
def login(body: LoginRequest, response: Response, service: AccountServiceDep) -> AccountSnapshot:
    """
    Authenticate with username (or email) and password.
    Returns the account and sets the access cookie (HttpOnly, Secure, SameSite=Strict).
    """
    snapshot, cookie = service.login(body.username, body.password)
    cookie.apply(response)
    return snapshot


@router.post("/logout", response_class=Response)
def logout(
    _identity: Annotated[Identity, Depends(require_user)],
    service: AccountServiceDep,
) -> Response:
    """Tell the browser to drop the access cookie. Tokens already issued stay valid until expiry."""
    response = Response(status_code=200)
    service.logout().apply(response)
    return response


@router.post("/resend-activate-email", response_class=Response)
def resend_activate_email(body: ResendActivationRequest, service: AccountServiceDep) -> Response:
    """Email the activation link again for an account that is not yet active."""
    service.resend_activation_email(body.username_or_email)
    return Response(status_code=200)


@router.post("/send-reset-password-email", response_class=Response)
def send_reset_password_email(body: ResetPasswordRequest, service: AccountServiceDep) -> Response:
    """Email a password reset link. Always succeeds, whether or not the email is registered."""
    service.request_password_reset(body.email)
    return Response(status_code=200)


@router.post("/update-password", response_model=bool)
def update_password(
    body: UpdatePasswordRequest,
    identity: Annotated[Identity, Depends(require_user)],
    service: AccountServiceDep,
) -> bool:
    """
    Set a new password for the caller. The token comes in the Authorization header
    (Bearer), normally the reset token from the emailed link.
    """
    return service.update_password(identity, body.password)


@router.post("/test-no-auth")
def test_no_auth() -> str:
    """Smoke test reachable without a token."""
    return "OK-no-auth"


@router.post("/test-with-auth")
def test_with_auth(_admin: Annotated[Identity, Depends(require_admin)]) -> str:
    """Smoke test for authenticated admins."""
    return "OK-with-auth"
