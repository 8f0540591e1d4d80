"""Account lifecycle: register, activate, login, resend activation, password reset, logout.

Accounts move NotRegistered -> Registered (inactive) -> Activated and never
back. Login checks the password before looking at the activation state, so
activation state is only revealed to callers who know the password.
"""

import logging
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from planner_auth.core.cookies import AccessCookie, CookieCodec
from planner_auth.core.errors import (
    AccountDisabledError,
    AccountNotFoundError,
    ActivationNotFoundError,
    AlreadyActivatedError,
    BadCredentialsError,
    DuplicateAccountError,
    RoleNotFoundError,
)
from planner_auth.core.security import (
    TokenCodec,
    burn_password_check,
    hash_password,
    verify_password,
)
from planner_auth.models import Activity, Role, User
from planner_auth.schemas.auth import AccountSnapshot, Identity, RegisterRequest
from planner_auth.services.notifications import Notifier

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "USER"


def snapshot_of(user: User) -> AccountSnapshot:
    """Account data safe to embed in a token or return to the client (no password)."""
    return AccountSnapshot(
        id=user.id,
        username=user.username,
        email=user.email,
        roles=user.role_names,
    )


def find_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(func.lower(User.username) == username.lower()).first()


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def find_by_identifier(db: Session, identifier: str) -> User | None:
    """Look up by username first, then by email."""
    return find_by_username(db, identifier) or find_by_email(db, identifier)


def account_exists(db: Session, username: str, email: str) -> bool:
    """True if the username or the email is taken (each checked case-insensitively)."""
    if find_by_username(db, username) is not None:
        return True
    return find_by_email(db, email) is not None


class AccountService:
    """Account state machine over User and its Activity record."""

    def __init__(
        self,
        db: Session,
        token_codec: TokenCodec,
        cookie_codec: CookieCodec,
        notifier: Notifier,
        default_role: str = DEFAULT_ROLE,
    ) -> None:
        self._db = db
        self._tokens = token_codec
        self._cookies = cookie_codec
        self._notifier = notifier
        self._default_role = default_role

    def register(self, candidate: RegisterRequest) -> None:
        """
        Create an inactive account with the default role and its activation record, then
        queue the activation email. Account and activation record are committed together.
        """
        email = str(candidate.email)
        if account_exists(self._db, candidate.username, email):
            raise DuplicateAccountError()

        # Looked up on every registration: roles may change while the service runs.
        role = self._db.query(Role).filter(Role.name == self._default_role).first()
        if role is None:
            logger.error(
                "Default role %s not found in role_data; registration is unavailable",
                self._default_role,
            )
            raise RoleNotFoundError(f"Default role {self._default_role} not found")

        user = User(
            username=candidate.username,
            email=email,
            password_hash=hash_password(candidate.password),
        )
        user.roles.append(role)
        activity = Activity(user=user, uuid=str(uuid.uuid4()), activated=False)
        self._db.add(user)
        self._db.add(activity)
        try:
            self._db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration with the same username or email.
            self._db.rollback()
            raise DuplicateAccountError() from e

        logger.info("Registered account id=%s", user.id)
        self._notify_activation(user.email, user.username, activity.uuid)

    def activate(self, activation_token: str) -> bool:
        """
        Flip the account to activated. Returns True when exactly one record changed.
        A concurrent activation that wins first makes this one fail with AlreadyActivated.
        """
        activity = self._db.query(Activity).filter(Activity.uuid == activation_token).first()
        if activity is None:
            raise ActivationNotFoundError()
        if activity.activated:
            raise AlreadyActivatedError()

        updated = (
            self._db.query(Activity)
            .filter(Activity.uuid == activation_token, Activity.activated.is_(False))
            .update({Activity.activated: True}, synchronize_session=False)
        )
        if updated == 0:
            logger.info("Account id=%s was activated by a concurrent request", activity.user_id)
            self._db.rollback()
            raise AlreadyActivatedError()
        self._db.commit()
        if updated != 1:
            logger.error("Activation updated %s records for one token", updated)
        else:
            logger.info("Activated account id=%s", activity.user_id)
        return updated == 1

    def login(self, identifier: str, password: str) -> tuple[AccountSnapshot, AccessCookie]:
        """
        Check credentials, then activation state. On success return the account
        snapshot and the access cookie carrying a freshly issued token.
        """
        user = find_by_identifier(self._db, identifier)
        if user is None:
            burn_password_check(password)
            logger.warning("Login failed: no account matches the identifier")
            raise BadCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.warning("Login failed for account id=%s: wrong password", user.id)
            raise BadCredentialsError()

        if user.activity is None or not user.activity.activated:
            logger.info("Login refused for account id=%s: not activated", user.id)
            raise AccountDisabledError()

        snapshot = snapshot_of(user)
        cookie = self._cookies.wrap(self._tokens.issue_access_token(snapshot))
        logger.info("Login succeeded for account id=%s", user.id)
        return snapshot, cookie

    def resend_activation_email(self, identifier: str) -> None:
        """Send the existing activation token again. The token is never regenerated."""
        user = find_by_identifier(self._db, identifier)
        if user is None:
            raise AccountNotFoundError()
        activity = user.activity
        if activity is None:
            logger.error("Account id=%s has no activation record", user.id)
            raise ActivationNotFoundError()
        if activity.activated:
            raise AlreadyActivatedError()
        self._notify_activation(user.email, user.username, activity.uuid)

    def request_password_reset(self, email: str) -> None:
        """
        Email a short-lived reset token. Unknown emails succeed silently so this
        endpoint cannot be used to discover which accounts exist.
        """
        user = find_by_email(self._db, email)
        if user is None:
            logger.info("Password reset requested for an unknown email")
            return
        token = self._tokens.issue_reset_token(snapshot_of(user))
        try:
            self._notifier.send_reset_password_email(user.email, token)
        except Exception as e:
            logger.error("Could not queue reset email for account id=%s: %s", user.id, e)

    def update_password(self, identity: Identity, new_password: str) -> bool:
        """Set a new password for the authenticated identity. True when exactly one record changed."""
        updated = (
            self._db.query(User)
            .filter(func.lower(User.email) == identity.email.lower())
            .update({User.password_hash: hash_password(new_password)}, synchronize_session=False)
        )
        self._db.commit()
        if updated != 1:
            logger.error("Password update changed %s records for account id=%s", updated, identity.id)
        else:
            logger.info("Password updated for account id=%s", identity.id)
        return updated == 1

    def logout(self) -> AccessCookie:
        """The cleared cookie. Tokens are stateless, so nothing is revoked server-side."""
        return self._cookies.clear()

    def _notify_activation(self, email: str, username: str, activation_token: str) -> None:
        try:
            self._notifier.send_activation_email(email, username, activation_token)
        except Exception as e:
            logger.error("Could not queue activation email for %s: %s", username, e)
