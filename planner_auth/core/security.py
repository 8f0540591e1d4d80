"""Password hashing and signed identity tokens (issue, verify, decode)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from pydantic import ValidationError

from planner_auth.core.config import Settings
from planner_auth.core.errors import TokenInvalidError
from planner_auth.schemas.auth import AccountSnapshot

logger = logging.getLogger(__name__)

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

CLAIM_USER_KEY = "user"
CLAIM_TYPE_KEY = "type"
TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_RESET = "reset"
TOKEN_TYPES = (TOKEN_TYPE_ACCESS, TOKEN_TYPE_RESET)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-timing")


def burn_password_check(plain_password: str) -> None:
    """Spend the same time as a real check when there is no account to check against."""
    verify_password(plain_password, _dummy_hash())


class TokenFailure(str, Enum):
    """Why a token was rejected. Logged only; callers see a plain False."""

    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"
    UNSUPPORTED = "unsupported"


class TokenRejectedError(Exception):
    """Internal: raised while parsing a token that does not verify."""

    def __init__(self, reason: TokenFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True)
class TokenClaims:
    snapshot: AccountSnapshot
    token_type: str
    issued_at: int
    expires_at: int


class TokenCodec:
    """
    Issues and verifies signed, expiring identity tokens (JWT, HMAC).

    The token carries the full account snapshot (password blanked) so an
    authenticated request needs no store lookup. Nothing about issued tokens is
    kept server-side: validity is the signature plus the expiry.
    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS512",
        access_ttl: timedelta = timedelta(days=1),
        reset_ttl: timedelta = timedelta(minutes=5),
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret cannot be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.reset_ttl = reset_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utc_now) -> "TokenCodec":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
            reset_ttl=timedelta(minutes=settings.JWT_RESET_TOKEN_EXPIRE_MINUTES),
            clock=clock,
        )

    def issue(
        self,
        account: AccountSnapshot,
        duration: timedelta,
        token_type: str = TOKEN_TYPE_ACCESS,
    ) -> str:
        """Sign a token embedding the account snapshot, valid for `duration` from now."""
        issued_at = int(self._clock().timestamp())
        user_claim = account.model_dump()
        user_claim["password"] = None
        payload: dict[str, Any] = {
            CLAIM_USER_KEY: user_claim,
            CLAIM_TYPE_KEY: token_type,
            "sub": str(account.id),
            "iat": issued_at,
            "exp": issued_at + int(duration.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_access_token(self, account: AccountSnapshot) -> str:
        return self.issue(account, self.access_ttl, TOKEN_TYPE_ACCESS)

    def issue_reset_token(self, account: AccountSnapshot) -> str:
        return self.issue(account, self.reset_ttl, TOKEN_TYPE_RESET)

    def verify(self, token: str) -> bool:
        """True if the signature checks out and the token has not expired. Never raises."""
        try:
            self._parse(token)
        except TokenRejectedError as e:
            logger.warning("Token rejected (%s)", e.reason.value)
            logger.debug("Token rejection detail: %s", e.detail)
            return False
        return True

    def decode(self, token: str) -> AccountSnapshot:
        """
        Return the account snapshot embedded in a token, without touching the store.
        Re-verifies the token; raises TokenInvalidError if it does not verify.
        """
        return self.decode_claims(token).snapshot

    def decode_claims(self, token: str) -> TokenClaims:
        """Verified claims, token type included. Raises TokenInvalidError."""
        try:
            return self._parse(token)
        except TokenRejectedError as e:
            raise TokenInvalidError(f"Token validation failed ({e.reason.value})") from e

    def _parse(self, token: str) -> TokenClaims:
        if not token:
            raise TokenRejectedError(TokenFailure.MALFORMED, "empty token")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry is checked below against the injected clock.
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["exp", "iat", "sub"],
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenRejectedError(TokenFailure.BAD_SIGNATURE, str(e)) from e
        except (jwt.InvalidAlgorithmError, jwt.MissingRequiredClaimError) as e:
            raise TokenRejectedError(TokenFailure.UNSUPPORTED, str(e)) from e
        except jwt.InvalidTokenError as e:
            raise TokenRejectedError(TokenFailure.MALFORMED, str(e)) from e

        expires_at = payload.get("exp")
        issued_at = payload.get("iat")
        if not isinstance(expires_at, int) or not isinstance(issued_at, int):
            raise TokenRejectedError(TokenFailure.UNSUPPORTED, "non-integer timestamps")
        if self._clock().timestamp() >= expires_at:
            raise TokenRejectedError(TokenFailure.EXPIRED, f"expired at {expires_at}")

        token_type = payload.get(CLAIM_TYPE_KEY)
        if token_type not in TOKEN_TYPES:
            raise TokenRejectedError(TokenFailure.UNSUPPORTED, f"unknown token type {token_type!r}")
        user_claim = payload.get(CLAIM_USER_KEY)
        if not isinstance(user_claim, dict):
            raise TokenRejectedError(TokenFailure.UNSUPPORTED, "missing user claim")
        try:
            snapshot = AccountSnapshot.model_validate(user_claim)
        except ValidationError as e:
            raise TokenRejectedError(TokenFailure.UNSUPPORTED, "user claim has the wrong shape") from e

        return TokenClaims(
            snapshot=snapshot,
            token_type=token_type,
            issued_at=issued_at,
            expires_at=expires_at,
        )
