"""Token authentication for every request, before routing.

Public routes pass straight through. For any other route the token is read
from the access cookie (or, for the bearer routes such as update-password,
from the Authorization header), verified, checked against the token types
the route accepts (reset tokens only on the bearer routes), and turned into
an Identity on request.state. No store lookup happens here: the token
carries the account.

Which routes are public is decided by a case-insensitive substring test on
the path. That is broad: any path containing "login" is public. Keep
protected route names clear of the public keywords.
"""

import logging
from collections.abc import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from planner_auth.core.cookies import CookieCodec
from planner_auth.core.errors import TokenInvalidError, TokenMissingError
from planner_auth.core.security import TOKEN_TYPE_ACCESS, TOKEN_TYPE_RESET, TokenCodec
from planner_auth.schemas.auth import Identity

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"
COOKIE_ROUTE_TOKEN_TYPES = frozenset({TOKEN_TYPE_ACCESS})
BEARER_ROUTE_TOKEN_TYPES = frozenset({TOKEN_TYPE_ACCESS, TOKEN_TYPE_RESET})


class CredentialExtractor:
    """Classifies request paths and finds the token for protected ones."""

    def __init__(
        self,
        cookie_codec: CookieCodec,
        public_routes: Iterable[str],
        bearer_token_routes: Iterable[str],
    ) -> None:
        self._cookies = cookie_codec
        self._public_routes = tuple(r.lower() for r in public_routes)
        self._bearer_routes = tuple(r.lower() for r in bearer_token_routes)

    def is_public(self, path: str) -> bool:
        lowered = path.lower()
        return any(route in lowered for route in self._public_routes)

    def uses_bearer_header(self, path: str) -> bool:
        lowered = path.lower()
        return any(route in lowered for route in self._bearer_routes)

    def accepted_token_types(self, path: str) -> frozenset[str]:
        """Access tokens everywhere; reset tokens only where the bearer header is read."""
        if self.uses_bearer_header(path):
            return BEARER_ROUTE_TOKEN_TYPES
        return COOKIE_ROUTE_TOKEN_TYPES

    def extract(self, request: Request) -> str | None:
        """Token for a protected request, or None if the expected carrier has none."""
        if self.uses_bearer_header(request.url.path):
            return bearer_token(request.headers.get("Authorization"))
        return self._cookies.unwrap(request.cookies)


def bearer_token(header_value: str | None) -> str | None:
    """Token from an 'Authorization: Bearer <token>' header value."""
    if not header_value:
        return None
    scheme, _, credentials = header_value.partition(" ")
    if scheme.lower() != BEARER_SCHEME or not credentials.strip():
        return None
    return credentials.strip()


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Authenticates protected requests and attaches the Identity to request.state.identity."""

    def __init__(
        self,
        app: ASGIApp,
        token_codec: TokenCodec,
        extractor: CredentialExtractor,
    ) -> None:
        super().__init__(app)
        self._tokens = token_codec
        self._extractor = extractor

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if self._extractor.is_public(path):
            return await call_next(request)

        token = self._extractor.extract(request)
        if token is None:
            logger.info("No token for protected route %s %s", request.method, path)
            raise TokenMissingError()
        if not self._tokens.verify(token):
            raise TokenInvalidError()

        claims = self._tokens.decode_claims(token)
        if claims.token_type not in self._extractor.accepted_token_types(path):
            logger.warning(
                "Refused %s token for account id=%s on %s", claims.token_type, claims.snapshot.id, path
            )
            raise TokenInvalidError()

        request.state.identity = Identity.from_snapshot(claims.snapshot)
        return await call_next(request)
