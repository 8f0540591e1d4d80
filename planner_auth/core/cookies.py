"""Access-token cookie: build, read and clear.

The cookie is created and cleared only by the server. Every cookie emitted
here is HttpOnly (unreadable from page scripts), Secure (HTTPS only) and
SameSite=Strict (never attached to cross-site requests). Logout is nothing
more than sending the cleared variant.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from starlette.responses import Response

from planner_auth.core.config import Settings

COOKIE_PATH = "/"
COOKIE_SAMESITE = "strict"


@dataclass(frozen=True)
class AccessCookie:
    """Transport wrapper for an access token. The security flags are not configurable."""

    name: str
    value: str
    max_age: int
    domain: str
    path: str = COOKIE_PATH
    http_only: bool = True
    secure: bool = True
    same_site: str = COOKIE_SAMESITE

    def apply(self, response: Response) -> None:
        """Attach this cookie to a response as a Set-Cookie header."""
        response.set_cookie(
            key=self.name,
            value=self.value,
            max_age=self.max_age,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.http_only,
            samesite=self.same_site,
        )


class CookieCodec:
    """Maps access tokens to and from the access cookie."""

    def __init__(self, name: str, domain: str, max_age: int) -> None:
        self.name = name
        self.domain = domain
        self.max_age = max_age

    @classmethod
    def from_settings(cls, settings: Settings) -> "CookieCodec":
        return cls(
            name=settings.COOKIE_JWT_NAME,
            domain=settings.COOKIE_DOMAIN,
            max_age=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    def wrap(self, token: str) -> AccessCookie:
        return AccessCookie(name=self.name, value=token, max_age=self.max_age, domain=self.domain)

    def unwrap(self, cookies: Mapping[str, str]) -> str | None:
        """Return the access token from the request cookies, or None if absent."""
        return cookies.get(self.name) or None

    def clear(self) -> AccessCookie:
        """Same attributes as an issued cookie, empty value and Max-Age=0: the browser drops it."""
        return AccessCookie(name=self.name, value="", max_age=0, domain=self.domain)
