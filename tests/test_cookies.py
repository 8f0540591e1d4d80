"""Unit tests for planner_auth.core.cookies: access cookie flags, unwrap and clear."""

import unittest

from starlette.responses import Response

from helpers import COOKIE_DOMAIN, make_settings, parse_set_cookie
from planner_auth.core.cookies import CookieCodec


def _codec() -> CookieCodec:
    return CookieCodec(name="jwt", domain=COOKIE_DOMAIN, max_age=3600)


def _rendered(cookie) -> str:
    response = Response()
    cookie.apply(response)
    return response.headers["set-cookie"]


class TestWrap(unittest.TestCase):
    """Issued cookies always carry the security flags."""

    def test_wrap_sets_value_and_flags(self) -> None:
        cookie = _codec().wrap("token-value")
        self.assertEqual(cookie.name, "jwt")
        self.assertEqual(cookie.value, "token-value")
        self.assertEqual(cookie.max_age, 3600)
        self.assertEqual(cookie.domain, COOKIE_DOMAIN)
        self.assertEqual(cookie.path, "/")
        self.assertTrue(cookie.http_only)
        self.assertTrue(cookie.secure)
        self.assertEqual(cookie.same_site, "strict")

    def test_set_cookie_header(self) -> None:
        morsel = parse_set_cookie(_rendered(_codec().wrap("token-value")))
        self.assertEqual(morsel.value, "token-value")
        self.assertEqual(morsel["max-age"], "3600")
        self.assertEqual(morsel["domain"], COOKIE_DOMAIN)
        self.assertEqual(morsel["path"], "/")
        self.assertTrue(morsel["httponly"])
        self.assertTrue(morsel["secure"])
        self.assertEqual(morsel["samesite"].lower(), "strict")

    def test_max_age_follows_access_token_lifetime(self) -> None:
        codec = CookieCodec.from_settings(make_settings(JWT_ACCESS_TOKEN_EXPIRE_MINUTES=90))
        self.assertEqual(codec.wrap("t").max_age, 5400)
        self.assertEqual(codec.domain, COOKIE_DOMAIN)


class TestClear(unittest.TestCase):
    """The cleared cookie has the same attributes, an empty value and Max-Age 0."""

    def test_clear_keeps_attributes(self) -> None:
        issued = _codec().wrap("token-value")
        cleared = _codec().clear()
        self.assertEqual(cleared.value, "")
        self.assertEqual(cleared.max_age, 0)
        for attr in ("name", "domain", "path", "http_only", "secure", "same_site"):
            self.assertEqual(getattr(cleared, attr), getattr(issued, attr), attr)

    def test_cleared_set_cookie_header(self) -> None:
        morsel = parse_set_cookie(_rendered(_codec().clear()))
        self.assertEqual(morsel.value, "")
        self.assertEqual(morsel["max-age"], "0")
        self.assertTrue(morsel["httponly"])
        self.assertTrue(morsel["secure"])


class TestUnwrap(unittest.TestCase):
    def test_present(self) -> None:
        self.assertEqual(_codec().unwrap({"jwt": "abc", "other": "x"}), "abc")

    def test_absent(self) -> None:
        self.assertIsNone(_codec().unwrap({"other": "x"}))

    def test_empty_value_counts_as_absent(self) -> None:
        self.assertIsNone(_codec().unwrap({"jwt": ""}))


if __name__ == "__main__":
    unittest.main()
