"""Unit tests for planner_auth.core.config: settings validation."""

import unittest

from pydantic import ValidationError

from helpers import make_settings
from planner_auth.core.database import engine_options


class TestSettingsValidation(unittest.TestCase):
    def test_defaults_for_tokens_and_cookie(self) -> None:
        settings = make_settings()
        self.assertEqual(settings.JWT_ALGORITHM, "HS512")
        self.assertEqual(settings.COOKIE_JWT_NAME, "jwt")
        self.assertIn("login", settings.PUBLIC_ROUTES)
        self.assertEqual(settings.BEARER_TOKEN_ROUTES, ["update-password"])
        self.assertEqual(settings.DEFAULT_ROLE, "USER")

    def test_algorithm_is_normalized(self) -> None:
        self.assertEqual(make_settings(JWT_ALGORITHM="hs256").JWT_ALGORITHM, "HS256")

    def test_asymmetric_algorithm_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(JWT_ALGORITHM="RS256")

    def test_empty_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(JWT_SECRET="   ")

    def test_token_lifetimes_bounded(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(JWT_ACCESS_TOKEN_EXPIRE_MINUTES=0)
        with self.assertRaises(ValidationError):
            make_settings(JWT_RESET_TOKEN_EXPIRE_MINUTES=2000)

    def test_route_lists_lowercased(self) -> None:
        settings = make_settings(PUBLIC_ROUTES=[" Login ", "", "REGISTER"])
        self.assertEqual(settings.PUBLIC_ROUTES, ["login", "register"])

    def test_database_url_scheme(self) -> None:
        self.assertEqual(make_settings(DATABASE_URL="sqlite://").DATABASE_URL, "sqlite://")
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://localhost/planner")

    def test_client_url_trailing_slash_dropped(self) -> None:
        self.assertEqual(make_settings(CLIENT_URL="https://planner.test/").CLIENT_URL, "https://planner.test")

    def test_client_url_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(CLIENT_URL="ftp://planner.test")


class TestEngineOptions(unittest.TestCase):
    def test_sqlite_connection_shared_across_threads(self) -> None:
        options = engine_options(make_settings(DATABASE_URL="sqlite://", DEBUG=False))
        self.assertEqual(options["connect_args"], {"check_same_thread": False})
        self.assertNotIn("pool_pre_ping", options)
        self.assertFalse(options["echo"])

    def test_server_backends_ping_pooled_connections(self) -> None:
        options = engine_options(
            make_settings(DATABASE_URL="postgresql://planner@localhost/planner", DEBUG=True)
        )
        self.assertTrue(options["pool_pre_ping"])
        self.assertNotIn("connect_args", options)
        self.assertTrue(options["echo"])


if __name__ == "__main__":
    unittest.main()
