"""Unit tests for planner_auth.core.errors: status mapping and the error envelope."""

import json
import unittest

from starlette.exceptions import HTTPException as StarletteHTTPException

from planner_auth.core import errors
from planner_auth.core.errors import (
    ERROR_ENVELOPE_FIELD,
    ERROR_STATUS,
    AccessDeniedError,
    AccountDisabledError,
    AuthServiceError,
    BadCredentialsError,
    DuplicateAccountError,
    MethodNotAllowedError,
    NotFoundError,
    TokenInvalidError,
    TokenMissingError,
    translate_error,
)
from planner_auth.middleware.errors import http_exception_to_error


def _body(response) -> dict:
    return json.loads(response.body)


class TestStatusMapping(unittest.TestCase):
    """Every error kind has a status: 400 for business rules, 401 for authentication."""

    def test_every_error_class_is_mapped(self) -> None:
        classes = [
            obj
            for obj in vars(errors).values()
            if isinstance(obj, type) and issubclass(obj, AuthServiceError)
        ]
        self.assertGreater(len(classes), 10)
        for cls in classes:
            self.assertIn(cls.kind, ERROR_STATUS, cls.__name__)

    def test_kinds_are_unique(self) -> None:
        kinds = [
            obj.kind
            for obj in vars(errors).values()
            if isinstance(obj, type) and issubclass(obj, AuthServiceError)
        ]
        self.assertEqual(len(kinds), len(set(kinds)))

    def test_business_rule_errors_are_400(self) -> None:
        for kind in ("DuplicateAccount", "RoleNotFound", "ActivationNotFound", "AlreadyActivated",
                     "AccountNotFound", "InvalidRequest"):
            self.assertEqual(ERROR_STATUS[kind], 400, kind)

    def test_authentication_errors_are_401(self) -> None:
        for kind in ("BadCredentials", "AccountDisabled", "TokenMissing", "TokenInvalid"):
            self.assertEqual(ERROR_STATUS[kind], 401, kind)

    def test_access_denied_is_403(self) -> None:
        self.assertEqual(ERROR_STATUS[AccessDeniedError.kind], 403)

    def test_routing_errors(self) -> None:
        self.assertEqual(ERROR_STATUS[NotFoundError.kind], 404)
        self.assertEqual(ERROR_STATUS[MethodNotAllowedError.kind], 405)

    def test_instances_carry_their_status(self) -> None:
        self.assertEqual(DuplicateAccountError().status_code, 400)
        self.assertEqual(TokenMissingError().status_code, 401)
        self.assertEqual(AuthServiceError().status_code, 500)


class TestTranslateError(unittest.TestCase):
    """translate_error renders only the kind, never the message or internals."""

    def test_known_error_keeps_kind(self) -> None:
        response = translate_error(DuplicateAccountError("username ada is taken"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(_body(response), {ERROR_ENVELOPE_FIELD: "DuplicateAccount"})

    def test_authentication_errors(self) -> None:
        for exc in (BadCredentialsError(), AccountDisabledError(), TokenMissingError(), TokenInvalidError()):
            response = translate_error(exc)
            self.assertEqual(response.status_code, 401)
            self.assertEqual(_body(response), {"exception": exc.kind})

    def test_unknown_error_becomes_internal_error(self) -> None:
        with self.assertLogs("planner_auth.core.errors", level="ERROR") as logs:
            response = translate_error(RuntimeError("connection refused on 10.0.0.5"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(_body(response), {"exception": "InternalError"})
        self.assertNotIn("10.0.0.5", response.body.decode())
        self.assertIn("RuntimeError", "\n".join(logs.output))


class TestHttpExceptionMapping(unittest.TestCase):
    """Framework HTTP errors become error kinds."""

    def test_not_found_and_method_not_allowed(self) -> None:
        self.assertIsInstance(http_exception_to_error(StarletteHTTPException(404)), NotFoundError)
        self.assertIsInstance(http_exception_to_error(StarletteHTTPException(405)), MethodNotAllowedError)

    def test_other_client_errors_are_invalid_request(self) -> None:
        error = http_exception_to_error(StarletteHTTPException(415))
        self.assertEqual(error.kind, "InvalidRequest")

    def test_server_errors_are_internal(self) -> None:
        error = http_exception_to_error(StarletteHTTPException(503))
        self.assertEqual(error.kind, "InternalError")
        self.assertEqual(error.status_code, 500)


if __name__ == "__main__":
    unittest.main()
