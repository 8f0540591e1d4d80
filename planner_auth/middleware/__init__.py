"""Request middleware: error translation and token authentication."""

from planner_auth.middleware.auth import AuthenticationMiddleware, CredentialExtractor
from planner_auth.middleware.errors import ErrorTranslatorMiddleware, install_error_translation

__all__ = [
    "AuthenticationMiddleware",
    "CredentialExtractor",
    "ErrorTranslatorMiddleware",
    "install_error_translation",
]
