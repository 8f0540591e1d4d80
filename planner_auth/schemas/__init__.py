"""Pydantic request/response schemas."""

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
from planner_auth.schemas.health import HealthResponse

__all__ = [
    "AccountSnapshot",
    "ActivateRequest",
    "ErrorResponse",
    "HealthResponse",
    "Identity",
    "LoginRequest",
    "RegisterRequest",
    "ResendActivationRequest",
    "ResetPasswordRequest",
    "UpdatePasswordRequest",
]
