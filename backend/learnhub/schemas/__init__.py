"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    LogoutSchema,
    MessageSchema,
    OAuthCallbackSchema,
    RefreshTokenSchema,
    RegisterSchema,
    SessionSchema,
    TokenPairSchema,
)
from .user import RolesUpdateSchema, UserSchema

__all__ = [
    "LoginSchema",
    "LoginResponseSchema",
    "LogoutSchema",
    "MessageSchema",
    "OAuthCallbackSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "SessionSchema",
    "TokenPairSchema",
    "RolesUpdateSchema",
    "UserSchema",
]
