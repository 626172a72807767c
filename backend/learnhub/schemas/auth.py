"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class OAuthCallbackSchema(Schema):
    """Query string Google appends when redirecting back to the API."""

    class Meta:
        unknown = EXCLUDE

    code = fields.String(load_default=None, validate=validate.Length(min=1, max=2048))
    state = fields.String(load_default=None, validate=validate.Length(min=1, max=256))
    error = fields.String(load_default=None, validate=validate.Length(max=256))


class RefreshTokenSchema(Schema):
    """Body of the refresh and logout endpoints."""

    refresh_token = fields.String(required=True, validate=validate.Length(max=512))


class LogoutSchema(Schema):
    """Body of the logout endpoint; a missing token is tolerated."""

    refresh_token = fields.String(load_default=None, allow_none=True)


class TokenPairSchema(Schema):
    """Response payload containing an access and a refresh token."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.Constant("bearer")


class LoginResponseSchema(TokenPairSchema):
    """Token pair plus the identity it was issued for."""

    user_id = fields.String(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)


class SessionSchema(Schema):
    """One active session of the authenticated user."""

    id = fields.String(required=True)
    user_agent = fields.String(allow_none=True)
    ip = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
    expires_at = fields.DateTime(required=True)
    expired = fields.Boolean(required=True)


class MessageSchema(Schema):
    """Plain confirmation message."""

    message = fields.String(required=True)
