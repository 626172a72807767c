"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from learnhub.models.enums import UserRole


class UserSchema(Schema):
    """Public representation of an account (never includes credentials)."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    provider = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)


class RolesUpdateSchema(Schema):
    """Payload replacing an account's roles."""

    roles = fields.List(
        fields.String(validate=validate.OneOf([r.value for r in UserRole])),
        required=True,
        validate=validate.Length(min=1),
    )
