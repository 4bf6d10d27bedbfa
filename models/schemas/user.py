from marshmallow import Schema, fields, pre_load, validate

from models.schemas.common import normalize_email


# Passwords are taken verbatim
_RAW_FIELDS = {"password", "current_password", "new_password"}


def _strip_strings(data):
    if not isinstance(data, dict):
        return data
    return {k: v.strip() if isinstance(v, str) and k not in _RAW_FIELDS else v for k, v in data.items()}


class SignupSchema(Schema):
    # "@" is reserved for email logins
    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=1, max=64),
            validate.Regexp(r"^[^@]+$", error="Username must not contain '@'"),
        ],
    )
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = _strip_strings(data)
        if isinstance(data, dict) and "email" in data:
            data["email"] = normalize_email(data["email"])
        return data


class LoginSchema(Schema):
    # username or email
    username = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip_strings(data)


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True, load_only=True)
    new_password = fields.String(required=True, load_only=True)


class DeleteAccountSchema(Schema):
    # Presence and the literal "DELETE" are enforced by AccountService
    password = fields.String(load_default=None, load_only=True)
    confirm_delete = fields.String(load_default=None)


class EmailSchema(Schema):
    email = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=normalize_email(data["email"]))
        return data


class TokenSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1))


class ResetPasswordSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True)


class UserOutSchema(Schema):
    id = fields.Integer()
    username = fields.String()
    email = fields.String(allow_none=True)
    email_verified = fields.Boolean()
    discogs_username = fields.String(allow_none=True)
    discogs_linked = fields.Boolean()
    created_at = fields.DateTime()
