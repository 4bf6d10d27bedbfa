from marshmallow import ValidationError, validate

_email_validator = validate.Email(error="Invalid email format")


def normalize_email(raw):
    return raw.strip().lower() if isinstance(raw, str) else raw


def validate_email(raw: str) -> str:
    """Return the normalized address or raise ValidationError."""
    email = normalize_email(raw)
    if not email:
        raise ValidationError("Email is required.")
    _email_validator(email)
    return email
