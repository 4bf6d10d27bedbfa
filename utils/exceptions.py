"""
Domain exceptions raised by the auth services.

Each carries the error code and HTTP status the API layer renders; see
api.errors.register_error_handlers.
"""


class AuthError(Exception):
    """Base auth exception with an error code and HTTP status."""

    error = "BAD_REQUEST"
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str | None = None, status_code: int | None = None, details: dict | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class BadRequest(AuthError):
    pass


class Malformed(AuthError):
    error = "MALFORMED"
    default_message = "Malformed input"


class InvalidCredential(AuthError):
    error = "INVALID_CREDENTIAL"
    status_code = 401
    default_message = "Invalid credentials"


class Unauthorized(AuthError):
    error = "UNAUTHORIZED"
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AuthError):
    error = "FORBIDDEN"
    status_code = 403
    default_message = "Forbidden"


class NotFound(AuthError):
    error = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class Conflict(AuthError):
    error = "CONFLICT"
    status_code = 409
    default_message = "Conflict"


class Expired(AuthError):
    error = "EXPIRED"
    status_code = 400
    default_message = "Token expired"


class ServiceUnavailable(AuthError):
    error = "SERVICE_UNAVAILABLE"
    status_code = 503
    default_message = "External service unavailable"


# Session token failures all surface as 401.
class TokenError(AuthError):
    error = "INVALID_TOKEN"
    status_code = 401
    default_message = "Invalid token"


class InvalidSignature(TokenError):
    error = "INVALID_SIGNATURE"
    default_message = "Token signature mismatch"


class TokenExpired(TokenError, Expired):
    error = "EXPIRED"
    default_message = "Token expired"


class MalformedToken(TokenError, Malformed):
    error = "MALFORMED"
    default_message = "Token could not be parsed"
