"""
Authentication blueprint (public entry points):
- POST /auth/signup
- POST /auth/login
- POST /auth/logout
- POST /auth/refresh
- POST /auth/verify-email, GET /auth/verify-email?token=...
- POST /auth/forgot-password
- POST /auth/reset-password

The implementation:
- Uses argon2 for password hashing (utils.security.CredentialHasher)
- Issues 2h session tokens at login and 24h tokens at refresh (PyJWT, HS256),
  carried in the http-only "token" cookie
- Never revokes tokens server-side; logout only clears the cookie
"""
from __future__ import annotations

import logging
from urllib.parse import urlencode

from flask import Blueprint, request, jsonify, current_app, redirect

from models.schemas.user import (
    SignupSchema,
    LoginSchema,
    EmailSchema,
    TokenSchema,
    ResetPasswordSchema,
)
from services import get_services
from services.password_reset import RESET_REQUESTED_MESSAGE
from utils.cookies import set_session_cookie, clear_session_cookie
from utils.exceptions import AuthError, Unauthorized

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

signup_schema = SignupSchema()
login_schema = LoginSchema()
email_schema = EmailSchema()
token_schema = TokenSchema()
reset_password_schema = ResetPasswordSchema()


@bp.post("/signup")
def signup():
    """
    Create an account; a verification link is sent to the email.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string, minLength: 6 }
    responses:
      201:
        description: Created
      400:
        description: Missing or malformed fields
      409:
        description: Username or email already registered
    """
    data = signup_schema.load(request.get_json(silent=True) or {})
    get_services().accounts.signup(data["username"], data["email"], data["password"])
    return jsonify(
        {
            "message": "Account created successfully! Please check your email to verify your account.",
            "requires_verification": True,
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login with username or email; sets the session cookie (2 hours).
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string, description: "username or email" }
             password: { type: string }
    responses:
      200:
        description: OK (session cookie set)
      401:
        description: Invalid credentials
      403:
        description: Email not verified
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    svc = get_services()
    result = svc.accounts.authenticate(data["username"], data["password"])

    token = svc.tokens.issue(result.user.id, result.user.username, ttl=svc.tokens.login_ttl)
    body = {"message": "Login successful", "expires_in": int(svc.tokens.login_ttl.total_seconds())}
    if result.needs_email:
        body.update({"message": "Please add an email to your account", "needs_email": True})

    response = jsonify(body)
    set_session_cookie(response, token, svc.tokens.login_ttl)
    logger.info("User %s logged in", result.user.id)
    return response, 200


@bp.post("/logout")
def logout():
    """
    Clear the session cookie.
    ---
    tags:
      - Auth
    responses:
      200:
        description: Logged out
    """
    response = jsonify({"message": "Logged out"})
    clear_session_cookie(response)
    return response, 200


@bp.post("/refresh")
def refresh():
    """
    Exchange the current session cookie, even if expired, for a fresh 24h one.
    ---
    tags:
      - Auth
    responses:
      200:
        description: Token refreshed
      401:
        description: Missing, forged or orphaned token
    """
    token = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])
    if not token:
        raise Unauthorized("No token provided")

    svc = get_services()
    new_token, principal = svc.tokens.refresh(token, svc.users)

    response = jsonify({"message": "Token refreshed", "expires_in": int(svc.tokens.refresh_ttl.total_seconds())})
    set_session_cookie(response, new_token, svc.tokens.refresh_ttl)
    logger.info("Session refreshed for user %s", principal.user_id)
    return response, 200


@bp.post("/verify-email")
def verify_email():
    """
    Consume an email verification token.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            token: { type: string }
    responses:
      200:
        description: Verified (or already verified)
      404:
        description: Unknown or already used token
    """
    data = token_schema.load(request.get_json(silent=True) or {})
    result = get_services().verification.consume(data["token"])
    if result.already_verified:
        return jsonify({"message": "Email already verified"}), 200
    return jsonify({"message": "Email verified successfully! You can now log in."}), 200


@bp.get("/verify-email")
def verify_email_link():
    """
    Link form of email verification; redirects to the login page.
    ---
    tags:
      - Auth
    parameters:
      - in: query
        name: token
        type: string
        required: true
    responses:
      302:
        description: Redirect to login with verified=true or error=verification_failed
    """
    login_url = current_app.config["LOGIN_URL"]
    try:
        get_services().verification.consume(request.args.get("token", ""))
    except AuthError as exc:
        logger.info("Email verification link rejected: %s", exc.error)
        return redirect(f"{login_url}?{urlencode({'error': 'verification_failed'})}")
    return redirect(f"{login_url}?{urlencode({'verified': 'true'})}")


@bp.post("/forgot-password")
def forgot_password():
    """
    Request a password reset link. The response never reveals whether the email exists.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
    responses:
      200:
        description: Generic acknowledgement
    """
    data = email_schema.load(request.get_json(silent=True) or {})
    get_services().password_reset.request_reset(data["email"])
    return jsonify({"message": RESET_REQUESTED_MESSAGE}), 200


@bp.post("/reset-password")
def reset_password():
    """
    Set a new password using a reset token (single use, 1 hour).
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            token: { type: string }
            password: { type: string, minLength: 6 }
    responses:
      200:
        description: Password updated
      400:
        description: Weak password or expired token
      404:
        description: Unknown or already used token
    """
    data = reset_password_schema.load(request.get_json(silent=True) or {})
    get_services().password_reset.reset_password(data["token"], data["password"])
    return jsonify({"message": "Password reset successful. You can now log in."}), 200
