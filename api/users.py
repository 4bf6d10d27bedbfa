"""Account routes for the signed-in user. Every view sits behind session_required."""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.schemas.user import ChangePasswordSchema, DeleteAccountSchema, EmailSchema, UserOutSchema
from services import get_services
from utils.cookies import clear_session_cookie
from utils.decorators import session_required
from utils.exceptions import NotFound
from utils.security import Principal

bp = Blueprint("users", __name__)

change_password_schema = ChangePasswordSchema()
delete_account_schema = DeleteAccountSchema()
email_schema = EmailSchema()
user_out_schema = UserOutSchema()


@bp.get("/me")
@session_required()
def me(principal: Principal):
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - SessionCookie: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = get_services().users.get(principal.user_id)
    if user is None:
        raise NotFound("User not found")
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.post("/change-password")
@session_required()
def change_password(principal: Principal):
    """
    Change password; requires the current password.
    ---
    tags:
      - Users
    security:
      - SessionCookie: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            current_password: { type: string }
            new_password: { type: string, minLength: 6 }
    responses:
      200: { description: Password changed }
      400: { description: Weak password or wrong current password }
      401: { description: Unauthorized }
      404: { description: User not found }
    """
    data = change_password_schema.load(request.get_json(silent=True) or {})
    get_services().accounts.change_password(principal.user_id, data["current_password"], data["new_password"])
    return jsonify({"message": "Password changed successfully"}), 200


@bp.post("/delete-account")
@session_required()
def delete_account(principal: Principal):
    """
    Permanently delete the account and everything it owns.
    Requires the password and the literal confirmation "DELETE".
    ---
    tags:
      - Users
    security:
      - SessionCookie: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            password: { type: string }
            confirm_delete: { type: string, enum: ["DELETE"] }
    responses:
      200: { description: Account deleted, session cookie cleared }
      400: { description: Missing confirmation or wrong password }
      401: { description: Unauthorized }
    """
    data = delete_account_schema.load(request.get_json(silent=True) or {})
    get_services().accounts.delete_account(principal.user_id, data["password"], data["confirm_delete"])
    response = jsonify({"message": "Account deleted successfully"})
    clear_session_cookie(response)
    return response, 200


@bp.post("/add-email")
@session_required()
def add_email(principal: Principal):
    """
    Attach an email to an account that has none; a verification link is sent.
    ---
    tags:
      - Users
    security:
      - SessionCookie: []
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
      200: { description: Email added, verification pending }
      400: { description: Malformed email or account already has one }
      409: { description: Email registered by another user }
    """
    data = email_schema.load(request.get_json(silent=True) or {})
    get_services().verification.request_email_add(principal.user_id, data["email"])
    return jsonify(
        {
            "message": "Email added successfully! Please check your email to verify your account.",
            "requires_verification": True,
        }
    ), 200
