"""
Account security operations: signup, login, change-password and
delete-account. Every password check goes through CredentialHasher; only
change-password and password reset write a new hash.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from marshmallow import ValidationError

from models.schemas.common import validate_email
from models.user import User
from models.user_store import UserStore
from utils.exceptions import BadRequest, Conflict, Forbidden, InvalidCredential, Malformed, NotFound
from utils.security import CredentialHasher, generate_token

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "DELETE"


@dataclass
class LoginResult:
    user: User
    needs_email: bool = False


class AccountService:
    def __init__(self, users: UserStore, hasher: CredentialHasher, mailer=None, password_min_length: int = 6):
        self.users = users
        self.hasher = hasher
        self.mailer = mailer
        self.password_min_length = password_min_length

    def check_password_strength(self, password: str, field: str = "Password") -> None:
        if not password or len(password) < self.password_min_length:
            raise Malformed(f"{field} must be at least {self.password_min_length} characters long")

    def signup(self, username: str, email: str, password: str) -> User:
        if not username or not email or not password:
            raise BadRequest("All fields are required")
        if "@" in username:
            raise Malformed("Username must not contain '@'")
        self.check_password_strength(password)
        try:
            email = validate_email(email)
        except ValidationError as exc:
            raise Malformed("Invalid email format") from exc

        if self.users.find_by_username(username):
            raise Conflict("Username already taken")
        if self.users.find_by_email(email):
            raise Conflict("Email already registered")

        user = User(
            username=username,
            email=email,
            email_verified=False,
            password_hash=self.hasher.hash(password),
            email_verification_token=generate_token(),
        )
        self.users.add(user)
        logger.info("Created user %s", user.id)

        if self.mailer is not None:
            self.mailer.send_verification(user.email, user.email_verification_token)
        return user

    def authenticate(self, identifier: str, password: str) -> LoginResult:
        user = self.users.find_by_login(identifier) if identifier else None
        if user is None or not self.hasher.verify(password or "", user.password_hash):
            raise InvalidCredential("Invalid credentials")

        # Legacy accounts predate email; they get a session so they can add one
        if not user.email:
            return LoginResult(user=user, needs_email=True)
        if not user.email_verified:
            raise Forbidden(
                "Please verify your email before logging in",
                details={"requires_verification": True},
            )
        return LoginResult(user=user)

    def change_password(self, user_id: int, current_password: str, new_password: str) -> User:
        if not current_password or not new_password:
            raise BadRequest("Current password and new password are required")
        self.check_password_strength(new_password, field="New password")

        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        if not self.hasher.verify(current_password, user.password_hash):
            raise InvalidCredential("Current password is incorrect", status_code=400)

        user.password_hash = self.hasher.hash(new_password)
        self.users.save(user)
        logger.info("Password changed for user %s", user.id)
        return user

    def delete_account(self, user_id: int, password: str, confirmation: str) -> None:
        if not password or confirmation != DELETE_CONFIRMATION:
            raise BadRequest("Password and confirmation required")

        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        if not self.hasher.verify(password, user.password_hash):
            raise InvalidCredential("Password is incorrect", status_code=400)

        self.users.delete(user)
        logger.info("Deleted user %s", user_id)
