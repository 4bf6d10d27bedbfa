"""Email verification token lifecycle."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from marshmallow import ValidationError

from models.schemas.common import validate_email
from models.user import User
from models.user_store import UserStore
from utils.exceptions import BadRequest, Conflict, Malformed, NotFound
from utils.security import generate_token

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    user: User
    already_verified: bool = False


class EmailVerificationService:
    def __init__(self, users: UserStore, mailer=None):
        self.users = users
        self.mailer = mailer

    def request_email_add(self, user_id: int, email: str) -> str:
        """Attach an unverified email to an account and return its verification token."""
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        if user.email:
            raise BadRequest("User already has an email address")
        try:
            email = validate_email(email)
        except ValidationError as exc:
            raise Malformed("Invalid email format") from exc

        owner = self.users.find_by_email(email)
        if owner is not None and owner.id != user.id:
            raise Conflict("Email already registered by another user")

        token = generate_token()
        user.email = email
        user.email_verified = False
        user.email_verification_token = token
        self.users.save(user)
        logger.info("Email verification requested for user %s", user.id)

        if self.mailer is not None:
            self.mailer.send_verification(email, token)
        return token

    def consume(self, token: str) -> VerificationResult:
        """Mark the holder of ``token`` verified. The token is dead afterwards."""
        user = self.users.find_by_verification_token(token)
        if user is None:
            raise NotFound("Invalid or expired verification token")
        if user.email_verified:
            return VerificationResult(user=user, already_verified=True)

        user.email_verified = True
        user.email_verification_token = None
        self.users.save(user)
        logger.info("Email verified for user %s", user.id)

        if self.mailer is not None:
            self.mailer.send_welcome(user.email, user.username)
        return VerificationResult(user=user)
