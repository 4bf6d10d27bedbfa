"""
Password reset token lifecycle.

Requesting a reset never reveals whether the address belongs to an account.
Tokens expire one hour after issuance and are cleared on first use.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models.user import User
from models.user_store import UserStore
from utils.exceptions import Expired, NotFound
from utils.security import CredentialHasher, generate_token, utcnow

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, we've sent a password reset link."


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PasswordResetService:
    def __init__(
        self,
        users: UserStore,
        hasher: CredentialHasher,
        accounts,
        mailer=None,
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.users = users
        self.hasher = hasher
        self.accounts = accounts
        self.mailer = mailer
        self.ttl = ttl
        self._clock = clock

    def request_reset(self, email: str) -> Optional[str]:
        """
        Issue a reset token when ``email`` belongs to an account.
        Returns the token or None; callers respond identically either way.
        """
        user = self.users.find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown address")
            return None

        token = generate_token()
        user.password_reset_token = token
        user.password_reset_expires = self._clock() + self.ttl
        self.users.save(user)
        logger.info("Password reset token issued for user %s", user.id)

        if self.mailer is not None:
            self.mailer.send_password_reset(user.email, token)
        return token

    def reset_password(self, token: str, new_password: str) -> User:
        self.accounts.check_password_strength(new_password)

        user = self.users.find_by_reset_token(token)
        if user is None:
            raise NotFound("Invalid or expired reset token")

        expires = user.password_reset_expires
        if expires is None or _as_utc(expires) <= self._clock():
            self._clear(user)
            raise Expired("Reset token has expired")

        user.password_hash = self.hasher.hash(new_password)
        self._clear(user)
        logger.info("Password reset completed for user %s", user.id)
        return user

    def _clear(self, user: User) -> None:
        user.password_reset_token = None
        user.password_reset_expires = None
        self.users.save(user)
