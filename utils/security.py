"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Session token issue/verify/refresh via PyJWT (HS256)
- Opaque single-use token generation for email verification and password reset
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from utils.exceptions import InvalidSignature, MalformedToken, TokenExpired, Unauthorized


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)


class CredentialHasher:
    """One-way password hashing with constant-time verification."""

    def __init__(self, hasher: PasswordHasher | None = None):
        self._ph = hasher or PasswordHasher()

    def hash(self, password: str) -> str:
        return self._ph.hash(password)

    def verify(self, password: str, password_hash: str | None) -> bool:
        if not password_hash:
            return False
        try:
            return self._ph.verify(password_hash, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False


@dataclass(frozen=True)
class Principal:
    """Verified identity carried by a session token."""

    user_id: int
    username: str
    expires_at: datetime


class TokenService:
    """
    Signs and checks session tokens.

    Claims: {"userId", "username", "iat", "exp"}. Expiry is checked by PyJWT
    against wall-clock time; ``clock`` only drives issuance.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        login_ttl: timedelta = timedelta(hours=2),
        refresh_ttl: timedelta = timedelta(hours=24),
        refresh_grace: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self.login_ttl = login_ttl
        self.refresh_ttl = refresh_ttl
        self.refresh_grace = refresh_grace
        self._clock = clock

    def issue(self, user_id: int, username: str, ttl: Optional[timedelta] = None) -> str:
        token, _ = self._sign(user_id, username, ttl or self.login_ttl)
        return token

    def _sign(self, user_id: int, username: str, ttl: timedelta) -> tuple[str, Principal]:
        now = self._clock()
        exp = now + ttl
        payload = {
            "userId": int(user_id),
            "username": username,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, self._principal(payload)

    def decode(self, token: str, leeway: timedelta | int = 0, verify_exp: bool = True) -> Dict[str, Any]:
        """
        Decode and validate a token. ``leeway`` widens the expiry check and
        ``verify_exp=False`` skips it; the signature is always verified.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"], "verify_exp": verify_exp},
                leeway=leeway,
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(f"Invalid token: {exc}") from exc

        if not isinstance(claims.get("userId"), int) or not isinstance(claims.get("username"), str):
            raise MalformedToken("Token is missing identity claims")
        return claims

    def verify(self, token: str) -> Principal:
        claims = self.decode(token)
        return self._principal(claims)

    def refresh(self, token: str, users) -> tuple[str, Principal]:
        """
        Exchange an authentic token, expired or not, for a fresh 24h token.
        ``users`` is the credential store; the account must still exist.
        With ``refresh_grace`` set, tokens expired for longer than that are refused.
        """
        if self.refresh_grace is None:
            claims = self.decode(token, verify_exp=False)
        else:
            claims = self.decode(token, leeway=self.refresh_grace)
        user = users.get(claims["userId"])
        if user is None:
            raise Unauthorized("User not found")
        return self._sign(user.id, user.username, self.refresh_ttl)

    @staticmethod
    def _principal(claims: Dict[str, Any]) -> Principal:
        return Principal(
            user_id=claims["userId"],
            username=claims["username"],
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
