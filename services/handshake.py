"""
Discogs linking handshake state.

The state lives client-side in three cookies scoped to the initiating
browser. ``discogs_user_id`` is a short-lived JWT binding the user id to the
request token, so a client can neither retarget the link to another account
nor replay the state after the ten-minute window.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping

import jwt

from utils.exceptions import Unauthorized
from utils.security import utcnow

REQUEST_TOKEN_COOKIE = "discogs_request_token"
REQUEST_TOKEN_SECRET_COOKIE = "discogs_request_token_secret"
USER_ID_COOKIE = "discogs_user_id"

HANDSHAKE_COOKIES = (REQUEST_TOKEN_COOKIE, REQUEST_TOKEN_SECRET_COOKIE, USER_ID_COOKIE)

_AUDIENCE = "discogs-handshake"


@dataclass(frozen=True)
class HandshakeState:
    request_token: str
    request_token_secret: str
    user_id: int
    issued_at: datetime


class HandshakeCodec:
    """Converts HandshakeState to and from its cookie values."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        max_age: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("Handshake signing secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self.max_age = max_age
        self._clock = clock

    def start(self, user_id: int, request_token: str, request_token_secret: str) -> HandshakeState:
        return HandshakeState(
            request_token=request_token,
            request_token_secret=request_token_secret,
            user_id=int(user_id),
            issued_at=self._clock(),
        )

    def dump(self, state: HandshakeState) -> dict[str, str]:
        binding = jwt.encode(
            {
                "sub": str(state.user_id),
                "rt": state.request_token,
                "aud": _AUDIENCE,
                "iat": int(state.issued_at.timestamp()),
                "exp": int((state.issued_at + self.max_age).timestamp()),
            },
            self._secret,
            algorithm=self._algorithm,
        )
        return {
            REQUEST_TOKEN_COOKIE: state.request_token,
            REQUEST_TOKEN_SECRET_COOKIE: state.request_token_secret,
            USER_ID_COOKIE: binding,
        }

    def load(self, cookies: Mapping[str, str]) -> HandshakeState:
        """Rebuild the state; any missing, tampered or stale part is Unauthorized."""
        request_token = cookies.get(REQUEST_TOKEN_COOKIE)
        request_token_secret = cookies.get(REQUEST_TOKEN_SECRET_COOKIE)
        binding = cookies.get(USER_ID_COOKIE)
        if not request_token or not request_token_secret or not binding:
            raise Unauthorized("Discogs handshake state is missing")

        try:
            claims = jwt.decode(
                binding,
                self._secret,
                algorithms=[self._algorithm],
                audience=_AUDIENCE,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Unauthorized("Discogs handshake expired") from exc
        except jwt.InvalidTokenError as exc:
            raise Unauthorized("Discogs handshake state is invalid") from exc

        if claims.get("rt") != request_token:
            raise Unauthorized("Discogs handshake state is invalid")
        try:
            user_id = int(claims["sub"])
        except ValueError as exc:
            raise Unauthorized("Discogs handshake state is invalid") from exc

        return HandshakeState(
            request_token=request_token,
            request_token_secret=request_token_secret,
            user_id=user_id,
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
        )
