"""Session and handshake cookie helpers."""
from __future__ import annotations

from datetime import timedelta

from flask import current_app

from services.handshake import HANDSHAKE_COOKIES


def _max_age(value) -> int:
    return int(value.total_seconds()) if isinstance(value, timedelta) else int(value)


def set_session_cookie(response, token: str, max_age) -> None:
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=_max_age(max_age),
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite="Strict",
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite="Strict",
    )


def set_handshake_cookies(response, values: dict[str, str]) -> None:
    max_age = _max_age(current_app.config["DISCOGS_HANDSHAKE_MAX_AGE"])
    for name, value in values.items():
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            httponly=True,
            secure=current_app.config["COOKIE_SECURE"],
            samesite="Lax",
        )


def clear_handshake_cookies(response) -> None:
    for name in HANDSHAKE_COOKIES:
        response.delete_cookie(
            name,
            httponly=True,
            secure=current_app.config["COOKIE_SECURE"],
            samesite="Lax",
        )
