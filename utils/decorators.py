from __future__ import annotations

import logging
from functools import wraps

from flask import current_app, g, redirect, request

from services import get_services
from utils.exceptions import TokenError, Unauthorized

logger = logging.getLogger(__name__)


def session_required(redirect_to_login: bool = False):
    """
    Request gate for protected routes.

    Reads the session token from the auth cookie and verifies it. On success
    the verified Principal is stored on ``g.principal`` and passed to the view
    as its ``principal`` argument. Without a valid token, page routes
    (``redirect_to_login=True``) redirect to the login page and API routes
    raise Unauthorized (JSON 401).
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])
            failure = None
            principal = None
            if not token:
                failure = Unauthorized("Not authenticated")
            else:
                try:
                    principal = get_services().tokens.verify(token)
                except TokenError as exc:
                    logger.info("Rejected session token on %s: %s", request.path, exc.error)
                    failure = Unauthorized("Invalid or expired session")

            if failure is not None:
                if redirect_to_login:
                    return redirect(current_app.config["LOGIN_URL"])
                raise failure

            g.principal = principal
            return fn(*args, principal=principal, **kwargs)

        wrapper.requires_session = True
        return wrapper

    return decorator
