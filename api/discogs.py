"""
Discogs linking routes:
- GET  /auth/discogs            start the OAuth 1.0a handshake (redirects to Discogs)
- GET  /auth/discogs/callback   provider callback; always drops the handshake cookies
- POST /auth/discogs/disconnect remove the linked credentials
"""
from __future__ import annotations

import logging
from urllib.parse import urlencode

from flask import Blueprint, current_app, jsonify, redirect, request

from services import get_services
from utils.cookies import clear_handshake_cookies, set_handshake_cookies
from utils.decorators import session_required
from utils.exceptions import AuthError
from utils.security import Principal

logger = logging.getLogger(__name__)

bp = Blueprint("discogs", __name__)


def _profile_redirect(**params):
    return redirect(f"{current_app.config['PROFILE_URL']}?{urlencode(params)}")


@bp.get("")
@session_required(redirect_to_login=True)
def begin(principal: Principal):
    """
    Start linking a Discogs account.
    ---
    tags:
      - Discogs
    security:
      - SessionCookie: []
    responses:
      302:
        description: Redirect to the Discogs authorize page (or to login without a session)
      503:
        description: Discogs could not issue a request token
    """
    linker = get_services().discogs
    authorize_url, state = linker.begin_link(principal.user_id)

    response = redirect(authorize_url)
    set_handshake_cookies(response, linker.handshake.dump(state))
    return response


@bp.get("/callback")
def callback():
    """
    Discogs redirects here after the user authorizes the request token.
    ---
    tags:
      - Discogs
    parameters:
      - in: query
        name: oauth_token
        type: string
        required: true
      - in: query
        name: oauth_verifier
        type: string
        required: true
    responses:
      302:
        description: Redirect to the profile page with discogs=connected or error=<code>
    """
    try:
        get_services().discogs.complete_link(
            request.cookies,
            request.args.get("oauth_token"),
            request.args.get("oauth_verifier"),
        )
        response = _profile_redirect(discogs="connected")
    except AuthError as exc:
        logger.info("Discogs callback failed: %s (%s)", exc.error, exc.message)
        response = _profile_redirect(error=exc.error.lower())
    except Exception:
        logger.exception("Unexpected error in Discogs callback")
        response = _profile_redirect(error="oauth_callback_failed")

    # A handshake is good for exactly one callback attempt
    clear_handshake_cookies(response)
    return response


@bp.post("/disconnect")
@session_required()
def disconnect(principal: Principal):
    """
    Unlink the Discogs account. Succeeds when nothing is linked.
    ---
    tags:
      - Discogs
    security:
      - SessionCookie: []
    responses:
      200: { description: Disconnected }
      401: { description: Unauthorized }
    """
    get_services().discogs.disconnect(principal.user_id)
    return jsonify({"message": "Discogs account disconnected successfully"}), 200
