"""
Discogs account linking (OAuth 1.0a, three-legged).

    Unlinked -> RequestIssued -> Authorized -> Linked -> (disconnect) -> Unlinked

DiscogsClient speaks to the provider through Authlib's requests-based
OAuth1Session (HMAC-SHA1, header signatures). DiscogsLinker owns the state
machine: it starts the handshake, finishes it from the callback, stores the
access credentials on the user and removes them again on disconnect.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Mapping

import requests
from authlib.integrations.requests_client import OAuth1Session, OAuthError

from models.user import User
from models.user_store import UserStore
from services.handshake import HandshakeCodec, HandshakeState
from utils.exceptions import BadRequest, NotFound, ServiceUnavailable, Unauthorized

logger = logging.getLogger(__name__)

_PROVIDER_ERRORS = (OAuthError, requests.RequestException, ValueError, KeyError, TypeError)


@dataclass(frozen=True)
class OAuthToken:
    token: str
    secret: str


class DiscogsClient:
    REQUEST_TOKEN_URL = "https://api.discogs.com/oauth/request_token"
    AUTHORIZE_URL = "https://discogs.com/oauth/authorize"
    ACCESS_TOKEN_URL = "https://api.discogs.com/oauth/access_token"
    IDENTITY_URL = "https://api.discogs.com/oauth/identity"

    def __init__(
        self,
        consumer_key: str | None,
        consumer_secret: str | None,
        callback_url: str,
        user_agent: str = "VinylCollectionApp/1.0",
        timeout: float = 10,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.callback_url = callback_url
        self.user_agent = user_agent
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.consumer_key and self.consumer_secret)

    def _session(self, **kwargs) -> OAuth1Session:
        if not self.configured:
            raise ServiceUnavailable("Discogs integration is not configured")
        session = OAuth1Session(self.consumer_key, self.consumer_secret, **kwargs)
        session.headers["User-Agent"] = self.user_agent
        return session

    def fetch_request_token(self) -> OAuthToken:
        with self._session(redirect_uri=self.callback_url) as session:
            try:
                data = session.fetch_request_token(self.REQUEST_TOKEN_URL, timeout=self.timeout)
                return OAuthToken(token=data["oauth_token"], secret=data["oauth_token_secret"])
            except _PROVIDER_ERRORS as exc:
                logger.warning("Discogs request token failed: %s", exc)
                raise ServiceUnavailable("Failed to obtain Discogs request token") from exc

    def authorization_url(self, request_token: str) -> str:
        with self._session() as session:
            return session.create_authorization_url(self.AUTHORIZE_URL, request_token=request_token)

    def fetch_access_token(self, request_token: str, request_token_secret: str, verifier: str) -> OAuthToken:
        with self._session(token=request_token, token_secret=request_token_secret) as session:
            try:
                data = session.fetch_access_token(self.ACCESS_TOKEN_URL, verifier=verifier, timeout=self.timeout)
                return OAuthToken(token=data["oauth_token"], secret=data["oauth_token_secret"])
            except _PROVIDER_ERRORS as exc:
                logger.warning("Discogs access token exchange failed: %s", exc)
                raise ServiceUnavailable("Failed to exchange Discogs access token") from exc

    def fetch_username(self, access: OAuthToken) -> str:
        with self._session(token=access.token, token_secret=access.secret) as session:
            try:
                resp = session.get(self.IDENTITY_URL, timeout=self.timeout)
                resp.raise_for_status()
                return resp.json()["username"]
            except _PROVIDER_ERRORS as exc:
                logger.warning("Discogs identity lookup failed: %s", exc)
                raise ServiceUnavailable("Failed to get Discogs profile") from exc


class DiscogsLinker:
    def __init__(self, users: UserStore, client: DiscogsClient, handshake: HandshakeCodec):
        self.users = users
        self.client = client
        self.handshake = handshake

    def begin_link(self, user_id: int) -> tuple[str, HandshakeState]:
        """Obtain a request token; return the authorize URL and the state to hand the browser."""
        if self.users.get(user_id) is None:
            raise NotFound("User not found")
        request_token = self.client.fetch_request_token()
        state = self.handshake.start(user_id, request_token.token, request_token.secret)
        logger.info("Discogs link started for user %s", user_id)
        return self.client.authorization_url(request_token.token), state

    def complete_link(self, cookies: Mapping[str, str], request_token: str | None, verifier: str | None) -> User:
        """
        Finish the handshake from the provider callback. The caller must drop the
        handshake cookies whatever the outcome.
        """
        if not request_token or not verifier:
            raise BadRequest("Missing OAuth parameters")

        state = self.handshake.load(cookies)
        if not secrets.compare_digest(state.request_token, request_token):
            raise Unauthorized("Request token does not match this handshake")

        user = self.users.get(state.user_id)
        if user is None:
            raise NotFound("User not found")

        access = self.client.fetch_access_token(state.request_token, state.request_token_secret, verifier)
        username = self.client.fetch_username(access)

        user.discogs_access_token = access.token
        user.discogs_access_token_secret = access.secret
        user.discogs_username = username
        self.users.save(user)
        logger.info("Discogs account %s linked to user %s", username, user.id)
        return user

    def disconnect(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        was_linked = user.discogs_linked
        user.discogs_access_token = None
        user.discogs_access_token_secret = None
        user.discogs_username = None
        self.users.save(user)
        if was_linked:
            logger.info("Discogs account disconnected for user %s", user_id)
        return user
