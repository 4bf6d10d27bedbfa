"""
Service wiring.

Every service is built once per application from the Flask config and kept
on ``app.extensions``; request handlers reach them through get_services().
"""
from __future__ import annotations

from flask import Flask, current_app

from models.db_storage import DBStorage
from models.user_store import UserStore
from services.accounts import AccountService
from services.discogs import DiscogsClient, DiscogsLinker
from services.email_verification import EmailVerificationService
from services.handshake import HandshakeCodec
from services.mailer import Mailer
from services.password_reset import PasswordResetService
from utils.security import CredentialHasher, TokenService

EXTENSION_KEY = "vinyl_auth"


class AuthServices:
    def __init__(self, config):
        self.storage = DBStorage(config["DATABASE_URL"], echo=config.get("SQL_ECHO", False))
        self.storage.reload()
        self.users = UserStore(self.storage)

        self.hasher = CredentialHasher()
        self.tokens = TokenService(
            secret=config["JWT_SECRET"],
            algorithm=config["JWT_ALGORITHM"],
            login_ttl=config["SESSION_TOKEN_EXPIRES"],
            refresh_ttl=config["SESSION_REFRESH_EXPIRES"],
            refresh_grace=config["SESSION_REFRESH_GRACE"],
        )
        self.mailer = Mailer(config["APP_URL"])

        self.accounts = AccountService(
            self.users, self.hasher, mailer=self.mailer, password_min_length=config["PASSWORD_MIN_LENGTH"]
        )
        self.verification = EmailVerificationService(self.users, mailer=self.mailer)
        self.password_reset = PasswordResetService(
            self.users, self.hasher, self.accounts, mailer=self.mailer, ttl=config["PASSWORD_RESET_EXPIRES"]
        )

        discogs_client = DiscogsClient(
            consumer_key=config.get("DISCOGS_CONSUMER_KEY"),
            consumer_secret=config.get("DISCOGS_CONSUMER_SECRET"),
            callback_url=config["DISCOGS_CALLBACK_URL"],
            user_agent=config["DISCOGS_USER_AGENT"],
            timeout=config["DISCOGS_TIMEOUT_SECONDS"],
        )
        handshake = HandshakeCodec(
            secret=config["JWT_SECRET"],
            algorithm=config["JWT_ALGORITHM"],
            max_age=config["DISCOGS_HANDSHAKE_MAX_AGE"],
        )
        self.discogs = DiscogsLinker(self.users, discogs_client, handshake)


def init_app(app: Flask) -> AuthServices:
    services = AuthServices(app.config)
    app.extensions[EXTENSION_KEY] = services

    # Release the scoped session at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        services.storage.close()

    return services


def get_services() -> AuthServices:
    return current_app.extensions[EXTENSION_KEY]
