"""
Outbound account notifications.

Delivery is handled outside this service; Mailer builds the links and hands
them to ``deliver``. The default implementation only records them through
logging, with the link itself at DEBUG.
"""
from __future__ import annotations

import logging
from urllib.parse import urlencode

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, app_url: str, api_prefix: str = "/api/v1"):
        self.app_url = app_url.rstrip("/")
        self.api_prefix = api_prefix

    def verification_link(self, token: str) -> str:
        return f"{self.app_url}{self.api_prefix}/auth/verify-email?{urlencode({'token': token})}"

    def reset_link(self, token: str) -> str:
        return f"{self.app_url}/reset-password?{urlencode({'token': token})}"

    def send_verification(self, email: str, token: str) -> None:
        self.deliver(email, "Verify your Vinyl Collection account", self.verification_link(token))

    def send_password_reset(self, email: str, token: str) -> None:
        self.deliver(email, "Reset your Vinyl Collection password", self.reset_link(token))

    def send_welcome(self, email: str, username: str) -> None:
        self.deliver(email, f"Welcome to Vinyl Collection, {username}", f"{self.app_url}/login")

    def deliver(self, email: str, subject: str, link: str) -> None:
        logger.info("Queued email %r to %s", subject, email)
        logger.debug("Email link for %s: %s", email, link)
