"""
Unit tests for password hashing and session tokens.
"""
import jwt
import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from tests.conftest import TEST_SECRET
from utils.exceptions import InvalidSignature, MalformedToken, TokenError, TokenExpired, Unauthorized
from utils.security import CredentialHasher, TokenService, generate_token


def _issued_ago(delta, **kwargs):
    """TokenService whose clock sits ``delta`` in the past."""
    return TokenService(TEST_SECRET, clock=lambda: datetime.now(timezone.utc) - delta, **kwargs)


class _Users:
    def __init__(self, *known):
        self._known = {u.id: u for u in known}

    def get(self, user_id):
        return self._known.get(user_id)


class TestCredentialHasher:

    def test_hash_is_not_plaintext_and_verifies(self):
        hasher = CredentialHasher()
        digest = hasher.hash("pw123456")
        assert digest != "pw123456"
        assert hasher.verify("pw123456", digest)

    def test_wrong_password_is_false(self):
        hasher = CredentialHasher()
        assert not hasher.verify("nope", hasher.hash("pw123456"))

    def test_garbage_hash_is_false(self):
        hasher = CredentialHasher()
        assert not hasher.verify("pw123456", "not-an-argon2-hash")
        assert not hasher.verify("pw123456", None)


def test_generate_token_is_random_hex():
    first, second = generate_token(), generate_token()
    assert first != second
    assert len(first) == 64
    int(first, 16)


class TestTokenService:

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService("")

    def test_issue_and_verify(self, tokens):
        principal = tokens.verify(tokens.issue(7, "alice"))
        assert principal.user_id == 7
        assert principal.username == "alice"

    def test_claims_shape(self, tokens):
        claims = jwt.decode(tokens.issue(7, "alice"), TEST_SECRET, algorithms=["HS256"])
        assert set(claims) == {"userId", "username", "iat", "exp"}
        assert claims["exp"] - claims["iat"] == int(timedelta(hours=2).total_seconds())

    def test_accepted_within_two_hours(self):
        token = _issued_ago(timedelta(hours=1, minutes=59)).issue(1, "alice")
        assert TokenService(TEST_SECRET).verify(token).username == "alice"

    def test_rejected_at_hour_three(self):
        token = _issued_ago(timedelta(hours=3)).issue(1, "alice")
        with pytest.raises(TokenExpired) as exc:
            TokenService(TEST_SECRET).verify(token)
        assert exc.value.status_code == 401

    def test_wrong_secret_is_invalid_signature(self, tokens):
        forged = TokenService("someone-elses-secret").issue(1, "alice")
        with pytest.raises(InvalidSignature):
            tokens.verify(forged)

    def test_tampered_payload_is_invalid_signature(self, tokens):
        header, _, signature = tokens.issue(1, "alice").split(".")
        _, payload, _ = tokens.issue(2, "mallory").split(".")
        with pytest.raises(InvalidSignature):
            tokens.verify(".".join([header, payload, signature]))

    def test_garbage_is_malformed(self, tokens):
        with pytest.raises(MalformedToken):
            tokens.verify("not-a-token")

    def test_missing_identity_claims_is_malformed(self, tokens):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode({"sub": "1", "iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(MalformedToken):
            tokens.verify(token)

    def test_every_failure_is_a_token_error(self, tokens):
        for bad in ("", "a.b.c", TokenService("x").issue(1, "a")):
            with pytest.raises(TokenError):
                tokens.verify(bad)


class TestRefresh:

    def test_refresh_expired_token_within_grace(self, tokens):
        alice = SimpleNamespace(id=1, username="alice")
        stale = _issued_ago(timedelta(hours=3)).issue(1, "alice")

        new_token, principal = tokens.refresh(stale, _Users(alice))

        assert principal.user_id == 1
        claims = jwt.decode(new_token, TEST_SECRET, algorithms=["HS256"])
        assert claims["exp"] - claims["iat"] == int(timedelta(hours=24).total_seconds())
        assert tokens.verify(new_token).username == "alice"

    def test_refresh_long_expired_token(self, tokens):
        stale = _issued_ago(timedelta(days=30)).issue(1, "alice")
        new_token, principal = tokens.refresh(stale, _Users(SimpleNamespace(id=1, username="alice")))
        assert principal.user_id == 1
        assert tokens.verify(new_token).username == "alice"

    def test_refresh_with_grace_cap(self):
        capped = TokenService(TEST_SECRET, refresh_grace=timedelta(days=7))
        alice = SimpleNamespace(id=1, username="alice")

        _, principal = capped.refresh(_issued_ago(timedelta(days=6)).issue(1, "alice"), _Users(alice))
        assert principal.user_id == 1
        with pytest.raises(TokenExpired):
            capped.refresh(_issued_ago(timedelta(days=8)).issue(1, "alice"), _Users(alice))

    def test_refresh_requires_authentic_signature(self, tokens):
        forged = TokenService("someone-elses-secret").issue(1, "alice")
        with pytest.raises(InvalidSignature):
            tokens.refresh(forged, _Users(SimpleNamespace(id=1, username="alice")))

    def test_refresh_for_deleted_user_fails(self, tokens):
        with pytest.raises(Unauthorized):
            tokens.refresh(tokens.issue(1, "alice"), _Users())

    def test_refresh_uses_current_username(self, tokens):
        renamed = SimpleNamespace(id=1, username="alice2")
        _, principal = tokens.refresh(tokens.issue(1, "alice"), _Users(renamed))
        assert principal.username == "alice2"
