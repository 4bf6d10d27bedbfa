"""
API tests for Discogs account linking.
"""
from services.handshake import HANDSHAKE_COOKIES, REQUEST_TOKEN_COOKIE, USER_ID_COOKIE
from utils.exceptions import ServiceUnavailable


def _cookie_headers(response, name):
    return [h for h in response.headers.getlist("Set-Cookie") if h.startswith(f"{name}=")]


def _linked_fields(user):
    return user.discogs_access_token, user.discogs_access_token_secret, user.discogs_username


class TestBeginLink:

    def test_redirects_to_discogs_and_sets_handshake_cookies(self, client, alice, login, discogs_client):
        login(alice)
        response = client.get('/api/v1/auth/discogs')

        assert response.status_code == 302
        assert response.headers["Location"] == "https://discogs.com/oauth/authorize?oauth_token=rt1"
        for name in HANDSHAKE_COOKIES:
            header = _cookie_headers(response, name)[0]
            assert "HttpOnly" in header
            assert "Max-Age=600" in header
        assert client.get_cookie(REQUEST_TOKEN_COOKIE).value == "rt1"

    def test_provider_failure_sets_no_cookies(self, client, alice, login, discogs_client):
        discogs_client.fetch_request_token.side_effect = ServiceUnavailable("Failed to obtain Discogs request token")
        login(alice)

        response = client.get('/api/v1/auth/discogs')

        assert response.status_code == 503
        assert response.get_json()["error"] == "SERVICE_UNAVAILABLE"
        for name in HANDSHAKE_COOKIES:
            assert client.get_cookie(name) is None

    def test_requires_session(self, client, discogs_client):
        response = client.get('/api/v1/auth/discogs')
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")
        discogs_client.fetch_request_token.assert_not_called()


class TestCallback:

    def test_links_account_and_clears_handshake(self, client, svc, alice, login, discogs_client):
        login(alice)
        client.get('/api/v1/auth/discogs')

        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/profile?discogs=connected")
        discogs_client.fetch_access_token.assert_called_once_with("rt1", "s1", "v1")
        assert _linked_fields(svc.users.get(alice.id)) == ("access-token", "access-secret", "alice_on_discogs")
        for name in HANDSHAKE_COOKIES:
            assert "Max-Age=0" in _cookie_headers(response, name)[0]
            assert client.get_cookie(name) is None

    def test_mismatched_request_token(self, client, svc, alice, login, discogs_client):
        login(alice)
        client.get('/api/v1/auth/discogs')

        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt2&oauth_verifier=v1')

        assert response.headers["Location"].endswith("/profile?error=unauthorized")
        discogs_client.fetch_access_token.assert_not_called()
        assert _linked_fields(svc.users.get(alice.id)) == (None, None, None)
        for name in HANDSHAKE_COOKIES:
            assert client.get_cookie(name) is None

    def test_without_handshake(self, client, svc, alice, discogs_client):
        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/profile?error=unauthorized")
        discogs_client.fetch_access_token.assert_not_called()

    def test_tampered_user_cookie(self, client, svc, alice, login, discogs_client):
        login(alice)
        client.get('/api/v1/auth/discogs')
        client.set_cookie(USER_ID_COOKIE, "2")

        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        assert response.headers["Location"].endswith("/profile?error=unauthorized")
        assert _linked_fields(svc.users.get(alice.id)) == (None, None, None)

    def test_missing_verifier(self, client, alice, login, discogs_client):
        login(alice)
        client.get('/api/v1/auth/discogs')

        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1')

        assert response.headers["Location"].endswith("/profile?error=bad_request")
        for name in HANDSHAKE_COOKIES:
            assert client.get_cookie(name) is None

    def test_exchange_failure(self, client, svc, alice, login, discogs_client):
        discogs_client.fetch_access_token.side_effect = ServiceUnavailable("Failed to exchange Discogs access token")
        login(alice)
        client.get('/api/v1/auth/discogs')

        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        assert response.headers["Location"].endswith("/profile?error=service_unavailable")
        assert _linked_fields(svc.users.get(alice.id)) == (None, None, None)

    def test_unexpected_error_still_clears_handshake(self, client, svc, alice, login, discogs_client):
        discogs_client.fetch_username.side_effect = RuntimeError("boom")
        login(alice)
        client.get('/api/v1/auth/discogs')

        response = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/profile?error=oauth_callback_failed")
        for name in HANDSHAKE_COOKIES:
            assert "Max-Age=0" in _cookie_headers(response, name)[0]
            assert client.get_cookie(name) is None
        assert _linked_fields(svc.users.get(alice.id)) == (None, None, None)

    def test_second_callback_fails(self, client, alice, login, discogs_client):
        login(alice)
        client.get('/api/v1/auth/discogs')
        client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        replay = client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        assert replay.headers["Location"].endswith("/profile?error=unauthorized")
        discogs_client.fetch_access_token.assert_called_once()


class TestDisconnect:

    def test_disconnect_linked_account(self, client, svc, alice, login, discogs_client):
        login(alice)
        client.get('/api/v1/auth/discogs')
        client.get('/api/v1/auth/discogs/callback?oauth_token=rt1&oauth_verifier=v1')

        response = client.post('/api/v1/auth/discogs/disconnect')

        assert response.status_code == 200
        assert _linked_fields(svc.users.get(alice.id)) == (None, None, None)
        assert client.get('/api/v1/auth/me').get_json()["data"]["discogs_linked"] is False

    def test_disconnect_unlinked_account(self, client, svc, alice, login):
        login(alice)
        response = client.post('/api/v1/auth/discogs/disconnect')
        assert response.status_code == 200
        assert response.get_json()["message"] == "Discogs account disconnected successfully"
        assert _linked_fields(svc.users.get(alice.id)) == (None, None, None)

    def test_disconnect_requires_session(self, client):
        assert client.post('/api/v1/auth/discogs/disconnect').status_code == 401
