"""
Pytest configuration and shared fixtures for the test suite.
"""
import pytest
from unittest.mock import MagicMock

from api import create_app
from models.db_storage import DBStorage
from models.user import User
from models.user_store import UserStore
from services import get_services
from services.accounts import AccountService
from services.discogs import DiscogsClient, OAuthToken
from utils.security import CredentialHasher, TokenService

TEST_SECRET = "test-jwt-secret"
ALICE_PASSWORD = "pw123456"


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        yield app
        get_services().storage.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def svc(app):
    """Services container of the test app."""
    return get_services()


def _make_user(users, hasher, **fields):
    password = fields.pop("password", ALICE_PASSWORD)
    user = User(password_hash=hasher.hash(password), **fields)
    return users.add(user)


@pytest.fixture
def alice(svc):
    """Verified user with a username, email and password."""
    return _make_user(svc.users, svc.hasher, username="alice", email="alice@example.com", email_verified=True)


@pytest.fixture
def legacy_user(svc):
    """Account created before email was required."""
    return _make_user(svc.users, svc.hasher, username="oldtimer", email=None, email_verified=False)


@pytest.fixture
def login(client, svc):
    """Put a session cookie for ``user`` into the test client."""
    def _login(user):
        token = svc.tokens.issue(user.id, user.username)
        client.set_cookie("token", token)
        return token
    return _login


@pytest.fixture
def discogs_client(svc):
    """Replace the provider client with a mock; no network in tests."""
    fake = MagicMock(spec=DiscogsClient)
    fake.configured = True
    fake.fetch_request_token.return_value = OAuthToken(token="rt1", secret="s1")
    fake.authorization_url.side_effect = lambda rt: f"https://discogs.com/oauth/authorize?oauth_token={rt}"
    fake.fetch_access_token.return_value = OAuthToken(token="access-token", secret="access-secret")
    fake.fetch_username.return_value = "alice_on_discogs"
    svc.discogs.client = fake
    return fake


# Framework-free fixtures for the service layer

@pytest.fixture
def storage():
    storage = DBStorage("sqlite:///:memory:")
    storage.reload()
    yield storage
    storage.drop_all()


@pytest.fixture
def users(storage):
    return UserStore(storage)


@pytest.fixture
def hasher():
    return CredentialHasher()


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
def mailer():
    return MagicMock()


@pytest.fixture
def accounts(users, hasher, mailer):
    return AccountService(users, hasher, mailer=mailer)


@pytest.fixture
def stored_alice(users, hasher):
    return _make_user(users, hasher, username="alice", email="alice@example.com", email_verified=True)
