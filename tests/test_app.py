import pytest

from api import create_app
from api.config import DEV_JWT_SECRET, DevelopmentConfig, ProductionConfig, TestingConfig, get_config


@pytest.mark.parametrize("name, expected", [
    ("testing", TestingConfig),
    ("test", TestingConfig),
    ("prod", ProductionConfig),
    ("production", ProductionConfig),
    ("dev", DevelopmentConfig),
])
def test_get_config(name, expected):
    assert get_config(name) is expected


def test_testing_app(app):
    assert app.config["TESTING"] is True
    assert app.config["DATABASE_URL"] == "sqlite:///:memory:"


def test_production_refuses_development_secret(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET", DEV_JWT_SECRET)
    with pytest.raises(RuntimeError):
        create_app("production")


def test_missing_secret_is_fatal(monkeypatch):
    monkeypatch.setattr(TestingConfig, "JWT_SECRET", "")
    with pytest.raises(RuntimeError):
        create_app("testing")


def test_root(client):
    response = client.get('/')
    assert response.status_code == 200
    assert response.get_json()["docs"] == "/apidocs/"


def test_production_cookies_are_secure():
    assert ProductionConfig.COOKIE_SECURE is True
