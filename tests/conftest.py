import pytest

from api import create_app
from models import storage

PASSWORD = "Secret123"


@pytest.fixture
def app():
    """Fresh app and in-memory database per test."""
    app = create_app("testing")
    yield app
    with app.app_context():
        storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_data():
    return {
        "username": "alice",
        "email": "A@X.com",
        "password": PASSWORD,
        "firstName": "Alice",
        "lastName": "Runner",
    }


@pytest.fixture
def registered(client, user_data):
    """Register alice and return the response body."""
    resp = client.post("/api/auth/register", json=user_data)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def login(client, identifier="a@x.com", password=PASSWORD):
    return client.post("/api/auth/login", json={"identifier": identifier, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
