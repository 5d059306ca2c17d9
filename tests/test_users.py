import pytest

from api import create_app
from api.config import TestingConfig
from conftest import bearer


class TestProfile:

    def test_get_profile(self, client, registered):
        resp = client.get("/api/users/profile")
        assert resp.status_code == 200
        user = resp.get_json()["data"]["user"]
        assert user["firstName"] == "Alice"
        assert user["activityLevel"] == "moderately_active"

    def test_update_profile(self, client, registered):
        resp = client.put(
            "/api/users/profile",
            json={"firstName": "Alicia", "height": 170, "gender": "female", "dateOfBirth": "1990-05-01"},
        )
        assert resp.status_code == 200
        user = resp.get_json()["data"]["user"]
        assert user["firstName"] == "Alicia"
        assert user["height"] == 170
        assert user["dateOfBirth"] == "1990-05-01"

    def test_null_profile_picture_clears_it(self, client, registered):
        client.put("/api/users/profile", json={"profilePicture": "https://img.example/a.png"})
        resp = client.put("/api/users/profile", json={"profilePicture": None})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["user"]["profilePicture"] == ""

    @pytest.mark.parametrize(
        "payload",
        [{"height": 10}, {"weight": 900}, {"gender": "robot"}, {"dateOfBirth": "2999-01-01"}],
    )
    def test_update_profile_validation(self, client, registered, payload):
        resp = client.put("/api/users/profile", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Validation failed"

    def test_profile_requires_auth(self, app):
        assert app.test_client().get("/api/users/profile").status_code == 401


class TestPublicProfile:

    def test_anonymous_view(self, app, registered):
        resp = app.test_client().get("/api/users/alice")
        assert resp.status_code == 200
        user = resp.get_json()["data"]["user"]
        assert user["username"] == "alice"
        assert user["isOwnProfile"] is False
        assert "email" not in user

    def test_owner_view(self, client, registered):
        resp = client.get(f"/api/users/{registered['data']['user']['id']}")
        assert resp.status_code == 200
        user = resp.get_json()["data"]["user"]
        assert user["isOwnProfile"] is True
        assert user["email"] == "a@x.com"

    def test_invalid_token_still_served(self, app, registered):
        resp = app.test_client().get("/api/users/alice", headers=bearer("broken"))
        assert resp.status_code == 200
        assert resp.get_json()["data"]["user"]["isOwnProfile"] is False

    def test_unknown_user(self, client):
        resp = client.get("/api/users/ghost")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "User not found"


class TestApp:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "ok"
        assert body["db"] == "connected"
        assert body["environment"] == "test"

    def test_unknown_route_envelope(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"success": False, "message": "Route /api/nope not found", "error": "NOT_FOUND"}

    def test_identical_secrets_are_rejected(self, monkeypatch):
        monkeypatch.setattr(TestingConfig, "JWT_REFRESH_SECRET", TestingConfig.JWT_SECRET)
        with pytest.raises(RuntimeError):
            create_app("testing")
