from datetime import timedelta
from types import SimpleNamespace

import jwt
import pytest

from api.config import parse_duration
from utils.exceptions import TokenExpired, TokenInvalid
from utils.security import (
    ACCESS,
    REFRESH,
    decode_token,
    hash_password,
    issue_token_pair,
    token_digest,
    verify_password,
)

USER = SimpleNamespace(id="42", email="a@x.com", username="alice")


class TestPasswordHashing:

    @pytest.mark.parametrize("password", ["Secret123", "pässwörd-ÜNICODE-1", "x" * 200])
    def test_hash_is_one_way(self, password):
        hashed = hash_password(password)
        assert hashed != password
        assert password not in hashed
        assert verify_password(password, hashed)
        assert not verify_password(password + "!", hashed)

    def test_same_password_gets_different_salts(self):
        assert hash_password("Secret123") != hash_password("Secret123")

    def test_missing_hash_never_verifies(self):
        assert verify_password("not-a-real-password", None) is False
        assert verify_password("Secret123", None) is False

    def test_garbage_hash_does_not_raise(self):
        assert verify_password("Secret123", "not-an-argon2-hash") is False


class TestTokens:

    def test_pair_carries_identity_claims(self, app):
        with app.app_context():
            pair = issue_token_pair(USER)
            access = decode_token(pair.access_token, ACCESS)
            refresh = decode_token(pair.refresh_token, REFRESH)
        for claims in (access, refresh):
            assert (claims["id"], claims["email"], claims["username"]) == ("42", "a@x.com", "alice")
        assert refresh["exp"] - access["exp"] > 6 * 24 * 3600

    def test_tokens_use_different_secrets(self, app):
        with app.app_context():
            pair = issue_token_pair(USER)
            with pytest.raises(TokenInvalid):
                decode_token(pair.access_token, REFRESH)
            with pytest.raises(TokenInvalid):
                decode_token(pair.refresh_token, ACCESS)

    def test_pairs_issued_together_are_distinct(self, app):
        with app.app_context():
            first = issue_token_pair(USER)
            second = issue_token_pair(USER)
        assert first.refresh_token != second.refresh_token
        assert first.access_token != second.access_token

    def test_expired_and_malformed_are_different_errors(self, app):
        with app.app_context():
            expired = jwt.encode(
                {"id": "42", "type": "access", "iss": "fittrack-api", "iat": 1, "exp": 2},
                app.config["JWT_SECRET"],
                algorithm="HS256",
            )
            with pytest.raises(TokenExpired):
                decode_token(expired, ACCESS)
            with pytest.raises(TokenInvalid):
                decode_token("not.a.jwt", ACCESS)
            tampered = issue_token_pair(USER).access_token[:-2] + "xx"
            with pytest.raises(TokenInvalid):
                decode_token(tampered, ACCESS)

    def test_wrong_type_claim_is_invalid(self, app):
        with app.app_context():
            token = jwt.encode(
                {"id": "42", "type": "refresh", "iss": "fittrack-api", "iat": 1, "exp": 4102444800},
                app.config["JWT_SECRET"],
                algorithm="HS256",
            )
            with pytest.raises(TokenInvalid):
                decode_token(token, ACCESS)

    @pytest.mark.parametrize("issuer", [None, "someone-else"])
    def test_foreign_or_missing_issuer_is_invalid(self, app, issuer):
        claims = {"id": "42", "type": "access", "iat": 1, "exp": 4102444800}
        if issuer:
            claims["iss"] = issuer
        with app.app_context():
            token = jwt.encode(claims, app.config["JWT_SECRET"], algorithm="HS256")
            with pytest.raises(TokenInvalid):
                decode_token(token, ACCESS)

    def test_digest_is_stable_and_not_the_token(self):
        assert token_digest("abc") == token_digest("abc")
        assert token_digest("abc") != "abc"
        assert len(token_digest("abc")) == 64


class TestParseDuration:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("15m", timedelta(minutes=15)),
            ("7d", timedelta(days=7)),
            ("1h", timedelta(hours=1)),
            ("30s", timedelta(seconds=30)),
            ("3600", timedelta(seconds=3600)),
            ("2w", timedelta(weeks=2)),
            ("500ms", timedelta(milliseconds=500)),
            (90, timedelta(seconds=90)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "soon", "15 minutes", "-5m"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)
