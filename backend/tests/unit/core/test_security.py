"""
Tests for password hashing and JWT helpers
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException

from lecture_reports.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
    build_token_claims,
)
from lecture_reports.models.user import User


class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = get_password_hash("password123")
        assert hashed != "password123"
        assert verify_password("password123", hashed)

    def test_wrong_password_rejected(self):
        hashed = get_password_hash("password123")
        assert not verify_password("password124", hashed)

    def test_empty_hash_rejected(self):
        assert not verify_password("password123", "")

    def test_hashes_are_salted(self):
        assert get_password_hash("same") != get_password_hash("same")


class TestTokens:

    @pytest.fixture
    def user(self):
        return User(id=7, email="lecturer@luct.ac.ls", role="Lecturer", first_name="Thabo", last_name="Borotho")

    def test_claims(self, user):
        claims = build_token_claims(user)
        assert claims == {
            "sub": "7",
            "email": "lecturer@luct.ac.ls",
            "role": "Lecturer",
            "first_name": "Thabo",
            "last_name": "Borotho",
        }

    def test_access_token_round_trip(self, user):
        payload = decode_token(create_access_token(build_token_claims(user)))
        assert payload["sub"] == "7"
        assert payload["role"] == "Lecturer"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_refresh_token_type(self, user):
        payload = decode_token(create_refresh_token(build_token_claims(user)))
        assert payload["type"] == "refresh"

    def test_expired_token_raises_401(self, user):
        token = create_access_token(build_token_claims(user), expires_delta=timedelta(seconds=-10))
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.status_code == 401

    def test_garbage_token_raises_401(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not-a-jwt")
        assert exc_info.value.status_code == 401
