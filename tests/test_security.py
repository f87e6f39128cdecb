"""Password hashing and access tokens."""
import jwt
import pytest

from auth import security


def test_hash_and_verify_password() -> None:
    hashed = security.hash_password("pass1234")
    assert hashed != "pass1234"
    assert security.verify_password("pass1234", hashed) is True
    assert security.verify_password("wrong", hashed) is False
    assert security.verify_password("pass1234", "not-a-hash") is False


def test_empty_password_rejected() -> None:
    with pytest.raises(security.AuthSecurityError):
        security.hash_password("")


def test_access_token_round_trip() -> None:
    token = security.build_access_token(7)
    assert security.token_subject(token) == 7


def test_token_with_wrong_secret_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    token = security.build_access_token(7)
    monkeypatch.setenv("JWT_SECRET", "another-secret")
    with pytest.raises(security.AuthSecurityError):
        security.token_subject(token)


def test_non_access_token_rejected() -> None:
    token = jwt.encode({"sub": "7", "type": "refresh"}, security.jwt_secret(), algorithm="HS256")
    with pytest.raises(security.AuthSecurityError):
        security.decode_access_token(token)


def test_expired_token_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MIN", "-5")
    token = security.build_access_token(7)
    with pytest.raises(security.AuthSecurityError):
        security.decode_access_token(token)
