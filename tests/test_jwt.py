"""Token issuer tests — issue, verify, expiry, tampering."""

import secrets
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from keepmark.auth.jwt import (
    TokenError,
    TokenExpired,
    TokenIssuer,
    TokenMalformed,
    TokenSignatureInvalid,
)
from keepmark.config import Settings

SECRET = secrets.token_urlsafe(32)


@pytest.fixture
def issuer():
    return TokenIssuer(SECRET, expires_minutes=15)


def _tamper_signature(token: str) -> str:
    head, _, sig = token.rpartition(".")
    swapped = "A" if sig[0] != "A" else "B"
    return f"{head}.{swapped}{sig[1:]}"


def test_issue_then_verify(issuer):
    token = issuer.issue(42, email="alice@test.io")
    assert issuer.verify(token) == 42


def test_payload_claims(issuer):
    token = issuer.issue(7, email="a@test.io")
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "7"
    assert payload["email"] == "a@test.io"
    assert payload["exp"] > payload["iat"]


def test_expired_token(issuer):
    token = issuer.issue(42, expires_minutes=-1)
    with pytest.raises(TokenExpired):
        issuer.verify(token)


def test_tampered_signature(issuer):
    token = _tamper_signature(issuer.issue(42))
    with pytest.raises(TokenSignatureInvalid):
        issuer.verify(token)


def test_tampered_payload_fails_signature(issuer):
    """Swap in another user's payload but keep the original signature."""
    real = issuer.issue(1)
    other = issuer.issue(2)
    forged = ".".join([real.split(".")[0], other.split(".")[1], real.split(".")[2]])
    with pytest.raises(TokenSignatureInvalid):
        issuer.verify(forged)


def test_other_secret_rejected(issuer):
    foreign = TokenIssuer(secrets.token_urlsafe(32)).issue(42)
    with pytest.raises(TokenSignatureInvalid):
        issuer.verify(foreign)


def test_expired_with_bad_signature_reports_signature(issuer):
    """Signature is checked before expiry."""
    token = _tamper_signature(issuer.issue(42, expires_minutes=-5))
    with pytest.raises(TokenSignatureInvalid):
        issuer.verify(token)


def test_garbage_is_malformed(issuer):
    with pytest.raises(TokenMalformed):
        issuer.verify("definitely.not.a-jwt")
    with pytest.raises(TokenMalformed):
        issuer.verify("")


def test_non_numeric_subject_is_malformed(issuer):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "alice", "exp": now + timedelta(minutes=5)}, SECRET, algorithm="HS256"
    )
    with pytest.raises(TokenMalformed):
        issuer.verify(token)


def test_missing_exp_is_malformed(issuer):
    token = jwt.encode({"sub": "42"}, SECRET, algorithm="HS256")
    with pytest.raises(TokenMalformed):
        issuer.verify(token)


def test_alg_none_rejected(issuer):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "42", "exp": now + timedelta(minutes=5)}, None, algorithm="none"
    )
    with pytest.raises(TokenError):
        issuer.verify(token)


def test_empty_secret_refused():
    with pytest.raises(ValueError):
        TokenIssuer("")


def test_from_settings():
    settings = Settings(
        jwt_secret=SECRET, access_token_expire_minutes=30, environment="test"
    )
    issuer = TokenIssuer.from_settings(settings)
    assert issuer.expires_minutes == 30
    assert issuer.algorithm == "HS256"
    assert issuer.verify(issuer.issue(5)) == 5
