import time
import uuid
from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.errors import InvalidTokenError
from app.core.security import TokenService, get_password_hash, verify_password


def test_password_hash_is_salted_and_verifiable():
    first = get_password_hash("Secret123")
    second = get_password_hash("Secret123")

    assert first != "Secret123"
    assert first != second
    assert verify_password("Secret123", first)
    assert not verify_password("Secret124", first)


def test_password_hash_uses_cost_factor_ten_or_more():
    hashed = get_password_hash("Secret123")
    # bcrypt hashes look like $2b$<cost>$...
    cost = int(hashed.split("$")[2])
    assert cost >= 10


def test_issued_token_carries_user_id(token_service):
    user_id = uuid.uuid4()
    token = token_service.issue_for_user(user_id)

    assert token_service.user_id_from(token) == user_id


def test_token_expires_after_two_hours(token_service):
    token = token_service.issue({"sub": "abc"})
    claims = jwt.get_unverified_claims(token)
    issued_window = claims["exp"] - int(time.time())

    assert 2 * 3600 - 60 <= issued_window <= 2 * 3600


def test_verify_rejects_expired_token(token_service):
    token = token_service.issue({"sub": str(uuid.uuid4())}, expires_delta=timedelta(seconds=-1))

    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


def test_verify_rejects_token_signed_with_other_secret(token_service):
    other = TokenService(settings.model_copy(update={"JWT_SECRET": "another-secret"}))
    token = other.issue_for_user(uuid.uuid4())

    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


def test_verify_rejects_garbage(token_service):
    with pytest.raises(InvalidTokenError):
        token_service.verify("not-a-jwt")


def test_user_id_from_requires_subject(token_service):
    token = token_service.issue({"role": "user"})

    with pytest.raises(InvalidTokenError):
        token_service.user_id_from(token)


def test_user_id_from_rejects_non_uuid_subject(token_service):
    token = token_service.issue({"sub": "42"})

    with pytest.raises(InvalidTokenError):
        token_service.user_id_from(token)


def test_issue_does_not_mutate_claims(token_service):
    claims = {"sub": "abc"}
    token_service.issue(claims)

    assert claims == {"sub": "abc"}
