import uuid

import pytest

from app.core.errors import DuplicateIdentityError, InvalidCredentialError, NotFoundError
from app.models.user import User
from app.services.auth_service import LOGOUT_MESSAGE
from app.services.credential_store import credential_store

PASSWORD = "Secret123"


def register(auth_service, db, email="ana@example.com"):
    return auth_service.register(db, name="Ana Maria", email=email, password=PASSWORD)


def test_register_returns_email_and_token_for_new_user(auth_service, token_service, db):
    result = register(auth_service, db)

    user = credential_store.get_by_email(db, "ana@example.com")
    assert set(result) == {"email", "token"}
    assert result["email"] == "ana@example.com"
    assert token_service.user_id_from(result["token"]) == user.id


def test_register_defaults_active_and_user_role(auth_service, db):
    register(auth_service, db)

    user = credential_store.get_by_email(db, "ana@example.com", with_secret=True)
    assert user.is_active is True
    assert user.roles == ["user"]
    assert user.hashed_password != PASSWORD


def test_register_duplicate_email_fails_and_keeps_one_record(auth_service, db):
    register(auth_service, db)

    with pytest.raises(DuplicateIdentityError):
        register(auth_service, db)

    assert db.query(User).filter(User.email == "ana@example.com").count() == 1


def test_store_constraint_catches_registration_race(db):
    credential_store.create(db, name="First", email="race@example.com", hashed_password="x")

    # Second insert skips the existence check, as a racing request would
    with pytest.raises(DuplicateIdentityError):
        credential_store.create(db, name="Second", email="race@example.com", hashed_password="y")

    assert db.query(User).filter(User.email == "race@example.com").count() == 1


def test_email_match_is_case_sensitive(auth_service, db):
    register(auth_service, db)

    register(auth_service, db, email="Ana@example.com")

    assert db.query(User).count() == 2


def test_login_token_embeds_registered_user_id(auth_service, token_service, db):
    register(auth_service, db)
    user = credential_store.get_by_email(db, "ana@example.com")

    result = auth_service.login(db, "ana@example.com", PASSWORD)

    assert set(result) == {"token"}
    assert token_service.user_id_from(result["token"]) == user.id


def test_login_reactivates_inactive_user(auth_service, db):
    register(auth_service, db)
    user = credential_store.get_by_email(db, "ana@example.com")
    credential_store.set_active(db, user, False)

    auth_service.login(db, "ana@example.com", PASSWORD)

    db.refresh(user)
    assert user.is_active is True


def test_login_unknown_email_is_not_found(auth_service, db):
    with pytest.raises(NotFoundError):
        auth_service.login(db, "nobody@example.com", PASSWORD)


def test_login_wrong_password_changes_nothing(auth_service, db):
    register(auth_service, db)
    user = credential_store.get_by_email(db, "ana@example.com")
    credential_store.set_active(db, user, False)

    with pytest.raises(InvalidCredentialError):
        auth_service.login(db, "ana@example.com", "Wrong1234")

    db.refresh(user)
    assert user.is_active is False


def test_logout_deactivates_user(auth_service, db):
    register(auth_service, db)
    user = credential_store.get_by_email(db, "ana@example.com")

    result = auth_service.logout(db, user.id)

    db.refresh(user)
    assert result == {"message": LOGOUT_MESSAGE}
    assert user.is_active is False


def test_logout_unknown_user_is_not_found(auth_service, db):
    with pytest.raises(NotFoundError):
        auth_service.logout(db, uuid.uuid4())


def test_default_reads_do_not_load_password_hash(auth_service, db):
    register(auth_service, db)
    db.expunge_all()

    user = credential_store.get_by_email(db, "ana@example.com")

    assert "hashed_password" not in user.__dict__
