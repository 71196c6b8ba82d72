import logging
import uuid
from typing import Dict
from sqlalchemy.orm import Session
from app.core.errors import DuplicateIdentityError, InvalidCredentialError, NotFoundError
from app.core.security import TokenService, get_password_hash, verify_password
from app.services.credential_store import credential_store

logger = logging.getLogger(__name__)

LOGOUT_MESSAGE = "User logged out successfully"


class AuthService:
    """
    Registration, login and logout.

    Session state lives in the user's is_active flag: logout switches it off
    and the next successful login switches it back on. Tokens themselves are
    never revoked; the access guard rejects them while the user is inactive.
    """

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def register(self, db: Session, name: str, email: str, password: str) -> Dict[str, str]:
        """Create a user and return its email with a fresh token"""
        # Explicit check so the common duplicate case never reaches the insert
        if credential_store.email_exists(db, email):
            raise DuplicateIdentityError(email)

        user = credential_store.create(
            db,
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
        )
        logger.info(f"Registered user {user.id}")

        return {
            "email": user.email,
            "token": self.token_service.issue_for_user(user.id),
        }

    def login(self, db: Session, email: str, password: str) -> Dict[str, str]:
        """Check credentials, reactivate the user if needed, and issue a token"""
        user = credential_store.get_by_email(db, email, with_secret=True)
        if user is None:
            raise NotFoundError(email)

        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialError(email)

        if not user.is_active:
            credential_store.set_active(db, user, True)
            logger.info(f"Reactivated user {user.id} on login")

        return {"token": self.token_service.issue_for_user(user.id)}

    def logout(self, db: Session, user_id: uuid.UUID) -> Dict[str, str]:
        """Mark the user inactive so existing tokens stop being honored"""
        user = credential_store.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError(str(user_id))

        credential_store.set_active(db, user, False)
        logger.info(f"Logged out user {user.id}")
        return {"message": LOGOUT_MESSAGE}
