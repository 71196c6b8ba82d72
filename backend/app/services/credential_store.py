import logging
import uuid
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer
from app.core.errors import DuplicateIdentityError
from app.models.user import User, DEFAULT_ROLES

logger = logging.getLogger(__name__)


class CredentialStore:
    """Single-row reads and writes of user records"""

    @staticmethod
    def get_by_email(db: Session, email: str, with_secret: bool = False) -> Optional[User]:
        """Find a user by exact email. The password hash is only loaded on request."""
        query = db.query(User).filter(User.email == email)
        if with_secret:
            query = query.options(undefer(User.hashed_password))
        return query.first()

    @staticmethod
    def get_by_id(db: Session, user_id: uuid.UUID) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def email_exists(db: Session, email: str) -> bool:
        return db.query(User.id).filter(User.email == email).first() is not None

    @staticmethod
    def create(db: Session, name: str, email: str, hashed_password: str) -> User:
        """
        Insert a new active user with the default roles.

        The unique constraint on email is the final authority: if two
        registrations race past the existence check, the losing insert
        fails here and surfaces as DuplicateIdentityError.
        """
        db_user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            is_active=True,
            roles=list(DEFAULT_ROLES),
        )
        db.add(db_user)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.info(f"Lost registration race for {email}")
            raise DuplicateIdentityError(email) from e
        # Refresh to load server-generated fields (timestamps)
        db.refresh(db_user)
        return db_user

    @staticmethod
    def set_active(db: Session, user: User, active: bool) -> User:
        user.is_active = active
        db.commit()
        db.refresh(user)
        return user


credential_store = CredentialStore()
