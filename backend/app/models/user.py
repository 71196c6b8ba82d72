import uuid
from sqlalchemy import Column, String, DateTime, Boolean, JSON, Uuid
from sqlalchemy.orm import deferred
from sqlalchemy.sql import func
from app.core.database import Base

DEFAULT_ROLES = ["user"]


class User(Base):
    """
    User model representing application users.

    Stores authentication credentials, session state and roles.
    Passwords are stored as hashes (never plaintext).
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    # Email is unique and indexed for fast lookups during login
    email = Column(String, unique=True, index=True, nullable=False)
    # Deferred so regular reads never load the hash; login undefers it explicitly
    hashed_password = deferred(Column(String, nullable=False))
    # is_active is flipped off on logout and back on at the next login
    is_active = Column(Boolean, nullable=False, default=True)
    roles = Column(JSON, nullable=False, default=lambda: list(DEFAULT_ROLES))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email})"
