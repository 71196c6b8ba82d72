import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchRecord(Base):
    """
    One restaurant search made by a user.

    Records are written once per search request and never updated.
    They disappear only when the owning user is deleted (cascade).
    """
    __tablename__ = "transaction"

    # Monotonic insertion counter; history is ordered by it
    seq = Column(Integer, primary_key=True, autoincrement=True)
    # Public identifier returned to clients
    id = Column(Uuid, unique=True, nullable=False, default=uuid.uuid4)
    # Free-form place name, address or "lat, lon" literal
    search_term = Column(String(30), nullable=False)
    # Search radius in meters
    radius = Column(Integer, nullable=False)
    user_id = Column(
        Uuid,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Set client-side in UTC when the search is made
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # No backref: history is queried on demand, users don't carry their records
    user = relationship("User")
