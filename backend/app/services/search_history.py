import uuid
from typing import List
from sqlalchemy.orm import Session
from app.models.search_record import SearchRecord


class SearchHistoryRecorder:
    """Durable log of the searches each user makes"""

    @staticmethod
    def record(db: Session, term: str, radius: int, user_id: uuid.UUID) -> SearchRecord:
        """Persist a search before any provider call is made"""
        record = SearchRecord(search_term=term, radius=radius, user_id=user_id)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def list_for(db: Session, user_id: uuid.UUID) -> List[SearchRecord]:
        """
        Return the user's searches in the order they were made.

        Query failures propagate, so an empty list always means the user
        has no history yet.
        """
        return (
            db.query(SearchRecord)
            .filter(SearchRecord.user_id == user_id)
            .order_by(SearchRecord.seq)
            .all()
        )


search_history = SearchHistoryRecorder()
