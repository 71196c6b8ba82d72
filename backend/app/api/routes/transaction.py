import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field
from app.core.database import get_db
from app.core.errors import ExternalServiceError
from app.api.dependencies import RequireRoles, ValidRoles, get_restaurant_search_service
from app.models.search_record import SearchRecord
from app.services.access_guard import AuthenticatedUser
from app.services.restaurant_search import DEFAULT_RADIUS, RestaurantSearchService
from app.services.search_history import search_history

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transaction", tags=["transaction"])

NO_RECORDS_MESSAGE = "No records found"
# Upper bound keeps the provider's circle filter within a city-sized area
MAX_RADIUS_METERS = 50_000


class SearchRequest(BaseModel):
    search_term: str = Field(..., alias="searchTerm", min_length=1, max_length=30)
    # Radius in meters around the resolved point
    radius: int = Field(DEFAULT_RADIUS, ge=1, le=MAX_RADIUS_METERS)

    model_config = ConfigDict(populate_by_name=True)


def serialize_record(record: SearchRecord) -> Dict[str, Any]:
    return {
        "id": str(record.id),
        "searchTerm": record.search_term,
        "radius": record.radius,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
    }


@router.post("/search", status_code=status.HTTP_201_CREATED)
def search_restaurants(
    search: SearchRequest,
    current_user: AuthenticatedUser = Depends(RequireRoles(ValidRoles.user)),
    db: Session = Depends(get_db),
    search_service: RestaurantSearchService = Depends(get_restaurant_search_service),
):
    """Search restaurants around a place name, address or "lat, lon" pair"""
    try:
        return search_service.search(
            db,
            user_id=current_user.id,
            term=search.search_term,
            radius=search.radius,
        )
    except ExternalServiceError:
        # Detail stays generic; the cause is in the log
        logger.exception(f"Restaurant search failed for user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Error searching restaurants"
        )


@router.get("/history")
def list_search_history(
    current_user: AuthenticatedUser = Depends(RequireRoles(ValidRoles.user)),
    db: Session = Depends(get_db),
):
    """List the current user's searches, oldest first"""
    records = search_history.list_for(db, current_user.id)
    if not records:
        # Explicit marker so "no history yet" never looks like a failed query
        return {"message": NO_RECORDS_MESSAGE}
    return [serialize_record(record) for record in records]
