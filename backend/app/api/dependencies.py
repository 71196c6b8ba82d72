from enum import Enum
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import TokenService
from app.services.access_guard import AccessGuard, AuthenticatedUser
from app.services.auth_service import AuthService
from app.services.place_lookup import PlaceLookupClient
from app.services.restaurant_search import RestaurantSearchService

# Bearer scheme - extracts the token from "Authorization: Bearer <token>"
# auto_error=False so a missing or malformed header goes through the guard
bearer_scheme = HTTPBearer(auto_error=False)

# Built once from the process-wide settings and shared by every request
token_service = TokenService(settings)
place_lookup_client = PlaceLookupClient(settings)

CREDENTIALS_ERROR_MESSAGE = "Could not validate credentials"


class ValidRoles(str, Enum):
    user = "user"
    admin = "admin"


def credentials_exception() -> HTTPException:
    # Same body for every authentication failure so callers can't tell them apart
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=CREDENTIALS_ERROR_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_service() -> TokenService:
    return token_service


def get_place_lookup_client() -> PlaceLookupClient:
    return place_lookup_client


def get_auth_service(tokens: TokenService = Depends(get_token_service)) -> AuthService:
    return AuthService(tokens)


def get_access_guard(tokens: TokenService = Depends(get_token_service)) -> AccessGuard:
    return AccessGuard(tokens)


def get_restaurant_search_service(
    place_client: PlaceLookupClient = Depends(get_place_lookup_client),
) -> RestaurantSearchService:
    return RestaurantSearchService(place_client)


class RequireRoles:
    """
    Route dependency declaring which roles may call an operation.

    Resolves the caller through the access guard, stores it on
    request.state.user and returns it to the handler. With no roles given,
    any authenticated, active user is accepted.
    """

    def __init__(self, *roles: ValidRoles):
        self.required_roles = frozenset(
            role.value if isinstance(role, ValidRoles) else role for role in roles
        )

    def __call__(
        self,
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
        db: Session = Depends(get_db),
        guard: AccessGuard = Depends(get_access_guard),
    ) -> AuthenticatedUser:
        token = credentials.credentials if credentials else None
        try:
            user = guard.check(db, token, self.required_roles)
        except UnauthorizedError:
            raise credentials_exception()
        except ForbiddenError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        request.state.user = user
        return user
