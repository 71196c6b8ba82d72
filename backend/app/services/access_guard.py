import logging
import uuid
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional
from sqlalchemy.orm import Session
from app.core.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from app.core.security import TokenService
from app.models.user import User
from app.services.credential_store import credential_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller resolved by the guard, handed to route handlers"""
    id: uuid.UUID
    name: str
    email: str
    roles: FrozenSet[str]

    @classmethod
    def from_model(cls, user: User) -> "AuthenticatedUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            roles=frozenset(user.roles or []),
        )


class AccessGuard:
    """
    Per-request authentication and role authorization.

    A request moves through token present -> token valid -> user loaded ->
    user active -> role authorized. Every failure before the role check is an
    UnauthorizedError; a failed role check is a ForbiddenError.
    """

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def authenticate(self, db: Session, token: Optional[str]) -> AuthenticatedUser:
        if not token:
            logger.debug("Rejected request without bearer token")
            raise UnauthorizedError("Missing token")

        try:
            user_id = self.token_service.user_id_from(token)
        except InvalidTokenError as e:
            logger.debug(f"Rejected invalid token: {e}")
            raise UnauthorizedError("Invalid token") from e

        # The user may have been deleted after the token was issued
        user = credential_store.get_by_id(db, user_id)
        if user is None:
            logger.debug(f"Rejected token for unknown user {user_id}")
            raise UnauthorizedError("Unknown user")

        # Logged-out users keep valid tokens; this check is what revokes them
        if not user.is_active:
            logger.debug(f"Rejected token for inactive user {user_id}")
            raise UnauthorizedError("Inactive user")

        return AuthenticatedUser.from_model(user)

    @staticmethod
    def authorize(user: AuthenticatedUser, required_roles: Iterable[str]) -> None:
        required = frozenset(required_roles)
        # No required roles means any authenticated, active user may proceed
        if required and required.isdisjoint(user.roles):
            logger.debug(f"User {user.id} lacks any of roles {sorted(required)}")
            raise ForbiddenError(f"User {user.name} lacks the required role")

    def check(self, db: Session, token: Optional[str], required_roles: Iterable[str]) -> AuthenticatedUser:
        user = self.authenticate(db, token)
        self.authorize(user, required_roles)
        return user
