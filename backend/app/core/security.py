import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.core.config import Settings
from app.core.errors import InvalidTokenError

# CryptContext handles password hashing using bcrypt
# bcrypt generates a salt per hash; 10 rounds is the minimum cost we accept
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


class TokenService:
    """Issues and verifies signed, time-bounded session tokens"""

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET
        self._algorithm = settings.ALGORITHM
        self._expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def issue(self, claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT carrying the given claims with an 'exp' claim added"""
        # Copy data to avoid mutating the caller's dict
        to_encode = claims.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or self._expires)
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def issue_for_user(self, user_id: uuid.UUID) -> str:
        """Create a token whose subject is the user's id"""
        return self.issue({"sub": str(user_id)})

    def verify(self, token: str) -> Dict[str, Any]:
        """Decode a JWT, checking signature and expiration"""
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            # Expired, tampered, signed with another key, or not a JWT at all
            raise InvalidTokenError(str(e)) from e

    def user_id_from(self, token: str) -> uuid.UUID:
        """Verify a token and return the user id from its 'sub' claim"""
        payload = self.verify(token)
        subject = payload.get("sub")
        if subject is None:
            raise InvalidTokenError("Token has no subject")
        try:
            return uuid.UUID(str(subject))
        except ValueError as e:
            raise InvalidTokenError("Token subject is not a user id") from e
