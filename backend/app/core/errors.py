"""
Domain errors raised by the service layer.

Route modules translate these into HTTP responses. Services never raise
HTTPException themselves so they can be exercised without a request.
"""


class AppError(Exception):
    """Base class for all domain errors"""


class DuplicateIdentityError(AppError):
    """A user with the same email already exists"""


class NotFoundError(AppError):
    """The referenced user does not exist"""


class InvalidCredentialError(AppError):
    """The supplied password does not match the stored hash"""


class InvalidTokenError(AppError):
    """Token signature, expiry or claims are not valid"""


class UnauthorizedError(AppError):
    """Request could not be tied to an active, authenticated user"""


class ForbiddenError(AppError):
    """Authenticated user lacks every role the operation accepts"""


class ExternalServiceError(AppError):
    """The geocoding/places provider failed or answered with garbage"""
