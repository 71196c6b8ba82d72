from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings

# Create database engine - manages connection pool
# The engine does not connect until the first session uses it
engine = create_engine(settings.database_url, echo=settings.DB_ECHO)

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    This is a FastAPI dependency that provides a database session to route handlers.
    The session is automatically closed after the request completes (via finally block).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always close session, even if request raises an exception
        db.close()
