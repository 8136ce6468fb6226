"""
Database session management.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from tripledger.core.config import settings
from tripledger.db.base import Base

_engine_options = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
if settings.DATABASE_URL.startswith("sqlite"):
    _engine_options["connect_args"] = {"check_same_thread": False}
else:
    _engine_options["pool_recycle"] = 3600

engine = create_engine(settings.DATABASE_URL, **_engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables."""
    import tripledger.models  # noqa: F401  registers every table on Base.metadata
    Base.metadata.create_all(bind=engine)
