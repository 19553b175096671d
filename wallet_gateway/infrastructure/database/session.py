"""Database session management with connection pooling"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from wallet_gateway.config import settings

# Engine is created lazily: the default backend is the hosted REST store
_engine = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_engine():
    global _engine
    if _engine is None:
        # Recycle after 1 hour to avoid stale connections
        _engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=10,
            pool_recycle=3600,
        )
        SessionLocal.configure(bind=_engine)
    return _engine


def get_db() -> Session:
    """Dependency injection for database sessions"""
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
