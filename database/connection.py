"""
Database connection and session management.

Supports multiple database backends:
- SQLite (default, file-based)
- PostgreSQL
- MySQL
"""
import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from config import settings

logger = logging.getLogger(__name__)


def get_database_type() -> str:
    """Determine database type from URL."""
    url = settings.DATABASE_URL.lower()
    if url.startswith("sqlite"):
        return "sqlite"
    elif url.startswith("postgresql") or url.startswith("postgres"):
        return "postgresql"
    elif url.startswith("mysql"):
        return "mysql"
    else:
        return "unknown"


def create_db_engine():
    """Create database engine with appropriate settings for the database type."""
    db_type = get_database_type()

    if db_type == "sqlite":
        # SQLite - simple file-based, no connection pooling
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG
        )
    else:
        # Production databases - use connection pooling
        return create_engine(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_pre_ping=True,  # Verify connections before use
            echo=settings.DEBUG
        )


engine = create_db_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency for FastAPI to get database sessions."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _ensure_sqlite_directory():
    """SQLite does not create missing parent directories of its file."""
    database = make_url(settings.DATABASE_URL).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def init_db(bind=None):
    """Initialize database tables."""
    from database.models import Basket, BasketContent, BasketSnapshot, ConfigObject

    if bind is None:
        if get_database_type() == "sqlite":
            _ensure_sqlite_directory()
        bind = engine

    Base.metadata.create_all(bind=bind)
    logger.info(f"Database initialized: {get_database_type()}")
