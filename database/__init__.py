# Config Baskets v1.0.0
"""
Database package for the Config Baskets engine.

Supports multiple SQL backends:
- SQLite (default)
- PostgreSQL
- MySQL
"""
from database.connection import (
    Base, engine, SessionLocal, get_db, init_db,
    get_database_type
)
from database.models import (
    Basket, OwnerType,
    BasketSnapshot,
    BasketContent,
    ConfigObject
)

__all__ = [
    "Base", "engine", "SessionLocal", "get_db", "init_db",
    "get_database_type",
    "Basket", "OwnerType",
    "BasketSnapshot",
    "BasketContent",
    "ConfigObject"
]
