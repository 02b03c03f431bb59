# Config Baskets v1.0.0
"""
Services package for the Config Baskets engine.
Contains the basket registry, snapshot, restore and purge engines.
"""
from services.repository import (
    ObjectRepository,
    SqlObjectRepository,
    InMemoryObjectRepository
)

__all__ = [
    "ObjectRepository",
    "SqlObjectRepository",
    "InMemoryObjectRepository"
]
