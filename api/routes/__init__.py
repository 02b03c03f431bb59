"""
API routes package for the Config Baskets engine.
"""
from api.routes import baskets

__all__ = ["baskets"]
