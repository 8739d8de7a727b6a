"""
Database models package - SQLAlchemy ORM models
"""

from .collection import Collection

__all__ = ["Collection"]
