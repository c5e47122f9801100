"""
SQLAlchemy declarative base.

This is the foundation for all database models.
All models inherit from this Base class.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.
    
    Every collection table inherits from this class so alembic and the
    data store see the same metadata.
    """
    pass
