"""Database persistence infrastructure.

- Base model and mixins for all database models
- Database connection and session management
- Models and repository implementations for abuse and usage data
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.database import Database

__all__ = [
    "BaseModel",
    "Database",
]
