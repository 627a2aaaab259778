"""Declarative base for the admission tables.

Two shapes of table exist:

    BaseModel (id, created_at)
        ├── BaseMutableModel (+ updated_at)
        │   └── IPAbuseModel         one row per IP, counters updated in place
        ├── ApiUsageModel            append-only usage log
        └── DomainSearchModel        append-only analytics log

Models are infrastructure details. Domain entities never inherit from them;
repositories map rows to IPAbuseRecord and friends.
"""

from datetime import UTC, datetime
from uuid import UUID as PythonUUID, uuid4

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class BaseModel(DeclarativeBase):
    """Root of every admission table: UUID key plus insert timestamp."""

    __abstract__ = True

    id: Mapped[PythonUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id})>"


class BaseMutableModel(BaseModel):
    """Base for rows updated in place (abuse counters, block state).

    updated_at is refreshed by SQLAlchemy on every ORM or Core UPDATE
    issued through the model's table.
    """

    __abstract__ = True

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a timestamp read from the database to aware UTC.

    SQLite returns naive values (stored as UTC); PostgreSQL returns aware
    ones in the session time zone.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
