"""
Declarative base and shared columns for the ranking service models.
"""
from datetime import datetime

from sqlalchemy import DateTime, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base; every table of the service hangs off its metadata."""

    def __repr__(self) -> str:
        identity = inspect(self).identity
        key = ", ".join(str(part) for part in identity) if identity else "transient"
        return f"<{self.__class__.__name__}({key})>"


class TimestampMixin:
    """
    created_at / updated_at for source rows.

    Naive local time, matching BaseRepository.now(), so the age windows
    the ranker computes in Python compare cleanly with stored values.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.now,
        nullable=False,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.now,
        onupdate=datetime.now,
        nullable=True
    )
