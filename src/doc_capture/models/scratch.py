"""Database models for the capture scratch space.

This module contains the SQLAlchemy model backing the small key-value
store where the debounce guard keeps its cross-call memory.
"""

from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import declarative_base

__all__ = ["Base", "ScratchValue"]

Base = declarative_base()


class ScratchValue(Base):
    """SQLAlchemy model for one key-value pair of scratch state.

    Attributes:
        key: Primary key naming the value
        value: String-encoded value
        updated_at: Timestamp of the last write
    """
    __tablename__ = "scratch_values"

    key: str = Column(String(128), primary_key=True)
    value: str = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
