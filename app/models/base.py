"""Declarative base and column mixins shared by the storefront tables"""

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, declared_attr
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional
import enum
import uuid

from app.utils.helpers import utcnow

class Base(DeclarativeBase):
    pass

class TimestampedModel:
    """created_at / updated_at as naive UTC, stamped by the application"""

    @declared_attr
    def created_at(cls):
        return Column(DateTime, nullable=False, default=utcnow, index=True)

    @declared_attr
    def updated_at(cls):
        return Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

class UUIDModel:
    """UUID primary key, portable across PostgreSQL and SQLite"""

    @declared_attr
    def id(cls):
        return Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        # Money keeps its exact scale as a string
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value

class SerializableModel:
    """Row to JSON-friendly dict, used for cached payloads"""

    def to_dict(self, exclude: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        skipped = set(exclude or ())
        return {
            column.name: _jsonable(getattr(self, column.name))
            for column in self.__table__.columns
            if column.name not in skipped
        }

    def __repr__(self):
        keys = ", ".join(
            f"{column.name}={getattr(self, column.name)!r}"
            for column in self.__table__.primary_key.columns
        )
        return f"<{self.__class__.__name__}({keys})>"

__all__ = [
    'Base',
    'TimestampedModel',
    'UUIDModel',
    'SerializableModel',
]
