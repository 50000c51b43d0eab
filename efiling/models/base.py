"""
Base model classes and common fields
"""

import json
import uuid
from datetime import datetime

from sqlalchemy import CHAR, Column, DateTime, Text, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB as PostgresJSONB
from sqlalchemy.dialects.postgresql import UUID as PostgresUUID
from sqlalchemy.sql import func

from efiling.db.database import Base
from efiling.services.role_matcher import normalize_role_codes


class DateTimeEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles datetime and UUID objects"""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, uuid.UUID):
            return str(obj)
        return super().default(obj)


class GUID(TypeDecorator):
    """
    Platform-independent GUID type.
    Uses PostgreSQL's UUID type when available, otherwise uses CHAR(36).
    Values always come back as strings so ids compare the same on every backend.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgresUUID(as_uuid=False))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        # Request ids are validated by EntityId before they reach a query
        try:
            return str(uuid.UUID(str(value)))
        except ValueError:
            return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return str(value)


class JSON(TypeDecorator):
    """
    Platform-independent JSON type.
    Uses PostgreSQL's JSONB type when available, otherwise uses TEXT.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgresJSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if dialect.name == "postgresql":
            return value
        return json.dumps(value, cls=DateTimeEncoder)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if dialect.name == "postgresql":
            return value
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value


class RoleCodeList(JSON):
    """JSON column holding role-code patterns, always read and written as list[str]"""

    cache_ok = True

    def process_bind_param(self, value, dialect):
        return super().process_bind_param(normalize_role_codes(value), dialect)

    def process_result_value(self, value, dialect):
        return normalize_role_codes(super().process_result_value(value, dialect))


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""

    created_at = Column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        server_default=func.now(),
        nullable=False,
    )


class UUIDMixin:
    """Mixin for UUID primary key"""

    id = Column(GUID(), primary_key=True, default=lambda: str(uuid.uuid4()), nullable=False)


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """Base model with UUID primary key and timestamps"""

    __abstract__ = True
