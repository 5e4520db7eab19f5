"""
Custom SQLAlchemy column types shared by PostgreSQL and SQLite.
"""

import uuid

from sqlalchemy import JSON, String, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB, UUID as PostgresUUID


class GUID(TypeDecorator):
    """
    Platform-independent GUID type.

    Stored as a native UUID on PostgreSQL and as String(36) elsewhere.
    Values are always returned as ``uuid.UUID``.
    """

    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgresUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class RepsSequence(TypeDecorator):
    """
    Ordered list of rep counts (pyramid programs).

    JSONB on PostgreSQL, JSON elsewhere. Entries are coerced to ``int`` on the
    way in so the evaluator never sums strings.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return [int(reps) for reps in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return [int(reps) for reps in value]
