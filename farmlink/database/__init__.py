from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.database.engine import async_session, engine
from farmlink.database.session import get_db
from farmlink.database.unit_of_work import UnitOfWork

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "UnitOfWork",
    "async_session",
    "engine",
    "get_db",
]
