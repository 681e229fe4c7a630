"""
Database engine, declarative base and session management.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.config import get_settings

settings = get_settings()

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)


class EntityMixin:
    """Dict conversion honouring a per-entity deny-list.

    Only relationships that were eagerly loaded are followed, so the shape of
    an entity is decided by the query that produced it.
    """

    __serialize_exclude__: frozenset = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        state = inspect(self)
        exclude = self.__serialize_exclude__
        data: Dict[str, Any] = {}
        for attr in state.mapper.column_attrs:
            if attr.key not in exclude:
                data[attr.key] = getattr(self, attr.key)
        for rel in state.mapper.relationships:
            if rel.key in exclude or rel.key in state.unloaded:
                continue
            value = getattr(self, rel.key)
            if rel.uselist:
                data[rel.key] = [item.to_dict() for item in value]
            else:
                data[rel.key] = value.to_dict() if value is not None else None
        return data


Base = declarative_base(cls=EntityMixin)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create all tables (dev only — use migrations in production).

    Model modules must be imported first so they are registered on ``Base``.
    """
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Session for work outside a request (scheduler jobs)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
