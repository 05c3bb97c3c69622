"""
Database Infrastructure
=======================

Engine configuration, session lifecycle and schema creation.

Uses SQLAlchemy 2.0 in synchronous mode: the ticket store is synchronous,
so the repository saves inside the same call that mutated it. Engines and
session factories are created by the application and passed around; there
is no module-level engine.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    SQLAlchemy 2.0 style using DeclarativeBase.
    """
    pass


def init_database(database_url: str, echo: bool = False) -> Engine:
    """
    Create the database engine.

    Args:
        database_url: SQLAlchemy URL (e.g. sqlite:///tickets.db)
        echo: Log emitted SQL
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        # sync handlers may run on a thread pool
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Prevent lazy loading after commit
        autoflush=False,
    )


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """
    Transactional session: commits on success, rolls back on error.

    Usage:
        with session_scope(factory) as session:
            session.add(model)
    """
    with session_factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def create_tables(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    # Models register themselves on Base.metadata when imported
    import sla_tracker.sla.infrastructure.models  # noqa: F401

    Base.metadata.create_all(engine)


def close_database(engine: Engine) -> None:
    """Dispose of pooled connections."""
    engine.dispose()
