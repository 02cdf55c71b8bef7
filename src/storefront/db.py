import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from flask import Flask, current_app, g
from sqlalchemy import BigInteger, Integer, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.config import DatabaseConfig
from storefront.core.exceptions import ConflictError, DatabaseError

logger = logging.getLogger(__name__)

Base = declarative_base()

# SQLite only auto-increments INTEGER PRIMARY KEY columns
BigIntId = BigInteger().with_variant(Integer, "sqlite")

EXTENSION_KEY = "storefront.db"


def create_db_engine(settings: DatabaseConfig) -> Engine:
    if settings.is_sqlite:
        # One shared connection so in-memory databases survive across sessions
        return create_engine(
            settings.url,
            echo=settings.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
        pool_pre_ping=True,
    )


class Database:
    """Engine plus session factory, attached to a Flask app."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def init_app(self, app: Flask) -> None:
        app.extensions[EXTENSION_KEY] = self
        app.teardown_appcontext(_close_session)

    def create_all(self) -> None:
        # Register every model with Base.metadata before creating tables
        import storefront.models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)


def get_database(app: Optional[Flask] = None) -> Database:
    return (app or current_app).extensions[EXTENSION_KEY]


def get_session() -> Session:
    """Request-scoped session, closed on app context teardown."""
    if "db_session" not in g:
        g.db_session = get_database().session_factory()
    return g.db_session


def _close_session(exc: Optional[BaseException] = None) -> None:
    session = g.pop("db_session", None)
    if session is not None:
        if exc is not None:
            session.rollback()
        session.close()


@contextmanager
def transaction(session: Session, conflict_detail: Optional[str] = None) -> Iterator[Session]:
    """
    Commit everything done inside the block, or roll all of it back.

    Integrity violations surface as ConflictError, any other SQLAlchemy
    failure as DatabaseError. Errors raised by the block itself propagate
    unchanged after the rollback.
    """
    try:
        yield session
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity constraint violation: {e.orig}")
        raise ConflictError(conflict_detail or "The request conflicts with existing data")
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database transaction failed: {str(e)}")
        raise DatabaseError(f"Database transaction failed: {str(e)}")
    except Exception:
        session.rollback()
        raise
