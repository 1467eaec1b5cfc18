from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator
from typing import Any, TypeVar

from flask import Flask, abort, current_app, g
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.library.utils import valid_id

T = TypeVar("T")


def _engine_options(db_url: str) -> dict[str, Any]:
    opts: dict[str, Any] = {"pool_pre_ping": True}
    if db_url.startswith("postgres"):
        opts.update(pool_recycle=1800, pool_size=5, max_overflow=10, pool_timeout=30)
    return opts


def _enforce_sqlite_foreign_keys(engine: Engine) -> None:
    # Without this pragma SQLite ignores ON DELETE RESTRICT on authors/genres/books.
    @event.listens_for(engine, "connect")
    def _fk_pragma(dbapi_connection, connection_record):  # type: ignore[no-redef]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(db_url: str) -> Engine:
    """Engine for the catalog database, shared by the app and the standalone scripts."""
    engine = create_engine(db_url, **_engine_options(db_url))
    if engine.dialect.name == "sqlite":
        _enforce_sqlite_foreign_keys(engine)
    return engine


def init_db(app: Flask) -> None:
    engine = build_engine(app.config["DATABASE_URL"])
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
    app.logger.debug("Catalog database engine ready (dialect=%s)", engine.dialect.name)


def db_session() -> Session:
    """
    Request-scoped session, opened lazily and closed by teardown_db_session.
    """
    s: Session | None = getattr(g, "db_session", None)
    if s is None:
        s = current_app.extensions["sqlalchemy_sessionmaker"]()
        g.db_session = s
    return s


def find_record(s: Session, model: type[T], obj_id: int) -> T | None:
    """Primary-key lookup; an id outside the INTEGER column range is simply missing."""
    if valid_id(obj_id) is None:
        return None
    return s.get(model, obj_id)


def get_or_404(s: Session, model: type[T], obj_id: int, description: str) -> T:
    """Load a catalog record by primary key or abort with a 404 carrying `description`."""
    obj = find_record(s, model, obj_id)
    if obj is None:
        abort(404, description=description)
    return obj


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = getattr(g, "db_session", None)
    if s is not None:
        s.close()
        g.db_session = None


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Session outside a request (scripts, test seeding). Commits on success, rolls back on error.
    """
    s: Session = app.extensions["sqlalchemy_sessionmaker"]()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
