"""Database engine setup.

The store is addressed by a SQLAlchemy URL. The default is a SQLite
file next to ``resquery.toml``; SQLite file databases run in WAL mode so
readers never block the importer. Any other backend SQLAlchemy supports
(e.g. PostgreSQL, given its driver) works through the same URL.

SQLAlchemy Core (not ORM) is used because resquery only issues a few
read queries per invocation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from resquery.infrastructure.database.schema import metadata


def sqlite_url(db_path: Path) -> str:
    """SQLAlchemy URL for a SQLite file at *db_path*."""
    return f"sqlite:///{db_path}"


def create_db_engine(url: str) -> Engine:
    """Create an engine for *url*; SQLite files get WAL journal mode.

    Statements are logged through the ``sqlalchemy.engine`` logger when
    ``[database] echo`` is set, not by ``create_engine(echo=...)``.
    """
    parsed = make_url(url)
    is_sqlite_file = parsed.get_backend_name() == "sqlite" and parsed.database not in (
        None,
        "",
        ":memory:",
    )
    if is_sqlite_file:
        Path(str(parsed.database)).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url)

    if is_sqlite_file:

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def init_database(url: str) -> Engine:
    """Create the schema at *url* and return the engine.

    Idempotent — safe to call on an existing database.
    """
    engine = create_db_engine(url)
    metadata.create_all(engine)
    return engine
