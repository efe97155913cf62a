"""Post store engine and schema via SQLAlchemy Core."""

from resquery.infrastructure.database.engine import create_db_engine, init_database, sqlite_url
from resquery.infrastructure.database.schema import metadata, res

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "res",
    "sqlite_url",
]
