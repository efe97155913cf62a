"""Board — the single dependency injected into every service.

Owns the settings and the database engine for one post store. The
engine is created on first use so that commands which never touch the
database (``query parse``, ``query resolve --max``) never open it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from resquery.infrastructure.database.engine import init_database
from resquery.infrastructure.repositories.posts import PostRepository

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from resquery.config.settings import ResSettings

logger = logging.getLogger(__name__)


class Board:
    """Database access for a post store, configured from :class:`ResSettings`.

    Constructed lazily by the CLI context and handed to services via
    their :class:`BaseService` constructor.
    """

    def __init__(self, settings: ResSettings) -> None:
        self._settings = settings
        self._engine: Engine | None = None

    @property
    def root(self) -> Path:
        """Directory relative paths in the config resolve against."""
        return self._settings.root

    @property
    def settings(self) -> ResSettings:
        return self._settings

    @property
    def database_url(self) -> str:
        return self._settings.resolved_database_url()

    @property
    def engine(self) -> Engine:
        """The SQLAlchemy engine, created (with schema) on first access."""
        if self._engine is None:
            logger.debug("Opening post store")
            self._engine = init_database(self.database_url)
        return self._engine

    @property
    def posts(self) -> PostRepository:
        """Repository over the ``res`` table."""
        return PostRepository(
            self.engine,
            batch_size=self._settings.database.fetch_batch_size,
        )

    def close(self) -> None:
        """Dispose of the engine's connection pool, if one was opened."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
