"""Read/write repository for the ``res`` post table."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from resquery.infrastructure.database.schema import res

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


class PostRepository:
    """Encapsulates SQL for post lookups by number."""

    def __init__(self, engine: Engine, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self._engine = engine
        self._batch_size = max(1, batch_size)

    def get_posts_by_numbers(self, numbers: Sequence[int]) -> list[dict[str, Any]]:
        """Fetch posts whose ``no`` is in *numbers*, ascending by ``no``.

        Numbers with no stored post are simply absent from the result.
        Large inputs are split into batches of bound parameters.
        """
        if not numbers:
            logger.debug("get_posts_by_numbers: empty numbers list")
            return []

        wanted = sorted(set(numbers))
        logger.debug("get_posts_by_numbers: querying %d numbers", len(wanted))

        rows: list[dict[str, Any]] = []
        try:
            with self._engine.connect() as conn:
                for offset in range(0, len(wanted), self._batch_size):
                    batch = wanted[offset : offset + self._batch_size]
                    stmt = select(res).where(res.c.no.in_(batch)).order_by(res.c.no)
                    rows.extend(dict(row) for row in conn.execute(stmt).mappings())
        except SQLAlchemyError:
            logger.error("get_posts_by_numbers: query failed", exc_info=True)
            raise

        logger.debug("get_posts_by_numbers: found %d posts", len(rows))
        return rows

    def get_max_post_number(self) -> int:
        """Highest stored post number, or 0 when the table is empty."""
        stmt = select(func.max(res.c.no))
        try:
            with self._engine.connect() as conn:
                value = conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError:
            logger.error("get_max_post_number: query failed", exc_info=True)
            raise

        result = int(value) if value is not None else 0
        logger.debug("get_max_post_number: result = %d", result)
        return result

    def count_posts(self) -> int:
        stmt = select(func.count(res.c.no))
        with self._engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one() or 0)

    def insert_posts(self, posts: Sequence[dict[str, Any]]) -> int:
        """Insert post rows in one transaction. Returns the number inserted."""
        if not posts:
            return 0
        with self._engine.begin() as conn:
            conn.execute(insert(res), list(posts))
        return len(posts)
