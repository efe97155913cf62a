"""StoreService — post store lifecycle."""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from resquery.services.base import BaseService
from resquery.services.result import ServiceError, ServiceResult
from resquery.services.telemetry import traced


class StoreService(BaseService):
    """Creates and inspects the post store."""

    @traced
    def init_database(self) -> ServiceResult:
        """Create the schema (idempotent) and report the stored post count."""
        try:
            safe_url = make_url(self._board.database_url).render_as_string(hide_password=True)
        except ArgumentError as exc:
            return ServiceResult(
                ok=False,
                op="init_database",
                error=ServiceError(
                    code="DATABASE_ERROR",
                    message="Could not parse the database URL",
                    detail={"exception": type(exc).__name__},
                ),
            )
        try:
            total = self._board.posts.count_posts()
        except SQLAlchemyError as exc:
            return ServiceResult(
                ok=False,
                op="init_database",
                error=ServiceError(
                    code="DATABASE_ERROR",
                    message=f"Could not initialize the post store: {type(exc).__name__}",
                    detail={"database_url": safe_url},
                ),
            )
        return ServiceResult(
            ok=True,
            op="init_database",
            data={"database_url": safe_url, "total": total},
        )
