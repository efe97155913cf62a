"""BaseService — abstract foundation for all resquery services.

Every service receives a :class:`Board` at construction time. The Board
provides the settings and lazily opened database access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from resquery.infrastructure.board import Board


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class PostService(BaseService):
            def fetch(self, expression: str) -> ServiceResult:
                rows = self._board.posts.get_posts_by_numbers(...)
                ...
    """

    def __init__(self, board: Board) -> None:
        self._board = board
