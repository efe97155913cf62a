"""Repository adapters for infrastructure data access."""

from resquery.infrastructure.repositories.posts import PostRepository

__all__ = ["PostRepository"]
