"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, resquery.toml only contains
overrides. A fresh install needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- resquery.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str | None = None
    path: str = "res.db"
    echo: bool = False
    fetch_batch_size: int = Field(default=500, ge=1)


class ReplyConfig(BaseModel):
    """[reply] section."""

    model_config = {"frozen": True}

    max_message_chars: int = Field(default=1800, ge=1)
    max_messages: int = Field(default=5, ge=1)
    max_numbers: int | None = Field(default=10_000, ge=1)
    truncation_marker: str = "...(表示制限により省略)"
    oekaki_url_template: str | None = None
