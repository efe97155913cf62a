"""SQLAlchemy Core table definitions for the post store.

One table, ``res``, keyed by post number. ``id`` holds the poster's
author identifier as shown on the board, not a surrogate key.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, MetaData, Table, Text

metadata = MetaData()

res = Table(
    "res",
    metadata,
    Column("no", Integer, primary_key=True, autoincrement=False),
    Column("name_and_trip", Text, nullable=False),
    Column("datetime", DateTime, nullable=False),
    Column("datetime_text", Text, nullable=False),
    Column("id", Text, nullable=False),  # author ID
    Column("main_text", Text, nullable=False),
    Column("main_text_html", Text, nullable=False, default="", server_default=""),
    Column("oekaki_id", Integer),
)

Index("ix_res_id", res.c.id)
