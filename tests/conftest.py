"""Shared pytest fixtures and test helpers for resquery tests."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from resquery.config.settings import ResSettings
from resquery.infrastructure.board import Board
from resquery.infrastructure.database.engine import init_database, sqlite_url
from resquery.services.telemetry import disable_telemetry

_EPOCH = datetime(2024, 4, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def _reset_cli_state() -> Generator[None]:
    """Undo the logging and telemetry setup a CLI invocation leaves behind."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    res_level = logging.getLogger("resquery").level
    yield
    root.handlers = handlers
    logging.getLogger("resquery").setLevel(res_level)
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """Initialized SQLite engine with the post table created."""
    engine = init_database(sqlite_url(tmp_path / "res.db"))
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def board_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary board directory, isolated from RESQUERY_* env overrides."""
    for name in ("RESQUERY_CONFIG", "RESQUERY_DATABASE_URL", "RESQUERY_DATABASE__PATH"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def board(board_root: Path) -> Generator[Board]:
    """Board backed by a SQLite file in the temp directory."""
    settings = ResSettings.from_cli(root=board_root)
    b = Board(settings)
    try:
        yield b
    finally:
        b.close()


@pytest.fixture
def _isolated_board(board_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp board root so the CLI uses an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_board")`` on command test
    classes.
    """
    monkeypatch.chdir(board_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_post(no: int, **overrides: Any) -> dict[str, Any]:
    """Build a post row for post number *no*."""
    posted = _EPOCH + timedelta(minutes=no)
    row: dict[str, Any] = {
        "no": no,
        "name_and_trip": "名無しさん",
        "datetime": posted,
        "datetime_text": posted.strftime("%Y/%m/%d(%a) %H:%M:%S"),
        "id": f"ID{no:04d}",
        "main_text": f"post body {no}",
        "main_text_html": f"<p>post body {no}</p>",
        "oekaki_id": None,
    }
    row.update(overrides)
    return row


def seed_posts(board: Board, numbers: Iterable[int], **overrides: Any) -> None:
    """Insert one generated post per number into the board's store."""
    board.posts.insert_posts([make_post(no, **overrides) for no in numbers])


def post_json(no: int, **overrides: Any) -> dict[str, Any]:
    """JSON-serializable variant of :func:`make_post` (for load files)."""
    row = make_post(no, **overrides)
    row["datetime"] = row["datetime"].isoformat()
    return row
