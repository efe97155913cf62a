"""Tests for PostService — parse, resolve, fetch, latest, load."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from resquery.infrastructure.board import Board
from resquery.infrastructure.repositories.posts import PostRepository
from resquery.services.base import BaseService
from resquery.domain.parser import parse_range_specifications
from resquery.services.posts import PostService, included_size
from tests.conftest import post_json, seed_posts


def _db_failure(*args: object, **kwargs: object) -> None:
    raise OperationalError("SELECT", {}, Exception("disk I/O error"))


class TestServiceBase:
    def test_inherits_base_service(self, board: Board) -> None:
        svc = PostService(board)
        assert isinstance(svc, BaseService)
        assert svc._board is board


class TestParse:
    def test_specs_serialized(self, board: Board) -> None:
        result = PostService(board).parse("10,^12,?324-")
        assert result.ok
        assert result.data["count"] == 3
        assert [s["kind"] for s in result.data["specs"]] == [
            "include",
            "exclude",
            "relative_include_from",
        ]
        assert result.data["needs_upper_bound"] is True
        assert result.warnings == []

    def test_empty_expression_warns(self, board: Board) -> None:
        result = PostService(board).parse("  ,  ")
        assert result.ok
        assert result.data["specs"] == []
        assert result.warnings == ["No usable range expression was supplied"]

    def test_never_opens_database(self, board: Board, board_root: Path) -> None:
        PostService(board).parse("1-")
        assert not (board_root / "res.db").exists()


class TestResolve:
    def test_absolute_does_not_query_maximum(self, board: Board) -> None:
        with patch.object(PostRepository, "get_max_post_number") as max_query:
            result = PostService(board).resolve("123-128,^126")
        assert result.ok
        assert result.data["numbers"] == [123, 124, 125, 127, 128]
        assert result.data["max_value"] is None
        max_query.assert_not_called()

    def test_relative_queries_maximum_once(self, board: Board) -> None:
        seed_posts(board, [2345])
        with patch.object(
            PostRepository, "get_max_post_number", autospec=True, return_value=2345
        ) as max_query:
            result = PostService(board).resolve("?456,?345,100-")
        assert result.ok
        assert max_query.call_count == 1
        assert result.data["max_value"] == 2345
        assert result.data["numbers"][:2] == [100, 101]
        assert 1456 in result.data["numbers"]

    def test_explicit_max_value(self, board: Board) -> None:
        with patch.object(PostRepository, "get_max_post_number") as max_query:
            result = PostService(board).resolve("?324", max_value=123340)
        assert result.data["numbers"] == [123324]
        assert result.data["max_value"] == 123340
        max_query.assert_not_called()

    def test_uses_store_maximum(self, board: Board) -> None:
        seed_posts(board, range(1, 8))
        result = PostService(board).resolve("5-")
        assert result.data["numbers"] == [5, 6, 7]
        assert result.data["max_value"] == 7

    def test_empty_store_relative_fallback(self, board: Board) -> None:
        result = PostService(board).resolve("?324")
        assert result.ok
        assert result.data["max_value"] == 0
        assert result.data["numbers"] == [324]

    def test_no_matches_warns(self, board: Board) -> None:
        result = PostService(board).resolve("5,^5")
        assert result.ok
        assert result.data["numbers"] == []
        assert result.warnings == ["Expression matched no post numbers"]

    def test_invalid_expression(self, board: Board) -> None:
        result = PostService(board).resolve("abc")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_EXPRESSION"
        assert result.error.detail == {"expression": "abc"}

    def test_database_error(self, board: Board) -> None:
        with patch.object(PostRepository, "get_max_post_number", side_effect=_db_failure):
            result = PostService(board).resolve("1-")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DATABASE_ERROR"
        assert result.error.detail == {"exception": "OperationalError"}


class TestFetch:
    def test_posts_in_ascending_order(self, board: Board) -> None:
        seed_posts(board, range(1, 11))
        result = PostService(board).fetch("9,2-4,^3")
        assert result.ok
        assert [item["no"] for item in result.data["items"]] == [2, 4, 9]
        assert result.data["count"] == 3
        assert result.data["numbers"] == [2, 4, 9]

    def test_missing_posts_skipped(self, board: Board) -> None:
        seed_posts(board, [1, 3])
        result = PostService(board).fetch("1-4")
        assert result.ok
        assert [item["no"] for item in result.data["items"]] == [1, 3]
        assert result.data["numbers"] == [1, 2, 3, 4]

    def test_no_stored_posts_is_success(self, board: Board) -> None:
        result = PostService(board).fetch("100-102")
        assert result.ok
        assert result.data["count"] == 0
        assert result.data["items"] == []

    def test_items_are_json_ready(self, board: Board) -> None:
        seed_posts(board, [1], oekaki_id=7)
        item = PostService(board).fetch("1").data["items"][0]
        assert isinstance(item["datetime"], str)
        assert item["oekaki_id"] == 7
        json.dumps(item)

    def test_relative_against_store(self, board: Board) -> None:
        seed_posts(board, range(1440, 1460))
        result = PostService(board).fetch("?456")
        assert [item["no"] for item in result.data["items"]] == [1456]
        result = PostService(board).fetch("?45")
        assert [item["no"] for item in result.data["items"]] == [1445]

    def test_invalid_expression(self, board: Board) -> None:
        result = PostService(board).fetch("")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_EXPRESSION"

    def test_empty_range(self, board: Board) -> None:
        seed_posts(board, [1, 2])
        result = PostService(board).fetch("5-")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "EMPTY_RANGE"
        assert result.error.detail == {"expression": "5-", "max_value": 2}

    def test_database_error(self, board: Board) -> None:
        with patch.object(PostRepository, "get_posts_by_numbers", side_effect=_db_failure):
            result = PostService(board).fetch("1")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DATABASE_ERROR"

    def test_posts_from_result(self, board: Board) -> None:
        seed_posts(board, [1, 2])
        posts = PostService.posts_from_result(PostService(board).fetch("1-2"))
        assert [post.no for post in posts] == [1, 2]
        assert posts[0].main_text == "post body 1"


class TestFetchLimit:
    def test_refused_before_resolving(self, board: Board) -> None:
        with patch("resquery.services.posts.calculate_post_numbers") as calc:
            result = PostService(board).fetch("0-2147483647", max_numbers=1000)
        calc.assert_not_called()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "TOO_MANY_NUMBERS"
        assert result.error.detail["size"] == 2**31
        assert result.error.detail["limit"] == 1000

    def test_open_range_sized_against_store_maximum(self, board: Board) -> None:
        seed_posts(board, range(1, 21))
        assert PostService(board).fetch("1-", max_numbers=20).ok
        result = PostService(board).fetch("1-", max_numbers=19)
        assert result.error is not None
        assert result.error.code == "TOO_MANY_NUMBERS"

    def test_within_limit(self, board: Board) -> None:
        seed_posts(board, [1, 2, 3])
        result = PostService(board).fetch("1-3", max_numbers=3)
        assert result.ok
        assert result.data["count"] == 3

    def test_no_limit_by_default(self, board: Board) -> None:
        seed_posts(board, [1])
        assert PostService(board).fetch("1-5000").ok


class TestIncludedSize:
    @pytest.mark.parametrize(
        "expression,max_value,expected",
        [
            ("5", 0, 1),
            ("10-19", 0, 10),
            ("20-10", 0, 0),
            ("95-", 100, 6),
            ("95-", 0, 0),
            ("?24", 123456, 1),
            ("?20-29", 123456, 10),
            ("?^20-29,^1-100", 123456, 0),
            ("?450-", 123456, 7),
            ("1-10,5-15", 0, 21),
        ],
    )
    def test_size(self, expression: str, max_value: int, expected: int) -> None:
        specs = parse_range_specifications(expression)
        assert included_size(specs, max_value) == expected


class TestLatest:
    def test_empty_store(self, board: Board) -> None:
        result = PostService(board).latest()
        assert result.ok
        assert result.data == {"max_value": 0}

    def test_max(self, board: Board) -> None:
        seed_posts(board, [3, 17, 9])
        assert PostService(board).latest().data["max_value"] == 17

    def test_database_error(self, board: Board) -> None:
        with patch.object(PostRepository, "get_max_post_number", side_effect=_db_failure):
            result = PostService(board).latest()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DATABASE_ERROR"


class TestLoad:
    def test_load_posts(self, board: Board, tmp_path: Path) -> None:
        path = tmp_path / "posts.json"
        path.write_text(
            json.dumps([post_json(n) for n in (1, 2, 3)], ensure_ascii=False),
            encoding="utf-8",
        )
        result = PostService(board).load(path)
        assert result.ok
        assert result.op == "load_posts"
        assert result.data == {"path": str(path), "inserted": 3}
        assert board.posts.count_posts() == 3

    def test_missing_file(self, board: Board, tmp_path: Path) -> None:
        result = PostService(board).load(tmp_path / "missing.json")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "FILE_NOT_FOUND"

    @pytest.mark.parametrize(
        "content",
        ["not json", '{"no": 1}', '[{"no": 1}]'],
        ids=["bad-json", "not-a-list", "missing-fields"],
    )
    def test_invalid_input(self, board: Board, tmp_path: Path, content: str) -> None:
        path = tmp_path / "posts.json"
        path.write_text(content, encoding="utf-8")
        result = PostService(board).load(path)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_INPUT"
        assert board.posts.count_posts() == 0

    def test_duplicate_numbers_are_database_error(self, board: Board, tmp_path: Path) -> None:
        seed_posts(board, [1])
        path = tmp_path / "posts.json"
        path.write_text(json.dumps([post_json(1)]), encoding="utf-8")
        result = PostService(board).load(path)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DATABASE_ERROR"
