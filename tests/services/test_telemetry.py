"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time
from collections.abc import Generator

import pytest

from resquery.infrastructure.board import Board
from resquery.services.posts import PostService
from resquery.services.reply import ReplyService
from resquery.services.result import ServiceError, ServiceResult
from resquery.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)
from tests.conftest import seed_posts


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """Ensure clean telemetry state for every test."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def _telemetry() -> Generator[None]:
    enable_telemetry()
    yield
    disable_telemetry()


# ── Span ─────────────────────────────────────────────────────────────


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "duration_ms" in d
        assert "children" not in d
        assert "annotations" not in d

    def test_to_dict_with_children_and_annotations(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.annotate("rows", 42)
        child.end()
        root.end()
        d = root.to_dict()
        assert d["children"][0]["name"] == "child"
        assert d["children"][0]["annotations"] == {"rows": 42}


# ── trace_span ───────────────────────────────────────────────────────


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("test") as span:
            assert span is None

    @pytest.mark.usefixtures("_telemetry")
    def test_no_root_yields_none(self) -> None:
        with trace_span("test") as span:
            assert span is None

    @pytest.mark.usefixtures("_telemetry")
    def test_nested_spans(self) -> None:
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("a"):
                with trace_span("b") as inner:
                    assert inner is not None
                    inner.annotate("key", "value")
            assert [c.name for c in root.children] == ["a"]
            assert root.children[0].children[0].annotations == {"key": "value"}
            assert root.children[0].end_time is not None
        finally:
            _current_span.reset(token)


# ── @traced ──────────────────────────────────────────────────────────


class TestTracedDecorator:
    def test_noop_when_disabled(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(ok=True, op="test")

        assert my_func().meta is None

    @pytest.mark.usefixtures("_telemetry")
    def test_injects_meta_when_enabled(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            with trace_span("stage"):
                pass
            return ServiceResult(ok=True, op="test", meta={"existing": "data"})

        result = my_func()
        assert result.meta is not None
        assert result.meta["existing"] == "data"
        telemetry = result.meta["telemetry"]
        assert telemetry["name"].endswith("my_func")
        assert telemetry["children"][0]["name"] == "stage"

    @pytest.mark.usefixtures("_telemetry")
    def test_non_service_result_passthrough(self) -> None:
        @traced
        def my_func() -> str:
            return "hello"

        assert my_func() == "hello"

    @pytest.mark.usefixtures("_telemetry")
    def test_exception_resets_current_span(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            msg = "boom"
            raise ValueError(msg)

        with pytest.raises(ValueError, match="boom"):
            my_func()
        assert get_current_span() is None

    @pytest.mark.usefixtures("_telemetry")
    def test_error_result_gets_telemetry(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(
                ok=False,
                op="test",
                error=ServiceError(code="FAIL", message="oops"),
            )

        result = my_func()
        assert not result.ok
        assert result.meta is not None
        assert "telemetry" in result.meta

    @pytest.mark.usefixtures("_telemetry")
    def test_nested_traced_call_becomes_child(self) -> None:
        @traced
        def inner() -> ServiceResult:
            return ServiceResult(ok=True, op="inner")

        @traced
        def outer() -> ServiceResult:
            inner()
            return ServiceResult(ok=True, op="outer")

        result = outer()
        assert result.meta is not None
        children = result.meta["telemetry"]["children"]
        assert [c["name"] for c in children] == [inner.__qualname__]


class TestGetCurrentSpan:
    def test_returns_none_when_disabled(self) -> None:
        assert get_current_span() is None

    @pytest.mark.usefixtures("_telemetry")
    def test_returns_span_when_enabled(self) -> None:
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            assert get_current_span() is root
        finally:
            _current_span.reset(token)


# ── Spans recorded by services ───────────────────────────────────────


@pytest.mark.usefixtures("_telemetry")
class TestServiceSpans:
    def test_fetch_span_tree(self, board: Board) -> None:
        seed_posts(board, range(1, 11))
        result = PostService(board).fetch("8-")
        assert result.ok
        assert result.meta is not None
        telemetry = result.meta["telemetry"]
        assert telemetry["name"] == "PostService.fetch"
        names = [c["name"] for c in telemetry["children"]]
        assert names == ["max_post_number", "calculate_post_numbers", "fetch_posts"]
        fetch_span = telemetry["children"][2]
        assert fetch_span["annotations"] == {"requested": 3, "found": 3}

    def test_absolute_expression_skips_max_lookup(self, board: Board) -> None:
        seed_posts(board, [1, 2])
        result = PostService(board).fetch("1-2")
        assert result.meta is not None
        names = [c["name"] for c in result.meta["telemetry"]["children"]]
        assert "max_post_number" not in names

    def test_reply_nests_fetch(self, board: Board) -> None:
        seed_posts(board, [1])
        result = ReplyService(board).reply("<@1> 1")
        assert result.meta is not None
        telemetry = result.meta["telemetry"]
        assert telemetry["name"] == "ReplyService.reply"
        assert telemetry["children"][0]["name"] == "PostService.fetch"
