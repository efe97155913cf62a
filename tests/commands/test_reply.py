"""Tests for the reply command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from resquery.cli import cli
from resquery.infrastructure.board import Board
from resquery.services.reply import NOT_FOUND_MESSAGE, USAGE_MESSAGE
from tests.conftest import seed_posts


@pytest.mark.usefixtures("_isolated_board")
class TestReplyCommand:
    def test_reply_posts(self, cli_runner: CliRunner, board: Board) -> None:
        seed_posts(board, range(1, 4))
        result = cli_runner.invoke(cli, ["reply", "<@123> 1-3,^2"])
        assert result.exit_code == 0
        assert "### __1 名無しさん" in result.output
        assert "### __3 名無しさん" in result.output
        assert "### __2 " not in result.output

    def test_reply_usage(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "reply", "<@123> hello"])
        assert result.exit_code == 0
        assert result.output.strip() == USAGE_MESSAGE

    def test_reply_not_found_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "reply", "<@!1> 900"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["data"]["status"] == "not_found"
        assert data["data"]["messages"] == [NOT_FOUND_MESSAGE]

    def test_reply_quiet_multiple_messages(self, cli_runner: CliRunner, board: Board) -> None:
        seed_posts(board, range(1, 4))
        (board.root / "resquery.toml").write_text("[reply]\nmax_message_chars = 80\n")
        result = cli_runner.invoke(cli, ["-q", "reply", "1-3"])
        assert result.exit_code == 0
        assert result.output.count("### __") == 3
        assert "\n\n### __2" in result.output

    def test_reply_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["reply", "--examples"])
        assert result.exit_code == 0
        assert "resquery reply" in result.output
