"""ReplyService — turn an incoming chat message into reply messages.

The chat transport is not handled here: the caller hands over the raw
message content and sends whatever ``data["messages"]`` holds. Every
outcome, including a database failure, produces at least one message.
"""

from __future__ import annotations

from resquery.domain.mentions import strip_mentions
from resquery.domain.messages import chunk_messages
from resquery.services.base import BaseService
from resquery.services.posts import PostService
from resquery.services.result import ServiceResult
from resquery.services.telemetry import traced

USAGE_MESSAGE = (
    "使い方: @bot 123 または @bot 123-128 または @bot 123,124-128,^126-127"
    " または @bot ?324 (最新レス基準の相対指定)"
)
EMPTY_RANGE_MESSAGE = "指定された範囲には表示するレスがありません。"
NOT_FOUND_MESSAGE = "指定された範囲のレスが見つかりませんでした。"
TOO_MANY_MESSAGE = "指定された範囲が広すぎます。範囲を狭めて指定してください。"
DATABASE_ERROR_MESSAGE = "データベースエラーが発生しました。"

# fetch error code -> (reply status, reply text)
_ERROR_REPLIES: dict[str, tuple[str, str]] = {
    "INVALID_EXPRESSION": ("usage", USAGE_MESSAGE),
    "EMPTY_RANGE": ("empty_range", EMPTY_RANGE_MESSAGE),
    "TOO_MANY_NUMBERS": ("too_many", TOO_MANY_MESSAGE),
    "DATABASE_ERROR": ("database_error", DATABASE_ERROR_MESSAGE),
}


class ReplyService(BaseService):
    """Builds bot replies for range expressions posted in chat."""

    @traced
    def reply(self, content: str) -> ServiceResult:
        """Build the reply messages for one incoming message.

        ``data["status"]`` is one of ``posts``, ``usage``, ``empty_range``,
        ``too_many``, ``not_found`` or ``database_error``. Expressions
        spanning more than ``[reply] max_numbers`` numbers are refused
        before they are resolved. Only a database failure makes
        the result unsuccessful; its reply text is still in ``data``.
        """
        expression = strip_mentions(content)
        config = self._board.settings.reply
        fetched = PostService(self._board).fetch(expression, max_numbers=config.max_numbers)

        if not fetched.ok:
            code = fetched.error.code if fetched.error else "DATABASE_ERROR"
            status, text = _ERROR_REPLIES.get(code, _ERROR_REPLIES["DATABASE_ERROR"])
            data = {"expression": expression, "status": status, "messages": [text]}
            if status == "database_error":
                return ServiceResult(ok=False, op="reply", data=data, error=fetched.error)
            return ServiceResult(ok=True, op="reply", data=data)

        posts = PostService.posts_from_result(fetched)
        if not posts:
            return ServiceResult(
                ok=True,
                op="reply",
                data={
                    "expression": expression,
                    "status": "not_found",
                    "messages": [NOT_FOUND_MESSAGE],
                },
            )

        blocks = [
            post.render(oekaki_url_template=config.oekaki_url_template) + "\n" for post in posts
        ]
        messages = chunk_messages(
            blocks,
            max_chars=config.max_message_chars,
            max_messages=config.max_messages,
            truncation_marker=config.truncation_marker,
        )
        return ServiceResult(
            ok=True,
            op="reply",
            data={
                "expression": expression,
                "status": "posts",
                "messages": messages,
                "post_count": len(posts),
            },
        )
