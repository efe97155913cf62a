"""Pagination of rendered posts into chat-sized reply messages."""

from __future__ import annotations

from collections.abc import Iterable


def _split_long(block: str, max_chars: int) -> list[str]:
    """Cut *block* into slices of at most *max_chars* characters."""
    if len(block) <= max_chars:
        return [block]
    return [block[i : i + max_chars] for i in range(0, len(block), max_chars)]


def chunk_messages(
    blocks: Iterable[str],
    *,
    max_chars: int,
    max_messages: int,
    truncation_marker: str,
) -> list[str]:
    """Pack text *blocks* into at most *max_messages* messages.

    Blocks are kept whole while they fit within *max_chars*; a block that
    would overflow starts a new message, and a block longer than
    *max_chars* on its own is sliced. When the message budget runs out
    the last message gets *truncation_marker* on a new line (the marker
    may push it past *max_chars*) and the remaining blocks are dropped.
    """
    messages: list[str] = []
    current = ""
    truncated = False

    for block in blocks:
        for piece in _split_long(block, max_chars):
            if current and len(current) + len(piece) > max_chars:
                if len(messages) + 1 >= max_messages:
                    truncated = True
                    break
                messages.append(current.rstrip("\n"))
                current = ""
            current += piece
        if truncated:
            break

    if current:
        messages.append(current.rstrip("\n"))
    if truncated:
        messages[-1] = f"{messages[-1]}\n{truncation_marker}"
    return messages
