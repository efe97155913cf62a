"""ServiceResult and ServiceError — what every service method returns.

Services never raise for expected outcomes. A malformed expression, a
range that resolves to nothing or a failed query all come back as a
result the CLI renders (``AppContext.emit``) and ``ReplyService`` maps
to chat replies.

Error codes:

========================  =================================================
``INVALID_EXPRESSION``    the expression held no usable token
``EMPTY_RANGE``           ``fetch`` resolved no post numbers
``TOO_MANY_NUMBERS``      the expression spans more numbers than allowed
``DATABASE_ERROR``        the post store raised a SQLAlchemy error
``FILE_NOT_FOUND``        ``load`` was given a missing file
``INVALID_INPUT``         ``load`` was given malformed post data
========================  =================================================
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``detail`` holds machine-readable context, e.g. the expression or the
    ``size``/``limit`` pair of a ``TOO_MANY_NUMBERS`` error.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type of every service operation.

    Examples:
        A successful ``fetch``::

            ServiceResult(
                ok=True,
                op="fetch",
                data={"numbers": [123, 124], "count": 2, "items": [...], ...},
            )

        A ``reply`` whose query failed still carries the text to send::

            ServiceResult(
                ok=False,
                op="reply",
                data={"status": "database_error", "messages": ["..."]},
                error=ServiceError(code="DATABASE_ERROR", message="..."),
            )

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``parse``, ``resolve``, ``fetch``, ``latest``,
            ``load_posts``, ``init_database`` or ``reply``).
        data: Operation-specific payload.
        warnings: Non-fatal issues, e.g. an expression matching nothing.
        error: Set when ``ok`` is False.
        meta: Telemetry spans, present only in verbose mode.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
