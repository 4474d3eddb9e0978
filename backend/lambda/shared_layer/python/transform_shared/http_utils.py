"""transform_shared.http_utils — Handler response envelope.

Every invocation ends in exactly one ``{http_status_code, headers, body}``
envelope, success or not. ``Content-Type`` and ``X-Transform-Elapsed-Time``
are always present and override caller-supplied headers of the same name.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Mapping, Optional

from transform_shared.errors import HandlerOutcome
from transform_shared.serialization import to_jsonable

__all__ = ["DEBUGGER_KEY", "build_response", "elapsed_ms"]

DEBUGGER_KEY = "__debugger"
_FIXED_HEADERS = frozenset({"content-type", "x-transform-elapsed-time"})


def elapsed_ms(started_at: float) -> int:
    """Milliseconds since ``started_at`` (a ``time.perf_counter()`` reading)."""
    return max(0, int((time.perf_counter() - started_at) * 1000))


def _payload(body: Any, debug: Optional[Mapping[str, Any]]) -> Any:
    if body is None:
        body = {}
    if debug is None:
        return body
    if isinstance(body, dict):
        return {**body, DEBUGGER_KEY: debug}
    # Non-object results are kept intact under "result".
    return {"result": body, DEBUGGER_KEY: debug}


def build_response(
    outcome: HandlerOutcome,
    started_at: float,
    debug: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Wrap ``outcome`` into the handler response envelope.

    ``debug`` is attached as ``__debugger`` only when given; without it the
    body carries no such key at all.
    """
    merged = {k: v for k, v in (headers or {}).items() if k.lower() not in _FIXED_HEADERS}
    merged["Content-Type"] = "application/json"
    merged["X-Transform-Elapsed-Time"] = f"{elapsed_ms(started_at)}ms"
    return {
        "http_status_code": outcome.status_code,
        "headers": merged,
        "body": to_jsonable(_payload(outcome.body, debug)),
    }
