"""transform_shared.errors — Error taxonomy and outcome types.

Every stage of the transform pipeline returns either a plain success value or
a ``Failed`` outcome. Nothing is raised across a component boundary; the
handler unwraps each stage once and hands any ``Failed`` straight to the
response builder.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from transform_shared.config import (
    ERROR_STATUS_HINT,
    GENERIC_EXECUTION_ERROR,
    HTTP_BAD_REQUEST,
    HTTP_OK,
    HTTP_UNPROCESSABLE_ENTITY,
    MODEL_EXECUTION_ERROR,
    REMOTE_FAILURE_MESSAGE,
)

__all__ = [
    "ErrorKind",
    "Failed",
    "HandlerOutcome",
    "Ok",
    "UnexpectedContentType",
    "bad_expression",
    "format_error",
    "invalid_uri",
    "remote_business_error",
    "run_diagnostics",
    "transport_error",
]


class ErrorKind(str, enum.Enum):
    INVALID_URI = "InvalidUri"
    BAD_EXPRESSION = "BadExpression"
    TRANSPORT_ERROR = "TransportError"
    REMOTE_BUSINESS_ERROR = "RemoteBusinessError"


class UnexpectedContentType(RuntimeError):
    """The Execute API answered 2xx with a body that is not JSON."""


@dataclass(frozen=True)
class Ok:
    body: Any
    status_code: int = HTTP_OK


@dataclass(frozen=True)
class Failed:
    """A terminal pipeline outcome.

    ``debug`` holds diagnostics (expression text, input, engine error) and is
    only ever populated when the caller asked for debugging.
    """

    kind: ErrorKind
    status_code: int
    body: Dict[str, Any]
    upstream_status: Optional[int] = None
    debug: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "kind": self.kind.value,
            "status": self.status_code,
            "body": self.body,
        }
        if self.upstream_status is not None:
            out["upstream_status"] = self.upstream_status
        if self.debug is not None:
            out["debug"] = self.debug
        return out


HandlerOutcome = Union[Ok, Failed]


def format_error(message: str, code: str = GENERIC_EXECUTION_ERROR) -> Dict[str, Any]:
    """Body shape the consumer recognizes as a transform-level error."""
    return {"statusCodeHint": ERROR_STATUS_HINT, "code": code, "message": message}


# ---------------------------------------------------------------------------
# Failed constructors
# ---------------------------------------------------------------------------


def invalid_uri(message: str) -> Failed:
    return Failed(ErrorKind.INVALID_URI, HTTP_UNPROCESSABLE_ENTITY, format_error(message))


def bad_expression(message: str, debug: Optional[Dict[str, Any]] = None) -> Failed:
    return Failed(
        ErrorKind.BAD_EXPRESSION,
        HTTP_BAD_REQUEST,
        {"error": {"message": message}},
        debug=debug,
    )


def transport_error(status: int, reason: str) -> Failed:
    return Failed(
        ErrorKind.TRANSPORT_ERROR,
        HTTP_UNPROCESSABLE_ENTITY,
        format_error(reason),
        upstream_status=status,
    )


def remote_business_error(message: str) -> Failed:
    return Failed(
        ErrorKind.REMOTE_BUSINESS_ERROR,
        HTTP_UNPROCESSABLE_ENTITY,
        format_error(f"unable to process request; {message}"),
    )


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def _describe(entry: Any) -> str:
    if isinstance(entry, dict):
        return f"[{entry.get('error_type')}] {entry.get('message')}"
    return str(entry)


def run_diagnostics(body: Any) -> Optional[Dict[str, Any]]:
    """Detect a model or runtime failure embedded in a 2xx Execute response.

    Returns an error body to deliver in place of the response, or None when
    the response is clean. Warnings are ignored.
    """
    if not isinstance(body, dict):
        return None

    status = body.get("status")
    if status == "Success":
        response_data = body.get("response_data")
        errors = response_data.get("errors") if isinstance(response_data, dict) else None
        if isinstance(errors, list) and errors:
            message = "; ".join(_describe(entry) for entry in errors)
            return format_error(message, MODEL_EXECUTION_ERROR)
    elif status == "Error" or body.get("errorCode"):
        error = body.get("error")
        if error is None:
            error = body.get("errors")
        message = REMOTE_FAILURE_MESSAGE if error is None else str(error)
        return format_error(message, body.get("errorCode") or MODEL_EXECUTION_ERROR)
    return None
