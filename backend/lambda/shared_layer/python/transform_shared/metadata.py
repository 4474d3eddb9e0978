"""transform_shared.metadata — Execute API (v3) request metadata.

Builds the ``request_meta`` block in two layers: computed fields derived from
the invocation context, then the caller's free-form ``extras`` merged on top.
Keys whose final value is ``None`` are dropped; the wire format omits unset
fields instead of sending nulls.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from dateutil import parser as date_parser

from transform_shared.config import (
    COMPILER_TYPES,
    DEFAULT_CALL_PURPOSE,
    DEFAULT_COMPILER_TYPE,
    DEFAULT_SOURCE_SYSTEM,
)
from transform_shared.uri import ServiceLocator

__all__ = [
    "capitalize",
    "compute_fields",
    "format_date",
    "is_blank",
    "join_values",
    "normalize",
    "to_datetime",
]


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def is_blank(value: Any) -> bool:
    """True for falsy values and strings made only of whitespace."""
    if isinstance(value, str):
        return not value.strip()
    return not value


def capitalize(text: str) -> str:
    """Uppercase the first character and leave the rest untouched."""
    return text[:1].upper() + text[1:]


def join_values(value: Union[None, str, Iterable[str]], separator: str = ",") -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return separator.join(str(item) for item in value)


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def to_datetime(value: Any) -> Optional[dt.datetime]:
    """Parse a datetime, date, epoch milliseconds or date string.

    Strings go through dateutil, so ISO-8601 as well as forms like
    ``2024/01/31`` or ``Jan 31, 2024`` are accepted.

    Returns None when the value cannot be read as a point in time. Naive
    values are taken as UTC.
    """
    parsed: Optional[dt.datetime] = None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = dt.datetime.fromtimestamp(value / 1000.0, tz=dt.timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError):
            return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def format_date(value: Any) -> Optional[str]:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-01-31T00:00:00.000Z."""
    parsed = to_datetime(value)
    if parsed is None:
        return None
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _compiler_type(value: Any) -> str:
    kind = value.lower() if isinstance(value, str) else DEFAULT_COMPILER_TYPE
    if kind not in COMPILER_TYPES:
        kind = DEFAULT_COMPILER_TYPE
    return capitalize(kind)


def compute_fields(context: Mapping[str, Any], locator: ServiceLocator) -> Dict[str, Any]:
    """Fields derived from the context and the decoded service locator.

    The locator must be the same one used to build the execute URL so the
    path and the metadata never disagree.
    """
    call_purpose = context.get("call_purpose")
    source_system = context.get("source_system")
    return {
        # v3 also accepts the locator through metadata
        "service_id": locator.service_id,
        "version_id": locator.version_id,
        "version": locator.version,
        "transaction_date": format_date(context.get("transaction_date")),
        "call_purpose": DEFAULT_CALL_PURPOSE if is_blank(call_purpose) else call_purpose,
        "source_system": DEFAULT_SOURCE_SYSTEM if source_system is None else source_system,
        "correlation_id": context.get("correlation_id"),
        "array_outputs": join_values(context.get("array_outputs")),
        "compiler_type": _compiler_type(context.get("compiler_type")),
        "debug_solve": context.get("debug_solve"),
        "excel_file": context.get("excel_file"),
        "requested_output": join_values(context.get("requested_output")),
        "requested_output_regex": context.get("requested_output_regex"),
        "response_data_inputs": context.get("response_data_inputs"),
        "service_category": join_values(context.get("service_category")),
    }


def normalize(context: Mapping[str, Any], locator: ServiceLocator) -> Dict[str, Any]:
    """Return the ``request_meta`` mapping sent to the Execute API."""
    values = compute_fields(context, locator)
    extras = context.get("extras") or {}
    values.update(extras)
    return {key: value for key, value in values.items() if value is not None}
