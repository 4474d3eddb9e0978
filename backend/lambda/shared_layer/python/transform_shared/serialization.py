"""transform_shared.serialization — JSON-safe conversion for response bodies.

Debug payloads carry exceptions, outcome objects, Decimals and datetimes;
everything is reduced to plain JSON types before it leaves the Lambda.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import json
from decimal import Decimal
from typing import Any

from transform_shared.errors import Failed


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    if isinstance(obj, (dt.datetime, dt.date)):
        return obj.isoformat()
    if isinstance(obj, Failed):
        return obj.to_dict()
    if isinstance(obj, BaseException):
        return {"type": type(obj).__name__, "message": str(obj)}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return str(obj)


def to_jsonable(value: Any) -> Any:
    """Round-trip ``value`` through JSON so only plain types remain."""
    return json.loads(json.dumps(value, default=_json_default))
