"""transform_shared.expressions — JSONata expression runner.

Wraps the jsonata engine so compile and evaluation failures come back as a
``BadExpression`` outcome carrying the engine's message verbatim. Diagnostic
details (expression, input, engine error) are attached only in debug mode.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import jsonata

from transform_shared.errors import Failed, bad_expression

logger = logging.getLogger(__name__)

__all__ = [
    "clean_expression",
    "is_valid_expression",
    "load_expression",
    "run",
]

_RE_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_RE_NEWLINES = re.compile(r"\n+")
_RE_WIDE_SPACES = re.compile(r"\s{4,}")

_loaded: Dict[str, str] = {}


def _compile(expression: str) -> jsonata.Jsonata:
    if not expression or not expression.strip():
        raise ValueError("expression is empty")
    return jsonata.Jsonata(expression)


def run(expression: str, data: Any, debug: bool = False) -> Tuple[Any, Optional[Failed]]:
    """Compile and evaluate ``expression`` against ``data``.

    Returns (result, None) on success or (None, failed) when the engine
    rejects the expression or fails while evaluating it.
    """
    try:
        return _compile(expression).evaluate(data), None
    except Exception as exc:
        message = str(exc) or "unable to compile and run JSONata expression"
        logger.warning("JSONata expression failed: %s", message)
        details = None
        if debug:
            details = {"expr": expression, "input": data, "error": exc}
        return None, bad_expression(message, details)


def is_valid_expression(expression: str) -> bool:
    """True when the engine can compile the expression."""
    try:
        _compile(expression)
        return True
    except Exception:
        return False


def clean_expression(expression: str) -> str:
    """Strip comments and whitespace so the expression fits on one line."""
    cleaned = _RE_BLOCK_COMMENT.sub("", expression)
    cleaned = _RE_NEWLINES.sub("", cleaned).replace('"', "'")
    return _RE_WIDE_SPACES.sub("", cleaned)


def load_expression(path: Union[str, Path]) -> str:
    """Read an expression file once and reuse the text for later calls."""
    key = str(Path(path).resolve())
    if key not in _loaded:
        try:
            _loaded[key] = Path(key).read_text(encoding="utf-8")
        except OSError as exc:
            raise OSError(f"Failed to read expression file {path}: {exc}") from exc
    return _loaded[key]
