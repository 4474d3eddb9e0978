"""transform_handler/lambda_function.py

Lambda that runs a JSONata transform document against the Execute API (v3).

Pipeline (one pass, no retries):
    request.jsonata  ->  POST {spark_url}/{tenant}/api/v3/<service>/execute
                     ->  response.jsonata  ->  response envelope

Any stage may stop the pipeline with a Failed outcome, which goes straight
to the response envelope. Every invocation returns exactly one
``{http_status_code, headers, body}``.

Event:
    request   {body, headers}
    secrets   {authorization, ...}
    context   {tenant, spark_url, service_uri?, log_level?, debugger?, ...metadata}

Environment variables:
    LOG_LEVEL                default: INFO
    TRANSFORMS_DIR           default: ./transforms next to this file
    AUTHORIZATION_SECRET_ID  optional fallback for secrets.authorization
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional, Tuple

from transform_shared import config, expressions, invoker
from transform_shared.errors import Failed, HandlerOutcome, Ok, remote_business_error
from transform_shared.http_utils import build_response

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger()


def _apply_log_level(value: Any) -> None:
    level = logging.getLevelName(str(value or config.LOG_LEVEL).upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)


_apply_log_level(None)

# ---------------------------------------------------------------------------
# Transform expressions (baked at deploy time)
# ---------------------------------------------------------------------------

TRANSFORMS_DIR = config.TRANSFORMS_DIR or os.path.join(os.path.dirname(__file__), "transforms")
REQUEST_JSONATA = expressions.load_expression(os.path.join(TRANSFORMS_DIR, "request.jsonata"))
RESPONSE_JSONATA = expressions.load_expression(os.path.join(TRANSFORMS_DIR, "response.jsonata"))


def _redacted(event: Dict[str, Any]) -> Dict[str, Any]:
    """The event with secret values masked, for debug payloads."""
    secrets = event.get("secrets")
    if not isinstance(secrets, dict):
        return event
    return {**event, "secrets": {key: "***" for key in secrets}}


def _transform(event: Dict[str, Any], debug: bool) -> Tuple[HandlerOutcome, Dict[str, Any]]:
    """Run the pipeline and return its outcome with the trace collected so far."""
    request = event.get("request") or {}
    context = event.get("context") or {}
    trace: Dict[str, Any] = {}

    req_transform, failed = expressions.run(REQUEST_JSONATA, request.get("body"), debug)
    if failed is not None:
        return failed, trace
    trace["req_transform"] = req_transform

    result = invoker.invoke(context, event.get("secrets"), req_transform)
    if isinstance(result, Failed):
        return result, trace
    trace["original_response"] = {"status": result.status_code, "body": result.body}

    res_transform, failed = expressions.run(RESPONSE_JSONATA, result.body, debug)
    if failed is not None:
        return failed, trace
    return Ok(res_transform), trace


def lambda_handler(event: Optional[Dict[str, Any]], context: Any = None) -> Dict[str, Any]:
    started_at = time.perf_counter()
    event = event or {}
    settings = event.get("context") or {}
    debug = bool(settings.get("debugger"))
    _apply_log_level(settings.get("log_level"))

    try:
        outcome, trace = _transform(event, debug)
    except Exception as exc:
        logger.exception("Transform pipeline failed unexpectedly")
        outcome, trace = remote_business_error(str(exc)), {}

    debug_payload = None
    if debug:
        debug_payload = {"event": _redacted(event)}
        if isinstance(outcome, Failed):
            debug_payload["error"] = outcome
        else:
            debug_payload.update(trace)

    response = build_response(outcome, started_at, debug_payload)
    logger.info(
        "Transform finished: status=%s elapsed=%s",
        response["http_status_code"],
        response["headers"]["X-Transform-Elapsed-Time"],
    )
    return response
