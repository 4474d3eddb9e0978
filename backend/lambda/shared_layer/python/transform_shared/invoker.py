"""transform_shared.invoker — Execute API (v3) call.

POSTs ``{request_data: {inputs}, request_meta}`` to the service located by
``context.service_uri`` and classifies the answer:

    Success(body)           2xx JSON; body may be a diagnosed error body
    Failed(TransportError)  non-2xx; message is the HTTP reason phrase
    Failed(InvalidUri)      service URI missing or unusable
    Failed(RemoteBusinessError)
                            anything else that went wrong on the way
                            (network fault, bad JSON, non-JSON content)

No retries and no client-side timeout; the Lambda invocation timeout bounds
the call.
"""

from __future__ import annotations

import http
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from transform_shared import metadata, uri
from transform_shared.aws_clients import resolve_authorization
from transform_shared.config import HTTP_OK
from transform_shared.errors import (
    Failed,
    UnexpectedContentType,
    invalid_uri,
    remote_business_error,
    run_diagnostics,
    transport_error,
)

logger = logging.getLogger(__name__)

__all__ = ["RemoteResult", "Success", "build_payload", "invoke"]


@dataclass(frozen=True)
class Success:
    body: Any
    status_code: int = HTTP_OK


RemoteResult = Union[Success, Failed]


def build_payload(context: Mapping[str, Any], locator: uri.ServiceLocator, inputs: Any) -> Dict[str, Any]:
    return {
        "request_data": {"inputs": inputs},
        "request_meta": metadata.normalize(context, locator),
    }


def _reason_phrase(exc: urllib.error.HTTPError) -> str:
    reason = str(exc.reason or "").strip()
    if reason:
        return reason
    try:
        return http.HTTPStatus(exc.code).phrase
    except ValueError:
        return f"HTTP {exc.code}"


def _read_json(resp: Any) -> Any:
    content_type = resp.headers.get("Content-Type") or ""
    if "application/json" not in content_type:
        raise UnexpectedContentType(
            f"expecting response with JSON content type but got ({content_type})"
        )
    return json.loads(resp.read().decode("utf-8"))


def invoke(context: Mapping[str, Any], secrets: Optional[Mapping[str, Any]], inputs: Any) -> RemoteResult:
    """Call the Execute API with ``inputs`` and classify the response."""
    tenant = str(context.get("tenant") or "")
    base_url = f"{context.get('spark_url') or ''}/{tenant}"

    # Decoded once; the URL path and the metadata both read this locator.
    locator = uri.decode(context.get("service_uri") or "")
    try:
        url = uri.locator_url(base_url, locator)
    except uri.InvalidUri as exc:
        logger.warning("Invalid service URI %r: %s", context.get("service_uri"), exc)
        return invalid_uri(str(exc))

    try:
        headers = {
            "Content-Type": "application/json",
            "x-tenant-name": tenant,
            "Authorization": resolve_authorization(secrets),
        }
        data = json.dumps(build_payload(context, locator, inputs)).encode("utf-8")
        req = urllib.request.Request(url, method="POST", data=data, headers=headers)

        logger.info("Calling Execute API: %s (tenant=%s)", url, tenant)
        with urllib.request.urlopen(req) as resp:
            body = _read_json(resp)
    except urllib.error.HTTPError as exc:
        try:
            detail = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
        except Exception as read_exc:
            detail = f"<unreadable body: {read_exc}>"
        logger.error("Execute API returned %s: %s", exc.code, detail[:500])
        return transport_error(exc.code, _reason_phrase(exc))
    except Exception as exc:
        logger.error("Execute API call could not be processed: %s", exc)
        return remote_business_error(str(exc))

    diagnosed = run_diagnostics(body)
    if diagnosed is not None:
        logger.warning("Execute API reported an error: %s", diagnosed["message"])
        return Success(diagnosed)
    return Success(body)
