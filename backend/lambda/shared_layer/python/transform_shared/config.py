"""transform_shared.config — Environment variables and constants.

Environment variables:
    LOG_LEVEL                default: INFO
    TRANSFORMS_DIR           default: <transform_handler>/transforms (resolved by the handler)
    AUTHORIZATION_SECRET_ID  optional Secrets Manager secret holding the bearer token
    SECRETS_REGION           default: DYNAMODB_REGION or us-west-2
"""

from __future__ import annotations

import os

__all__ = [
    "AUTHORIZATION_SECRET_ID",
    "COMPILER_TYPES",
    "DEFAULT_API_PATH",
    "DEFAULT_CALL_PURPOSE",
    "DEFAULT_COMPILER_TYPE",
    "DEFAULT_ENDPOINT",
    "DEFAULT_SOURCE_SYSTEM",
    "ERROR_STATUS_HINT",
    "GENERIC_EXECUTION_ERROR",
    "HTTP_BAD_REQUEST",
    "HTTP_OK",
    "HTTP_UNPROCESSABLE_ENTITY",
    "LOG_LEVEL",
    "MODEL_EXECUTION_ERROR",
    "REMOTE_FAILURE_MESSAGE",
    "SECRETS_REGION",
    "TRANSFORMS_DIR",
    "URI_FORMAT",
]

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
TRANSFORMS_DIR: str = os.environ.get("TRANSFORMS_DIR", "")
AUTHORIZATION_SECRET_ID: str = os.environ.get("AUTHORIZATION_SECRET_ID", "")
SECRETS_REGION: str = os.environ.get("SECRETS_REGION", os.environ.get("DYNAMODB_REGION", "us-west-2"))

# ---------------------------------------------------------------------------
# HTTP status codes
# ---------------------------------------------------------------------------

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNPROCESSABLE_ENTITY = 422

# ---------------------------------------------------------------------------
# Execute API (v3)
# ---------------------------------------------------------------------------

DEFAULT_ENDPOINT = "execute"
DEFAULT_API_PATH = "api/v3"

COMPILER_TYPES = frozenset({"neuron", "type3", "xconnector"})
DEFAULT_COMPILER_TYPE = "neuron"
DEFAULT_CALL_PURPOSE = "Single Execution"
DEFAULT_SOURCE_SYSTEM = "Transform Document"

URI_FORMAT = (
    "Service URIs should be one of these formats: "
    '"{folder}/{service}[{version}?]" or '
    '"service/{serviceId}" or '
    '"version/{versionId}" or '
    '"proxy/{custom-endpoint}"'
)

# ---------------------------------------------------------------------------
# Error bodies
# ---------------------------------------------------------------------------

ERROR_STATUS_HINT = 422
GENERIC_EXECUTION_ERROR = "GENERIC_EXECUTION_ERROR"
MODEL_EXECUTION_ERROR = "MODEL_EXECUTION_ERROR"
REMOTE_FAILURE_MESSAGE = "remote execution failed without error details"
