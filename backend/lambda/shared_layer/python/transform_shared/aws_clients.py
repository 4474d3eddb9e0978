"""transform_shared.aws_clients — Lazy-singleton AWS service clients.

The Secrets Manager client is only built when a bearer token has to be read
from a secret, so invocations that carry their own authorization never pay
the boto3 construction cost.
"""

from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.config import Config

from transform_shared import config

logger = logging.getLogger(__name__)

_secretsmanager = None


def _get_secretsmanager(region: Optional[str] = None):
    """Get (or create) the Secrets Manager client singleton."""
    global _secretsmanager
    if _secretsmanager is None:
        _secretsmanager = boto3.client(
            "secretsmanager",
            region_name=region or config.SECRETS_REGION,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _secretsmanager


def _read_secret_string(secret_id: str) -> str:
    """Return the SecretString of ``secret_id``.

    Raises ValueError when the secret has no string value; botocore errors
    propagate to the caller.
    """
    resp = _get_secretsmanager().get_secret_value(SecretId=secret_id)
    value = resp.get("SecretString")
    if not value:
        raise ValueError(f"Secret {secret_id} has no string value")
    return value


def resolve_authorization(secrets: Optional[dict]) -> str:
    """Authorization header value for the Execute API.

    Prefers ``secrets.authorization`` from the event; falls back to the
    AUTHORIZATION_SECRET_ID secret. The fallback value is read per call and
    never cached.
    """
    token = str((secrets or {}).get("authorization") or "").strip()
    if token:
        return token
    if not config.AUTHORIZATION_SECRET_ID:
        raise ValueError("authorization secret is required")

    logger.info("Reading authorization from secret %s", config.AUTHORIZATION_SECRET_ID)
    return _read_secret_string(config.AUTHORIZATION_SECRET_ID).strip()
