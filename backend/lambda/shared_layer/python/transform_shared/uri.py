"""transform_shared.uri — Service URI grammar for the Execute API.

A service URI locates a compute unit in one of these forms:

    folder/service                      folders/folder/services/service
    folder/service[version]             folders/folder/services/service[version]
    service/{serviceId}
    version/{versionId}
    proxy/{custom-endpoint}

Leading, trailing and duplicate slashes are tolerated. Anything else decodes
to the empty locator, which is not an error until a URL is built from it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, urlsplit

from transform_shared.config import DEFAULT_API_PATH, DEFAULT_ENDPOINT, URI_FORMAT

__all__ = [
    "InvalidUri",
    "ServiceLocator",
    "decode",
    "encode",
    "locator_url",
    "sanitize",
    "to_url",
]

_RE_LOCATOR = re.compile(r"^([^/]+)/([^\[]+)(?:\[(.*?)\])?$")
_RE_SLASHES = re.compile(r"/{2,}")


class InvalidUri(ValueError):
    """Raised when a service URI cannot be turned into an execute URL."""


@dataclass(frozen=True)
class ServiceLocator:
    folder: Optional[str] = None
    service: Optional[str] = None
    version: Optional[str] = None
    service_id: Optional[str] = None
    version_id: Optional[str] = None
    proxy: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.folder, self.service, self.version, self.service_id, self.version_id, self.proxy)
        )


def sanitize(url: str, leading: bool = False) -> str:
    """Collapse duplicate slashes and drop the trailing one.

    The leading slash is kept only when ``leading`` is true.
    """
    sanitized = _RE_SLASHES.sub("/", url or "")
    if sanitized.endswith("/"):
        sanitized = sanitized[:-1]
    if not leading and sanitized.startswith("/"):
        sanitized = sanitized[1:]
    return sanitized


def decode(uri: str) -> ServiceLocator:
    """Decode a service URI string into a ServiceLocator."""
    uri = sanitize(uri).replace("folders/", "", 1).replace("services/", "", 1)
    match = _RE_LOCATOR.match(uri)
    if not match:
        return ServiceLocator()

    first, second, version = match.groups()
    if first == "version":
        return ServiceLocator(version_id=second)
    if first == "service":
        return ServiceLocator(service_id=second)
    if first == "proxy":
        return ServiceLocator(proxy=second)
    return ServiceLocator(folder=first, service=second, version=version or None)


def encode(locator: ServiceLocator, long: bool = True) -> str:
    """Encode a ServiceLocator back into a service URI.

    Priority: proxy > version_id > service_id > folder/service. The long form
    (``folders/f/services/s``) comes from older API versions and carries no
    version; the short form appends ``[version]`` when present.
    """
    if locator.proxy:
        return f"proxy/{locator.proxy}"
    if locator.version_id:
        return f"version/{locator.version_id}"
    if locator.service_id:
        return f"service/{locator.service_id}"
    if locator.folder and locator.service:
        if long:
            return f"folders/{locator.folder}/services/{locator.service}"
        suffix = f"[{locator.version}]" if locator.version else ""
        return f"{locator.folder}/{locator.service}{suffix}"
    return ""


def locator_url(
    base_url: str,
    locator: ServiceLocator,
    endpoint: str = DEFAULT_ENDPOINT,
    path: str = DEFAULT_API_PATH,
) -> str:
    """Build the execute URL for an already decoded locator.

    Proxy locators supply their own endpoint, so ``endpoint`` is only
    appended for the other forms. Locator segments are percent-encoded; a
    proxy path keeps its slashes.
    """
    if locator.proxy:
        path += f"/proxy/{quote(sanitize(locator.proxy), safe='/')}"
    elif locator.version_id:
        path += f"/version/{quote(locator.version_id, safe='')}"
    elif locator.service_id:
        path += f"/service/{quote(locator.service_id, safe='')}"
    elif locator.folder and locator.service:
        path += f"/folders/{quote(locator.folder, safe='')}/services/{quote(locator.service, safe='')}"
    else:
        raise InvalidUri(f"Service URI is required; {URI_FORMAT}")

    if endpoint and not locator.proxy:
        path += f"/{endpoint}"

    url = f"{base_url}/{path}"
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidUri(f"Invalid Service URI; {URI_FORMAT}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidUri(f"Invalid Service URI; {URI_FORMAT}")
    return url


def to_url(
    base_url: str,
    uri: str,
    endpoint: str = DEFAULT_ENDPOINT,
    path: str = DEFAULT_API_PATH,
) -> str:
    """Decode ``uri`` and build its execute URL under ``base_url``."""
    locator = decode(uri or "")
    if locator.is_empty:
        raise InvalidUri(f"Service URI is required; {URI_FORMAT}")
    return locator_url(base_url, locator, endpoint=endpoint, path=path)
