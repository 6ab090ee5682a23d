from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

import httpx

from ..config import HTTP_TIMEOUT_SEC
from ..errors import MissingRedirectError, TransportError, UnexpectedResponseError
from ..utils.logging import get_logger

log = get_logger()


def request_redirect_target(
    method: str,
    url: str,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    timeout: float = HTTP_TIMEOUT_SEC,
) -> str:
    """Make a plain HTTP request that must answer 303 and return its Location.

    Redirects are not followed and the body is never read.
    """
    if urlsplit(url).scheme.lower() != "http":
        raise TransportError(f"URL did not lead to a http connection: {url}", url=url)
    method = method.upper()
    log.debug("%s %s (redirect expected)", method, url)
    try:
        with httpx.Client(transport=transport, timeout=timeout, follow_redirects=False) as client:
            with client.stream(method, url) as resp:
                status = resp.status_code
                reason = resp.reason_phrase
                location = resp.headers.get("location")
    except httpx.HTTPError as e:
        raise TransportError(f"{method} {url} failed: {e}", url=url) from e

    if status != 303:
        raise UnexpectedResponseError(
            f"Server did not respond with a redirect: {status} {reason}",
            status_code=status,
            url=url,
        )
    if location is None:
        raise MissingRedirectError("Redirection target not set in HTTP header.", status_code=status, url=url)
    return location
