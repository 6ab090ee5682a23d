"""HTTPS requests against the registration authority.

One request per call, whole body read into memory. The authority answers with
single-line JSON; bodies are returned with every line terminator removed and
lines joined without a separator.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

import httpx

from ..config import HTTP_TIMEOUT_SEC
from ..errors import ConflictError, TransportError
from ..utils.logging import get_logger
from .multipart import encode_multipart
from .trust import TrustAnchor

log = get_logger()


@runtime_checkable
class HttpsTransport(Protocol):
    def request(self, method: str, url: str) -> str: ...
    def request_with_upload(self, method: str, url: str, field_name: str, payload: bytes) -> str: ...


def join_lines(text: str) -> str:
    return text.replace("\r\n", "").replace("\r", "").replace("\n", "")


def refuse_plaintext_redirect(response: httpx.Response) -> None:
    """Response hook: redirects may only lead to another https URL."""
    if not response.has_redirect_location:
        return
    target = response.url.join(response.headers["location"])
    if target.scheme != "https":
        raise TransportError(
            f"Refusing redirect from {response.url} to non-https target {target}",
            status_code=response.status_code,
            url=str(target),
        )


class SecureTransport:
    """HTTPS client with an optional pinned trust anchor.

    ``transport`` replaces the network layer (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        trust_anchor: Optional[TrustAnchor] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = HTTP_TIMEOUT_SEC,
    ) -> None:
        self.trust_anchor = trust_anchor
        self._verify = trust_anchor.ssl_context() if trust_anchor is not None else True
        self._transport = transport
        self._timeout = timeout

    def request(self, method: str, url: str) -> str:
        return self._send(method, url)

    def request_with_upload(self, method: str, url: str, field_name: str, payload: bytes) -> str:
        content_type, body = encode_multipart(field_name, payload)
        headers = {"Content-Type": content_type, "Content-Length": str(len(body))}
        return self._send(method, url, headers=headers, content=body)

    def _send(self, method: str, url: str, headers: Optional[dict] = None, content: Optional[bytes] = None) -> str:
        if urlsplit(url).scheme.lower() != "https":
            raise TransportError(f"URL did not lead to a https connection: {url}", url=url)
        method = method.upper()
        log.debug("%s %s", method, url)
        try:
            with httpx.Client(
                verify=self._verify,
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
                event_hooks={"response": [refuse_plaintext_redirect]},
            ) as client:
                resp = client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        if resp.status_code == 409:
            raise ConflictError(
                "This operation is not possible in the current context (HTTP response 409).",
                status_code=409,
                url=url,
            )
        if not resp.is_success:
            raise TransportError(
                f"Server returned HTTP {resp.status_code} for {url}",
                status_code=resp.status_code,
                url=url,
                details={"body": resp.text},
            )
        return join_lines(resp.text)


def request(method: str, url: str, trust_anchor: Optional[TrustAnchor] = None) -> str:
    return SecureTransport(trust_anchor).request(method, url)


def request_with_upload(
    method: str, url: str, field_name: str, payload: bytes, trust_anchor: Optional[TrustAnchor] = None
) -> str:
    return SecureTransport(trust_anchor).request_with_upload(method, url, field_name, payload)
