"""Error kinds raised by the transport and workflow layers.

Every exception carries a ``kind`` so callers can branch without string
inspection::

    try:
        svc.finish_csr_uploads()
    except VVError as e:
        if e.kind is ErrorKind.CONFLICT:
            ...

Nothing in the library recovers from these; they surface unchanged.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    CONFLICT = "conflict"
    UNEXPECTED_RESPONSE = "unexpected_response"
    MISSING_REDIRECT = "missing_redirect"
    HANDSHAKE = "handshake"
    MALFORMED_RESPONSE = "malformed_response"
    TRUST_STORE = "trust_store"
    NO_ACTIVE_PROCESS = "no_active_process"


class VVError(Exception):
    """Base class; ``kind`` is fixed per subclass."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.details = details or {}
        super().__init__(message)


class TransportError(VVError):
    """Connection or I/O failure, wrong scheme, or a non-2xx status."""

    kind = ErrorKind.TRANSPORT


class ConflictError(TransportError):
    """HTTP 409: the operation is not possible in the current server-side state."""

    kind = ErrorKind.CONFLICT


class UnexpectedResponseError(VVError):
    kind = ErrorKind.UNEXPECTED_RESPONSE


class MissingRedirectError(VVError):
    kind = ErrorKind.MISSING_REDIRECT


class HandshakeError(VVError):
    """Local e-ID agent unreachable or its redirect carried no auth_key."""

    kind = ErrorKind.HANDSHAKE


class MalformedResponseError(VVError):
    """JSON reply missing an expected field or holding the wrong type."""

    kind = ErrorKind.MALFORMED_RESPONSE


class TrustStoreError(VVError):
    kind = ErrorKind.TRUST_STORE


class NoActiveProcessError(VVError):
    """A process-scoped operation was called while no process id is held."""

    kind = ErrorKind.NO_ACTIVE_PROCESS
