"""Client-side records for one enrollment process.

The server is authoritative for process status; these only mirror what the
client holds between calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import NoActiveProcessError


class CertType(str, Enum):
    SIGN = "sign"
    AUTH = "auth"
    ENCR = "encr"


@dataclass(frozen=True)
class Process:
    id: str
    status: str = ""


@dataclass(frozen=True)
class AuthSession:
    eid_session_id: str
    auth_key: str = ""


@dataclass(frozen=True)
class CertificateRequest:
    type: CertType
    payload: bytes = field(repr=False)


@dataclass(frozen=True)
class Certificate:
    type: CertType
    der_bytes: bytes = field(repr=False)


@dataclass
class ProcessState:
    """Held process id and transient e-ID session.

    Lifecycle: created (empty) -> assigned -> cleared. The empty string means
    no active process. Not thread-safe; one workflow per run.
    """

    process_id: str = ""
    auth_session: Optional[AuthSession] = None

    @property
    def active(self) -> bool:
        return self.process_id != ""

    def assign(self, process_id: str) -> None:
        self.process_id = process_id or ""
        self.auth_session = None

    def clear(self) -> None:
        self.process_id = ""
        self.auth_session = None

    def require_process_id(self) -> str:
        if not self.process_id:
            raise NoActiveProcessError("No active process. Start a new process first.")
        return self.process_id
