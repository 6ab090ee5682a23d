"""Enrollment workflow against the Volksverschluesselung registration authority.

Server-side sequence (enforced by the server, mirrored here only by API shape):

  start -> select_auth_method -> eID (init / handshake / confirm)
        -> submit_email -> validate_email -> upload_csr (per type)
        -> finish_csr_uploads -> download_certificate (per type) -> finalize

Each method issues exactly one request and leaves ``state`` untouched when it
fails. Every method except ``start`` and ``service_status`` needs a held
process id and raises NoActiveProcessError before any network traffic without
one.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
from typing import Dict, Optional, Union
from urllib.parse import urlencode

from ..config import EID_AGENT_URL, VV_SERVER
from ..errors import MalformedResponseError
from ..transport.https import HttpsTransport
from ..transport.redirect import request_redirect_target
from ..utils.logging import get_logger
from .eid import RedirectResolver, perform_handshake
from .replies import (
    CertificateReply,
    EidSessionReply,
    ProcessCreatedReply,
    ProcessStatusReply,
    parse_reply,
)
from .state import AuthSession, Certificate, CertificateRequest, CertType, Process, ProcessState

log = get_logger()

CSR_FIELD_NAME = "certification_request"


def hex_hash(s: str) -> str:
    """SHA-256 of ``s`` (UTF-8) as 64 lowercase hex digits.

    Same fingerprint the authority's own client displays for a process id.
    """
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


class EnrollmentService:
    def __init__(
        self,
        transport: HttpsTransport,
        *,
        state: Optional[ProcessState] = None,
        base_url: str = VV_SERVER,
        agent_url: str = EID_AGENT_URL,
        redirect_resolver: RedirectResolver = request_redirect_target,
    ) -> None:
        self.transport = transport
        self.state = state if state is not None else ProcessState()
        self.base_url = base_url.rstrip("/")
        self.agent_url = agent_url
        self.redirect_resolver = redirect_resolver

    @property
    def process_id(self) -> str:
        return self.state.process_id

    # URL building
    def _url(self, path: str, params: Optional[Dict[str, str]] = None) -> str:
        url = f"{self.base_url}{path}"
        if params:
            url += "?" + urlencode(params)
        return url

    def _process_url(self, path: str, **params: str) -> str:
        return self._url(path, {"process_id": self.state.require_process_id(), **params})

    # Service level
    def service_status(self) -> str:
        """Raw status reply of the authority itself; not process scoped."""
        return self.transport.request("GET", self._url("/status/"))

    # Process lifecycle
    def start(self) -> Process:
        reply = self.transport.request("POST", self._url("/process/"))
        process_id = parse_reply(ProcessCreatedReply, reply).Data.ProcessId
        self.state.assign(process_id)
        log.info("process started, hash %s", hex_hash(process_id))
        return Process(id=process_id)

    def status(self) -> str:
        reply = self.transport.request("GET", self._process_url("/process/"))
        return parse_reply(ProcessStatusReply, reply).Result.ProcessStatus

    def process(self) -> Process:
        return Process(id=self.state.require_process_id(), status=self.status())

    def finalize(self) -> None:
        self.transport.request("DELETE", self._process_url("/process/", success="true"))
        log.info("process %s finalized", hex_hash(self.state.process_id))
        self.state.clear()

    def process_id_hash(self) -> str:
        return hex_hash(self.state.require_process_id())

    # Authentication
    def select_auth_method(self, method: str) -> None:
        self.transport.request("POST", self._process_url("/auth/", auth_type=method))
        log.info("authentication method %r selected", method)

    def init_eid_session(self) -> str:
        reply = self.transport.request("POST", self._process_url("/auth/eid/"))
        eid_session_id = parse_reply(EidSessionReply, reply).Data.EIdSession
        self.state.auth_session = AuthSession(eid_session_id=eid_session_id)
        return eid_session_id

    def perform_eid_handshake(self, eid_session_id: str) -> str:
        self.state.require_process_id()
        log.info("starting e-ID authentication via %s", self.agent_url)
        auth_key = perform_handshake(
            eid_session_id,
            self.redirect_resolver,
            base_url=self.base_url,
            agent_url=self.agent_url,
        )
        self.state.auth_session = AuthSession(eid_session_id=eid_session_id, auth_key=auth_key)
        return auth_key

    def confirm_eid_session(self, eid_session_id: str, auth_key: str) -> str:
        self.state.require_process_id()
        url = self._url(
            "/auth/eid/",
            {"eid_session": eid_session_id, "eid_authkey": auth_key, "success": "true"},
        )
        reply = self.transport.request("PUT", url)
        self.state.auth_session = None
        log.info("e-ID session confirmed")
        return reply

    def authenticate_with_eid(self) -> AuthSession:
        """Run init, local handshake and confirmation back to back."""
        eid_session_id = self.init_eid_session()
        auth_key = self.perform_eid_handshake(eid_session_id)
        self.confirm_eid_session(eid_session_id, auth_key)
        return AuthSession(eid_session_id=eid_session_id, auth_key=auth_key)

    # E-mail
    def submit_email(self, address: str) -> None:
        self.transport.request(
            "POST", self._process_url("/email/", email_addr=address, force_flag="false")
        )

    def validate_email(self, code: str) -> None:
        self.transport.request("PUT", self._process_url("/email/", validation_code=code))

    def fetch_personal_data(self) -> str:
        return self.transport.request("GET", self._process_url("/users/"))

    # Certificates
    def upload_csr(self, cert_type: Union[CertType, str], payload: bytes) -> None:
        req = CertificateRequest(type=CertType(cert_type), payload=payload)
        url = self._process_url("/certificates/", cert_type=req.type.value)
        self.transport.request_with_upload("POST", url, CSR_FIELD_NAME, req.payload)
        log.info("uploaded %s CSR (%d bytes)", req.type.value, len(req.payload))

    def finish_csr_uploads(self) -> None:
        self.transport.request("PUT", self._process_url("/certificates/", publish="false"))

    def download_certificate(self, cert_type: Union[CertType, str]) -> Certificate:
        ct = CertType(cert_type)
        reply = self.transport.request("GET", self._process_url("/certificates/", cert_type=ct.value))
        cert64 = parse_reply(CertificateReply, reply).Data.CertificateData
        try:
            der = base64.b64decode(cert64, validate=True)
        except binascii.Error as e:
            raise MalformedResponseError(f"CertificateData is not valid base64: {e}") from e
        return Certificate(type=ct, der_bytes=der)
