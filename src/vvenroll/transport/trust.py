"""Pinned trust anchor for connections to the registration authority.

The authority's TLS certificate chains up to its own root CA, which is not in
the platform trust store. The root is shipped as a key store (PKCS#12, as
written by ``keytool -import``) or as a PEM/DER certificate, loaded once at
startup and shared read-only by every request afterwards.
"""
from __future__ import annotations

import os
import ssl
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple, Union

from asn1crypto import pkcs12 as asn1_pkcs12
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from ..errors import TrustStoreError

TrustSource = Union[bytes, str, os.PathLike, BinaryIO]

_PEM_MARKER = b"-----BEGIN"

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")
BUNDLED_TRUST_STORES = ("vv-root-ca.p12", "vv-root-ca.cer", "vv-root-ca.pem")


@dataclass(frozen=True)
class TrustAnchor:
    certificates: Tuple[x509.Certificate, ...]

    def __len__(self) -> int:
        return len(self.certificates)

    def pem_bundle(self) -> str:
        return "".join(
            c.public_bytes(serialization.Encoding.PEM).decode("ascii") for c in self.certificates
        )

    def ssl_context(self) -> ssl.SSLContext:
        """TLS 1.2+ client context trusting only the anchored certificates."""
        ctx = ssl.create_default_context(cadata=self.pem_bundle())
        ctx.minimum_version = ssl.TLSVersion.TLSv1_2
        return ctx


def _read_source(source: TrustSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        if isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as f:
                return f.read()
        return source.read()
    except OSError as e:
        raise TrustStoreError(f"unable to read trust store: {e}") from e


def _unverified_pkcs12_certs(data: bytes) -> Tuple[x509.Certificate, ...]:
    """Certificates from the plaintext cert bags of a PKCS#12 store.

    The MAC is not checked. Bags stored inside encrypted content need the
    password and are skipped.
    """
    pfx = asn1_pkcs12.Pfx.load(data)
    auth_safe = pfx["auth_safe"]
    if auth_safe["content_type"].native != "data":
        return ()
    certs = []
    for info in asn1_pkcs12.AuthenticatedSafe.load(auth_safe["content"].native):
        if info["content_type"].native != "data":
            continue
        for bag in asn1_pkcs12.SafeContents.load(info["content"].native):
            if bag["bag_id"].native != "cert_bag":
                continue
            cert_bag = bag["bag_value"]
            if cert_bag["cert_id"].native != "x509":
                continue
            certs.append(x509.load_der_x509_certificate(cert_bag["cert_value"].parsed.dump()))
    return tuple(certs)


def _parse(data: bytes, password: Optional[bytes]) -> Tuple[x509.Certificate, ...]:
    if data.lstrip().startswith(_PEM_MARKER):
        return tuple(x509.load_pem_x509_certificates(data))
    try:
        return (x509.load_der_x509_certificate(data),)
    except ValueError:
        pass
    try:
        store = pkcs12.load_pkcs12(data, password)
    except ValueError:
        if password is not None:
            raise
        # no password given: skip the integrity check of the store itself
        return _unverified_pkcs12_certs(data)
    certs = [c.certificate for c in store.additional_certs]
    if store.cert is not None:
        certs.insert(0, store.cert.certificate)
    return tuple(certs)


def bundled_trust_store() -> Optional[str]:
    """Path of the authority's root CA shipped in ``vvenroll/data``, if present."""
    for name in BUNDLED_TRUST_STORES:
        candidate = os.path.join(DATA_DIR, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def load_trust_anchor(source: TrustSource, password: Optional[Union[str, bytes]] = None) -> TrustAnchor:
    """Load trusted certificates from a key store.

    ``password`` verifies the integrity of a PKCS#12 store and is ignored for
    PEM and DER input. With ``None`` the integrity check is skipped and the
    unencrypted certificate bags are read.
    Raises TrustStoreError if the source is unreadable, malformed or empty.
    """
    data = _read_source(source)
    if not data:
        raise TrustStoreError("trust store is empty")
    if isinstance(password, str):
        password = password.encode("utf-8")
    try:
        certs = _parse(data, password)
    except (ValueError, TypeError, KeyError) as e:
        raise TrustStoreError(f"error loading trust store: {e}") from e
    if not certs:
        raise TrustStoreError("trust store contains no certificates")
    return TrustAnchor(certificates=certs)
