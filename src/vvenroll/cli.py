from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import config
from .errors import TrustStoreError, VVError
from .store import ProcessStore
from .transport.https import SecureTransport
from .transport.trust import bundled_trust_store, load_trust_anchor
from .utils.logging import get_logger
from .workflow.service import EnrollmentService
from .workflow.state import CertType

log = get_logger()


def build_service(trust_store: str = config.TRUST_STORE, password: str = config.TRUST_STORE_PASSWORD) -> EnrollmentService:
    anchor = None
    trust_store = trust_store or bundled_trust_store()
    if not trust_store:
        log.warning("No trust store configured, using the platform certificates")
    else:
        try:
            anchor = load_trust_anchor(trust_store, password)
        except TrustStoreError as e:
            log.warning("Unable to load SSL certificates from %s: %s", trust_store, e)
    return EnrollmentService(SecureTransport(anchor), base_url=config.VV_SERVER, agent_url=config.EID_AGENT_URL)


def cmd_init(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print("Initializing a new process...")
    svc.start()
    store.save(svc.process_id)
    print("Process id has been saved. Hash: ")
    print(svc.process_id_hash())
    return 0


def cmd_status(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print("Process id hash: ")
    print(svc.process_id_hash())
    return 0


def cmd_auth(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print(f"Setting authentication method {args.method}... ")
    svc.select_auth_method(args.method)
    return 0


def cmd_eid(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    eid_session = svc.init_eid_session()
    print("Starting authentication...")
    auth_key = svc.perform_eid_handshake(eid_session)
    svc.confirm_eid_session(eid_session, auth_key)
    print("Authentication successful.")
    return 0


def cmd_email(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print(f"Submitting e-mail address '{args.address}'...")
    svc.submit_email(args.address)
    return 0


def cmd_validate(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print(f"Submitting validation code '{args.code}'...")
    svc.validate_email(args.code)
    return 0


def cmd_showdata(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print("Requesting personal data...")
    print(svc.fetch_personal_data())
    return 0


def cmd_csr(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    data = Path(args.file).read_bytes()
    print(f"Sending CSR of type '{args.type}'...")
    svc.upload_csr(args.type, data)
    return 0


def cmd_csrdone(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    svc.finish_csr_uploads()
    return 0


def cmd_getcert(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    out = Path(args.file)
    if out.exists():
        print(f"File '{args.file}' already exists.", file=sys.stderr)
        return 1
    print(f"Requesting signed certificate of type '{args.type}'...")
    cert = svc.download_certificate(args.type)
    out.write_bytes(cert.der_bytes)
    return 0


def cmd_finalize(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    svc.finalize()
    store.clear()
    print("Process finalized.")
    return 0


def cmd_service_status(svc: EnrollmentService, store: ProcessStore, args: argparse.Namespace) -> int:
    print(svc.service_status())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("vvenroll", description="Volksverschluesselung enrollment client")
    p.add_argument("--state-file", default=config.STATE_FILE, help="where the process id is kept")
    p.add_argument("--trust-store", default=config.TRUST_STORE, help="key store with the authority's root CA")
    sub = p.add_subparsers(dest="cmd", required=True)
    types = [t.value for t in CertType]

    def add(name, func, help, needs_process=True):
        sp = sub.add_parser(name, help=help)
        sp.set_defaults(func=func, needs_process=needs_process)
        return sp

    add("init", cmd_init, "initialize a new process and show hash value", needs_process=False)
    add("status", cmd_status, "show process status and hash value")
    add("auth", cmd_auth, "select authentication method (e.g. eid)").add_argument("method")
    add("eid", cmd_eid, "perform eid authentication process")
    add("email", cmd_email, "set e-mail address").add_argument("address")
    add("validate", cmd_validate, "submit e-mail validation code").add_argument("code")
    add("showdata", cmd_showdata, "show personal data")
    p_csr = add("csr", cmd_csr, "upload a certificate signing request")
    p_csr.add_argument("type", choices=types)
    p_csr.add_argument("file")
    add("csrdone", cmd_csrdone, "tell server all CSRs have been uploaded")
    p_get = add("getcert", cmd_getcert, "download the signed certificate and save it to file")
    p_get.add_argument("type", choices=types)
    p_get.add_argument("file")
    add("finalize", cmd_finalize, "end the current process")
    add("service-status", cmd_service_status, "show status of the registration service", needs_process=False)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    store = ProcessStore(args.state_file)
    try:
        process_id = store.load()
    except (OSError, ValueError) as e:
        print(f"Could not read state file {args.state_file}: {e}", file=sys.stderr)
        return 1
    if args.needs_process and not process_id:
        print("Could not load process id. Call init command.", file=sys.stderr)
        return 1

    svc = build_service(args.trust_store)
    svc.state.assign(process_id)
    try:
        rc = args.func(svc, store, args)
        if rc == 0 and args.func is not cmd_service_status and svc.state.active:
            print("process status: " + svc.status())
    except VVError as e:
        print(f"error ({e.kind.value}): {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(str(e), file=sys.stderr)
        return 1
    return rc


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
