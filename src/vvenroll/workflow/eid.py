"""Loopback handshake with the local e-ID agent.

The agent runs the e-ID protocol against the token URL and answers with a 303
whose target carries ``auth_key``. The match is deliberately literal: first
``auth_key=`` occurrence, value up to the next ``&`` or end of string.
"""
from __future__ import annotations

import re
from typing import Callable
from urllib.parse import unquote_plus, urlencode

from ..config import EID_AGENT_URL, VV_SERVER
from ..errors import HandshakeError, MissingRedirectError, TransportError, UnexpectedResponseError
from ..transport.redirect import request_redirect_target

AUTH_KEY_RE = re.compile(r"auth_key=([^&]+)")

RedirectResolver = Callable[[str, str], str]


def build_token_url(eid_session_id: str, base_url: str = VV_SERVER) -> str:
    return f"{base_url}/auth/eid/?" + urlencode({"eid_session": eid_session_id})


def build_agent_url(token_url: str, agent_url: str = EID_AGENT_URL) -> str:
    return f"{agent_url}?" + urlencode({"tcTokenURL": token_url})


def extract_auth_key(redirect_target: str) -> str:
    m = AUTH_KEY_RE.search(redirect_target)
    if m is None:
        raise HandshakeError("auth_key not found in redirection target", details={"target": redirect_target})
    return unquote_plus(m.group(1))


def perform_handshake(
    eid_session_id: str,
    resolver: RedirectResolver = request_redirect_target,
    *,
    base_url: str = VV_SERVER,
    agent_url: str = EID_AGENT_URL,
) -> str:
    url = build_agent_url(build_token_url(eid_session_id, base_url), agent_url)
    try:
        target = resolver("GET", url)
    except (TransportError, UnexpectedResponseError, MissingRedirectError) as e:
        raise HandshakeError(f"Could not complete handshake with local e-ID agent: {e}", url=url) from e
    return extract_auth_key(target)
