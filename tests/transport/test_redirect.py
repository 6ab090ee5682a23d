import httpx
import pytest

from vvenroll.errors import MissingRedirectError, TransportError, UnexpectedResponseError
from vvenroll.transport.redirect import request_redirect_target

AGENT = "http://127.0.0.1:24727/eID-Client?tcTokenURL=x"
TARGET = "https://ra.example/auth/eid/?eid_session=S&auth_key=ABC123&other=x"


def resolve(handler, url=AGENT):
    return request_redirect_target("GET", url, transport=httpx.MockTransport(handler))


def test_returns_location_of_303():
    assert resolve(lambda req: httpx.Response(303, headers={"Location": TARGET})) == TARGET


def test_redirect_not_followed():
    calls = []

    def handler(req):
        calls.append(str(req.url))
        return httpx.Response(303, headers={"Location": "http://127.0.0.1:24727/next"})

    resolve(handler)
    assert calls == [AGENT]


def test_303_without_location():
    with pytest.raises(MissingRedirectError):
        resolve(lambda req: httpx.Response(303))


@pytest.mark.parametrize("status", [200, 302, 307, 404])
def test_non_303_status(status):
    with pytest.raises(UnexpectedResponseError) as ei:
        resolve(lambda req: httpx.Response(status, headers={"Location": TARGET}))
    assert ei.value.status_code == status


def test_unreachable_agent():
    def handler(req):
        raise httpx.ConnectError("connection refused", request=req)

    with pytest.raises(TransportError):
        resolve(handler)


def test_https_url_rejected():
    with pytest.raises(TransportError):
        resolve(lambda req: httpx.Response(303, headers={"Location": TARGET}), url="https://127.0.0.1:24727/")
