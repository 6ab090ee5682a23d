import pytest

from vvenroll.workflow.service import EnrollmentService
from vvenroll.workflow.state import ProcessState

BASE = "https://ra.example"


class FakeTransport:
    """Records every call and answers from a queue of canned replies."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def _next(self):
        if not self.replies:
            return "{}"
        r = self.replies.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    def request(self, method, url):
        self.calls.append((method, url, None, None))
        return self._next()

    def request_with_upload(self, method, url, field_name, payload):
        self.calls.append((method, url, field_name, payload))
        return self._next()


@pytest.fixture
def fake():
    return FakeTransport()


@pytest.fixture
def svc(fake):
    return EnrollmentService(fake, state=ProcessState("abc-123"), base_url=BASE)
