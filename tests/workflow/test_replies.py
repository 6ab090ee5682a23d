import pytest

from vvenroll.errors import MalformedResponseError
from vvenroll.workflow.replies import CertificateReply, ProcessCreatedReply, ProcessStatusReply, parse_reply


def test_extracts_nested_field_and_ignores_extras():
    r = parse_reply(ProcessCreatedReply, '{"Data":{"ProcessId":"abc-123","Other":1},"Meta":{}}')
    assert r.Data.ProcessId == "abc-123"


@pytest.mark.parametrize(
    "reply",
    [
        "",
        "not json",
        "[]",
        '{"Result":{"ProcessId":"x"}}',
        '{"Data":{}}',
        '{"Data":{"ProcessId":123}}',
        '{"Data":{"ProcessId":null}}',
        '{"Data":{"ProcessId":""}}',
        '{"Data":"abc"}',
    ],
)
def test_missing_or_wrong_type(reply):
    with pytest.raises(MalformedResponseError):
        parse_reply(ProcessCreatedReply, reply)


def test_status_uses_result_wrapper():
    assert parse_reply(ProcessStatusReply, '{"Result":{"ProcessStatus":"auth"}}').Result.ProcessStatus == "auth"
    with pytest.raises(MalformedResponseError):
        parse_reply(ProcessStatusReply, '{"Data":{"ProcessStatus":"auth"}}')


def test_certificate_reply():
    assert parse_reply(CertificateReply, '{"Data":{"CertificateData":"AAEC"}}').Data.CertificateData == "AAEC"
