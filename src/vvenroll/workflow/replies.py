"""Reply shapes of the registration authority.

Every reply is a single JSON object with a ``Data`` or ``Result`` wrapper. The
models only declare the field each step needs; anything else is ignored.
"""
from __future__ import annotations

import json
from typing import Annotated, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from ..errors import MalformedResponseError


class _Reply(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _ProcessData(_Reply):
    ProcessId: Annotated[StrictStr, Field(min_length=1)]


class ProcessCreatedReply(_Reply):
    Data: _ProcessData


class _StatusResult(_Reply):
    ProcessStatus: StrictStr


class ProcessStatusReply(_Reply):
    Result: _StatusResult


class _EidData(_Reply):
    EIdSession: StrictStr


class EidSessionReply(_Reply):
    Data: _EidData


class _CertificateData(_Reply):
    CertificateData: StrictStr


class CertificateReply(_Reply):
    Data: _CertificateData


R = TypeVar("R", bound=_Reply)


def parse_reply(model: Type[R], reply: str) -> R:
    try:
        obj = json.loads(reply)
    except ValueError as e:
        raise MalformedResponseError(f"reply is not valid JSON: {e}", details={"reply": reply}) from e
    try:
        return model.model_validate(obj)
    except ValidationError as e:
        raise MalformedResponseError(
            f"unexpected reply shape for {model.__name__}: {e.errors(include_url=False)}",
            details={"reply": reply},
        ) from e
