import uuid
from typing import Optional, Tuple

CRLF = b"\r\n"


def new_boundary() -> str:
    return f"---boundary{uuid.uuid4()}---"


def encode_multipart(field_name: str, payload: bytes, boundary: Optional[str] = None) -> Tuple[str, bytes]:
    """Encode ``payload`` as the single file part of a multipart/form-data body.

    Returns (content_type, body). The payload is copied byte for byte; it is
    assumed not to contain the boundary.
    """
    boundary = boundary or new_boundary()
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{field_name}"\r\n'
        "Content-Type: application/octet-stream\r\n"
        "\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return f"multipart/form-data; boundary={boundary}", head + bytes(payload) + tail
