"""Protocol module for the Melian client."""

from .commands import HEADER_VERSION, Action, RequestHeader
from .codec import (
    REQUEST_HEADER,
    RESPONSE_PREFIX,
    decode_request_header,
    decode_response_length,
    encode_request,
    encode_response,
    send_request,
)

__all__ = [
    "HEADER_VERSION",
    "Action",
    "RequestHeader",
    "REQUEST_HEADER",
    "RESPONSE_PREFIX",
    "encode_request",
    "decode_request_header",
    "encode_response",
    "decode_response_length",
    "send_request",
]
