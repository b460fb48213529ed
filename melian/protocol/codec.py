"""
Frame Codec Module

Serializes requests into the binary wire format and reads length-prefixed
responses back.

Protocol Format:
    Request:  version(1) action(1) table_id(1) column_id(1) length(4, BE) payload
    Response: length(4, BE) payload

A response length of zero is the server's way of saying "no value for this
key"; it is returned as b"" and is never treated as an error.
"""

import socket
import struct

from ..errors import ConfigurationError, ProtocolError
from ..network.transport import read_exact, write_all
from .commands import HEADER_VERSION, MAX_IDENTIFIER, RequestHeader

REQUEST_HEADER = struct.Struct("!BBBBI")
RESPONSE_PREFIX = struct.Struct("!I")

MAX_PAYLOAD_LENGTH = 0xFFFFFFFF


def _check_identifier(value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"Invalid {label}: {value!r} is not an integer")
    if not 0 <= value <= MAX_IDENTIFIER:
        raise ConfigurationError(
            f"Invalid {label}: {value} is outside 0-{MAX_IDENTIFIER}"
        )


def encode_request(action: int, table_id: int, column_id: int, payload: bytes = b"") -> bytes:
    """
    Build a complete request frame (header followed by payload).

    Args:
        action: Opcode (Action.FETCH or Action.DESCRIBE)
        table_id: Table identifier, 0-255
        column_id: Column identifier, 0-255
        payload: Raw key bytes (empty for DESCRIBE)

    Returns:
        The bytes to put on the wire.

    Examples:
        >>> encode_request(ord("F"), 1, 2, b"ab")
        b'\\x11F\\x01\\x02\\x00\\x00\\x00\\x02ab'
    """
    _check_identifier(table_id, "table ID")
    _check_identifier(column_id, "column ID")
    if len(payload) > MAX_PAYLOAD_LENGTH:
        raise ConfigurationError(f"Payload too large: {len(payload)} bytes")

    header = REQUEST_HEADER.pack(
        HEADER_VERSION,
        action,
        table_id,
        column_id,
        len(payload),
    )
    return header + payload


def decode_request_header(data: bytes) -> RequestHeader:
    """Parse the 8-byte request header."""
    if len(data) != REQUEST_HEADER.size:
        raise ProtocolError(
            f"Request header must be {REQUEST_HEADER.size} bytes, got {len(data)}"
        )
    return RequestHeader(*REQUEST_HEADER.unpack(data))


def encode_response(payload: bytes) -> bytes:
    """Prefix a response payload with its big-endian length."""
    return RESPONSE_PREFIX.pack(len(payload)) + payload


def decode_response_length(prefix: bytes) -> int:
    """Parse the 4-byte response length prefix."""
    if len(prefix) != RESPONSE_PREFIX.size:
        raise ProtocolError(
            f"Response prefix must be {RESPONSE_PREFIX.size} bytes, got {len(prefix)}"
        )
    (length,) = RESPONSE_PREFIX.unpack(prefix)
    return length


def send_request(
        sock: socket.socket,
        action: int,
        table_id: int,
        column_id: int,
        payload: bytes = b"",
) -> bytes:
    """
    Run one request/response cycle on a connected socket.

    Returns:
        The response payload, or b"" when the server has no value.

    Raises:
        ConfigurationError: identifiers out of range
        TransportError: the write failed or the stream closed mid-frame
    """
    write_all(sock, encode_request(action, table_id, column_id, payload))
    length = decode_response_length(read_exact(sock, RESPONSE_PREFIX.size))
    if length == 0:
        return b""
    return read_exact(sock, length)
