"""
Functional Fetch API

The fast path: plain functions operating on a bare socket obtained from
create_connection(). There is no per-call object overhead and no name
resolution; callers pass table and column identifiers directly. Resolve
them once with table_id_of()/column_id_of() if only names are known.

Usage:
    conn = create_connection(dsn="tcp://127.0.0.1:8765", timeout=1)
    with conn:
        row = fetch_by_int_with(conn, 0, 0, 20)
        row = fetch_by_string_with(conn, 1, 1, "Pixel")
"""

import json
import socket
import struct
from typing import Any, Optional, Union

from .config.settings import settings
from .errors import ConfigurationError, DecodeError
from .network.transport import close_socket, open_socket, parse_dsn
from .protocol.codec import send_request
from .protocol.commands import Action
from .schema.loader import schema_from_payload
from .schema.model import Schema

Key = Union[bytes, bytearray, memoryview, str]

INT_KEY = struct.Struct("<I")


def create_connection(dsn: Optional[str] = None, timeout: Optional[float] = None) -> socket.socket:
    """
    Open a raw connection handle for the fast-path functions.

    The returned socket is owned by the caller; close it with
    disconnect_socket() or use it as a context manager.
    """
    dsn = dsn if dsn is not None else settings.DSN
    timeout = timeout if timeout is not None else settings.TIMEOUT
    return open_socket(parse_dsn(dsn), timeout)


def disconnect_socket(conn: Optional[socket.socket]) -> bool:
    """Close a raw connection handle. Returns False if there was nothing to close."""
    if conn is None:
        return False
    close_socket(conn)
    return True


def key_bytes(key: Optional[Key]) -> bytes:
    """Normalize a lookup key to bytes; str keys are UTF-8 encoded."""
    if key is None:
        raise ConfigurationError("You must provide a key to fetch")
    if isinstance(key, bytes):
        return key
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    raise ConfigurationError(f"Unsupported key type: {type(key).__name__}")


def int_key(key: int) -> bytes:
    """Pack an integer key as 4-byte little-endian, as the server expects."""
    if key is None:
        raise ConfigurationError("You must provide a key to fetch")
    if isinstance(key, bool) or not isinstance(key, int):
        raise ConfigurationError(f"Integer key expected, got {type(key).__name__}")
    if not 0 <= key <= 0xFFFFFFFF:
        raise ConfigurationError(f"Integer key {key} does not fit in 32 unsigned bits")
    return INT_KEY.pack(key)


def decode_payload(payload: bytes) -> Optional[Any]:
    """Decode a row payload; an empty payload means no row."""
    if not payload:
        return None
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise DecodeError(f"Failed to decode Melian payload: {exc}") from exc


def fetch_raw_with(conn: socket.socket, table_id: int, column_id: int, key: Key) -> bytes:
    """Fetch the raw payload stored under key; b"" when there is none."""
    payload = key_bytes(key)
    return send_request(conn, Action.FETCH, table_id, column_id, payload)


def fetch_by_string_with(
        conn: socket.socket, table_id: int, column_id: int, key: Key
) -> Optional[Any]:
    """
    Fetch and JSON-decode the row stored under key, or None.

    A stored JSON null also decodes to None; use fetch_raw_with() to tell it
    apart from a missing row (b"null" versus b"").
    """
    return decode_payload(fetch_raw_with(conn, table_id, column_id, key))


def fetch_by_int_with(
        conn: socket.socket, table_id: int, column_id: int, key: int
) -> Optional[Any]:
    """Like fetch_by_string_with() for integer keys."""
    return fetch_by_string_with(conn, table_id, column_id, int_key(key))


def describe_with(conn: socket.socket) -> Schema:
    """Ask the server for its schema."""
    return schema_from_payload(send_request(conn, Action.DESCRIBE, 0, 0, b""))
