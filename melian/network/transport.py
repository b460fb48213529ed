"""
Socket Transport Module

Opens and closes byte-stream connections to a Melian server and performs
full-buffer reads and writes on top of them.

Supported DSNs (scheme is case-insensitive):
    unix:///path/to/socket
    tcp://host:port
"""

import logging
import re
import socket
from dataclasses import dataclass
from typing import List, Optional

from ..config.settings import settings
from ..errors import ConfigurationError, MelianConnectionError, TransportError

logger = logging.getLogger(__name__)

_UNIX_DSN = re.compile(r"^unix://(.+)$", re.IGNORECASE)
_TCP_DSN = re.compile(r"^tcp://([^:]+):(\d+)$", re.IGNORECASE)


@dataclass(frozen=True)
class Dsn:
    """
    Parsed connection descriptor.

    Attributes:
        kind: "unix" or "tcp"
        path: Socket path for UNIX connections
        host: Host name for TCP connections
        port: Port number for TCP connections
    """
    kind: str
    path: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None

    def __str__(self) -> str:
        if self.kind == "unix":
            return f"unix://{self.path}"
        return f"tcp://{self.host}:{self.port}"


def parse_dsn(dsn: str) -> Dsn:
    """
    Parse a DSN string into a Dsn.

    Raises:
        ConfigurationError: the DSN is not unix://<path> or tcp://<host>:<port>
    """
    if not isinstance(dsn, str):
        raise ConfigurationError(f"DSN must be a string, got {type(dsn).__name__}")

    match = _UNIX_DSN.match(dsn)
    if match:
        return Dsn("unix", path=match.group(1))

    match = _TCP_DSN.match(dsn)
    if match:
        return Dsn("tcp", host=match.group(1), port=int(match.group(2)))

    raise ConfigurationError(
        f"Unsupported DSN '{dsn}'. Use unix:///path or tcp://host:port"
    )


def open_socket(dsn: Dsn, timeout: float) -> socket.socket:
    """
    Connect to the server described by dsn.

    The timeout bounds TCP connection setup only; once connected the socket
    is put back into blocking mode. UNIX connections are not time-bounded.
    """
    if dsn.kind == "unix":
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(dsn.path)
        except OSError as exc:
            sock.close()
            raise MelianConnectionError(
                f"Failed to connect to UNIX socket {dsn.path}: {exc}"
            ) from exc
    else:
        try:
            sock = socket.create_connection((dsn.host, dsn.port), timeout=timeout)
        except OSError as exc:
            raise MelianConnectionError(
                f"Failed to connect to {dsn.host}:{dsn.port}: {exc}"
            ) from exc
        sock.settimeout(None)

    logger.debug(f"Connected to {dsn}")
    return sock


def close_socket(sock: Optional[socket.socket]) -> None:
    """Close a socket; None is accepted and ignored."""
    if sock is None:
        return
    sock.close()


def write_all(sock: socket.socket, data: bytes) -> None:
    """
    Write every byte of data, looping over partial sends.

    Raises:
        TransportError: a send failed or reported zero bytes written
    """
    view = memoryview(data)
    offset = 0
    total = len(view)
    while offset < total:
        try:
            written = sock.send(view[offset:])
        except OSError as exc:
            raise TransportError(f"Melian write failed: {exc}") from exc
        if written <= 0:
            raise TransportError("Melian write failed: no bytes written")
        offset += written


def read_exact(sock: socket.socket, size: int) -> bytes:
    """
    Read exactly size bytes, looping over partial receives.

    Raises:
        TransportError: the stream ended before size bytes arrived, or a
            receive failed
    """
    chunks: List[bytes] = []
    remaining = size
    while remaining > 0:
        try:
            chunk = sock.recv(min(remaining, settings.READ_CHUNK_SIZE))
        except OSError as exc:
            raise TransportError(f"Melian read failed: {exc}") from exc
        if not chunk:
            raise TransportError("Melian socket closed unexpectedly")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
