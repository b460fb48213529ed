"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import json
import os
import shutil
import socket
import struct
import tempfile
import threading
import pytest
from asyncio import StreamReader, StreamWriter
from contextlib import closing
from typing import Dict, Generator, Optional, Set, Tuple

from melian.protocol.codec import (
    REQUEST_HEADER,
    RESPONSE_PREFIX,
    decode_request_header,
    encode_response,
)
from melian.schema.loader import schema_from_spec
from melian.schema.model import Schema


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Schema Fixtures
# ============================================================================

SCHEMA_SPEC = "people#0|60|id:int,cats#1|45|id:int;name:string"

SCHEMA_DOCUMENT = {
    "tables": [
        {
            "name": "people",
            "id": 0,
            "period": 60,
            "indexes": [{"id": 0, "column": "id", "type": "int"}],
        },
        {
            "name": "cats",
            "id": 1,
            "period": 45,
            "indexes": [
                {"id": 0, "column": "id", "type": "int"},
                {"id": 1, "column": "name", "type": "string"},
            ],
        },
    ]
}


@pytest.fixture
def schema_document() -> dict:
    """A fresh copy of the two-table schema document."""
    return json.loads(json.dumps(SCHEMA_DOCUMENT))


@pytest.fixture
def schema() -> Schema:
    """The two-table schema as a model object."""
    return schema_from_spec(SCHEMA_SPEC)


# ============================================================================
# Socket Fixtures
# ============================================================================

@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """
    A connected (client, server) socket pair.

    Tests queue the server's reply before calling the client, then read the
    request the client wrote, so nothing blocks.
    """
    client, server = socket.socketpair()
    yield client, server
    client.close()
    server.close()


# ============================================================================
# Fake Server
# ============================================================================

def int_key(value: int) -> bytes:
    return struct.pack("<I", value)


DEFAULT_ROWS: Dict[Tuple[int, int, bytes], dict] = {
    (0, 0, int_key(20)): {"id": 20, "name": "Ada", "email": "ada@example.com"},
    (1, 0, int_key(10)): {"id": 10, "name": "Pixel", "colour": "black"},
    (1, 1, b"Pixel"): {"id": 10, "name": "Pixel", "colour": "black"},
}


class FakeMelianServer:
    """
    In-process Melian server for end-to-end client tests.

    Runs an asyncio server on a background thread so the blocking client
    can talk to it from the test thread.

    Usage:
        srv = FakeMelianServer()
        srv.start_tcp()
        client = MelianClient(dsn=srv.dsn)
        ...
        srv.stop()

    Attributes:
        describe_payload: Bytes returned for DESCRIBE requests
        rows: (table_id, column_id, key) -> row, returned as JSON (bytes verbatim)
        truncated: Keys answered with a short frame before closing
        requests: Every (header, payload) received, in order
    """

    def __init__(
            self,
            describe_payload: Optional[bytes] = None,
            rows: Optional[Dict[Tuple[int, int, bytes], dict]] = None,
    ):
        if describe_payload is None:
            describe_payload = json.dumps(SCHEMA_DOCUMENT).encode()
        self.describe_payload = describe_payload
        self.rows = dict(DEFAULT_ROWS if rows is None else rows)
        self.truncated: Set[bytes] = set()
        self.requests = []
        self.dsn: Optional[str] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: Set[StreamWriter] = set()

    async def handle_client(self, reader: StreamReader, writer: StreamWriter) -> None:
        """Serve request/response cycles until the client disconnects."""
        self._writers.add(writer)
        try:
            while True:
                try:
                    header = decode_request_header(
                        await reader.readexactly(REQUEST_HEADER.size)
                    )
                    payload = await reader.readexactly(header.payload_length)
                except asyncio.IncompleteReadError:
                    break

                self.requests.append((header, payload))

                if header.is_describe:
                    writer.write(encode_response(self.describe_payload))
                elif payload in self.truncated:
                    writer.write(RESPONSE_PREFIX.pack(64) + b"{\"id\"")
                    await writer.drain()
                    break
                else:
                    row = self.rows.get((header.table_id, header.column_id, payload))
                    if row is None:
                        body = b""
                    elif isinstance(row, bytes):
                        body = row
                    else:
                        body = json.dumps(row).encode()
                    writer.write(encode_response(body))
                await writer.drain()
        except ConnectionResetError:
            pass
        finally:
            self._writers.discard(writer)
            writer.close()

    def start_tcp(self) -> None:
        self._start_loop()
        self._server = self._call(asyncio.start_server(self.handle_client, '127.0.0.1', 0))
        port = self._server.sockets[0].getsockname()[1]
        self.dsn = f"tcp://127.0.0.1:{port}"

    def start_unix(self, path: str) -> None:
        self._start_loop()
        self._server = self._call(asyncio.start_unix_server(self.handle_client, path=path))
        self.dsn = f"unix://{path}"

    def stop(self) -> None:
        if self._loop is None:
            return
        if self._server is not None:
            self._call(self._close_server())
            self._server = None
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()
        self._loop = None

    async def _close_server(self) -> None:
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()

    def _start_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

    def _call(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout=5)


@pytest.fixture
def server_port() -> int:
    """Get a free port with nothing listening on it."""
    return find_free_port()


@pytest.fixture
def socket_dir() -> Generator[str, None, None]:
    """Short temporary directory for UNIX socket paths."""
    path = tempfile.mkdtemp(prefix="melian-")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def server_factory(socket_dir: str):
    """
    Factory fixture to create and start fake servers.

    Usage:
        def test_something(server_factory):
            srv = server_factory(describe_payload=b"")
    """
    servers = []

    def factory(kind: str = "tcp", **kwargs) -> FakeMelianServer:
        srv = FakeMelianServer(**kwargs)
        if kind == "unix":
            srv.start_unix(os.path.join(socket_dir, f"s{len(servers)}.sock"))
        else:
            srv.start_tcp()
        servers.append(srv)
        return srv

    yield factory

    for srv in servers:
        srv.stop()


@pytest.fixture(params=["tcp", "unix"])
def server(request, server_factory) -> FakeMelianServer:
    """A running fake server, once over TCP and once over a UNIX socket."""
    return server_factory(request.param)


@pytest.fixture
def tcp_server(server_factory) -> FakeMelianServer:
    """A running fake server over TCP."""
    return server_factory("tcp")


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
