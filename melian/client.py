"""
Melian Client Module

Object-oriented interface to a Melian server. A MelianClient owns one
connection and the schema used to translate table and column names into
identifiers.

There are three ways to look up data, from slowest to fastest:

    client.fetch_by_int_from("people", "id", 20)     # names, resolved per call
    client.fetch_by_int(0, 0, 20)                    # identifiers
    fetch_by_int_with(conn, 0, 0, 20)                # melian.api, bare socket

Usage:
    with MelianClient(dsn="unix:///tmp/melian.sock") as client:
        row = client.fetch_by_string_from("cats", "name", "Pixel")
"""

import logging
import socket
from typing import Any, Optional

from .api import (
    Key,
    describe_with,
    fetch_by_int_with,
    fetch_by_string_with,
    fetch_raw_with,
)
from .config.settings import settings
from .errors import TransportError
from .network.transport import close_socket, open_socket, parse_dsn
from .schema.loader import SchemaLike, check_schema_sources, load_schema
from .schema.model import Schema, Table
from .schema.resolver import column_id_of, resolve, table_id_of

logger = logging.getLogger(__name__)


class MelianClient:
    """
    Client for the Melian cache server.

    The schema is taken from the first available of: schema, schema_file,
    schema_spec. When none is given it is requested from the server with a
    DESCRIBE call. Supplying more than one is an error raised before any
    connection is made.

    Attributes:
        dsn: Parsed connection descriptor
        timeout: TCP connect timeout in seconds
    """

    def __init__(
            self,
            dsn: Optional[str] = None,
            timeout: Optional[float] = None,
            schema: Optional[SchemaLike] = None,
            schema_file: Optional[str] = None,
            schema_spec: Optional[str] = None,
    ):
        """
        Connect to the server and load the schema.

        Args:
            dsn: unix:///path or tcp://host:port (default from settings)
            timeout: TCP connect timeout (default from settings)
            schema: Explicit Schema or schema document
            schema_file: Path to a JSON schema file
            schema_spec: Compact schema spec, e.g. "people#0|60|id:int"
        """
        if schema is None and schema_file is None and schema_spec is None:
            schema_file = settings.SCHEMA_FILE
            schema_spec = settings.SCHEMA_SPEC if schema_file is None else None
        check_schema_sources(schema, schema_file, schema_spec)

        self.dsn = parse_dsn(dsn if dsn is not None else settings.DSN)
        self.timeout = timeout if timeout is not None else settings.TIMEOUT
        self._socket: Optional[socket.socket] = None

        self.connect()
        try:
            self._schema = load_schema(
                schema=schema,
                schema_file=schema_file,
                schema_spec=schema_spec,
                describe=self.describe_schema,
            )
        except Exception:
            self.disconnect()
            raise

    def connect(self) -> bool:
        """Open the socket. Returns False if already connected."""
        if self._socket is not None:
            return False
        self._socket = open_socket(self.dsn, self.timeout)
        return True

    def disconnect(self) -> bool:
        """Close the socket. Returns False if it was not open."""
        if self._socket is None:
            return False
        close_socket(self._socket)
        self._socket = None
        logger.debug(f"Disconnected from {self.dsn}")
        return True

    close = disconnect

    @property
    def is_connected(self) -> bool:
        return self._socket is not None

    @property
    def schema(self) -> Schema:
        return self._schema

    def describe_schema(self) -> Schema:
        """Send a DESCRIBE request and return the server's schema."""
        return describe_with(self._conn())

    def get_table_id(self, name: str) -> Table:
        """Look up a table by name in this client's schema."""
        return table_id_of(self._schema, name)

    def get_column_id(self, table: Table, name: str) -> int:
        """Look up a column identifier by name within table."""
        return column_id_of(table, name)

    def fetch_raw(self, table_id: int, column_id: int, key: Key) -> bytes:
        """Fetch the raw payload for key; b"" when there is no row."""
        return fetch_raw_with(self._conn(), table_id, column_id, key)

    def fetch_by_string(self, table_id: int, column_id: int, key: Key) -> Optional[Any]:
        """Fetch and JSON-decode the row for key, or None if absent."""
        return fetch_by_string_with(self._conn(), table_id, column_id, key)

    def fetch_by_int(self, table_id: int, column_id: int, key: int) -> Optional[Any]:
        """Like fetch_by_string() for integer keys."""
        return fetch_by_int_with(self._conn(), table_id, column_id, key)

    def fetch_raw_from(self, table_name: str, column_name: str, key: Key) -> bytes:
        """Name-based fetch_raw(). Slower: names are resolved on every call."""
        table_id, column_id = self._resolve(table_name, column_name)
        return self.fetch_raw(table_id, column_id, key)

    def fetch_by_string_from(self, table_name: str, column_name: str, key: Key) -> Optional[Any]:
        """Name-based fetch_by_string(). Slower: names are resolved on every call."""
        table_id, column_id = self._resolve(table_name, column_name)
        return self.fetch_by_string(table_id, column_id, key)

    def fetch_by_int_from(self, table_name: str, column_name: str, key: int) -> Optional[Any]:
        """Name-based fetch_by_int(). Slower: names are resolved on every call."""
        table_id, column_id = self._resolve(table_name, column_name)
        return self.fetch_by_int(table_id, column_id, key)

    def _resolve(self, table_name: str, column_name: str):
        return resolve(self._schema, table_name, column_name)

    def _conn(self) -> socket.socket:
        if self._socket is None:
            raise TransportError("Not connected to Melian server; call connect() first")
        return self._socket

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def __del__(self):
        # Partially constructed instances may lack _socket
        if getattr(self, "_socket", None) is not None:
            self.disconnect()

    def __repr__(self) -> str:
        state = "connected" if self.is_connected else "disconnected"
        return f"MelianClient(dsn='{self.dsn}', {state})"
