"""
Melian: Python client for the Melian cache server.

Talks to a Melian server over a UNIX or TCP socket using its fixed-header
binary protocol, and resolves table/column names through the server schema.
"""

from .api import (
    create_connection,
    describe_with,
    disconnect_socket,
    fetch_by_int_with,
    fetch_by_string_with,
    fetch_raw_with,
)
from .client import MelianClient
from .errors import (
    ConfigurationError,
    DecodeError,
    MelianConnectionError,
    MelianError,
    ProtocolError,
    SchemaLookupError,
    TransportError,
)
from .schema import Index, IndexType, Schema, Table, column_id_of, table_id_of

__version__ = "1.0.0"

__all__ = [
    "MelianClient",
    "create_connection",
    "disconnect_socket",
    "describe_with",
    "fetch_raw_with",
    "fetch_by_string_with",
    "fetch_by_int_with",
    "table_id_of",
    "column_id_of",
    "Schema",
    "Table",
    "Index",
    "IndexType",
    "MelianError",
    "ConfigurationError",
    "MelianConnectionError",
    "TransportError",
    "ProtocolError",
    "SchemaLookupError",
    "DecodeError",
]
