"""Network module for the Melian client."""

from .transport import Dsn, close_socket, open_socket, parse_dsn, read_exact, write_all

__all__ = [
    "Dsn",
    "parse_dsn",
    "open_socket",
    "close_socket",
    "write_all",
    "read_exact",
]
