"""
Protocol Action and Frame Definitions

This module defines the opcodes and the request header structure used on
the wire. Every integer in the header is unsigned and big-endian.
"""

from dataclasses import dataclass
from enum import IntEnum

# Single fixed byte sent as the first octet of every request.
HEADER_VERSION = 0x11

# Valid range for table and column identifiers (one byte each).
MAX_IDENTIFIER = 0xFF


class Action(IntEnum):
    """Enumeration of request opcodes (ASCII values)."""
    FETCH = ord("F")
    DESCRIBE = ord("D")


@dataclass(frozen=True)
class RequestHeader:
    """
    Represents the fixed 8-byte request header.

    Attributes:
        version: Protocol version tag (HEADER_VERSION)
        action: Opcode selecting FETCH or DESCRIBE
        table_id: Target table identifier (0-255)
        column_id: Target index/column identifier (0-255)
        payload_length: Number of payload bytes following the header
    """
    version: int
    action: int
    table_id: int
    column_id: int
    payload_length: int

    @property
    def is_fetch(self) -> bool:
        """Check if the header carries a FETCH request."""
        return self.action == Action.FETCH

    @property
    def is_describe(self) -> bool:
        """Check if the header carries a DESCRIBE request."""
        return self.action == Action.DESCRIBE
