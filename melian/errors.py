"""
Melian Client Exceptions

Every failure raised by this package derives from MelianError, so callers
can catch the whole family in one place. Nothing here retries or reconnects.
"""


class MelianError(Exception):
    """Base class for all Melian client errors."""


class ConfigurationError(MelianError, ValueError):
    """Bad DSN, conflicting schema sources, or a missing/invalid argument."""


class MelianConnectionError(MelianError, ConnectionError):
    """The socket to the server could not be established."""


class TransportError(MelianError):
    """A write failed or the stream ended before a full frame was read."""


class ProtocolError(MelianError):
    """The server's reply could not be used (no schema, malformed frame)."""


class SchemaLookupError(MelianError, LookupError):
    """A table or column name is not present in the schema."""


class DecodeError(MelianError, ValueError):
    """A non-empty payload is not a well-formed JSON document."""
