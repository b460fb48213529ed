"""
Schema Loading Module

Builds a Schema from one of four sources, in this order of priority:

    1. an explicit Schema (or its document dict)
    2. a JSON schema file
    3. a compact schema spec string
    4. a live DESCRIBE query against the server

Compact spec grammar:
    people#0|60|id:int,cats#1|45|id:int;name:string

Tables are separated by ",", each table is "name#id|period|columns", columns
are separated by ";" and each column is "name:type". Column identifiers are
assigned by position, starting at 0.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..errors import ConfigurationError, ProtocolError
from ..protocol.commands import MAX_IDENTIFIER
from .model import Index, IndexType, Schema, Table

logger = logging.getLogger(__name__)

SchemaLike = Union[Schema, Dict[str, Any]]


def load_schema(
        schema: Optional[SchemaLike] = None,
        schema_file: Optional[str] = None,
        schema_spec: Optional[str] = None,
        describe: Optional[Callable[[], Schema]] = None,
) -> Schema:
    """
    Resolve the schema from whichever source was supplied.

    Args:
        schema: Explicit Schema or document dict
        schema_file: Path to a JSON schema file
        schema_spec: Compact schema spec string
        describe: Zero-argument callable querying the server; used only when
            no other source is given

    Raises:
        ConfigurationError: more than one source given, or the source is
            malformed
        ProtocolError: the server could not provide a schema
    """
    check_schema_sources(schema, schema_file, schema_spec)

    if schema is not None:
        logger.debug("Using explicit schema")
        return coerce_schema(schema)
    if schema_file:
        logger.debug(f"Loading schema from file {schema_file}")
        return schema_from_file(schema_file)
    if schema_spec:
        logger.debug("Loading schema from spec")
        return schema_from_spec(schema_spec)
    if describe is None:
        raise ConfigurationError("No schema source available")
    logger.debug("Requesting schema from server")
    return describe()


def check_schema_sources(
        schema: Optional[SchemaLike],
        schema_file: Optional[str],
        schema_spec: Optional[str],
) -> None:
    """Reject more than one explicit schema source."""
    provided = [source for source in (schema, schema_file, schema_spec) if source is not None]
    if len(provided) > 1:
        raise ConfigurationError(
            "Provide maximum one of: 'schema', 'schema_spec', 'schema_file'"
        )


def coerce_schema(value: SchemaLike) -> Schema:
    """Accept a Schema as-is or convert a document dict into one."""
    if isinstance(value, Schema):
        return value
    try:
        return Schema.from_dict(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid schema: {exc}") from exc


def schema_from_file(path: Union[str, Path]) -> Schema:
    """Load a JSON schema document from path."""
    file_path = Path(path)
    try:
        contents = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot open schema file {path}: {exc}") from exc

    try:
        return Schema.from_dict(json.loads(contents))
    except ValueError as exc:
        raise ConfigurationError(
            f"Failed to parse JSON schema in file '{path}': {exc}"
        ) from exc


def schema_from_payload(payload: bytes) -> Schema:
    """Decode the payload of a DESCRIBE reply."""
    if not payload:
        raise ProtocolError("Could not get schema data")
    try:
        return Schema.from_dict(json.loads(payload))
    except ValueError as exc:
        raise ProtocolError(f"Malformed schema description from server: {exc}") from exc


def schema_from_spec(spec: str) -> Schema:
    """
    Parse a compact schema spec string.

    Examples:
        >>> schema = schema_from_spec("cats#1|45|id:int;name:string")
        >>> [(i.column, i.id) for i in schema.tables[0].indexes]
        [('id', 0), ('name', 1)]
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ConfigurationError("Schema spec failure: spec cannot be empty")

    tables: List[Table] = []
    for chunk in spec.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        tables.append(_parse_table(chunk))

    if not tables:
        raise ConfigurationError("Schema spec failure: spec produced no tables")
    return Schema(tables=tables)


def _parse_table(chunk: str) -> Table:
    parts = chunk.split("|")
    if len(parts) > 3:
        raise ConfigurationError(f"Schema spec failure: too many fields in '{chunk}'")
    table_part = parts[0]
    period_part = parts[1].strip() if len(parts) > 1 else ""
    columns_part = parts[2] if len(parts) > 2 else ""

    name, ident = _split_with_hash(table_part)
    if not name or ident is None:
        raise ConfigurationError(
            f"Schema spec failure: Missing table name or table ID in '{chunk}'"
        )
    table_id = _parse_int(ident, "table ID", chunk)
    _check_range(table_id, "table ID", chunk)
    period = _parse_int(period_part, "refresh period", chunk) if period_part else 0

    indexes: List[Index] = []
    for position, column_spec in enumerate(c for c in columns_part.split(";") if c.strip()):
        indexes.append(_parse_column(column_spec.strip(), position, chunk))

    if not indexes:
        raise ConfigurationError(f"Schema spec failure: table '{name}' defines no columns")
    return Table(name=name, id=table_id, period=period, indexes=indexes)


def _parse_column(column_spec: str, position: int, chunk: str) -> Index:
    column_part, _, type_part = column_spec.partition(":")
    column, ident = _split_with_hash(column_part)
    if not column:
        raise ConfigurationError(f"Schema spec failure: Missing column name in '{chunk}'")

    # Legacy "name#N:type" carries its own identifier
    column_id = position if ident is None else _parse_int(ident, "column ID", chunk)
    _check_range(column_id, "column ID", chunk)

    type_name = type_part.strip() or IndexType.INT.value
    try:
        index_type = IndexType(type_name)
    except ValueError:
        raise ConfigurationError(
            f"Schema spec failure: unknown column type '{type_name}' in '{chunk}'"
        ) from None
    return Index(id=column_id, column=column, type=index_type)


def _split_with_hash(value: str) -> Tuple[str, Optional[str]]:
    name, sep, ident = value.partition("#")
    if not sep:
        return name.strip(), None
    return name.strip(), ident.strip()


def _parse_int(value: str, label: str, chunk: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Schema spec failure: invalid {label} '{value}' in '{chunk}'"
        ) from None


def _check_range(value: int, label: str, chunk: str) -> None:
    if not 0 <= value <= MAX_IDENTIFIER:
        raise ConfigurationError(
            f"Schema spec failure: {label} {value} is outside 0-{MAX_IDENTIFIER} in '{chunk}'"
        )
