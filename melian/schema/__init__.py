"""Schema module for the Melian client."""

from .loader import (
    coerce_schema,
    load_schema,
    schema_from_file,
    schema_from_payload,
    schema_from_spec,
)
from .model import Index, IndexType, Schema, Table
from .resolver import column_id_of, resolve, table_id_of

__all__ = [
    "Index",
    "IndexType",
    "Schema",
    "Table",
    "load_schema",
    "coerce_schema",
    "schema_from_file",
    "schema_from_payload",
    "schema_from_spec",
    "table_id_of",
    "column_id_of",
    "resolve",
]
