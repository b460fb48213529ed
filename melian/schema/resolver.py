"""
Lookup Resolver

Maps table and column names to the numeric identifiers the wire format
needs. Resolution is a linear scan; the first match wins when names repeat.
"""

from typing import Tuple

from ..errors import SchemaLookupError
from .model import Schema, Table


def table_id_of(schema: Schema, name: str) -> Table:
    """Return the first table named name."""
    for table in schema.tables:
        if table.name == name:
            return table
    raise SchemaLookupError(f"Cannot find table named '{name}'")


def column_id_of(table: Table, name: str) -> int:
    """Return the identifier of the first index on column name."""
    for index in table.indexes:
        if index.column == name:
            return index.id
    raise SchemaLookupError(f"Cannot find column named '{name}'")


def resolve(schema: Schema, table_name: str, column_name: str) -> Tuple[int, int]:
    """Resolve a (table, column) name pair to (table_id, column_id)."""
    table = table_id_of(schema, table_name)
    return table.id, column_id_of(table, column_name)
