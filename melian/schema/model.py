"""
Schema Model

In-memory directory of the tables and lookup columns a Melian server
exposes. The document form (used by schema files and DESCRIBE replies) is:

    {"tables": [{"name": "cats", "id": 1, "period": 45,
                 "indexes": [{"id": 0, "column": "id", "type": "int"}]}]}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..protocol.commands import MAX_IDENTIFIER


class IndexType(Enum):
    """Key type of a lookup column. Informational; the wire format is unaffected."""
    INT = "int"
    STRING = "string"


def _identifier(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    if not 0 <= value <= MAX_IDENTIFIER:
        raise ValueError(f"{label} {value} is outside 0-{MAX_IDENTIFIER}")
    return value


def _name(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{label} must be a non-empty string, got {value!r}")
    return value


@dataclass
class Index:
    """
    A lookup column of a table.

    Attributes:
        id: Column identifier sent on the wire (0-255)
        column: Column name
        type: Key type (int or string)
    """
    id: int
    column: str
    type: IndexType = IndexType.INT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Index":
        if not isinstance(data, dict):
            raise ValueError(f"Index entry must be an object, got {data!r}")
        return cls(
            id=_identifier(data.get("id"), "Index ID"),
            column=_name(data.get("column"), "Index column"),
            type=IndexType(data.get("type") or IndexType.INT.value),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "column": self.column, "type": self.type.value}


@dataclass
class Table:
    """
    A table served by Melian.

    Attributes:
        name: Table name
        id: Table identifier sent on the wire (0-255)
        period: Refresh period in seconds (informational only)
        indexes: Lookup columns in declaration order
    """
    name: str
    id: int
    period: int = 0
    indexes: List[Index] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        if not isinstance(data, dict):
            raise ValueError(f"Table entry must be an object, got {data!r}")
        indexes = data.get("indexes")
        if indexes is None:
            indexes = []
        if not isinstance(indexes, list):
            raise ValueError(f"Table indexes must be a list, got {indexes!r}")
        try:
            period = int(data.get("period") or 0)
        except (TypeError, ValueError):
            raise ValueError(f"Table period must be an integer, got {data.get('period')!r}") from None
        return cls(
            name=_name(data.get("name"), "Table name"),
            id=_identifier(data.get("id"), "Table ID"),
            period=period,
            indexes=[Index.from_dict(entry) for entry in indexes],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "period": self.period,
            "indexes": [index.to_dict() for index in self.indexes],
        }


@dataclass
class Schema:
    """Ordered collection of tables. Name lookups use the first match."""
    tables: List[Table] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schema":
        """
        Build a Schema from its document form.

        Raises:
            ValueError: the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("Schema must be a JSON object")
        tables = data.get("tables")
        if tables is None:
            tables = []
        if not isinstance(tables, list):
            raise ValueError(f"Schema tables must be a list, got {tables!r}")
        return cls(tables=[Table.from_dict(entry) for entry in tables])

    def to_dict(self) -> Dict[str, Any]:
        return {"tables": [table.to_dict() for table in self.tables]}

    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]
