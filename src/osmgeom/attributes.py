"""
Attribute tables

Maps entity tag maps onto fixed-column sparse rows. Columns come from the
kind's KeyIndex, so every row of a table has the same width and layout.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .errors import StructuralMismatchError
from .models import KeyIndex


AttributeRow = Tuple[Optional[str], ...]


@dataclass(frozen=True)
class AttributeTable:
    """Row-labelled, column-aligned tag table for one geometry kind"""
    columns: Tuple[str, ...]
    row_labels: Tuple[str, ...]
    rows: Tuple[AttributeRow, ...]

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "row_labels", tuple(self.row_labels))
        object.__setattr__(self, "rows", tuple(tuple(r) for r in self.rows))
        if len(self.row_labels) != len(self.rows):
            raise StructuralMismatchError("attribute table row labels", len(self.rows), len(self.row_labels))
        width = len(self.columns)
        for label, row in zip(self.row_labels, self.rows):
            if len(row) != width:
                raise StructuralMismatchError("attribute row", width, len(row), f"row '{label}'")

    def __len__(self) -> int:
        return len(self.rows)

    def value(self, row_label: str, key: str) -> Optional[str]:
        return self.rows[self.row_labels.index(row_label)][self.columns.index(key)]

    @staticmethod
    def split_role_label(label: str, role_separator: str = "-") -> Tuple[str, str]:
        """Split "{id}{sep}{role}" into id and role; the id may be negative"""
        match = re.match(rf"^(-?\d+){re.escape(role_separator)}(.*)$", label, re.DOTALL)
        if match is None:
            return label, ""
        return match.group(1), match.group(2)

    def to_dataframe(
        self,
        id_column: str = "osm_id",
        role_column: Optional[str] = None,
        role_separator: str = "-"
    ) -> pd.DataFrame:
        """
        Convert to a pandas DataFrame

        The row labels become the leading id column. When role_column is
        given, labels of the form "{id}{sep}{role}" are split into an id
        column and a role column.
        """
        df = pd.DataFrame(
            {column: [row[i] for row in self.rows] for i, column in enumerate(self.columns)},
            index=list(self.row_labels),
            dtype=object
        )
        if role_column is not None:
            ids, roles = [], []
            for label in self.row_labels:
                osm_id, role = self.split_role_label(label, role_separator)
                ids.append(osm_id)
                roles.append(role)
            df.insert(0, role_column, roles)
            df.insert(0, id_column, ids)
        else:
            df.insert(0, id_column, list(self.row_labels))
        return df


class AttributeTableBuilder:
    """Builds attribute rows and tables from tag maps"""

    @staticmethod
    def build_row(
        tags: Mapping[str, str],
        key_index: KeyIndex,
        entity_id: Optional[int] = None
    ) -> AttributeRow:
        """
        Build one sparse row for an entity

        Args:
            tags: The entity's tag map
            key_index: Key set of the entity's kind
            entity_id: Only used in error messages

        Returns:
            Tuple of len(key_index) cells, None where the entity lacks the key

        Raises:
            UnknownKeyError: a tag key is missing from key_index
        """
        row: List[Optional[str]] = [None] * len(key_index)
        for key, value in tags.items():
            row[key_index.column(key, entity_id)] = value
        return tuple(row)

    @staticmethod
    def copy_row(row: AttributeRow) -> AttributeRow:
        return tuple(row)

    @classmethod
    def build_table(
        cls,
        entries: Iterable[Tuple[str, Mapping[str, str]]],
        key_index: KeyIndex
    ) -> AttributeTable:
        """
        Build a table from (row label, tags) pairs, keeping their order

        Row labels are carried alongside the rows, never derived from them.
        """
        labels: List[str] = []
        rows: List[AttributeRow] = []
        for label, tags in entries:
            labels.append(label)
            rows.append(cls.build_row(tags, key_index))
        return AttributeTable(columns=key_index.keys, row_labels=tuple(labels), rows=tuple(rows))

    @staticmethod
    def from_rows(
        labels: Sequence[str],
        rows: Sequence[AttributeRow],
        key_index: KeyIndex
    ) -> AttributeTable:
        """Assemble a table from rows that were built elsewhere"""
        return AttributeTable(columns=key_index.keys, row_labels=tuple(labels), rows=tuple(rows))
