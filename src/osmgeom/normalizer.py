"""
Geometry collection normalizer

Checks that geometries, labels and attribute rows line up before a
collection is handed to the presentation layer
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from loguru import logger

from .attributes import AttributeTable
from .config import GEOMETRY_KINDS
from .errors import GeometryKindError, StructuralMismatchError


@dataclass(frozen=True)
class GeometryBundle:
    """One geometry kind: ordered geometries, their labels and aligned attribute table"""
    kind: str
    labels: Tuple[str, ...]
    geometries: Tuple[Any, ...]
    table: AttributeTable
    bbox: Optional[Any] = None
    crs: Optional[Dict[str, Any]] = field(default=None)

    def __len__(self) -> int:
        return len(self.geometries)

    def __iter__(self):
        return iter(zip(self.labels, self.geometries))


class GeometryCollectionNormalizer:
    """Validates and packages per-kind geometry collections"""

    @staticmethod
    def check_lengths(collection: str, expected: int, actual: int, detail: str = ""):
        if expected != actual:
            logger.error(f"Structural mismatch in {collection}: expected {expected}, got {actual} {detail}".rstrip())
            raise StructuralMismatchError(collection, expected, actual, detail)

    def normalize(
        self,
        kind: str,
        labels: Sequence[str],
        geometries: Sequence[Any],
        table: AttributeTable,
        bbox: Optional[Any] = None,
        crs: Optional[Dict[str, Any]] = None
    ) -> GeometryBundle:
        """
        Validate one collection and wrap it in a GeometryBundle

        Checks, in order:
            - every traced part has equal-length coordinates, labels and ids
            - the collection and its label array have equal length
            - the table has one row per geometry
            - table row labels match geometry labels position by position

        Raises:
            GeometryKindError: kind is not a known geometry kind
            StructuralMismatchError: any check fails
        """
        if kind not in GEOMETRY_KINDS:
            raise GeometryKindError(f"Unknown geometry kind '{kind}'")

        for label, geometry in zip(labels, geometries):
            for part in geometry.traced_parts():
                n = len(part.coordinates)
                self.check_lengths(f"{kind} '{label}' labels", n, len(part.labels))
                self.check_lengths(f"{kind} '{label}' member ids", n, len(part.member_ids))

        self.check_lengths(f"{kind} labels", len(geometries), len(labels))
        self.check_lengths(f"{kind} attribute rows", len(geometries), len(table.rows))

        for position, (label, row_label) in enumerate(zip(labels, table.row_labels)):
            if label != row_label:
                logger.error(f"{kind}: row {position} labelled '{row_label}' but geometry is '{label}'")
                raise StructuralMismatchError(
                    f"{kind} attribute row labels", len(labels), len(table.row_labels),
                    f"position {position}: '{row_label}' != '{label}'"
                )

        return GeometryBundle(
            kind=kind,
            labels=tuple(labels),
            geometries=tuple(geometries),
            table=table,
            bbox=bbox,
            crs=crs
        )
