"""
Configuration settings for the OSM geometry converter
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List


# Geometry kinds the converter can emit, in output order
GEOMETRY_KINDS = ("points", "lines", "polygons", "multipolygons", "multilinestrings")

UNCLOSED_RING_POLICIES = ("flag", "reject", "raise")


@dataclass
class AssemblyConfig:
    """How relations and ways are assembled"""
    # What to do with a multipolygon member way that does not close:
    #   flag   - keep the ring, mark it unclosed, record an issue
    #   reject - drop the whole relation, record an issue
    #   raise  - propagate UnclosedRingError
    unclosed_ring_policy: str = "flag"

    # Raise on the first recoverable issue instead of collecting it
    strict: bool = False

    # Worker threads for per-entity assembly (1 = sequential)
    max_workers: int = 1

    # Relation "type" tag values treated as polygons
    polygon_relation_types: List[str] = field(default_factory=lambda: [
        "multipolygon",
        "boundary",
    ])

    # Role labels for multilinestring relations
    no_role_label: str = "(no role)"
    role_separator: str = "-"


@dataclass
class OutputConfig:
    """Metadata attached to every emitted collection"""
    default_crs: Dict[str, Any] = field(default_factory=lambda: {
        "epsg": 4326,
        "proj4string": "+proj=longlat +datum=WGS84 +no_defs",
    })
    # Leading identifier column of attribute frames
    id_column: str = "osm_id"
    role_column: str = "role"
    geometry_column: str = "geometry"


@dataclass
class ConverterConfig:
    """Converter configuration"""
    kinds: List[str] = field(default_factory=lambda: list(GEOMETRY_KINDS))
    assembly: AssemblyConfig = field(default_factory=AssemblyConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


# Global config instance
config = ConverterConfig()


def get_config() -> ConverterConfig:
    """Get global configuration"""
    return config


def validate_config(config: ConverterConfig) -> None:
    """
    Validate that all configuration values are usable.
    Raises ValueError listing every problem found.
    """
    errors = []

    if not config.kinds:
        errors.append("kinds must name at least one geometry kind")
    for kind in config.kinds:
        if kind not in GEOMETRY_KINDS:
            errors.append(f"unknown geometry kind '{kind}' (expected one of {', '.join(GEOMETRY_KINDS)})")

    assembly = config.assembly
    if assembly is None:
        errors.append("assembly configuration is required but not set")
    else:
        if assembly.unclosed_ring_policy not in UNCLOSED_RING_POLICIES:
            errors.append(
                f"assembly.unclosed_ring_policy must be one of {', '.join(UNCLOSED_RING_POLICIES)}, "
                f"got '{assembly.unclosed_ring_policy}'"
            )
        if assembly.max_workers is None or assembly.max_workers < 1:
            errors.append(f"assembly.max_workers must be at least 1, got {assembly.max_workers}")
        if not assembly.polygon_relation_types:
            errors.append("assembly.polygon_relation_types must not be empty")

    if config.output is None:
        errors.append("output configuration is required but not set")
    elif not config.output.id_column:
        errors.append("output.id_column is required but not set")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
