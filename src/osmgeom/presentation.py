"""
Presentation adapters

Maps geometry bundles onto shapely geometries, geopandas GeoDataFrames and
GeoJSON feature collections
"""

from typing import Any, Dict, List, Literal, Optional, Union

import geopandas as gpd
from loguru import logger
from pydantic import BaseModel, Field
from shapely.geometry import LineString, MultiLineString, MultiPolygon, Point, Polygon, mapping
from shapely.geometry.base import BaseGeometry

from .config import OutputConfig, get_config
from .geometry import MultipolygonGeometry, PointGeometry, RoleLineGeometry, WayGeometry
from .normalizer import GeometryBundle


# ============================================================
# GeoJSON Types
# ============================================================

class GeoJSONPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float]  # [longitude, latitude]


class GeoJSONLineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]]  # [[lon, lat], ...]


class GeoJSONPolygon(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]]  # [[[lon, lat], ...]]


class GeoJSONMultiLineString(BaseModel):
    type: Literal["MultiLineString"] = "MultiLineString"
    coordinates: List[List[List[float]]]


class GeoJSONMultiPolygon(BaseModel):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: List[List[List[List[float]]]]


GeoJSONGeometry = Union[
    GeoJSONPoint,
    GeoJSONLineString,
    GeoJSONPolygon,
    GeoJSONMultiLineString,
    GeoJSONMultiPolygon,
]

GEOJSON_MODELS = {
    "Point": GeoJSONPoint,
    "LineString": GeoJSONLineString,
    "Polygon": GeoJSONPolygon,
    "MultiLineString": GeoJSONMultiLineString,
    "MultiPolygon": GeoJSONMultiPolygon,
}


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    id: str
    geometry: GeoJSONGeometry
    properties: Dict[str, Optional[str]] = Field(default_factory=dict)


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = Field(default_factory=list)
    bbox: Optional[List[float]] = None


# ============================================================
# Shapely conversion
# ============================================================

def multipolygon_to_shapely(geometry: MultipolygonGeometry) -> MultiPolygon:
    """
    Group a flat ring sequence into shells and holes

    Closed rings with role "inner" become holes of the first shell that
    contains them; every other closed ring is a shell. Unclosed rings and
    holes without a containing shell are left out with a warning.
    """
    shells: List[List] = []
    holes: List[List] = []
    for ring in geometry.rings:
        if not ring.closed or len(ring.traced) < 4:
            logger.warning(f"Relation {geometry.relation_id}: ring {ring.way_id} is not a valid closed ring, leaving it out")
            continue
        coords = list(ring.traced.coordinates)
        if ring.role == "inner":
            holes.append(coords)
        else:
            shells.append(coords)

    shell_polys = [Polygon(shell) for shell in shells]
    shell_holes: List[List] = [[] for _ in shells]
    for hole in holes:
        hole_poly = Polygon(hole)
        for i, shell_poly in enumerate(shell_polys):
            if shell_poly.contains(hole_poly):
                shell_holes[i].append(hole)
                break
        else:
            logger.warning(f"Relation {geometry.relation_id}: inner ring lies in no outer ring, leaving it out")

    return MultiPolygon([Polygon(shell, shell_holes[i]) for i, shell in enumerate(shells)])


def to_shapely(geometry: Any) -> BaseGeometry:
    """Convert one geometry entry into its shapely counterpart"""
    if isinstance(geometry, PointGeometry):
        return Point(geometry.lon, geometry.lat)
    if isinstance(geometry, WayGeometry):
        coords = list(geometry.traced.coordinates)
        if len(coords) < 2:
            logger.warning(f"Way {geometry.way_id} has {len(coords)} coordinate(s), emitting an empty line")
            return LineString()
        if geometry.closed and len(coords) >= 4:
            return Polygon(coords)
        return LineString(coords)
    if isinstance(geometry, RoleLineGeometry):
        coords = list(geometry.traced.coordinates)
        if len(coords) < 2:
            logger.warning(f"Relation {geometry.relation_id} role '{geometry.role}' has "
                           f"{len(coords)} coordinate(s), emitting an empty multilinestring")
            return MultiLineString()
        return MultiLineString([coords])
    if isinstance(geometry, MultipolygonGeometry):
        return multipolygon_to_shapely(geometry)
    raise TypeError(f"Cannot convert {type(geometry).__name__} to a shapely geometry")


# ============================================================
# Tables and feature collections
# ============================================================

def _crs_string(crs: Optional[Dict[str, Any]]) -> Optional[str]:
    if crs and crs.get("epsg"):
        return f"EPSG:{crs['epsg']}"
    return None


def bundle_to_dataframe(bundle: GeometryBundle, output_config: Optional[OutputConfig] = None):
    """
    Attribute table of a bundle as a pandas DataFrame

    Multilinestring rows take their id and role from the geometries
    themselves, so the frame does not depend on how row labels were joined.
    """
    output_config = output_config or get_config().output
    df = bundle.table.to_dataframe(id_column=output_config.id_column)
    if bundle.kind == "multilinestrings":
        df[output_config.id_column] = [str(g.relation_id) for g in bundle.geometries]
        df.insert(1, output_config.role_column, [g.role for g in bundle.geometries])
    return df


def bundle_to_geodataframe(bundle: GeometryBundle, output_config: Optional[OutputConfig] = None) -> gpd.GeoDataFrame:
    """
    Attribute table plus geometry column as a GeoDataFrame

    Rows keep bundle order, which is the only join key between geometry
    and attributes.
    """
    output_config = output_config or get_config().output
    df = bundle_to_dataframe(bundle, output_config)
    geometries = [to_shapely(geometry) for geometry in bundle.geometries]
    gdf = gpd.GeoDataFrame(
        df,
        geometry=gpd.GeoSeries(geometries, index=df.index),
        crs=_crs_string(bundle.crs)
    )
    if output_config.geometry_column != "geometry":
        gdf = gdf.rename_geometry(output_config.geometry_column)
    logger.debug(f"Built GeoDataFrame for {bundle.kind}: {len(gdf)} rows, {len(gdf.columns)} columns")
    return gdf


def bundle_to_feature_collection(bundle: GeometryBundle, output_config: Optional[OutputConfig] = None) -> FeatureCollection:
    """GeoJSON FeatureCollection with absent attribute cells left out of properties"""
    output_config = output_config or get_config().output
    features = []
    for label, geometry, row in zip(bundle.labels, bundle.geometries, bundle.table.rows):
        shape = mapping(to_shapely(geometry))
        properties: Dict[str, Optional[str]] = {output_config.id_column: label}
        if isinstance(geometry, RoleLineGeometry):
            properties[output_config.id_column] = str(geometry.relation_id)
            properties[output_config.role_column] = geometry.role
        for key, value in zip(bundle.table.columns, row):
            if value is not None:
                properties[key] = value
        features.append(Feature(
            id=label,
            geometry=GEOJSON_MODELS[shape["type"]](coordinates=shape["coordinates"]),
            properties=properties
        ))

    bbox = list(bundle.bbox) if bundle.bbox is not None else None
    return FeatureCollection(features=features, bbox=bbox)
