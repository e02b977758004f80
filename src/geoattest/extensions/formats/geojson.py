"""GeoJSON format extension.

GeoJSON is the hub format: every other format converts to and from it, so
``to_hub``/``from_hub`` are identities here. Validation covers the geometry
types of RFC 7946 plus Feature and FeatureCollection, WGS84 coordinate
ranges and polygon ring closure; geometries that pass those checks must also
be valid per shapely (no self-intersecting rings).
"""

from __future__ import annotations

import json
import math
from typing import Any, Callable, Dict, List, Sequence

import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import shape
from shapely.validation import explain_validity

from geoattest.errors import LocationValidationError
from geoattest.extensions.base import FormatExtension
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())

HUB_FORMAT = "geojson"

POSITION_GEOMETRIES = ("Point", "LineString", "Polygon", "MultiPoint", "MultiLineString", "MultiPolygon")

Position = List[float]
CoordinateComparison = Callable[[Sequence[float], Sequence[float]], bool]


def exact_match(a: Sequence[float], b: Sequence[float]) -> bool:
    return np.array_equal(np.asarray(a, dtype=float), np.asarray(b, dtype=float))


def within_tolerance(epsilon: float) -> CoordinateComparison:
    """Comparison policy accepting per-axis differences up to ``epsilon``."""
    if epsilon < 0:
        raise ValueError("epsilon must be >= 0")

    def _compare(a: Sequence[float], b: Sequence[float]) -> bool:
        return bool(np.allclose(np.asarray(a, dtype=float), np.asarray(b, dtype=float), rtol=0.0, atol=epsilon))

    return _compare


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def is_position(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) in (2, 3)
        and all(_is_number(v) for v in value)
    )


def is_geojson(obj: Any) -> bool:
    """Shallow shape check: a dict whose ``type`` and members look like GeoJSON."""
    if not isinstance(obj, dict):
        return False
    t = obj.get("type")
    if t == "Feature":
        return "geometry" in obj and "properties" in obj
    if t == "FeatureCollection":
        return isinstance(obj.get("features"), list)
    if t == "GeometryCollection":
        return isinstance(obj.get("geometries"), list)
    if t in POSITION_GEOMETRIES:
        return "coordinates" in obj
    return False


def _position_in_range(pos: Sequence[float]) -> bool:
    lon, lat = pos[0], pos[1]
    return -180 <= lon <= 180 and -90 <= lat <= 90


def is_wgs84_position(pos: Any) -> bool:
    return is_position(pos) and _position_in_range(pos)


def _valid_line(coords: Any) -> bool:
    return isinstance(coords, list) and len(coords) >= 2 and all(is_wgs84_position(p) for p in coords)


def _valid_ring(ring: Any) -> bool:
    if not isinstance(ring, list) or len(ring) < 4:
        return False
    if not all(is_wgs84_position(p) for p in ring):
        return False
    return list(ring[0]) == list(ring[-1])


def _valid_polygon(coords: Any) -> bool:
    return isinstance(coords, list) and len(coords) >= 1 and all(_valid_ring(r) for r in coords)


def _valid_multi(coords: Any, check: Callable[[Any], bool]) -> bool:
    return isinstance(coords, list) and all(check(c) for c in coords)


def _is_geometry(obj: Any) -> bool:
    return is_geojson(obj) and obj["type"] not in ("Feature", "FeatureCollection")


def _valid_structure(geom: Any) -> bool:
    if not _is_geometry(geom):
        return False
    t = geom["type"]
    if t == "GeometryCollection":
        return all(_valid_structure(g) for g in geom["geometries"])
    coords = geom["coordinates"]
    if t == "Point":
        return is_wgs84_position(coords)
    if t == "LineString":
        return _valid_line(coords)
    if t == "Polygon":
        return _valid_polygon(coords)
    if t == "MultiPoint":
        return _valid_multi(coords, is_wgs84_position)
    if t == "MultiLineString":
        return _valid_multi(coords, _valid_line)
    if t == "MultiPolygon":
        return _valid_multi(coords, _valid_polygon)
    return False


def _planar(geom: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``geom`` with every position cut to ``[lon, lat]``."""

    def _cut(coords: Any) -> Any:
        if is_position(coords):
            return coords[:2]
        return [_cut(c) for c in coords]

    if geom["type"] == "GeometryCollection":
        return {"type": geom["type"], "geometries": [_planar(g) for g in geom["geometries"]]}
    return {"type": geom["type"], "coordinates": _cut(geom["coordinates"])}


def _valid_topology(geom: Dict[str, Any]) -> bool:
    # shapely closes open rings itself, so closure and ranges are checked first
    try:
        shaped = shape(_planar(geom))
    except (GEOSException, ValueError, TypeError) as e:
        logger.debug("shapely could not build %s: %s", geom.get("type"), e)
        return False
    if not shaped.is_valid:
        logger.debug("invalid %s: %s", geom.get("type"), explain_validity(shaped))
        return False
    return True


def _valid_geometry(geom: Any) -> bool:
    return _valid_structure(geom) and _valid_topology(geom)


def _valid_feature(feature: Any) -> bool:
    if not is_geojson(feature) or feature["type"] != "Feature":
        return False
    props = feature["properties"]
    if props is not None and not isinstance(props, dict):
        return False
    geom = feature["geometry"]
    return geom is None or _valid_geometry(geom)


def validate_geojson(value: Any) -> bool:
    if not is_geojson(value):
        return False
    t = value["type"]
    if t == "Feature":
        return _valid_feature(value)
    if t == "FeatureCollection":
        return all(_valid_feature(f) for f in value["features"])
    return _valid_geometry(value)


def extract_coordinates(value: Dict[str, Any]) -> List[Position]:
    """All positions of a GeoJSON object, flattened in document order."""
    out: List[Position] = []

    def _walk(coords: Any):
        if is_position(coords):
            out.append(list(coords))
            return
        for c in coords:
            _walk(c)

    def _visit_geometry(geom: Any):
        if geom is None:
            return
        if not _is_geometry(geom):
            raise LocationValidationError("Expected a GeoJSON geometry", {"receivedType": _type_name(geom)})
        if geom["type"] == "GeometryCollection":
            for g in geom["geometries"]:
                _visit_geometry(g)
        else:
            _walk(geom["coordinates"])

    def _visit_feature(feature: Any):
        if not is_geojson(feature) or feature["type"] != "Feature":
            raise LocationValidationError("Expected a GeoJSON Feature", {"receivedType": _type_name(feature)})
        _visit_geometry(feature["geometry"])

    t = value.get("type") if isinstance(value, dict) else None
    if t == "FeatureCollection":
        for f in value["features"]:
            _visit_feature(f)
    elif t == "Feature":
        _visit_feature(value)
    else:
        _visit_geometry(value)
    return out


def _type_name(obj: Any) -> str:
    return obj.get("type", "unknown") if isinstance(obj, dict) else type(obj).__name__


def check_coordinate_preservation(before: Any, after: Any, comparison: CoordinateComparison = exact_match) -> bool:
    """True when every flattened position of ``before`` matches ``after``.

    Exact equality is the default policy; pass ``within_tolerance(eps)`` to
    allow floating point drift.
    """
    if before is None or after is None or not is_geojson(before) or not is_geojson(after):
        return False
    try:
        coords_before = extract_coordinates(before)
        coords_after = extract_coordinates(after)
    except (AttributeError, KeyError, TypeError, LocationValidationError):
        return False
    if len(coords_before) != len(coords_after):
        return False
    for a, b in zip(coords_before, coords_after):
        if len(a) != len(b) or not comparison(a, b):
            return False
    return True


class GeoJSONExtension(FormatExtension):
    id = "astral:location:geojson"
    name = "GeoJSON"
    description = "Handles all GeoJSON formats (Point, LineString, Polygon, etc.)"
    location_type = HUB_FORMAT

    def validate(self) -> bool:
        return True

    def validate_location(self, value: Any) -> bool:
        return validate_geojson(value)

    def _require_valid(self, value: Any):
        if not self.validate_location(value):
            raise LocationValidationError("Invalid GeoJSON data", {"locationType": self.location_type})

    def to_string(self, value: Any) -> str:
        self._require_valid(value)
        return json.dumps(value, separators=(",", ":"))

    def from_string(self, text: str) -> Any:
        try:
            parsed = json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            logger.debug("GeoJSON parse failed: %s", e)
            raise LocationValidationError(f"Invalid GeoJSON string: {e}") from e
        self._require_valid(parsed)
        return parsed

    def to_hub(self, value: Any) -> Dict[str, Any]:
        self._require_valid(value)
        return value

    def from_hub(self, hub_value: Dict[str, Any]) -> Any:
        self._require_valid(hub_value)
        return hub_value

    def extract_coordinates(self, value: Dict[str, Any]) -> List[Position]:
        return extract_coordinates(value)

    def check_preservation(self, before: Any, after: Any, comparison: CoordinateComparison = exact_match) -> bool:
        return check_coordinate_preservation(before, after, comparison)
