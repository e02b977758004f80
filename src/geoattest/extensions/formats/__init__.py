from .geojson import (
    HUB_FORMAT,
    GeoJSONExtension,
    check_coordinate_preservation,
    exact_match,
    extract_coordinates,
    is_geojson,
    is_position,
    within_tolerance,
)
from .coordinate import CoordinateExtension

__all__ = [
    "HUB_FORMAT",
    "GeoJSONExtension",
    "CoordinateExtension",
    "check_coordinate_preservation",
    "exact_match",
    "within_tolerance",
    "extract_coordinates",
    "is_geojson",
    "is_position",
]
