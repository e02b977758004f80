"""Decimal coordinate format: ``[lon, lat]`` or ``[lon, lat, alt]``.

Transport string is the comma-joined numbers (``"-122.4194,37.7749"``); the
hub form is a GeoJSON Point.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from geoattest.errors import LocationValidationError
from geoattest.extensions.base import FormatExtension
from geoattest.extensions.formats.geojson import is_wgs84_position, validate_geojson


class CoordinateExtension(FormatExtension):
    id = "astral:location:coordinate"
    name = "Decimal coordinates"
    description = "Handles [longitude, latitude(, altitude)] decimal coordinate pairs"
    location_type = "coordinate"

    def validate(self) -> bool:
        return True

    def validate_location(self, value: Any) -> bool:
        return is_wgs84_position(value)

    def _require_valid(self, value: Any):
        if not self.validate_location(value):
            raise LocationValidationError(
                "Invalid coordinate data: expected [lon, lat] within WGS84 bounds",
                {"locationType": self.location_type},
            )

    def to_string(self, value: Any) -> str:
        self._require_valid(value)
        return ",".join(json.dumps(v) for v in value)

    def from_string(self, text: str) -> List[float]:
        try:
            parsed = json.loads(f"[{text}]")
        except (TypeError, json.JSONDecodeError) as e:
            raise LocationValidationError(f"Invalid coordinate string: {text!r}") from e
        self._require_valid(parsed)
        return parsed

    def to_hub(self, value: Any) -> Dict[str, Any]:
        self._require_valid(value)
        return {"type": "Point", "coordinates": list(value)}

    def from_hub(self, hub_value: Dict[str, Any]) -> List[float]:
        geom = hub_value
        if isinstance(geom, dict) and geom.get("type") == "Feature":
            geom = geom.get("geometry")
        if not validate_geojson(geom) or geom.get("type") != "Point":
            raise LocationValidationError(
                "Only GeoJSON Point geometries can be expressed as coordinates",
                {"receivedType": geom.get("type") if isinstance(geom, dict) else type(geom).__name__},
            )
        return list(geom["coordinates"])
