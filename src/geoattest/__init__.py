"""geoattest: location attestation records over pluggable spatial formats.

Recognizes and converts spatial encodings through a GeoJSON hub, checks
schema strings for Location Protocol conformance and encodes location
records for external attestation signers.
"""

from geoattest.errors import (
    ConfigurationError,
    ExtensionError,
    ExtensionLoadError,
    ExtensionNotFoundError,
    GeoAttestError,
    LocationValidationError,
    MediaValidationError,
    SchemaValidationError,
    ValidationError,
)
from geoattest.encoder import SchemaEncoder, compute_schema_uid
from geoattest.extensions.registry import ExtensionRegistry
from geoattest.extensions.conversion import convert_format, detect_format
from geoattest.location import LocationModule
from geoattest.schemas.conformance import validate_location_protocol_schema
from geoattest.schemas.fields import parse_schema_string
from geoattest.schemas.records import LocationInput, UnsignedLocationRecord

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ExtensionError",
    "ExtensionLoadError",
    "ExtensionNotFoundError",
    "GeoAttestError",
    "LocationValidationError",
    "MediaValidationError",
    "SchemaValidationError",
    "ValidationError",
    "SchemaEncoder",
    "compute_schema_uid",
    "ExtensionRegistry",
    "convert_format",
    "detect_format",
    "LocationModule",
    "validate_location_protocol_schema",
    "parse_schema_string",
    "LocationInput",
    "UnsignedLocationRecord",
]
