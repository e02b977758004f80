import pytest

from geoattest.errors import (
    ConfigurationError,
    ExtensionError,
    ExtensionNotFoundError,
    GeoAttestError,
    LocationValidationError,
    ValidationError,
)


def test_codes_and_context():
    err = ExtensionNotFoundError("No format extension found for: wkt", {"available": ["geojson"]})
    assert err.code == "EXTENSION_NOT_FOUND"
    assert err.to_dict() == {
        "code": "EXTENSION_NOT_FOUND",
        "message": "No format extension found for: wkt",
        "context": {"available": ["geojson"]},
    }
    assert str(err) == "No format extension found for: wkt"


def test_hierarchy():
    assert issubclass(LocationValidationError, ValidationError)
    assert issubclass(ValidationError, ValueError)
    assert issubclass(ExtensionNotFoundError, LookupError)
    assert issubclass(ExtensionNotFoundError, ExtensionError)
    assert issubclass(ConfigurationError, GeoAttestError)


def test_code_override_and_field_helper():
    assert GeoAttestError("x", code="CUSTOM").code == "CUSTOM"
    err = ValidationError.for_field("srs", "required field is missing")
    assert err.context == {"fieldName": "srs"}
    with pytest.raises(ValueError):
        raise err
