"""Error hierarchy for geoattest.

Every error carries a string ``code`` for programmatic handling and an
optional ``context`` mapping with diagnostic details (for example the list of
available extension keys when a lookup fails). Chain the original cause with
``raise ... from``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GeoAttestError(Exception):
    code = "GEOATTEST_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": self.context}

    def __str__(self) -> str:
        return self.message


class ValidationError(GeoAttestError, ValueError):
    """Input failed validation (malformed location, schema string or record)."""

    code = "VALIDATION_ERROR"

    @classmethod
    def for_field(cls, field_name: str, message: str) -> "ValidationError":
        return cls(f"Validation error for '{field_name}': {message}", {"fieldName": field_name})


class LocationValidationError(ValidationError):
    code = "LOCATION_VALIDATION_ERROR"


class MediaValidationError(ValidationError):
    code = "MEDIA_VALIDATION_ERROR"


class SchemaValidationError(ValidationError):
    code = "SCHEMA_VALIDATION_ERROR"


class ExtensionError(GeoAttestError):
    code = "EXTENSION_ERROR"


class ExtensionNotFoundError(ExtensionError, LookupError):
    """No extension is registered for the requested key.

    ``context["available"]`` lists the keys currently registered for the
    capability so registry state can be inspected from the error alone.
    """

    code = "EXTENSION_NOT_FOUND"


class ExtensionLoadError(ExtensionError):
    code = "EXTENSION_LOAD_ERROR"


class ConfigurationError(GeoAttestError):
    code = "CONFIGURATION_ERROR"
