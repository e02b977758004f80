"""Location Protocol conformance checks for raw schema strings.

Two protocol generations exist:

* version 1 ("legacy", Location Protocol v0.1) has no self-identifying field
  and requires ``srs``, ``locationType`` and ``location``;
* version 2 ("current", Location Protocol v0.2) additionally requires a
  ``uint8 specVersion`` field.

The generation is chosen by the presence of a field named ``specVersion``.
A required field with an unexpected type is a warning, never an error.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict

from geoattest.errors import SchemaValidationError
from geoattest.schemas.fields import (
    SchemaField,
    is_valid_identifier,
    is_valid_solidity_type,
    parse_schema_string,
)
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())

SPEC_VERSION_FIELD = "specVersion"
SPATIAL_FIELDS: Tuple[str, ...] = ("srs", "locationType", "location")
LP_V1_REQUIRED_FIELDS: Tuple[str, ...] = SPATIAL_FIELDS
LP_V2_REQUIRED_FIELDS: Tuple[str, ...] = (SPEC_VERSION_FIELD,) + SPATIAL_FIELDS

EXPECTED_FIELD_TYPES: Dict[str, str] = {
    SPEC_VERSION_FIELD: "uint8",
    "srs": "string",
    "locationType": "string",
    "location": "string",
}

LEGACY_WARNING = (
    "Schema is v0.1 (legacy): missing specVersion field. "
    "Consider upgrading to v0.2 for self-identifying schemas."
)


class SchemaValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    version: Literal[1, 2]
    conformant: bool
    missing: List[str]
    errors: List[str]
    warnings: List[str]
    fields: List[SchemaField]

    @property
    def generation(self) -> str:
        return "current" if self.version == 2 else "legacy"


def validate_location_protocol_schema(raw_schema: str, strict: bool = False) -> SchemaValidationResult:
    """Check a raw schema string for Location Protocol conformance.

    In strict mode a non-conformant or malformed schema raises
    SchemaValidationError with the same diagnostics in its context.
    """
    errors: List[str] = []
    warnings: List[str] = []

    fields = parse_schema_string(raw_schema)
    if fields is None:
        errors.append('Invalid schema format: expected comma-separated "type name" pairs')
        result = SchemaValidationResult(
            valid=False,
            version=1,
            conformant=False,
            missing=list(LP_V1_REQUIRED_FIELDS),
            errors=errors,
            warnings=warnings,
            fields=[],
        )
        if strict:
            raise SchemaValidationError(
                f"Schema validation failed: {'; '.join(errors)}",
                {"rawSchema": raw_schema, "version": 1, "missing": result.missing, "errors": errors},
            )
        return result

    for field in fields:
        if not is_valid_solidity_type(field.type):
            errors.append(f"Invalid Solidity type '{field.type}' for field '{field.name}'")
        if not is_valid_identifier(field.name):
            errors.append(f"Invalid field name '{field.name}': must be a valid Solidity identifier")

    seen = set()
    duplicates: List[str] = []
    for field in fields:
        if field.name in seen and field.name not in duplicates:
            duplicates.append(field.name)
        seen.add(field.name)
    if duplicates:
        errors.append(f"Duplicate field names: {', '.join(duplicates)}")

    valid = not errors

    by_name = {}
    for field in fields:
        by_name.setdefault(field.name, field)
    version = 2 if SPEC_VERSION_FIELD in by_name else 1
    required = LP_V2_REQUIRED_FIELDS if version == 2 else LP_V1_REQUIRED_FIELDS

    missing: List[str] = []
    for name in required:
        field = by_name.get(name)
        if field is None:
            missing.append(name)
            continue
        expected = EXPECTED_FIELD_TYPES[name]
        if field.type != expected:
            warnings.append(f"Field '{name}' should be {expected}, found '{field.type}'")

    conformant = valid and not missing
    if version == 1 and valid:
        warnings.append(LEGACY_WARNING)

    result = SchemaValidationResult(
        valid=valid,
        version=version,
        conformant=conformant,
        missing=missing,
        errors=errors,
        warnings=warnings,
        fields=fields,
    )
    logger.debug("schema checked: version=%s valid=%s conformant=%s missing=%s", version, valid, conformant, missing)

    if strict and not conformant:
        if errors:
            message = f"Schema validation failed: {'; '.join(errors)}"
        else:
            message = f"Schema is not Location Protocol conformant: missing fields [{', '.join(missing)}]"
        raise SchemaValidationError(
            message,
            {"rawSchema": raw_schema, "version": version, "missing": missing, "errors": errors},
        )
    return result


def is_location_protocol_v2(raw_schema: str) -> bool:
    fields = parse_schema_string(raw_schema)
    if not fields:
        return False
    return any(f.name == SPEC_VERSION_FIELD for f in fields)


class SchemaValidationCache:
    """Remembers conformance results keyed by the raw schema string.

    Schema strings are immutable once deployed, so entries are never
    invalidated. Strict mode is applied on every lookup, cached or not.
    """

    def __init__(self, strict: bool = False):
        self.strict = bool(strict)
        self._results: Dict[str, SchemaValidationResult] = {}

    def validate(self, raw_schema: str) -> SchemaValidationResult:
        result = self._results.get(raw_schema)
        if result is None:
            result = validate_location_protocol_schema(raw_schema, strict=False)
            self._results[raw_schema] = result
        if self.strict and not result.conformant:
            # re-run in strict mode to raise with the standard diagnostics
            validate_location_protocol_schema(raw_schema, strict=True)
        if not result.conformant:
            logger.warning("schema is not Location Protocol conformant: missing=%s errors=%s", result.missing, result.errors)
        return result

    def get(self, raw_schema: str):
        return self._results.get(raw_schema)

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, raw_schema: str) -> bool:
        return raw_schema in self._results
