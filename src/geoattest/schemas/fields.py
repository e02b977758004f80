"""Parsing of raw attestation schema strings.

A raw schema is a comma-separated list of ``type name`` pairs, e.g.
``"uint256 eventTimestamp,string srs"``. Parsing is purely syntactic; type
and identifier checks are exposed separately so the conformance checker can
report every problem instead of stopping at the first one.
"""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

_INT_WIDTHS = range(8, 257, 8)

VALID_SOLIDITY_TYPES = frozenset(
    [f"uint{w}" for w in _INT_WIDTHS]
    + [f"int{w}" for w in _INT_WIDTHS]
    + ["address", "bool", "string", "bytes"]
    + [f"bytes{n}" for n in range(1, 33)]
)

SOLIDITY_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ARRAY_SUFFIX = "[]"


class SchemaField(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    name: str

    @property
    def is_array(self) -> bool:
        return self.type.endswith(ARRAY_SUFFIX)

    @property
    def base_type(self) -> str:
        return self.type[: -len(ARRAY_SUFFIX)] if self.is_array else self.type


def parse_schema_string(raw_schema: str) -> Optional[List[SchemaField]]:
    """Split a raw schema into fields.

    Returns None when the input is empty or any segment does not consist of
    exactly two whitespace-separated tokens. Partial results are never
    returned.
    """
    if not raw_schema or not isinstance(raw_schema, str):
        return None
    trimmed = raw_schema.strip()
    if not trimmed:
        return None

    fields: List[SchemaField] = []
    for segment in trimmed.split(","):
        parts = segment.split()
        if len(parts) != 2:
            return None
        fields.append(SchemaField(type=parts[0], name=parts[1]))
    return fields


def is_valid_solidity_type(type_str: str) -> bool:
    base = type_str[: -len(ARRAY_SUFFIX)] if type_str.endswith(ARRAY_SUFFIX) else type_str
    return base in VALID_SOLIDITY_TYPES


def is_valid_identifier(name: str) -> bool:
    return bool(SOLIDITY_IDENTIFIER_PATTERN.match(name))


def get_schema_field_names(raw_schema: str) -> List[str]:
    fields = parse_schema_string(raw_schema)
    if not fields:
        return []
    return [f.name for f in fields]
