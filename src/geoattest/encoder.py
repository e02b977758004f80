"""ABI encoding of attestation data.

``SchemaEncoder`` packs a list of ``(name, type, value)`` items into the
ABI byte string an attestation signer expects, and unpacks it again. The
heavy lifting is done by ``eth_abi``; this module adds schema parsing,
per-type value coercion and a record-level API keyed by field name.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Union

import eth_abi
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import is_hex, keccak, to_bytes, to_checksum_address
from pydantic import BaseModel

from geoattest.errors import SchemaValidationError, ValidationError
from geoattest.schemas.fields import SchemaField, is_valid_identifier, is_valid_solidity_type, parse_schema_string
from geoattest.schemas.records import ZERO_ADDRESS
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())


class SchemaItem(BaseModel):
    name: str
    type: str
    value: Any


def _to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _coerce_bytes(value: Any, type_str: str) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value == "" or value == "0x":
            return b""
        if is_hex(value):
            return to_bytes(hexstr=value)
    raise ValueError(f"{type_str} value must be bytes or a hex string")


def _coerce_int(value: Any, type_str: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{type_str} value must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip(), 0)
    raise ValueError(f"{type_str} value must be an integer")


def coerce_value(type_str: str, value: Any) -> Any:
    """Convert a python value to what eth_abi expects for ``type_str``."""
    if type_str.endswith("[]"):
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"{type_str} value must be a list")
        base = type_str[:-2]
        return [coerce_value(base, v) for v in value]
    if type_str.startswith(("uint", "int")):
        return _coerce_int(value, type_str)
    if type_str == "bool":
        if not isinstance(value, bool):
            raise ValueError("bool value must be True or False")
        return value
    if type_str == "address":
        if not isinstance(value, str):
            raise ValueError("address value must be a hex string")
        return to_checksum_address(value)
    if type_str == "string":
        if not isinstance(value, str):
            raise ValueError("string value must be str")
        return value
    if type_str.startswith("bytes"):
        return _coerce_bytes(value, type_str)
    raise ValueError(f"unsupported type {type_str}")


def normalize_decoded(type_str: str, value: Any) -> Any:
    """Make decoded values JSON friendly: lists for arrays, hex for bytes."""
    if type_str.endswith("[]"):
        base = type_str[:-2]
        return [normalize_decoded(base, v) for v in value]
    if type_str.startswith("bytes"):
        return _to_hex(value)
    if type_str == "address":
        return to_checksum_address(value)
    return value


class SchemaEncoder:
    """Encoder/decoder bound to one raw schema string."""

    def __init__(self, raw_schema: str):
        fields = parse_schema_string(raw_schema)
        if fields is None:
            raise SchemaValidationError("Invalid schema format", {"schema": raw_schema})
        bad = [f.type for f in fields if not is_valid_solidity_type(f.type) or not eth_abi.is_encodable_type(f.type)]
        if bad:
            raise SchemaValidationError(f"Unsupported field types: {', '.join(bad)}", {"schema": raw_schema})
        bad_names = [f.name for f in fields if not is_valid_identifier(f.name)]
        if bad_names:
            raise SchemaValidationError(f"Invalid field names: {', '.join(bad_names)}", {"schema": raw_schema})
        self.raw_schema = raw_schema
        self.fields: List[SchemaField] = fields
        self.types: List[str] = [f.type for f in fields]
        logger.debug("SchemaEncoder built for %d fields", len(fields))

    @property
    def schema(self) -> str:
        return self.raw_schema

    def schema_interface(self) -> Dict[str, str]:
        return {f.name: f.type for f in self.fields}

    @staticmethod
    def is_schema_valid(raw_schema: str) -> bool:
        try:
            SchemaEncoder(raw_schema)
        except (SchemaValidationError, TypeError, ValueError):
            return False
        return True

    def encode_data(self, items: Sequence[Union[SchemaItem, Mapping[str, Any]]]) -> str:
        """Encode items given in schema order; returns a 0x-prefixed hex string."""
        parsed = [i if isinstance(i, SchemaItem) else SchemaItem(**i) for i in items]
        if len(parsed) != len(self.fields):
            raise ValidationError(
                "Item count does not match schema",
                {"expected": len(self.fields), "received": len(parsed)},
            )
        values = []
        for field, item in zip(self.fields, parsed):
            if item.name != field.name or item.type != field.type:
                raise ValidationError(
                    f"Item '{item.name}' ({item.type}) does not match schema field '{field.name}' ({field.type})",
                    {"expected": field.model_dump(), "received": {"name": item.name, "type": item.type}},
                )
            try:
                values.append(coerce_value(field.type, item.value))
            except (TypeError, ValueError) as e:
                raise ValidationError.for_field(field.name, str(e)) from e
        try:
            encoded = eth_abi.encode(self.types, values)
        except (EncodingError, OverflowError, TypeError, ValueError) as e:
            raise ValidationError("Failed to encode schema data", {"error": str(e)}) from e
        return _to_hex(encoded)

    def decode_data(self, encoded: Union[str, bytes]) -> List[SchemaItem]:
        try:
            raw = _coerce_bytes(encoded, "encoded data")
            values = eth_abi.decode(self.types, raw)
        except (DecodingError, OverflowError, TypeError, ValueError) as e:
            raise ValidationError("Failed to decode schema data", {"error": str(e)}) from e
        return [
            SchemaItem(name=f.name, type=f.type, value=normalize_decoded(f.type, v))
            for f, v in zip(self.fields, values)
        ]

    def is_encoded_data_valid(self, encoded: Union[str, bytes]) -> bool:
        try:
            self.decode_data(encoded)
        except ValidationError:
            return False
        return True

    def encode_record(self, record: Mapping[str, Any]) -> str:
        """Encode a name -> value mapping.

        Array fields missing from the record encode as empty arrays; a missing
        scalar field is a ValidationError.
        """
        items = []
        for field in self.fields:
            value = record.get(field.name)
            if value is None:
                if field.is_array:
                    value = []
                else:
                    raise ValidationError.for_field(field.name, "required field is missing")
            items.append(SchemaItem(name=field.name, type=field.type, value=value))
        return self.encode_data(items)

    def decode_record(self, encoded: Union[str, bytes]) -> Dict[str, Any]:
        return {item.name: item.value for item in self.decode_data(encoded)}


def compute_schema_uid(raw_schema: str, resolver: str = ZERO_ADDRESS, revocable: bool = True) -> str:
    """UID the attestation schema registry assigns to ``raw_schema``.

    keccak256 over the packed (schema string, resolver address, revocable flag).
    """
    packed = raw_schema.encode("utf-8") + to_bytes(hexstr=resolver) + (b"\x01" if revocable else b"\x00")
    return _to_hex(keccak(packed))
