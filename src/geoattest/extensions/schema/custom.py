"""Schema extensions for caller-defined attestation schemas."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from geoattest.encoder import SchemaEncoder
from geoattest.errors import ValidationError
from geoattest.extensions.base import SchemaExtension
from geoattest.extensions.schema.location import is_schema_uid


class CustomSchemaExtension(SchemaExtension):
    """Schema extension over a fixed raw schema string and per-chain UIDs.

    ``validate_schema`` replaces the default record check; ``create_encoder``
    replaces the default encoder factory.
    """

    def __init__(
        self,
        id: str,
        name: str,
        description: str,
        schema_type: str,
        schema_string: str,
        schema_uids: Dict[int, str],
        validate_schema: Optional[Callable[[Dict[str, Any]], bool]] = None,
        create_encoder: Optional[Callable[[str], SchemaEncoder]] = None,
    ):
        self.id = id
        self.name = name
        self.description = description
        self.schema_type = schema_type
        self._schema_string = schema_string
        self._schema_uids = {int(k): v for k, v in (schema_uids or {}).items()}
        self._validate_schema = validate_schema
        self._encoder_factory = create_encoder

    def validate(self) -> bool:
        if not self._schema_string or not SchemaEncoder.is_schema_valid(self._schema_string):
            return False
        if not self._schema_uids:
            return False
        return all(is_schema_uid(uid) for uid in self._schema_uids.values())

    def get_schema_string(self) -> str:
        return self._schema_string

    def get_schema_uid(self, chain_id: int) -> str:
        uid = self._schema_uids.get(int(chain_id))
        if not uid:
            raise ValidationError(
                f"Schema UID not found for chain ID {chain_id}",
                {"chainId": chain_id, "availableChains": sorted(self._schema_uids)},
            )
        return uid

    def _create_encoder(self, raw_schema: str) -> SchemaEncoder:
        if self._encoder_factory is not None:
            return self._encoder_factory(raw_schema)
        return super()._create_encoder(raw_schema)

    def validate_data(self, data: Dict[str, Any]) -> bool:
        if self._validate_schema is not None:
            return bool(self._validate_schema(data))
        return super().validate_data(data)


def register_custom_schema_extension(registry, **options) -> CustomSchemaExtension:
    """Build a CustomSchemaExtension from keyword options and register it."""
    extension = CustomSchemaExtension(**options)
    registry.register_schema(extension)
    return extension
