"""Built-in schema extension for Location Protocol attestations."""

from __future__ import annotations

from typing import Optional

from geoattest.config import ConfigSource, StaticConfigSource, get_schema_string, get_schema_uid, get_supported_chain_ids
from geoattest.errors import GeoAttestError
from geoattest.extensions.base import SchemaExtension
from geoattest.schemas.conformance import validate_location_protocol_schema
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())


def is_schema_uid(uid: str) -> bool:
    return isinstance(uid, str) and len(uid) == 66 and uid.startswith("0x")


class LocationSchemaExtension(SchemaExtension):
    """Encodes unsigned location records with the configured location schema.

    The raw schema string is read from the configuration source on every
    call; see ``SchemaExtension`` for how encoders are cached.
    """

    id = "astral:schema:location"
    name = "Astral Location Schema"
    description = "Handles the attestation schema for Astral location records"
    schema_type = "location"

    def __init__(self, config_source: Optional[ConfigSource] = None, version: Optional[str] = None):
        self._config_source = config_source or StaticConfigSource()
        self._version = version

    def get_schema_string(self) -> str:
        return get_schema_string(self._config_source.load(), self._version)

    def get_schema_uid(self, chain_id: int) -> str:
        return get_schema_uid(self._config_source.load(), int(chain_id), self._version)

    def validate(self) -> bool:
        try:
            raw_schema = self.get_schema_string()
            result = validate_location_protocol_schema(raw_schema)
            if not result.valid:
                logger.warning("configured location schema is malformed: %s", result.errors)
                return False
            if not result.conformant:
                logger.warning("configured location schema is missing fields: %s", result.missing)
                return False
            config = self._config_source.load()
            for chain_id in get_supported_chain_ids(config, self._version):
                if not is_schema_uid(self.get_schema_uid(chain_id)):
                    return False
        except GeoAttestError as e:
            logger.warning("location schema extension failed its self-check: %s", e)
            return False
        return True
