"""Location attestation workflow.

``LocationModule`` turns caller input into an ``UnsignedLocationRecord``,
encodes records with the active schema extension and hands the resulting
``AttestationRequest`` to an external signer or registrar.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from geoattest.collaborators import OffchainSigner, OnchainRegistrar, RegistrationReceipt, SignedAttestation
from geoattest.config import Settings, get_chain_id, get_schema_string
from geoattest.errors import ExtensionError, LocationValidationError, MediaValidationError, ValidationError
from geoattest.extensions.base import FormatExtension
from geoattest.extensions.conversion import convert_format
from geoattest.extensions.registry import ExtensionRegistry
from geoattest.schemas.conformance import SchemaValidationCache
from geoattest.schemas.location_v1 import DEFAULT_SRS
from geoattest.schemas.records import (
    ZERO_ADDRESS,
    ZERO_BYTES32,
    AttestationRequest,
    LocationInput,
    MediaInput,
    UnsignedLocationRecord,
)
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())

LOCATION_SCHEMA_TYPE = "location"

RecordLike = Union[UnsignedLocationRecord, Mapping[str, Any]]


class LocationModule:
    def __init__(self, registry: Optional[ExtensionRegistry] = None, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        if registry is None:
            registry = ExtensionRegistry(
                config_source=self.settings.config_source(),
                schema_version=self.settings.schema_version,
            )
        self.registry = registry
        self.schema_cache = SchemaValidationCache(strict=self.settings.strict_schema_validation)
        self.schema_cache.validate(get_schema_string(self.registry.config_source.load(), self.registry.schema_version))

    @property
    def default_chain_id(self) -> int:
        return get_chain_id(self.registry.config_source.load(), self.settings.default_chain, self.registry.schema_version)

    # -- build -------------------------------------------------------------

    def _resolve_location(self, value: Any, location_type: Optional[str]) -> Tuple[Any, str]:
        """Parsed location value and the location type it was recognized as."""
        if location_type is not None:
            extension = self.registry.require_format(location_type)
            if isinstance(value, str):
                value = extension.from_string(value)
            if not extension.validate_location(value):
                raise LocationValidationError(
                    f"Location is not valid {location_type}", {"locationType": location_type}
                )
            return value, location_type

        detected = self.registry.detect_format(value)
        if detected is None and isinstance(value, str):
            # transport strings: take the first format able to parse the text
            for extension in self.registry.get_all_formats():
                parsed = self._try_parse(extension, value)
                if parsed is not None:
                    return parsed, extension.location_type
        if detected is None:
            raise ExtensionError(
                "Could not determine location format",
                {"available": [ext.location_type for ext in self.registry.get_all_formats()]},
            )
        return value, detected

    @staticmethod
    def _try_parse(extension: FormatExtension, text: str) -> Optional[Any]:
        try:
            parsed = extension.from_string(text)
        except ValidationError:
            return None
        return parsed if extension.validate_location(parsed) else None

    def _process_media(self, media: List[MediaInput]) -> Tuple[List[str], List[str]]:
        media_types: List[str] = []
        media_data: List[str] = []
        for item in media:
            extension = self.registry.require_media(item.media_type)
            if not extension.validate_media(item.media_type, item.data):
                raise MediaValidationError(
                    f"Invalid media data for type: {item.media_type}", {"mediaType": item.media_type}
                )
            media_types.append(item.media_type)
            media_data.append(extension.process_media(item.media_type, item.data))
        return media_types, media_data

    def build(self, data: Union[LocationInput, Mapping[str, Any]]) -> UnsignedLocationRecord:
        """Build an unsigned location record from caller input.

        The location type is taken from the input or detected; when a target
        format is given the location is converted first. The finished record
        is checked against the ``location`` schema extension.
        """
        location_input = data if isinstance(data, LocationInput) else LocationInput.model_validate(data)
        self.registry.wait_until_ready()

        value, location_type = self._resolve_location(location_input.location, location_input.location_type)

        target = location_input.target_location_format
        if target and target != location_type:
            value = convert_format(value, location_type, target, self.registry.get_all_formats())
            location_type = target

        location_string = self.registry.require_format(location_type).to_string(value)
        media_types, media_data = self._process_media(location_input.media)

        if location_input.timestamp is not None:
            event_timestamp = int(location_input.timestamp.timestamp())
        else:
            event_timestamp = int(time.time())

        record = UnsignedLocationRecord(
            event_timestamp=event_timestamp,
            srs=DEFAULT_SRS,
            location_type=location_type,
            location=location_string,
            media_type=media_types,
            media_data=media_data,
            memo=location_input.memo,
            recipient=location_input.recipient,
        )

        schema_extension = self.registry.get_schema(LOCATION_SCHEMA_TYPE)
        if schema_extension is None:
            logger.debug("no %s schema extension registered; skipping record check", LOCATION_SCHEMA_TYPE)
        elif not schema_extension.validate_data(record.to_schema_data()):
            raise ValidationError(
                "Generated record does not match the schema",
                {"record": record.model_dump(by_alias=True)},
            )
        logger.debug("built %s record at %s", location_type, event_timestamp)
        return record

    # -- encode / decode ---------------------------------------------------

    def encode(self, record: RecordLike, schema_type: str = LOCATION_SCHEMA_TYPE) -> str:
        data = record.to_schema_data() if isinstance(record, UnsignedLocationRecord) else dict(record)
        return self.registry.require_schema(schema_type).encode_data(data)

    def decode(self, encoded: str, schema_type: str = LOCATION_SCHEMA_TYPE) -> Dict[str, Any]:
        return self.registry.require_schema(schema_type).decode_data(encoded)

    # -- hand-off to collaborators -----------------------------------------

    def prepare_request(
        self,
        record: UnsignedLocationRecord,
        chain_id: Optional[int] = None,
        ref_uid: str = ZERO_BYTES32,
        schema_type: str = LOCATION_SCHEMA_TYPE,
    ) -> AttestationRequest:
        schema_extension = self.registry.require_schema(schema_type)
        chain_id = self.default_chain_id if chain_id is None else chain_id
        return AttestationRequest(
            schema_uid=schema_extension.get_schema_uid(chain_id),
            recipient=record.recipient or ZERO_ADDRESS,
            time=record.event_timestamp,
            expiration_time=record.expiration_time or 0,
            revocable=True if record.revocable is None else record.revocable,
            ref_uid=ref_uid,
            data=self.encode(record, schema_type),
        )

    def sign_offchain(self, record: UnsignedLocationRecord, signer: OffchainSigner, **options) -> SignedAttestation:
        request = self.prepare_request(record, **options)
        logger.debug("signing attestation for schema %s", request.schema_uid)
        return signer.sign(request)

    def register_onchain(
        self, record: UnsignedLocationRecord, registrar: OnchainRegistrar, **options
    ) -> RegistrationReceipt:
        request = self.prepare_request(record, **options)
        logger.debug("registering attestation for schema %s", request.schema_uid)
        return registrar.register(request)
