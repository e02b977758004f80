"""Extension capability interfaces.

Each extension is identified by ``<namespace>:<capability>:<format>``, e.g.
``astral:location:geojson``. Extensions are immutable once constructed and
never hold a reference back to the registry they are registered in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict

from geoattest.encoder import SchemaEncoder
from geoattest.errors import GeoAttestError, ValidationError


class ExtensionMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    type: str


class BaseExtension(ABC):
    id: str = ""
    name: str = ""
    description: str = ""

    @abstractmethod
    def validate(self) -> bool:
        """Self-check: is the extension properly configured?"""

    def get_metadata(self) -> ExtensionMetadata:
        return ExtensionMetadata(
            id=self.id,
            name=self.name,
            description=self.description,
            type=type(self).__name__,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class FormatExtension(BaseExtension):
    """Handles one spatial encoding and its conversion to/from the hub (GeoJSON)."""

    # base format identifier, e.g. "geojson"; more specific types such as
    # "geojson-point" resolve to it
    location_type: str = ""

    @abstractmethod
    def validate_location(self, value: Any) -> bool:
        ...

    @abstractmethod
    def to_string(self, value: Any) -> str:
        ...

    @abstractmethod
    def from_string(self, text: str) -> Any:
        ...

    @abstractmethod
    def to_hub(self, value: Any) -> Dict[str, Any]:
        ...

    @abstractmethod
    def from_hub(self, hub_value: Dict[str, Any]) -> Any:
        ...


class MediaExtension(BaseExtension):
    """Validates and normalizes attachment payloads for a set of MIME types."""

    supported_media_types: Sequence[str] = ()

    def supports_media_type(self, media_type: str) -> bool:
        return media_type in self.supported_media_types

    @abstractmethod
    def validate_media(self, media_type: str, data: str) -> bool:
        ...

    @abstractmethod
    def process_media(self, media_type: str, data: str) -> str:
        ...


class SchemaExtension(BaseExtension):
    """Maps a logical record to a schema-encoded byte string and back.

    Encoders are cached by the exact raw schema string they were built from.
    The raw string is looked up again on every call, so a different string
    reported by the configuration gets its own encoder while previously built
    encoders stay cached.
    """

    schema_type: str = ""

    @abstractmethod
    def get_schema_string(self) -> str:
        ...

    @abstractmethod
    def get_schema_uid(self, chain_id: int) -> str:
        ...

    def _create_encoder(self, raw_schema: str) -> SchemaEncoder:
        return SchemaEncoder(raw_schema)

    def _get_encoder(self) -> SchemaEncoder:
        cache: Dict[str, SchemaEncoder] = self.__dict__.setdefault("_encoders", {})
        raw_schema = self.get_schema_string()
        encoder = cache.get(raw_schema)
        if encoder is None:
            encoder = self._create_encoder(raw_schema)
            cache[raw_schema] = encoder
        return encoder

    @property
    def state(self) -> str:
        return "validated" if self.__dict__.get("_encoders") else "uninitialized"

    def validate_data(self, data: Dict[str, Any]) -> bool:
        """True when every scalar field is present and a trial encode is valid."""
        try:
            encoder = self._get_encoder()
            for field in encoder.fields:
                if not field.is_array and data.get(field.name) is None:
                    return False
                if field.is_array and field.name in data and not isinstance(data[field.name], (list, tuple)):
                    return False
            return encoder.is_encoded_data_valid(encoder.encode_record(data))
        except GeoAttestError:
            return False

    def encode_data(self, data: Dict[str, Any]) -> str:
        return self._get_encoder().encode_record(data)

    def decode_data(self, encoded: str) -> Dict[str, Any]:
        encoder = self._get_encoder()
        if not encoder.is_encoded_data_valid(encoded):
            raise ValidationError(f"Invalid encoded data for {self.schema_type} schema", {"encodedData": encoded})
        return encoder.decode_record(encoded)


class RecipeExtension(BaseExtension):
    """Proof recipe handling. Reserved; no built-in implementation exists."""

    recipe_type: str = ""

    @abstractmethod
    def validate_recipe(self, recipe_data: Any) -> bool:
        ...

    @abstractmethod
    def recipe_to_bytes(self, recipe_data: Any) -> bytes:
        ...

    @abstractmethod
    def parse_recipe_bytes(self, recipe_bytes: bytes) -> Any:
        ...


def base_format(location_type: str) -> str:
    """First hyphen-delimited segment: ``geojson-point`` -> ``geojson``."""
    return location_type.split("-")[0]


def format_keys(extensions: List[FormatExtension]) -> List[str]:
    return [ext.location_type for ext in extensions]
