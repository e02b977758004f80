from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from geoattest.schemas.location_v1 import DEFAULT_SRS

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = "0x" + "00" * 32


class _CamelModel(BaseModel):
    # schema field names are camelCase; python attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MediaInput(_CamelModel):
    media_type: str = Field(..., description="MIME type, e.g. image/jpeg")
    data: str = Field(..., description="base64 payload, data URL or storage reference")
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("media_type")
    def _mime_shape(cls, v: str):
        if "/" not in v:
            raise ValueError("media_type must look like '<category>/<subtype>'")
        return v.strip().lower()


class LocationInput(_CamelModel):
    """Caller-facing description of a location attestation to build."""

    location: Any
    location_type: Optional[str] = None
    target_location_format: Optional[str] = None
    timestamp: Optional[datetime] = None
    media: List[MediaInput] = Field(default_factory=list)
    memo: Optional[str] = None
    recipient: Optional[str] = None

    @field_validator("location")
    def _location_present(cls, v):
        if v is None:
            raise ValueError("location data is required")
        return v


class UnsignedLocationRecord(_CamelModel):
    """Canonical intermediate record handed to a schema extension.

    Frozen: derive changed copies with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    event_timestamp: int = Field(..., ge=0)
    srs: str = DEFAULT_SRS
    location_type: str
    location: str
    recipe_type: List[str] = Field(default_factory=list)
    recipe_payload: List[str] = Field(default_factory=list)
    media_type: List[str] = Field(default_factory=list)
    media_data: List[str] = Field(default_factory=list)
    memo: Optional[str] = None
    recipient: Optional[str] = None
    expiration_time: Optional[int] = None
    revocable: Optional[bool] = None

    @field_validator("media_data")
    def _media_parallel(cls, v: List[str], info):
        types = info.data.get("media_type")
        if types is not None and len(types) != len(v):
            raise ValueError("media_type and media_data must have the same length")
        return v

    def to_schema_data(self) -> Dict[str, Any]:
        """Field-name -> value mapping as consumed by a schema extension.

        An absent memo is encoded as the empty string.
        """
        data = self.model_dump(
            by_alias=True,
            exclude={"recipient", "expiration_time", "revocable"},
        )
        if data.get("memo") is None:
            data["memo"] = ""
        return data


class AttestationRequest(_CamelModel):
    """Payload handed to a signing or registration collaborator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    schema_uid: str
    recipient: str = ZERO_ADDRESS
    time: int
    expiration_time: int = 0
    revocable: bool = True
    ref_uid: str = ZERO_BYTES32
    data: str

    @field_validator("schema_uid", "ref_uid")
    def _bytes32_hex(cls, v: str):
        if not (isinstance(v, str) and v.startswith("0x") and len(v) == 66):
            raise ValueError("expected a 0x-prefixed 32-byte hex string")
        return v
