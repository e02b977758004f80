from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from geoattest.config import load_settings
from geoattest.errors import ConfigurationError, ExtensionNotFoundError, GeoAttestError, ValidationError
from geoattest.extensions.conversion import convert_format
from geoattest.extensions.registry import ExtensionRegistry
from geoattest.location import LOCATION_SCHEMA_TYPE, LocationModule
from geoattest.schemas.conformance import validate_location_protocol_schema
from geoattest.schemas.records import LocationInput, UnsignedLocationRecord
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())

settings = load_settings()
registry = ExtensionRegistry(config_source=settings.config_source(), schema_version=settings.schema_version)
locations = LocationModule(registry=registry, settings=settings)

app = FastAPI(title="geoattest", version="0.1.0")


class SchemaCheckRequest(BaseModel):
    raw_schema: str = Field(..., alias="rawSchema")


class DetectRequest(BaseModel):
    location: Any


class ConvertRequest(BaseModel):
    location: Any
    source_format: str = Field(..., alias="sourceFormat")
    target_format: str = Field(..., alias="targetFormat")


class DecodeRequest(BaseModel):
    encoded: str
    schema_type: str = Field(LOCATION_SCHEMA_TYPE, alias="schemaType")


def _status_for(error: GeoAttestError) -> int:
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, ExtensionNotFoundError):
        return 404
    if isinstance(error, ConfigurationError):
        return 500
    return 400


@app.exception_handler(GeoAttestError)
async def geoattest_error_handler(request: Request, exc: GeoAttestError):
    status = _status_for(exc)
    logger.debug("request %s failed with %s: %s", request.url.path, exc.code, exc)
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/extensions")
async def list_extensions():
    return {
        "formats": [ext.get_metadata().model_dump() for ext in registry.get_all_formats()],
        "media": [ext.get_metadata().model_dump() for ext in registry.get_all_media()],
        "schemas": [ext.get_metadata().model_dump() for ext in registry.get_all_schemas()],
    }


@app.post("/schemas/validate")
async def validate_schema(body: SchemaCheckRequest):
    result = validate_location_protocol_schema(body.raw_schema)
    out = result.model_dump()
    out["generation"] = result.generation
    return out


@app.post("/locations/detect")
async def detect_location(body: DetectRequest):
    return {"locationType": registry.detect_format(body.location)}


@app.post("/locations/convert")
async def convert_location(body: ConvertRequest):
    converted = convert_format(body.location, body.source_format, body.target_format, registry.get_all_formats())
    return {"location": converted, "locationType": body.target_format}


@app.post("/locations/build")
async def build_location(body: LocationInput):
    record = locations.build(body)
    return record.model_dump(by_alias=True)


@app.post("/records/encode")
async def encode_record(body: UnsignedLocationRecord):
    return {"encoded": locations.encode(body)}


@app.post("/records/decode")
async def decode_record(body: DecodeRequest):
    return {"record": locations.decode(body.encoded, body.schema_type)}


@app.get("/schemas/{schema_type}/uid")
async def schema_uid(schema_type: str, chain_id: Optional[int] = None):
    extension = registry.require_schema(schema_type)
    chain_id = locations.default_chain_id if chain_id is None else chain_id
    return {"schemaType": schema_type, "chainId": chain_id, "uid": extension.get_schema_uid(chain_id)}


def run(host: str = "0.0.0.0", port: int = 8000):
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
