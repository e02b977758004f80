"""Canonical Location Protocol v0.1 schema.

The same schema is deployed with the same UID on every supported network.
"""

from __future__ import annotations

from typing import Dict

LOCATION_V1_SCHEMA_UID = "0xba4171c92572b1e4f241d044c32cdf083be9fd946b8766977558ca6378c824e2"

LOCATION_V1_SCHEMA_STRING = (
    "uint256 eventTimestamp,string srs,string locationType,string location,"
    "string[] recipeType,bytes[] recipePayload,string[] mediaType,string[] mediaData,string memo"
)

LOCATION_V1_SCHEMA_INTERFACE: Dict[str, str] = {
    "eventTimestamp": "uint256",
    "srs": "string",
    "locationType": "string",
    "location": "string",
    "recipeType": "string[]",
    "recipePayload": "bytes[]",
    "mediaType": "string[]",
    "mediaData": "string[]",
    "memo": "string",
}

# network name -> chain id
SUPPORTED_NETWORKS: Dict[str, int] = {
    "sepolia": 11155111,
    "base": 8453,
    "arbitrum": 42161,
    "celo": 42220,
    "optimism": 10,
}

DEFAULT_SRS = "EPSG:4326"