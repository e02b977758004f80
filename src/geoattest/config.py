"""Runtime settings and protocol configuration.

Settings come from the environment (a ``.env`` file is loaded first). The
protocol configuration (schema string and per-chain schema UIDs for each
Location Protocol version) is supplied by a ``ConfigSource`` that callers
pass explicitly; nothing here is cached at module level.

Configuration file layout (JSON)::

    {
      "v0.1": {
        "schema": {"interface": {...}, "rawString": "uint256 eventTimestamp,..."},
        "chains": {
          "11155111": {"chain": "sepolia", "schemaUID": "0x..", ...}
        }
      }
    }
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

import dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from geoattest.errors import ConfigurationError
from geoattest.schemas.location_v1 import (
    LOCATION_V1_SCHEMA_INTERFACE,
    LOCATION_V1_SCHEMA_STRING,
    LOCATION_V1_SCHEMA_UID,
    SUPPORTED_NETWORKS,
)
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())

_TRUE = ("1", "true", "yes", "on")


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SchemaConfig(_ConfigModel):
    interface: Dict[str, str] = Field(default_factory=dict)
    raw_string: str


class ChainConfig(_ConfigModel):
    chain: str
    schema_uid: str = Field(..., alias="schemaUID")
    deployment_block: Optional[int] = None
    rpc_url: Optional[str] = None
    eas_contract_address: Optional[str] = None


class VersionConfig(_ConfigModel):
    schema_config: SchemaConfig = Field(..., alias="schema")
    chains: Dict[str, ChainConfig] = Field(default_factory=dict)


class ProtocolConfig(BaseModel):
    versions: Dict[str, VersionConfig]

    @classmethod
    def from_mapping(cls, data: Dict) -> "ProtocolConfig":
        try:
            return cls(versions=data)
        except PydanticValidationError as e:
            raise ConfigurationError("Malformed protocol configuration", {"errors": e.errors()}) from e


class ConfigSource(Protocol):
    """Anything that can report the current protocol configuration."""

    def load(self) -> ProtocolConfig:
        ...


class StaticConfigSource:
    """In-memory configuration; tests and embedders inject it directly."""

    def __init__(self, config: Optional[ProtocolConfig] = None):
        self.config = config or default_protocol_config()

    def load(self) -> ProtocolConfig:
        return self.config

    def replace(self, config: ProtocolConfig):
        self.config = config


class FileConfigSource:
    """JSON configuration file, re-read on every ``load()``."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> ProtocolConfig:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to load protocol configuration from {self.path}",
                {"configPath": str(self.path)},
            ) from e
        return ProtocolConfig.from_mapping(data)


def default_protocol_config() -> ProtocolConfig:
    chains = {
        str(chain_id): ChainConfig(chain=name, schema_uid=LOCATION_V1_SCHEMA_UID)
        for name, chain_id in SUPPORTED_NETWORKS.items()
    }
    version = VersionConfig(
        schema_config=SchemaConfig(interface=dict(LOCATION_V1_SCHEMA_INTERFACE), raw_string=LOCATION_V1_SCHEMA_STRING),
        chains=chains,
    )
    return ProtocolConfig(versions={"v0.1": version})


def _version_key(name: str):
    """Sort key that orders ``v0.9`` before ``v0.10``."""
    return tuple(int(part) for part in re.findall(r"\d+", name)), name


def get_version_config(config: ProtocolConfig, version: Optional[str] = None) -> VersionConfig:
    """The requested version, or the latest one when ``version`` is None."""
    available = sorted(config.versions, key=_version_key)
    if not available:
        raise ConfigurationError("No protocol configuration versions available", {"availableVersions": available})
    if version is None:
        return config.versions[available[-1]]
    if version not in config.versions:
        raise ConfigurationError(
            f"Protocol configuration version '{version}' not found",
            {"requestedVersion": version, "availableVersions": available},
        )
    return config.versions[version]


def get_chain_config(config: ProtocolConfig, chain_id: int, version: Optional[str] = None) -> ChainConfig:
    version_config = get_version_config(config, version)
    chain = version_config.chains.get(str(chain_id))
    if chain is None:
        raise ConfigurationError(
            f"Chain ID {chain_id} is not supported by the configuration",
            {"requestedChainId": chain_id, "supportedChains": sorted(version_config.chains), "version": version or "latest"},
        )
    return chain


def get_chain_id(config: ProtocolConfig, chain_name: str, version: Optional[str] = None) -> int:
    version_config = get_version_config(config, version)
    for chain_id, chain in version_config.chains.items():
        if chain.chain.lower() == chain_name.lower():
            return int(chain_id)
    raise ConfigurationError(
        f"Chain '{chain_name}' is not supported by the configuration",
        {
            "requestedChain": chain_name,
            "supportedChains": sorted(c.chain for c in version_config.chains.values()),
            "version": version or "latest",
        },
    )


def get_chain_config_by_name(config: ProtocolConfig, chain_name: str, version: Optional[str] = None) -> ChainConfig:
    return get_chain_config(config, get_chain_id(config, chain_name, version), version)


def get_supported_chain_ids(config: ProtocolConfig, version: Optional[str] = None) -> List[int]:
    return sorted(int(c) for c in get_version_config(config, version).chains)


def get_supported_chain_names(config: ProtocolConfig, version: Optional[str] = None) -> List[str]:
    return sorted(c.chain for c in get_version_config(config, version).chains.values())


def get_schema_config(config: ProtocolConfig, version: Optional[str] = None) -> SchemaConfig:
    return get_version_config(config, version).schema_config


def get_schema_string(config: ProtocolConfig, version: Optional[str] = None) -> str:
    raw = get_schema_config(config, version).raw_string
    if not raw:
        raise ConfigurationError("Schema string not found in configuration", {"version": version or "latest"})
    return raw


def get_schema_uid(config: ProtocolConfig, chain: Union[int, str], version: Optional[str] = None) -> str:
    if isinstance(chain, int):
        return get_chain_config(config, chain, version).schema_uid
    return get_chain_config_by_name(config, chain, version).schema_uid


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    config_path: Optional[str] = None
    default_chain: str = "sepolia"
    schema_version: Optional[str] = None
    strict_schema_validation: bool = False

    def config_source(self) -> ConfigSource:
        if self.config_path:
            return FileConfigSource(self.config_path)
        return StaticConfigSource()


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    if env_file:
        dotenv.load_dotenv(env_file)
    settings = Settings(
        config_path=os.environ.get("GEOATTEST_CONFIG_PATH") or None,
        default_chain=os.environ.get("GEOATTEST_DEFAULT_CHAIN", "sepolia"),
        schema_version=os.environ.get("GEOATTEST_SCHEMA_VERSION") or None,
        strict_schema_validation=os.environ.get("GEOATTEST_STRICT_SCHEMA", "0").strip().lower() in _TRUE,
    )
    logger.debug("settings loaded: %s", settings)
    return settings
