import logging
import os
from typing import Any, Callable, Dict, List, Tuple

import pytest

# tests/conftest.py

# keep a developer's .env from leaking into test runs
os.environ.setdefault("GEOATTEST_STRICT_SCHEMA", "0")
os.environ.pop("GEOATTEST_CONFIG_PATH", None)

from geoattest.config import StaticConfigSource
from geoattest.extensions.registry import ExtensionRegistry


@pytest.fixture
def registry() -> ExtensionRegistry:
    """Registry with every built-in extension registered."""
    return ExtensionRegistry(config_source=StaticConfigSource())


@pytest.fixture
def empty_registry() -> ExtensionRegistry:
    return ExtensionRegistry(register_builtins=False)


@pytest.fixture
def capture_logs(caplog) -> Callable[[str], Any]:
    """
    Attach pytest's capture handler to a named geoattest logger.

    Package loggers do not propagate to the root logger, so caplog only sees
    their records when its handler is added directly.
    Usage: logs = capture_logs("geoattest.extensions.registry")
    """
    attached: List[Tuple[logging.Logger, logging.Handler]] = []

    def _attach(name: str):
        logger = logging.getLogger(name)
        logger.addHandler(caplog.handler)
        attached.append((logger, caplog.handler))
        return caplog

    yield _attach
    for logger, handler in attached:
        logger.removeHandler(handler)


@pytest.fixture
def sf_point() -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [-122.4194, 37.7749]}


@pytest.fixture
def square_polygon() -> Dict[str, Any]:
    return {
        "type": "Polygon",
        "coordinates": [[[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.0, 0.0]]],
    }
