"""Format conversion through the GeoJSON hub.

Any two registered formats convert via ``source -> hub -> target``, so no
format needs a direct converter to any other. When neither end is the hub,
the result is taken back to the hub and its coordinates compared with the
first hub value; a mismatch is logged, not raised.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from geoattest.errors import ExtensionError, ExtensionNotFoundError, ValidationError
from geoattest.extensions.base import FormatExtension, base_format, format_keys
from geoattest.extensions.formats.geojson import (
    HUB_FORMAT,
    CoordinateComparison,
    check_coordinate_preservation,
    exact_match,
)
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())


def _find(extensions: List[FormatExtension], location_type: str) -> Optional[FormatExtension]:
    key = base_format(location_type)
    for ext in extensions:
        if ext.location_type == key:
            return ext
    return None


def detect_format(value: Any, extensions: Iterable[FormatExtension]) -> Optional[str]:
    """Location type of the first extension (in the given order) accepting ``value``."""
    for ext in extensions:
        if ext.validate_location(value):
            return ext.location_type
    return None


def convert_format(
    value: Any,
    source_format: str,
    target_format: str,
    extensions: Iterable[FormatExtension],
    comparison: CoordinateComparison = exact_match,
) -> Any:
    """Convert ``value`` from ``source_format`` to ``target_format``.

    Identical formats return ``value`` itself. Validation errors from the
    extensions and ExtensionNotFoundError propagate unchanged; anything else
    raised by an extension is re-raised as ExtensionError.
    """
    if source_format == target_format:
        return value

    extensions = list(extensions)
    source = _find(extensions, source_format)
    if source is None:
        raise ExtensionNotFoundError(
            f"No extension found for source format: {source_format}",
            {"sourceFormat": source_format, "available": format_keys(extensions)},
        )
    target = _find(extensions, target_format)
    if target is None:
        raise ExtensionNotFoundError(
            f"No extension found for target format: {target_format}",
            {"targetFormat": target_format, "available": format_keys(extensions)},
        )

    logger.debug("converting %s -> %s via %s", source_format, target_format, HUB_FORMAT)
    try:
        hub_value = source.to_hub(value)
        if target.location_type == HUB_FORMAT:
            return hub_value

        converted = target.from_hub(hub_value)

        if source.location_type != HUB_FORMAT:
            reconverted = target.to_hub(converted)
            if not check_coordinate_preservation(hub_value, reconverted, comparison):
                logger.warning(
                    "Coordinate values changed during conversion from %s to %s. "
                    "This may indicate precision loss or data transformation.",
                    source_format,
                    target_format,
                )
        return converted
    except (ValidationError, ExtensionError):
        raise
    except Exception as e:
        raise ExtensionError(
            f"Failed to convert from {source_format} to {target_format}",
            {"sourceFormat": source_format, "targetFormat": target_format, "error": str(e)},
        ) from e
