"""Extension registry.

The registry owns four independent key -> extension mappings:

- formats, keyed by base format (``geojson-point`` resolves to ``geojson``)
- media, keyed by exact MIME type; one instance sits under every MIME type it supports
- schemas, keyed by schema type
- recipes, keyed by recipe type

Every mapping keeps registration order, and ``detect_format`` returns the
first registered format that accepts a value, so the order formats are
registered in decides ambiguous detections.

Built-in extensions are registered synchronously from ``BUILTIN_EXTENSIONS``
while the registry is constructed. Optional extension modules can be pulled
in with ``load_extensions``. A failure in either path is logged and held as
a pending failure that the next ``wait_until_ready()`` call raises once.
"""

from __future__ import annotations

import importlib
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from geoattest.config import ConfigSource, StaticConfigSource
from geoattest.errors import ExtensionError, ExtensionLoadError, ExtensionNotFoundError
from geoattest.extensions.base import (
    BaseExtension,
    FormatExtension,
    MediaExtension,
    RecipeExtension,
    SchemaExtension,
    base_format,
)
from geoattest.extensions.conversion import detect_format as detect_first_format
from geoattest.extensions.formats import CoordinateExtension, GeoJSONExtension
from geoattest.extensions.media import ApplicationExtension, AudioExtension, ImageExtension, VideoExtension
from geoattest.extensions.schema.location import LocationSchemaExtension
from geoattest.utils.logger_util import get_logger, level_from_env

logger = get_logger(__name__, level_from_env())

E = TypeVar("E", bound=BaseExtension)

# (label, factory(config_source, schema_version)); registration order matters
# for format detection
ExtensionFactory = Callable[[ConfigSource, Optional[str]], BaseExtension]

BUILTIN_EXTENSIONS: Tuple[Tuple[str, ExtensionFactory], ...] = (
    ("geojson", lambda source, version: GeoJSONExtension()),
    ("coordinate", lambda source, version: CoordinateExtension()),
    ("image", lambda source, version: ImageExtension()),
    ("video", lambda source, version: VideoExtension()),
    ("audio", lambda source, version: AudioExtension()),
    ("application", lambda source, version: ApplicationExtension()),
    ("location-schema", lambda source, version: LocationSchemaExtension(source, version)),
)


class ExtensionRegistry:
    def __init__(
        self,
        register_builtins: bool = True,
        config_source: Optional[ConfigSource] = None,
        schema_version: Optional[str] = None,
        builtins: Optional[Sequence[Tuple[str, ExtensionFactory]]] = None,
    ):
        self.config_source = config_source or StaticConfigSource()
        self.schema_version = schema_version
        self._formats: Dict[str, FormatExtension] = {}
        self._media: Dict[str, MediaExtension] = {}
        self._schemas: Dict[str, SchemaExtension] = {}
        self._recipes: Dict[str, RecipeExtension] = {}
        self._pending_error: Optional[ExtensionLoadError] = None

        if register_builtins:
            self._register_builtins(BUILTIN_EXTENSIONS if builtins is None else builtins)

    # -- loading -----------------------------------------------------------

    def _register_builtins(self, table: Sequence[Tuple[str, ExtensionFactory]]):
        failures: List[str] = []
        for label, factory in table:
            try:
                self.register(factory(self.config_source, self.schema_version))
            except Exception as e:
                logger.warning("Failed to register built-in extension %s: %s", label, e)
                failures.append(label)
                self._hold_failure(
                    ExtensionLoadError(f"Failed to load built-in extension '{label}'", {"extension": label, "error": str(e)}),
                    e,
                )
        logger.debug(
            "built-in extensions registered: formats=%s media=%s schemas=%s failed=%s",
            list(self._formats),
            list(self._media),
            list(self._schemas),
            failures,
        )

    def _hold_failure(self, error: ExtensionLoadError, cause: BaseException):
        # keep the first failure; later ones are already in the log
        if self._pending_error is None:
            error.__cause__ = cause
            self._pending_error = error

    def load_extensions(self, *module_names: str) -> List[BaseExtension]:
        """Import modules and register every extension in their ``EXTENSIONS`` list.

        Returns the extensions that were registered. Failures are logged and
        surfaced by the next ``wait_until_ready()``.
        """
        loaded: List[BaseExtension] = []
        for module_name in module_names:
            try:
                module = importlib.import_module(module_name)
                extensions = getattr(module, "EXTENSIONS")
                for extension in extensions:
                    self.register(extension)
                    loaded.append(extension)
            except Exception as e:
                logger.warning("Failed to load extensions from %s: %s", module_name, e)
                self._hold_failure(
                    ExtensionLoadError(
                        f"Failed to load extensions from '{module_name}'",
                        {"module": module_name, "error": str(e)},
                    ),
                    e,
                )
        return loaded

    def wait_until_ready(self):
        """Raise the pending load failure, if any, exactly once."""
        error, self._pending_error = self._pending_error, None
        if error is not None:
            raise error

    @property
    def has_pending_failure(self) -> bool:
        return self._pending_error is not None

    # -- registration ------------------------------------------------------

    def _check(self, extension: BaseExtension, kind: str):
        try:
            ok = extension.validate()
        except Exception as e:
            raise ExtensionError(
                f"Invalid {kind} extension: {extension.id}", {"extensionId": extension.id, "error": str(e)}
            ) from e
        if not ok:
            raise ExtensionError(f"Invalid {kind} extension: {extension.id}", {"extensionId": extension.id})

    def _put(self, table: Dict[str, E], key: str, extension: E, kind: str):
        existing = table.get(key)
        if existing is not None and existing.id != extension.id:
            logger.warning(
                "Replacing %s extension for %s: %s -> %s", kind, key, existing.id, extension.id
            )
        table[key] = extension

    def register(self, extension: BaseExtension):
        """Register any extension under the capability it implements."""
        if isinstance(extension, FormatExtension):
            self.register_format(extension)
        elif isinstance(extension, MediaExtension):
            self.register_media(extension)
        elif isinstance(extension, SchemaExtension):
            self.register_schema(extension)
        elif isinstance(extension, RecipeExtension):
            self.register_recipe(extension)
        else:
            raise ExtensionError(f"Unknown extension kind: {type(extension).__name__}", {"extensionId": getattr(extension, "id", None)})

    def register_format(self, extension: FormatExtension):
        self._check(extension, "format")
        self._put(self._formats, base_format(extension.location_type), extension, "format")

    def register_media(self, extension: MediaExtension):
        self._check(extension, "media")
        for media_type in extension.supported_media_types:
            self._put(self._media, media_type, extension, "media")

    def register_schema(self, extension: SchemaExtension):
        self._check(extension, "schema")
        self._put(self._schemas, extension.schema_type, extension, "schema")

    def register_recipe(self, extension: RecipeExtension):
        self._check(extension, "recipe")
        self._put(self._recipes, extension.recipe_type, extension, "recipe")

    # -- lookup ------------------------------------------------------------

    def get_format(self, location_type: str) -> Optional[FormatExtension]:
        return self._formats.get(base_format(location_type))

    def get_media(self, media_type: str) -> Optional[MediaExtension]:
        return self._media.get(media_type)

    def get_schema(self, schema_type: str) -> Optional[SchemaExtension]:
        return self._schemas.get(schema_type)

    def get_recipe(self, recipe_type: str) -> Optional[RecipeExtension]:
        return self._recipes.get(recipe_type)

    def get_all_formats(self) -> List[FormatExtension]:
        return list(self._formats.values())

    def get_all_media(self) -> List[MediaExtension]:
        seen: Dict[str, MediaExtension] = {}
        for extension in self._media.values():
            seen.setdefault(extension.id, extension)
        return list(seen.values())

    def get_all_schemas(self) -> List[SchemaExtension]:
        return list(self._schemas.values())

    def get_all_recipes(self) -> List[RecipeExtension]:
        return list(self._recipes.values())

    def _require(self, found: Any, kind: str, key: str, available: List[str]):
        if found is None:
            raise ExtensionNotFoundError(
                f"No {kind} extension found for: {key}", {kind + "Key": key, "available": available}
            )
        return found

    def require_format(self, location_type: str) -> FormatExtension:
        return self._require(self.get_format(location_type), "format", location_type, list(self._formats))

    def require_media(self, media_type: str) -> MediaExtension:
        return self._require(self.get_media(media_type), "media", media_type, list(self._media))

    def require_schema(self, schema_type: str) -> SchemaExtension:
        return self._require(self.get_schema(schema_type), "schema", schema_type, list(self._schemas))

    def detect_format(self, value: Any) -> Optional[str]:
        detected = detect_first_format(value, self._formats.values())
        logger.debug("detected format: %s", detected)
        return detected
