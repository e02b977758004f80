import logging
import sys

import pytest

from geoattest.errors import ExtensionError, ExtensionLoadError, ExtensionNotFoundError
from geoattest.extensions.base import RecipeExtension
from geoattest.extensions.formats import CoordinateExtension, GeoJSONExtension
from geoattest.extensions.media import ImageExtension
from geoattest.extensions.registry import BUILTIN_EXTENSIONS, ExtensionRegistry

from formats_for_tests import BrokenFormat, PointDictFormat

REGISTRY_LOGGER = "geoattest.extensions.registry"


def _warnings(caplog):
    return [r for r in caplog.records if r.name == REGISTRY_LOGGER and r.levelno == logging.WARNING]


class ShadowGeoJSON(PointDictFormat):
    id = "test:location:shadow-geojson"
    location_type = "geojson"


def test_builtins_registered_synchronously(registry):
    registry.wait_until_ready()
    assert [f.location_type for f in registry.get_all_formats()] == ["geojson", "coordinate"]
    assert registry.get_schema("location") is not None
    assert registry.get_media("image/png").id == "astral:media:image"
    assert registry.get_media("application/json").id == "astral:media:application"
    assert len(BUILTIN_EXTENSIONS) == 7


def test_empty_registry(empty_registry):
    assert empty_registry.get_all_formats() == []
    assert empty_registry.get_format("geojson") is None
    assert empty_registry.get_media("image/png") is None
    assert empty_registry.get_schema("location") is None
    assert empty_registry.get_recipe("anything") is None
    assert empty_registry.detect_format({"type": "Point", "coordinates": [0, 0]}) is None


def test_format_lookup_uses_base_format(registry):
    assert registry.get_format("geojson-point").id == "astral:location:geojson"
    assert registry.get_format("wkt") is None


def test_replacement_warns_once_and_second_wins(empty_registry, capture_logs):
    caplog = capture_logs(REGISTRY_LOGGER)
    first, second = GeoJSONExtension(), ShadowGeoJSON()
    empty_registry.register_format(first)
    empty_registry.register_format(second)

    warnings = _warnings(caplog)
    assert len(warnings) == 1
    message = warnings[0].getMessage()
    assert first.id in message and second.id in message
    assert empty_registry.get_format("geojson") is second
    assert empty_registry.get_all_formats() == [second]


def test_same_id_reregistration_is_silent(empty_registry, capture_logs):
    caplog = capture_logs(REGISTRY_LOGGER)
    empty_registry.register_format(GeoJSONExtension())
    replacement = GeoJSONExtension()
    empty_registry.register_format(replacement)
    assert _warnings(caplog) == []
    assert empty_registry.get_format("geojson") is replacement


def test_replacing_builtin_keeps_position(registry):
    registry.register_format(ShadowGeoJSON())
    assert [f.id for f in registry.get_all_formats()] == ["test:location:shadow-geojson", "astral:location:coordinate"]


def test_invalid_extension_is_not_registered(empty_registry):
    with pytest.raises(ExtensionError):
        empty_registry.register_format(BrokenFormat())
    assert empty_registry.get_format("broken") is None


def test_detection_follows_registration_order(empty_registry, sf_point):
    empty_registry.register_format(GeoJSONExtension())
    empty_registry.register_format(PointDictFormat())
    assert empty_registry.detect_format(sf_point) == "geojson"

    reversed_registry = ExtensionRegistry(register_builtins=False)
    reversed_registry.register_format(PointDictFormat())
    reversed_registry.register_format(GeoJSONExtension())
    assert reversed_registry.detect_format(sf_point) == "pointdict"


def test_detect_builtins(registry, square_polygon):
    assert registry.detect_format(square_polygon) == "geojson"
    assert registry.detect_format([13.4, 52.5]) == "coordinate"
    assert registry.detect_format("somewhere") is None


def test_detect_rejects_feature_nested_in_collection(registry):
    nested = {"type": "GeometryCollection", "geometries": [{"type": "Feature", "geometry": None, "properties": {}}]}
    assert registry.detect_format(nested) is None


def test_media_registered_under_every_type(empty_registry):
    image = ImageExtension()
    empty_registry.register_media(image)
    for media_type in image.supported_media_types:
        assert empty_registry.get_media(media_type) is image
    assert empty_registry.get_all_media() == [image]


def test_require_raises_with_available_keys(registry):
    with pytest.raises(ExtensionNotFoundError) as excinfo:
        registry.require_format("wkt")
    assert excinfo.value.context["available"] == ["geojson", "coordinate"]

    with pytest.raises(ExtensionNotFoundError) as excinfo:
        registry.require_media("image/bmp")
    assert "image/png" in excinfo.value.context["available"]

    with pytest.raises(ExtensionNotFoundError):
        registry.require_schema("weather")
    assert registry.require_schema("location").schema_type == "location"


def test_register_dispatches_on_capability(empty_registry):
    empty_registry.register(CoordinateExtension())
    empty_registry.register(ImageExtension())
    assert empty_registry.get_format("coordinate") is not None
    assert empty_registry.get_media("image/gif") is not None
    with pytest.raises(ExtensionError):
        empty_registry.register(object())


def test_builtin_failure_raised_once(capture_logs):
    caplog = capture_logs(REGISTRY_LOGGER)

    def _fail(source, version):
        raise RuntimeError("cannot build")

    registry = ExtensionRegistry(builtins=[("geojson", lambda s, v: GeoJSONExtension()), ("broken", _fail)])
    assert registry.get_format("geojson") is not None
    assert len(_warnings(caplog)) == 1

    with pytest.raises(ExtensionLoadError) as excinfo:
        registry.wait_until_ready()
    assert excinfo.value.context["extension"] == "broken"
    assert isinstance(excinfo.value.__cause__, RuntimeError)

    # the failure is cleared after being reported
    registry.wait_until_ready()


def test_load_extensions_from_module(empty_registry, tmp_path, monkeypatch, sf_point):
    (tmp_path / "geoattest_test_plugin.py").write_text(
        "from formats_for_tests import PointDictFormat\nEXTENSIONS = [PointDictFormat()]\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "geoattest_test_plugin", raising=False)

    loaded = empty_registry.load_extensions("geoattest_test_plugin")
    assert [ext.id for ext in loaded] == ["test:location:pointdict"]
    empty_registry.wait_until_ready()
    assert empty_registry.detect_format(sf_point) == "pointdict"


def test_load_extensions_failure_is_pending(empty_registry):
    assert empty_registry.load_extensions("geoattest_no_such_module") == []
    assert empty_registry.has_pending_failure
    with pytest.raises(ExtensionLoadError):
        empty_registry.wait_until_ready()
    assert not empty_registry.has_pending_failure
    empty_registry.wait_until_ready()


class NoopRecipe(RecipeExtension):
    id = "test:recipe:noop"
    name = "No-op recipe"
    description = "Recipe that stores raw bytes"
    recipe_type = "noop"

    def validate(self) -> bool:
        return True

    def validate_recipe(self, recipe_data):
        return isinstance(recipe_data, bytes)

    def recipe_to_bytes(self, recipe_data):
        return recipe_data

    def parse_recipe_bytes(self, recipe_bytes):
        return recipe_bytes


def test_recipes_are_registered_by_type(registry):
    assert registry.get_all_recipes() == []
    recipe = NoopRecipe()
    registry.register_recipe(recipe)
    assert registry.get_recipe("noop") is recipe
    assert registry.get_all_recipes() == [recipe]
