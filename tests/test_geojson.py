import json

import pytest

from geoattest.errors import LocationValidationError
from geoattest.extensions.formats.geojson import (
    GeoJSONExtension,
    check_coordinate_preservation,
    extract_coordinates,
    within_tolerance,
)

ext = GeoJSONExtension()

LINE = {"type": "LineString", "coordinates": [[0, 0], [1, 1], [2, 1]]}
MULTI_POINT = {"type": "MultiPoint", "coordinates": [[10, 10], [20, 20, 5]]}
MULTI_LINE = {"type": "MultiLineString", "coordinates": [[[0, 0], [1, 1]], [[2, 2], [3, 3]]]}
MULTI_POLYGON = {
    "type": "MultiPolygon",
    "coordinates": [[[[0, 0], [1, 0], [1, 1], [0, 0]]], [[[5, 5], [6, 5], [6, 6], [5, 5]]]],
}


def _feature(geometry, properties=None):
    return {"type": "Feature", "geometry": geometry, "properties": properties}


def test_all_shapes_validate(sf_point, square_polygon):
    collection = {"type": "GeometryCollection", "geometries": [sf_point, LINE]}
    features = {"type": "FeatureCollection", "features": [_feature(sf_point, {"name": "sf"}), _feature(square_polygon)]}
    for value in (sf_point, LINE, square_polygon, MULTI_POINT, MULTI_LINE, MULTI_POLYGON, collection, _feature(sf_point), features):
        assert ext.validate_location(value), value["type"]


@pytest.mark.parametrize("coords", [[181, 0], [-181, 0], [0, 91], [0, -91]])
def test_out_of_range_point_rejected(coords):
    assert not ext.validate_location({"type": "Point", "coordinates": coords})


@pytest.mark.parametrize("coords", [[180, 90], [-180, -90], [180, -90]])
def test_boundary_point_accepted(coords):
    assert ext.validate_location({"type": "Point", "coordinates": coords})


def test_open_ring_rejected_and_closed_ring_accepted():
    ring = [[0, 0], [1, 0], [1, 1], [0, 1]]
    assert not ext.validate_location({"type": "Polygon", "coordinates": [ring + [[0, 0.5]]]})
    assert ext.validate_location({"type": "Polygon", "coordinates": [ring + [[0, 0]]]})


def test_short_ring_rejected():
    assert not ext.validate_location({"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [0, 0]]]})


def test_out_of_range_in_nested_feature_rejected():
    bad = {"type": "FeatureCollection", "features": [_feature({"type": "Point", "coordinates": [0, 95]})]}
    assert not ext.validate_location(bad)


@pytest.mark.parametrize(
    "value",
    [None, "Point", [1, 2], {"type": "Circle", "coordinates": [0, 0]}, {"type": "Point"}, {"type": "Point", "coordinates": [True, 1]}],
)
def test_non_geojson_rejected(value):
    assert not ext.validate_location(value)


def test_string_round_trip(sf_point, square_polygon):
    for value in (sf_point, square_polygon, MULTI_POLYGON, _feature(LINE, {"a": 1})):
        assert ext.from_string(ext.to_string(value)) == value


def test_to_string_is_compact(sf_point):
    assert ext.to_string(sf_point) == '{"type":"Point","coordinates":[-122.4194,37.7749]}'


def test_to_string_rejects_invalid():
    with pytest.raises(LocationValidationError):
        ext.to_string({"type": "Point", "coordinates": [200, 0]})


@pytest.mark.parametrize("text", ["{not json", '{"type":"Point","coordinates":[0,100]}', "42"])
def test_from_string_rejects_invalid(text):
    with pytest.raises(LocationValidationError):
        ext.from_string(text)


def test_hub_is_identity(sf_point):
    assert ext.to_hub(sf_point) is sf_point
    assert ext.from_hub(sf_point) is sf_point


def test_extract_coordinates_flattens_in_order(sf_point):
    collection = {
        "type": "FeatureCollection",
        "features": [_feature(sf_point), _feature({"type": "GeometryCollection", "geometries": [LINE]})],
    }
    assert extract_coordinates(collection) == [[-122.4194, 37.7749], [0, 0], [1, 1], [2, 1]]


def test_check_preservation_exact(sf_point):
    assert ext.check_preservation(sf_point, {"type": "Point", "coordinates": [-122.4194, 37.7749]})
    assert not ext.check_preservation(sf_point, {"type": "Point", "coordinates": [-122.4194, 37.77490001]})


def test_check_preservation_structural_mismatch(sf_point):
    assert not ext.check_preservation(sf_point, LINE)
    assert not ext.check_preservation(sf_point, None)
    assert not ext.check_preservation(None, sf_point)
    assert not ext.check_preservation([1, 2], [1, 2])


def test_check_preservation_with_tolerance(sf_point):
    drifted = {"type": "Point", "coordinates": [-122.41940001, 37.7749]}
    assert not check_coordinate_preservation(sf_point, drifted)
    assert check_coordinate_preservation(sf_point, drifted, within_tolerance(1e-6))


def test_negative_tolerance_rejected():
    with pytest.raises(ValueError):
        within_tolerance(-1)


def test_metadata():
    meta = ext.get_metadata()
    assert meta.id == "astral:location:geojson"
    assert meta.type == "GeoJSONExtension"
    assert ext.validate()


def test_self_intersecting_polygon_rejected():
    bowtie = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]}
    assert not ext.validate_location(bowtie)
    assert not ext.validate_location(_feature(bowtie))
    with pytest.raises(LocationValidationError):
        ext.to_string(bowtie)


def test_overlapping_multipolygon_rejected(square_polygon):
    shifted = [[[0.5, 0.5], [1.5, 0.5], [1.5, 1.5], [0.5, 1.5], [0.5, 0.5]]]
    value = {"type": "MultiPolygon", "coordinates": [square_polygon["coordinates"], shifted]}
    assert not ext.validate_location(value)


def test_mixed_dimension_positions_accepted():
    assert ext.validate_location({"type": "LineString", "coordinates": [[0, 0], [1, 1, 12.5]]})


NESTED_FEATURE = _feature(None, {})
NESTED_COLLECTION = {"type": "FeatureCollection", "features": [NESTED_FEATURE]}


@pytest.mark.parametrize(
    "value",
    [
        {"type": "GeometryCollection", "geometries": [NESTED_FEATURE]},
        {"type": "GeometryCollection", "geometries": [NESTED_COLLECTION]},
        _feature(_feature({"type": "Point", "coordinates": [0, 0]})),
        {"type": "FeatureCollection", "features": [NESTED_COLLECTION]},
    ],
)
def test_features_in_geometry_position_rejected(value):
    assert not ext.validate_location(value)
    with pytest.raises(LocationValidationError):
        ext.to_string(value)
    with pytest.raises(LocationValidationError):
        ext.to_hub(value)
    with pytest.raises(LocationValidationError):
        ext.from_string(json.dumps(value))
    with pytest.raises(LocationValidationError):
        extract_coordinates(value)
    assert not ext.check_preservation(value, value)


def test_tuple_positions_rejected():
    assert not ext.validate_location({"type": "Point", "coordinates": (0, 0)})
