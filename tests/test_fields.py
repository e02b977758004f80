import pytest

from geoattest.schemas.fields import (
    SchemaField,
    get_schema_field_names,
    is_valid_identifier,
    is_valid_solidity_type,
    parse_schema_string,
)


def test_parse_two_fields_in_order():
    fields = parse_schema_string("uint256 eventTimestamp,string srs")
    assert fields == [
        SchemaField(type="uint256", name="eventTimestamp"),
        SchemaField(type="string", name="srs"),
    ]


def test_parse_tolerates_extra_whitespace():
    fields = parse_schema_string("  uint8 specVersion ,  string   location ")
    assert [(f.type, f.name) for f in fields] == [("uint8", "specVersion"), ("string", "location")]


@pytest.mark.parametrize("raw", ["badfield", "", "   ", "string a,uint256", "string a b", "string a,,string b"])
def test_parse_failure_returns_none(raw):
    assert parse_schema_string(raw) is None


def test_parse_is_syntactic_only():
    # unknown types still parse; the conformance checker reports them
    fields = parse_schema_string("float32 x")
    assert fields == [SchemaField(type="float32", name="x")]


def test_array_field_properties():
    field = SchemaField(type="string[]", name="mediaType")
    assert field.is_array
    assert field.base_type == "string"
    assert not SchemaField(type="bytes", name="x").is_array


@pytest.mark.parametrize(
    "type_str",
    ["uint8", "uint256", "int16", "int256", "address", "bool", "string", "bytes", "bytes1", "bytes32", "bytes[]", "uint64[]"],
)
def test_valid_solidity_types(type_str):
    assert is_valid_solidity_type(type_str)


@pytest.mark.parametrize("type_str", ["uint7", "uint512", "int0", "bytes0", "bytes33", "float", "string[][]", "uint"])
def test_invalid_solidity_types(type_str):
    assert not is_valid_solidity_type(type_str)


def test_identifiers():
    assert is_valid_identifier("eventTimestamp")
    assert is_valid_identifier("_private1")
    assert not is_valid_identifier("1st")
    assert not is_valid_identifier("has-dash")


def test_field_names():
    assert get_schema_field_names("uint256 eventTimestamp,string srs") == ["eventTimestamp", "srs"]
    assert get_schema_field_names("broken") == []
