from __future__ import annotations

import json

import pytest

from app.exceptions import FieldMappingError
from app.mappers.response_mapper import ResponseMapper


@pytest.fixture()
def mapper() -> ResponseMapper:
    return ResponseMapper()


def test_optional_field_uses_default(mapper, make_configuration) -> None:
    config = make_configuration(
        response_root_path="$.collection",
        mappings=[
            ("externalId", "$.uri", True),
            ("email", "$.email", False, "no-email@example.com"),
        ],
    )
    body = '{"collection":[{"uri":"user-123","name":"John Doe"}]}'

    records = mapper.map_response(body, config)

    assert records == [{"externalId": "user-123", "email": "no-email@example.com"}]


def test_required_field_missing_aborts_whole_response(mapper, make_configuration) -> None:
    config = make_configuration(
        response_root_path="$.collection",
        mappings=[("externalId", "$.uri", True)],
    )
    body = '{"collection":[{"uri":"user-1"},{"name":"John Doe"}]}'

    with pytest.raises(FieldMappingError) as exc_info:
        mapper.map_response(body, config)

    assert exc_info.value.field_name == "externalId"
    assert "Required field mapping failed: externalId" in str(exc_info.value)


def test_list_root_keeps_element_order(mapper, make_configuration) -> None:
    config = make_configuration(
        response_root_path="$.collection",
        mappings=[("externalId", "$.uri", True), ("name", "$.name", False)],
    )
    body = json.dumps({"collection": [{"uri": f"user-{i}", "name": f"User {i}"} for i in range(5)]})

    records = mapper.map_response(body, config)

    assert [record["externalId"] for record in records] == [f"user-{i}" for i in range(5)]
    assert records[3] == {"externalId": "user-3", "name": "User 3"}


def test_object_root_is_single_item(mapper, make_configuration) -> None:
    config = make_configuration(
        response_root_path="$.resource",
        mappings=[("externalId", "$.uri", True), ("timezone", "$.timezone", False)],
    )
    body = '{"resource":{"uri":"user-9","timezone":"Europe/Berlin"}}'

    assert mapper.map_response(body, config) == [{"externalId": "user-9", "timezone": "Europe/Berlin"}]


def test_blank_root_path_means_document_root(mapper, make_configuration) -> None:
    config = make_configuration(response_root_path="  ", mappings=[("externalId", "$.id", True)])

    assert mapper.map_response('[{"id":"a"},{"id":"b"}]', config) == [
        {"externalId": "a"},
        {"externalId": "b"},
    ]


def test_optional_field_without_default_is_omitted(mapper, make_configuration) -> None:
    config = make_configuration(mappings=[("externalId", "$.id", True), ("email", "$.email", False)])

    assert mapper.map_response('{"id":"a"}', config) == [{"externalId": "a"}]


def test_explicit_null_is_kept(mapper, make_configuration) -> None:
    config = make_configuration(mappings=[("externalId", "$.id", True), ("email", "$.email", False, "x@y")])

    assert mapper.map_response('{"id":"a","email":null}', config) == [{"externalId": "a", "email": None}]


def test_invalid_json_is_mapping_error(mapper, make_configuration) -> None:
    config = make_configuration(source_name="broken", mappings=[("externalId", "$.id", True)])

    with pytest.raises(FieldMappingError, match="Failed to parse response for source: broken"):
        mapper.map_response("<html>oops</html>", config)


def test_unresolvable_root_is_mapping_error(mapper, make_configuration) -> None:
    config = make_configuration(response_root_path="$.collection", mappings=[("externalId", "$.id", True)])

    with pytest.raises(FieldMappingError):
        mapper.map_response('{"data":[]}', config)


def test_empty_list_root_yields_no_records(mapper, make_configuration) -> None:
    config = make_configuration(response_root_path="$.collection", mappings=[("externalId", "$.uri", True)])

    assert mapper.map_response('{"collection":[]}', config) == []
