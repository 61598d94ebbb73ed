from __future__ import annotations

import pytest

from app.mappers.json_path import (
    WILDCARD,
    InvalidPathError,
    PathNotFoundError,
    evaluate,
    parse_path,
)


DOCUMENT = {
    "collection": [
        {"uri": "user-1", "profile": {"name": "Ada"}, "tags": ["a", "b"]},
        {"uri": "user-2", "profile": {"name": "Grace"}, "tags": []},
        {"uri": "user-3"},
    ],
    "meta": {"next page": None, "count": 3},
}


def test_parse_path_tokens() -> None:
    assert parse_path("$") == ()
    assert parse_path("$.collection[0].uri") == ("collection", 0, "uri")
    assert parse_path("$['next page']") == ("next page",)
    assert parse_path("$.items[*].id") == ("items", WILDCARD, "id")
    assert parse_path("$.*") == (WILDCARD,)


def test_root_returns_whole_document() -> None:
    assert evaluate(DOCUMENT, "$") is DOCUMENT


def test_nested_member_and_index() -> None:
    assert evaluate(DOCUMENT, "$.collection[1].profile.name") == "Grace"
    assert evaluate(DOCUMENT, "$.collection[-1].uri") == "user-3"


def test_quoted_member_with_explicit_null() -> None:
    assert evaluate(DOCUMENT, "$.meta['next page']") is None


def test_wildcard_collects_and_skips_missing() -> None:
    assert evaluate(DOCUMENT, "$.collection[*].uri") == ["user-1", "user-2", "user-3"]
    assert evaluate(DOCUMENT, "$.collection[*].profile.name") == ["Ada", "Grace"]


def test_missing_member_raises() -> None:
    with pytest.raises(PathNotFoundError):
        evaluate({"name": "John Doe"}, "$.uri")


def test_index_out_of_range_raises() -> None:
    with pytest.raises(PathNotFoundError):
        evaluate(DOCUMENT, "$.collection[10]")


def test_type_mismatch_raises() -> None:
    with pytest.raises(PathNotFoundError):
        evaluate(DOCUMENT, "$.meta[0]")
    with pytest.raises(PathNotFoundError):
        evaluate(DOCUMENT, "$.meta.count.value")


@pytest.mark.parametrize(
    "path",
    ["collection", "$..uri", "$.", "$[abc]", "$['unterminated", "$.a[0"],
)
def test_invalid_paths_rejected(path: str) -> None:
    with pytest.raises(InvalidPathError):
        parse_path(path)
