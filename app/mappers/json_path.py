"""
app/mappers/json_path.py

Minimal JSONPath evaluator used by field mappings.

Supported syntax:
    $                   - document root
    $.field             - member access
    $.parent.child      - nested member access
    $['field name']     - quoted member access
    $.items[0]          - list index (negative indexes count from the end)
    $.items[*].field    - wildcard, collects one value per element
    $.*                 - wildcard over object values

Unlike a lenient lookup, a missing member or index raises
``PathNotFoundError`` so callers can tell "absent" from an explicit JSON null.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Sequence, Union


class JsonPathError(ValueError):
    """
    Base class for path parsing and evaluation failures.
    """


class InvalidPathError(JsonPathError):
    """
    Raised when the expression itself cannot be parsed.
    """


class PathNotFoundError(JsonPathError):
    """
    Raised when the expression does not resolve against the document.
    """


class _Wildcard:
    def __repr__(self) -> str:
        return "*"


WILDCARD = _Wildcard()

PathToken = Union[str, int, _Wildcard]


@lru_cache(maxsize=512)
def parse_path(path: str) -> tuple[PathToken, ...]:
    """
    Tokenize a path expression into member names, indexes and wildcards.
    """

    if not isinstance(path, str):
        raise InvalidPathError(f"Path must be a string, got {type(path).__name__}.")

    text = path.strip()
    if not text.startswith("$"):
        raise InvalidPathError(f"Path must start with '$': {path!r}")

    tokens: list[PathToken] = []
    index = 1
    length = len(text)

    while index < length:
        char = text[index]
        if char == ".":
            index += 1
            if index < length and text[index] == ".":
                raise InvalidPathError(f"Recursive descent is not supported: {path!r}")
            start = index
            while index < length and text[index] not in ".[":
                index += 1
            name = text[start:index].strip()
            if not name:
                raise InvalidPathError(f"Empty member name in path: {path!r}")
            tokens.append(WILDCARD if name == "*" else name)
        elif char == "[":
            token, index = _parse_bracket(text, index, path)
            tokens.append(token)
        else:
            raise InvalidPathError(f"Unexpected character {char!r} at offset {index} in path: {path!r}")

    return tuple(tokens)


def _parse_bracket(text: str, start: int, path: str) -> tuple[PathToken, int]:
    inner_start = start + 1
    if inner_start < len(text) and text[inner_start] in ("'", '"'):
        quote = text[inner_start]
        close = text.find(quote, inner_start + 1)
        if close == -1 or close + 1 >= len(text) or text[close + 1] != "]":
            raise InvalidPathError(f"Unterminated quoted member in path: {path!r}")
        return text[inner_start + 1 : close], close + 2

    close = text.find("]", inner_start)
    if close == -1:
        raise InvalidPathError(f"Unterminated bracket in path: {path!r}")

    inner = text[inner_start:close].strip()
    if inner == "*":
        return WILDCARD, close + 1
    try:
        return int(inner), close + 1
    except ValueError as exc:
        raise InvalidPathError(f"Unsupported bracket expression [{inner}] in path: {path!r}") from exc


def evaluate(document: Any, path: str) -> Any:
    """
    Evaluate ``path`` against ``document`` and return the matched value.

    Raises InvalidPathError for malformed expressions and PathNotFoundError
    when a member or index does not exist or a step hits the wrong JSON type.
    """

    tokens = parse_path(path)
    return _walk(document, tokens, path)


def _walk(current: Any, tokens: Sequence[PathToken], path: str) -> Any:
    for position, token in enumerate(tokens):
        if token is WILDCARD:
            if isinstance(current, list):
                items = current
            elif isinstance(current, dict):
                items = list(current.values())
            else:
                raise PathNotFoundError(f"Wildcard applied to a scalar value in path: {path}")

            remaining = tokens[position + 1 :]
            collected: list[Any] = []
            for item in items:
                try:
                    collected.append(_walk(item, remaining, path))
                except PathNotFoundError:
                    continue
            return collected

        if isinstance(token, int):
            if not isinstance(current, list):
                raise PathNotFoundError(f"Index [{token}] applied to a non-list value in path: {path}")
            try:
                current = current[token]
            except IndexError as exc:
                raise PathNotFoundError(f"Index [{token}] out of range in path: {path}") from exc
            continue

        if not isinstance(current, dict):
            raise PathNotFoundError(f"Member '{token}' applied to a non-object value in path: {path}")
        if token not in current:
            raise PathNotFoundError(f"No results for path: {path}")
        current = current[token]

    return current
