from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Protocol, Tuple

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JSONPathError


@dataclass(frozen=True)
class Key:
    name: str


class Locator(Protocol):
    def parse(self, query: str) -> Any: ...

    def locate(self, tree: Any, query: str) -> Tuple[Any, bool]: ...


def resolve(tree: Any, segments: Tuple[Key, ...]) -> Tuple[Any, bool]:
    """Walk `segments` from the root. Returns (value, found)."""
    cur = tree
    for seg in segments:
        if not isinstance(cur, dict) or seg.name not in cur:
            return None, False
        cur = cur[seg.name]
    return cur, True


@lru_cache(maxsize=1024)
def compile_path(query: str):
    """Compile a JSONPath expression, e.g. "sensor.readings[0].temp" or "$.meta.unit"."""
    if not query:
        raise ValueError("empty query")
    try:
        return jsonpath_parse(query)
    except JSONPathError as e:
        raise ValueError(f"invalid JSONPath {query!r}: {e}") from None


class KeyLocator:
    """Exact top-level member lookup. The whole query is the key."""

    syntax = "key"

    def parse(self, query: str) -> Tuple[Key, ...]:
        if not query:
            raise ValueError("empty query")
        return (Key(query),)

    def locate(self, tree: Any, query: str) -> Tuple[Any, bool]:
        return resolve(tree, self.parse(query))


class PathLocator:
    """
    JSONPath lookup. A single match yields its value; several matches
    (wildcards, slices) yield the list of values, which the coercer rejects
    as a non-scalar.
    """

    syntax = "path"

    def parse(self, query: str):
        return compile_path(query)

    def locate(self, tree: Any, query: str) -> Tuple[Any, bool]:
        try:
            matches = self.parse(query).find(tree)
        except (KeyError, IndexError, TypeError):
            # index applied to a mapping or a scalar
            return None, False
        if not matches:
            return None, False
        if len(matches) == 1:
            return matches[0].value, True
        return [m.value for m in matches], True


LOCATORS: Dict[str, type] = {
    KeyLocator.syntax: KeyLocator,
    PathLocator.syntax: PathLocator,
}


def get_locator(syntax: str = "key") -> Locator:
    try:
        return LOCATORS[syntax]()
    except KeyError:
        raise ValueError(
            f"Unknown query syntax {syntax!r}. Choose one of {sorted(LOCATORS)}"
        ) from None
