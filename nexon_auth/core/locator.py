"""
Field lookup for nested request data.

Field names use bracket segments, so `user[credentials][password]` walks
key `user`, then `credentials`, then `password`.
"""

import re
from typing import Any, Iterable, Mapping, Optional, Sequence

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def split_field(field: str) -> list[str]:
    """Split `a[b][c]` into `["a", "b", "c"]`."""
    return field.replace("]", "").split("[")


def lookup(data: Optional[Mapping[str, Any]], field: str) -> Any:
    """
    Return the first non-container value found along `field`.

    Returns None when `data` is None, when a segment is missing, or when the
    path ends on a mapping. Sequences are walked by integer index.
    """
    if data is None:
        return None

    current: Any = data
    for segment in split_field(field):
        if isinstance(current, Mapping):
            if segment not in current:
                return None
            value = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, str):
            if not segment.isdigit() or int(segment) >= len(current):
                return None
            value = current[int(segment)]
        else:
            return None

        if value is None:
            return None
        if not isinstance(value, (Mapping, list, tuple)):
            return value
        current = value

    return None


def lookup_first(
    field: str, *sources: Optional[Mapping[str, Any]]
) -> Any:
    """Look `field` up in each source in order; the first truthy value wins."""
    for source in sources:
        value = lookup(source, field)
        if value:
            return value
    return None


def expand_bracket_keys(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """
    Nest flat `key[sub]` pairs from a form or query string.

    `[("user[name]", "x"), ("plain", "y")]` becomes
    `{"user": {"name": "x"}, "plain": "y"}`. A repeated key keeps its last
    value. Keys that conflict with an existing scalar are kept flat.
    """
    result: dict[str, Any] = {}
    for key, value in items:
        head, _, rest = key.partition("[")
        if not rest or not head:
            result[key] = value
            continue

        path = [head] + _SEGMENT.findall("[" + rest)
        node = result
        for segment in path[:-1]:
            child = node.get(segment)
            if child is None:
                child = node[segment] = {}
            elif not isinstance(child, dict):
                node = None
                break
            node = child

        if node is None:
            result[key] = value
        else:
            node[path[-1]] = value

    return result
