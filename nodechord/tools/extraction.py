"""Field extraction from web-research results.

Projections fall through to the next candidate when a value is empty in the
loose sense (None, False, 0 or ""), so an empty list or mapping still counts
as present.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_INDEXED_SEGMENT = re.compile(r"^(\w+)\[(\d+)\]$")


def _present(value: Any) -> bool:
    if value is None or value is False or value == "":
        return False
    return not (isinstance(value, (int, float)) and value == 0)


def _either(value: Any, default: Any) -> Any:
    return value if _present(value) else default


def _key(data: Any, key: str) -> Any:
    if isinstance(data, Mapping):
        return data.get(key)
    return None


def _item(data: Any, index: int) -> Any:
    if isinstance(data, (list, tuple)) and -len(data) <= index < len(data):
        return data[index]
    if isinstance(data, Mapping):
        return data.get(index, data.get(str(index)))
    return None


def get_nested_value(obj: Any, path: str) -> Any:
    """Walk a dot path with optional ``name[index]`` segments.

    Returns None as soon as any link is missing.

    Example:
        >>> get_nested_value({"a": {"b": [{}, {"c": 1}]}}, "a.b[1].c")
        1
    """
    current = obj
    for part in path.split("."):
        match = _INDEXED_SEGMENT.match(part)
        if match:
            name, index = match.groups()
            current = _item(_key(current, name), int(index))
        elif isinstance(current, (list, tuple)) and part.isdigit():
            current = _item(current, int(part))
        else:
            current = _key(current, part)
        if current is None:
            break
    return current


def extract_field(data: Any, field: str, custom_path: str | None = None) -> Any:
    """Project a web-research result onto one field.

    Args:
        data: Backend result.
        field: ``full``, ``custom``, ``markdown``, ``html``, ``metadata``,
            ``results``, ``urls``, ``first``, ``json`` or any key of ``data``.
        custom_path: Dot path used when ``field`` is ``custom``.

    Returns:
        The projected value. ``full`` returns ``data`` itself.
    """
    if field == "full":
        return data
    if field == "custom" and custom_path:
        return get_nested_value(data, custom_path)

    if field in ("markdown", "html", "results"):
        return _either(_key(data, field), data)
    if field == "metadata":
        return _either(_key(data, "metadata"), {})
    if field == "urls":
        for key in ("results", "urls", "links"):
            candidate = _key(data, key)
            if isinstance(candidate, list):
                if key == "results":
                    return [_key(item, "url") for item in candidate]
                return candidate
        return data
    if field == "first":
        return _either(_item(_key(data, "results"), 0), _either(_item(data, 0), data))
    if field == "json":
        return _either(_key(data, "json"), _either(_key(data, "data"), data))
    return _either(_key(data, field), data)
