"""snake_case <-> camelCase helpers for request shaping."""
from __future__ import annotations

import re
from typing import Any, Mapping

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def camelize_keys(data: Mapping[str, Any], *, drop_none: bool = True) -> dict[str, Any]:
    """Shallow key conversion; ``None`` values are dropped by default."""
    return {
        to_camel(key): value
        for key, value in data.items()
        if not (drop_none and value is None)
    }
