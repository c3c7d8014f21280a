from __future__ import annotations

from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Mapping


def to_jsonable(obj: Any) -> Any:
    """
    Convert normalization results and models to JSON-serializable values.

    - objects exposing to_dict() use their wire shape (camelCase keys)
    - enums serialize to their value
    - other dataclasses fall back to asdict()
    """
    if obj is None or isinstance(obj, (bool, int, float)):
        return obj

    if isinstance(obj, Enum):
        return to_jsonable(obj.value)

    if isinstance(obj, str):
        return obj

    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_jsonable(to_dict())

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))

    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}

    # iterables (including set/frozenset/tuple/list)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((to_jsonable(x) for x in obj), key=str)

    # fallback: string representation
    return str(obj)
