from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Tuple

from .exceptions import NOT_SAVED_NOTICE, UnsupportedOptionError
from .schema import SchemaDefinition


def flatten_monitor(
    raw: Mapping[str, Any], opaque_paths: FrozenSet[str] = frozenset()
) -> Dict[str, Any]:
    """Flatten a raw monitor into dot-joined leaf paths, in first-seen order.

    Rules:
    - mappings recurse, unless their path is opaque (then the mapping is a leaf)
    - lists and scalars are leaves
    - empty mappings contribute nothing
    - dotted keys and nested objects spell the same path; the first one wins

    Time:  O(n) for n nodes in the input
    Space: O(n)

    Security notes:
    - Iterative (explicit stack), so nesting depth is bounded by memory, not
      by the interpreter recursion limit.
    """

    out: Dict[str, Any] = {}
    stack: List[Tuple[Iterator[Tuple[Any, Any]], str]] = [(iter(raw.items()), "")]
    while stack:
        items, prefix = stack[-1]
        for key, value in items:
            path = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, Mapping) and path not in opaque_paths:
                stack.append((iter(value.items()), path))
                break
            out.setdefault(path, value)
        else:
            stack.pop()
    return out


def detect_unsupported_keys(raw: Mapping[str, Any], schema: SchemaDefinition) -> List[str]:
    """Return every leaf path of raw that schema does not recognize."""

    recognized = schema.recognized_paths
    return [path for path in flatten_monitor(raw, schema.opaque_paths) if path not in recognized]


def unsupported_keys_error(
    unsupported: List[str], *, monitor_type: str, version: str
) -> UnsupportedOptionError:
    """Coalesce unsupported paths into one error, pipe-joined."""

    return UnsupportedOptionError(
        f"The following Heartbeat options are not supported for {monitor_type} project "
        f"monitors in {version}: {'|'.join(unsupported)}. {NOT_SAVED_NOTICE}"
    )
