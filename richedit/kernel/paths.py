"""
richedit Kernel — State Paths

View-binding paths address a value inside the editor state:

  "nodes"                          → the whole top-level node list
  "nodes[3]"                       → one top-level node
  "nodes[0].children[2].text"      → the text of a nested text node
  "nodes[1].attrs.style"           → an attribute value

Writes are copy-on-write: every container along the path is rebuilt and the
input state is never modified, so values held by the edit history stay intact.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any

_SEGMENT_RE = re.compile(r"([A-Za-z_][\w-]*)|\[(\d+)\]")


class PathError(ValueError):
    """Path is malformed or does not resolve against the state."""
    pass


def parse_path(path: str) -> list[str | int]:
    """
    Split a path into name and index segments.

      "nodes[0].children[2].text" → ["nodes", 0, "children", 2, "text"]
    """
    segments: list[str | int] = []
    pos = 0
    while pos < len(path):
        if segments and path[pos] == ".":
            pos += 1
            if pos == len(path):
                raise PathError(f"Path ends with a separator: {path!r}")
        match = _SEGMENT_RE.match(path, pos)
        if match is None:
            raise PathError(f"Malformed path {path!r} at offset {pos}")
        name, index = match.groups()
        segments.append(name if name is not None else int(index))
        pos = match.end()
    if not segments or not isinstance(segments[0], str):
        raise PathError(f"Path must start with a name: {path!r}")
    return segments


def get_path(state: dict[str, Any], path: str) -> Any:
    """Read the value at path. Raises PathError if it does not resolve."""
    value: Any = state
    for seg in parse_path(path):
        value = _step(value, seg, path)
    return value


def set_path(state: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a new state with value written at path."""
    return _assign(state, parse_path(path), value, path)


def apply_patch(state: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Apply every path → value pair of a view patch, in order."""
    for path, value in patch.items():
        state = set_path(state, path, value)
    return state


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _step(value: Any, seg: str | int, path: str) -> Any:
    if isinstance(seg, int):
        if isinstance(value, list) and seg < len(value):
            return value[seg]
        raise PathError(f"Index {seg} does not resolve in {path!r}")
    if isinstance(value, dict) and seg in value:
        return value[seg]
    if dataclasses.is_dataclass(value) and hasattr(value, seg):
        return getattr(value, seg)
    raise PathError(f"Key {seg!r} does not resolve in {path!r}")


def _assign(container: Any, segments: list[str | int], value: Any, path: str) -> Any:
    if not segments:
        return value
    head, rest = segments[0], segments[1:]

    if isinstance(container, list):
        if not isinstance(head, int):
            raise PathError(f"Expected an index after a list in {path!r}")
        items = list(container)
        if head < len(items):
            items[head] = _assign(items[head], rest, value, path)
        elif head == len(items) and not rest:
            items.append(value)
        else:
            raise PathError(f"Index {head} out of range in {path!r}")
        return items

    if isinstance(head, int):
        raise PathError(f"Index {head} applied to a non-list in {path!r}")

    if isinstance(container, dict):
        if rest and head not in container:
            raise PathError(f"Key {head!r} does not resolve in {path!r}")
        return {**container, head: _assign(container.get(head), rest, value, path)}

    if dataclasses.is_dataclass(container) and not isinstance(container, type):
        if head == "name":
            raise PathError(f"Element names are immutable; replace the node instead ({path!r})")
        if head not in {f.name for f in dataclasses.fields(container)}:
            raise PathError(f"Field {head!r} does not exist in {path!r}")
        current = getattr(container, head)
        return dataclasses.replace(container, **{head: _assign(current, rest, value, path)})

    raise PathError(f"Cannot descend into {type(container).__name__} at {head!r} in {path!r}")
