"""
richedit Kernel — Host Registry

The editor never talks to the host environment directly. Every collaborator
is held by an explicit Host object passed in at construction:

  view            — applies state patches to the live view (write only)
  parser          — markup string → list of nodes
  picker          — asks the user for a resource URL (optional)
  measure         — reports rendered geometry (optional)
  post_processors — final markup transforms, run newest first

Also validates what the picker hands back before it reaches the tree.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, TypeAdapter

from richedit.kernel.types import Node, Rect

# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------

Parser = Callable[[str], list[Node]]

# kind ("img", "link", "video", "audio") → str | list[str] | labeled dict.
# Raising means the user cancelled.
ResourcePicker = Callable[[str], Awaitable[Any]]

Measure = Callable[[], Awaitable[Rect]]

PostProcessor = Callable[[str], "str | None"]


class ViewBinder(Protocol):
    """
    Host view layer. apply() may return an awaitable that resolves once
    rendering settles; the editor awaits or schedules it.
    """

    def apply(self, patch: dict[str, Any]) -> Awaitable[Any] | None: ...


class EditSession(Protocol):
    """An active cursor/selection context that takes over insertion."""

    def insert(self, node: Node) -> None: ...


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass
class Host:
    """Ordered collaborator references for one editor instance."""

    view: ViewBinder
    parser: Parser | None = None
    picker: ResourcePicker | None = None
    measure: Measure | None = None
    post_processors: list[PostProcessor] = field(default_factory=list)

    @property
    def can_pick(self) -> bool:
        return self.picker is not None

    def register_post_processor(self, processor: PostProcessor) -> None:
        """Register a markup transform. Later registrations run first."""
        self.post_processors.append(processor)


# ---------------------------------------------------------------------------
# Picker results
# ---------------------------------------------------------------------------


class LabeledSource(BaseModel):
    """
    A picker result that carries its own src plus extra attributes,
    e.g. {"src": "a.mp3", "name": "Track", "author": "Someone"}.
    """

    model_config = ConfigDict(extra="allow")

    src: str | list[str]


_URL = TypeAdapter(str)
_SOURCES = TypeAdapter(str | list[str])


def picked_url(value: Any) -> str:
    """Validate a single-URL picker result (img, link)."""
    return _URL.validate_python(value)


def picked_sources(value: Any) -> list[str]:
    """Validate a media picker result and normalize it to a source list."""
    sources = _SOURCES.validate_python(value)
    return [sources] if isinstance(sources, str) else list(sources)


def picked_labeled(value: Any) -> tuple[list[str], dict[str, Any]]:
    """
    Split an audio picker result into (sources, extra attributes).
    Plain strings and lists carry no extra attributes.
    """
    if isinstance(value, dict) and value.get("src"):
        labeled = LabeledSource.model_validate(value)
        extra = {k: v for k, v in (labeled.model_extra or {}).items() if v is not None}
        return picked_sources(labeled.src), extra
    return picked_sources(value), {}
