"""
richedit Kernel — Shared Types

Data classes used across history, editor, menu, and serializer.
These are the contracts that bind the kernel together.

A document is a list of nodes (there is no single root element):
- TextNode holds raw, unescaped text
- ElementNode holds a tag name, attributes, and optional children
- Media elements (video/audio) keep their sources in `src` until serialization
- Cells of a grid-table carry their row index in `r`
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Union

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

TAG_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


# ---------------------------------------------------------------------------
# Tag registries
# ---------------------------------------------------------------------------

# Literal "true" marker some parsers emit for boolean attributes
BOOL_MARKER = "T"

MEDIA_TAGS: set[str] = {"video", "audio"}

TABLE_FAMILY_TAGS: set[str] = {"table", "thead", "tbody", "tfoot", "tr", "th", "td"}

BLOCK_TAGS: set[str] = {"p", "div", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6"}

CELL_TAGS: set[str] = {"td", "th"}

# Resource kinds understood by the resource picker
RESOURCE_KINDS: set[str] = {"img", "link", "video", "audio"}


class NodeKind(enum.Enum):
    """Classification used by every tag-specific lookup table."""

    TEXT = "text"
    IMAGE = "image"
    LINK = "link"
    MEDIA = "media"
    DIV = "div"
    TABLE = "table"
    ELEMENT = "element"


_KIND_BY_TAG: dict[str, NodeKind] = {
    "img": NodeKind.IMAGE,
    "a": NodeKind.LINK,
    "video": NodeKind.MEDIA,
    "audio": NodeKind.MEDIA,
    "div": NodeKind.DIV,
    "table": NodeKind.TABLE,
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextNode:
    """A text leaf. `text` is raw and may contain characters that need escaping."""

    text: str


@dataclass(frozen=True)
class ElementNode:
    """
    A tagged element.

    children is None for elements without a content model (img, br, source).
    An empty list still gets a closing tag on output.
    """

    name: str
    attrs: dict[str, Any] = field(default_factory=dict)
    children: list[Node] | None = None
    src: list[str] | None = None
    r: int | None = None

    def __post_init__(self):
        if not TAG_PATTERN.match(self.name or ""):
            raise ValueError(f"Element name must be a lowercase tag identifier, got {self.name!r}")


Node = Union[TextNode, ElementNode]


@dataclass
class HistoryEntry:
    """A recorded (key, value) snapshot. value replaces the whole state at key."""

    key: str
    value: Any


@dataclass
class Rect:
    """Rendered geometry reported by the host's measure call."""

    top: float = 0.0
    height: float = 0.0
    left: float = 0.0
    width: float = 0.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def node_kind(node: Node) -> NodeKind:
    """Classify a node for table-driven dispatch."""
    if isinstance(node, TextNode):
        return NodeKind.TEXT
    return _KIND_BY_TAG.get(node.name, NodeKind.ELEMENT)


def empty_paragraph() -> ElementNode:
    """A paragraph holding one empty text child."""
    return ElementNode(name="p", attrs={}, children=[TextNode(text="")])


def empty_document() -> list[Node]:
    """
    The canonical empty document.
    A document is never represented as an empty list.
    """
    return [empty_paragraph()]


def is_truthy_attr(value: Any) -> bool:
    """True for the boolean marker forms: True or the literal "T"."""
    return value is True or value == BOOL_MARKER


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert a node to the plain dict shape host views consume."""
    if isinstance(node, TextNode):
        return {"type": "text", "text": node.text}
    d: dict[str, Any] = {"name": node.name, "attrs": dict(node.attrs)}
    if node.children is not None:
        d["children"] = [node_to_dict(c) for c in node.children]
    if node.src is not None:
        d["src"] = list(node.src)
    if node.r is not None:
        d["r"] = node.r
    return d


def node_from_dict(d: dict[str, Any]) -> Node:
    """Inverse of node_to_dict."""
    if d.get("type") == "text":
        return TextNode(text=d.get("text", ""))
    children = d.get("children")
    return ElementNode(
        name=d["name"],
        attrs=dict(d.get("attrs") or {}),
        children=[node_from_dict(c) for c in children] if children is not None else None,
        src=list(d["src"]) if d.get("src") is not None else None,
        r=d.get("r"),
    )
