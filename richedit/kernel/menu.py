"""
richedit Kernel — Contextual Menu

Resolves the action labels offered for a long-pressed node.
Pure function: (node, can_pick) → list of labels.

Actions that need the host resource picker disappear when none is
configured. Toggle actions are relabeled from the node's current flags.
"""

from __future__ import annotations

from collections.abc import Callable

from richedit.kernel.types import ElementNode, Node, NodeKind, node_kind

# Base action lists per node family
MENU_ITEMS: dict[str, list[str]] = {
    "img": ["replace image", "width", "hyperlink", "preview image", "disable preview", "delete"],
    "link": ["replace link", "delete"],
    "media": ["cover", "loop", "autoplay", "delete"],
    "node": ["font size", "italic", "bold", "underline", "center", "indent", "delete"],
}

# Actions that open the resource picker
PICKER_ACTIONS: dict[str, set[str]] = {
    "img": {"replace image", "hyperlink", "preview image"},
    "link": {"replace link"},
    "media": {"cover"},
}


def menu_items(node: Node, can_pick: bool) -> list[str]:
    """Return a fresh, ordered list of actions applicable to node."""
    resolver = _RESOLVERS.get(node_kind(node), _node_items)
    return resolver(node, can_pick)


# ---------------------------------------------------------------------------
# Per-family rules
# ---------------------------------------------------------------------------


def _base(family: str, can_pick: bool) -> list[str]:
    items = list(MENU_ITEMS[family])
    if not can_pick:
        blocked = PICKER_ACTIONS.get(family, set())
        items = [item for item in items if item not in blocked]
    return items


def _relabel(items: list[str], label: str, replacement: str) -> list[str]:
    return [replacement if item == label else item for item in items]


def _image_items(node: ElementNode, can_pick: bool) -> list[str]:
    items = _base("img", can_pick)
    if node.attrs.get("ignore"):
        items = _relabel(items, "disable preview", "enable preview")
    return items


def _link_items(node: ElementNode, can_pick: bool) -> list[str]:
    return _base("link", can_pick)


def _media_items(node: ElementNode, can_pick: bool) -> list[str]:
    items = _base("media", can_pick)
    if node.attrs.get("loop"):
        items = _relabel(items, "loop", "unloop")
    return items


def _node_items(node: Node, can_pick: bool) -> list[str]:
    return list(MENU_ITEMS["node"])


_RESOLVERS: dict[NodeKind, Callable[..., list[str]]] = {
    NodeKind.IMAGE: _image_items,
    NodeKind.LINK: _link_items,
    NodeKind.MEDIA: _media_items,
}
