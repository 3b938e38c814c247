"""
richedit Kernel — Reconstruction Serializer

Pure function: (nodes, post_processors?) → markup string
No IO. Never mutates the input tree.

The parser normalizes some markup so the host view can render it. Serializing
inverts those rewrites before emitting tags:

- inline <svg> stored as an <img> data URI     → inline <svg> again
- media sources kept in a `src` list            → src attribute or <source> children
- tables wrapped in an overflow:auto <div>      → the bare table
- grid-layout tables with flat, row-tagged cells → <tr>/<td> rows
- styles added only to force table display       → removed inside tables
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterable
from typing import Any

from richedit.kernel.types import (
    TABLE_FAMILY_TAGS,
    ElementNode,
    Node,
    NodeKind,
    TextNode,
    is_truthy_attr,
    node_kind,
)

SVG_DATA_PREFIX = "data:image/svg+xml;utf8,"
SCROLL_MARKER = "overflow:auto"
GRID_MARKER = "display:grid"

_GRID_STYLE_RE = re.compile(r"grid-[^;]+;*")
_TABLE_DISPLAY_RE = re.compile(r";*display:table[^;]*")
_BORDER_RE = re.compile(r"border[^;]+;*")
_PADDING_RE = re.compile(r"padding[^;]+;*")
_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>")
_STYLE_ATTR_RE = re.compile(r'\sstyle="([^"]*)"')

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def serialize(
    nodes: list[Node],
    post_processors: Iterable[Callable[[str], str | None]] = (),
) -> str:
    """
    Serialize a node list to markup, then run post-processors.
    Post-processors run in reverse registration order; a falsy return
    leaves the markup unchanged.
    """
    out: list[str] = []
    _serialize_nodes(nodes, None, out)
    html = "".join(out)

    for processor in reversed(list(post_processors)):
        result = processor(html)
        if result:
            html = result

    return html


def escape_text(text: str) -> str:
    """Entity-encode raw text. & must go first so later entities are not double-escaped."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("\n", "<br>")
        .replace("\xa0", "&nbsp;")
    )


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def _serialize_nodes(nodes: list[Node], table: dict[str, Any] | None, out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, TextNode):
            out.append(escape_text(node.text))
            continue

        restored = _restore(node)
        if isinstance(restored, str):
            out.append(restored)
            continue
        node = restored

        context = table
        if node.name == "table":
            context = node.attrs
            node = _rebuild_grid(node)

        out.append("<" + node.name)
        for name, value in node.attrs.items():
            emitted = _attr(node.name, name, value, context)
            if emitted:
                out.append(emitted)
        out.append(">")

        if node.children is not None:
            _serialize_nodes(node.children, context, out)
            out.append("</" + node.name + ">")


def _restore(node: ElementNode) -> ElementNode | str:
    """Apply the reconstruction rule for this node's kind. A str result is emitted verbatim."""
    rule = _RESTORERS.get(node_kind(node))
    if rule is None:
        return node
    return rule(node)


# ---------------------------------------------------------------------------
# Reconstruction rules
# ---------------------------------------------------------------------------


def _restore_svg(node: ElementNode) -> ElementNode | str:
    src = node.attrs.get("src") or ""
    start = src.find(SVG_DATA_PREFIX) if isinstance(src, str) else -1
    if start == -1:
        return node
    markup = src[start + len(SVG_DATA_PREFIX):].replace("%23", "#")
    return _merge_svg_style(markup, node.attrs.get("style") or "")


def _merge_svg_style(markup: str, style: str) -> str:
    if not style:
        return markup
    match = _SVG_OPEN_RE.search(markup)
    if match is None:
        return markup
    tag = match.group(0)
    existing = _STYLE_ATTR_RE.search(tag)
    if existing:
        inner = existing.group(1)
        merged = style + (";" if inner and not style.endswith(";") else "") + inner
        tag = tag[: existing.start(1)] + merged + tag[existing.end(1):]
    else:
        tag = '<svg style="' + style + '"' + tag[4:]
    return markup[: match.start()] + tag + markup[match.end():]


def _restore_media(node: ElementNode) -> ElementNode:
    sources = node.src or []
    attrs = dict(node.attrs)
    children = list(node.children) if node.children is not None else []
    if len(sources) > 1:
        attrs.pop("src", None)
        children = [ElementNode(name="source", attrs={"src": url}) for url in sources]
    elif sources:
        attrs["src"] = sources[0]
    return dataclasses.replace(node, attrs=attrs, children=children, src=None)


def _restore_scroll_wrapper(node: ElementNode) -> ElementNode:
    style = node.attrs.get("style") or ""
    children = node.children or []
    if SCROLL_MARKER in style and len(children) == 1:
        child = children[0]
        if isinstance(child, ElementNode) and child.name == "table":
            return child
    return node


def _rebuild_grid(table: ElementNode) -> ElementNode:
    """Regroup a grid-table's flat cells into rows keyed by their stored row index."""
    style = table.attrs.get("style") or ""
    if GRID_MARKER not in style:
        return table

    rows: list[ElementNode] = []
    # Text seen before the first cell waits for that cell's row
    pending: list[Node] = []
    current_r: Any = None
    for child in table.children or []:
        if isinstance(child, TextNode):
            if not child.text.strip():
                continue
            if rows:
                rows[-1].children.append(child)
            else:
                pending.append(child)
            continue
        cell_style = child.attrs.get("style")
        if cell_style:
            child = dataclasses.replace(
                child,
                attrs={**child.attrs, "style": _GRID_STYLE_RE.sub("", cell_style)},
            )
        if not rows or child.r != current_r:
            rows.append(ElementNode(name="tr", attrs={}, children=[*pending, child]))
            pending = []
            current_r = child.r
        else:
            rows[-1].children.append(child)
    if pending:
        rows.append(ElementNode(name="tr", attrs={}, children=pending))

    attrs = {**table.attrs, "style": style.split(GRID_MARKER)[0]}
    return dataclasses.replace(table, attrs=attrs, children=rows)


_RESTORERS: dict[NodeKind, Callable[[ElementNode], ElementNode | str]] = {
    NodeKind.IMAGE: _restore_svg,
    NodeKind.MEDIA: _restore_media,
    NodeKind.DIV: _restore_scroll_wrapper,
}


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def _attr(tag: str, name: str, value: Any, table: dict[str, Any] | None) -> str:
    """Render one attribute, or "" when it should be omitted."""
    if not value:
        return ""
    if is_truthy_attr(value):
        return " " + name
    value = str(value)
    if name == "style" and table is not None and tag in TABLE_FAMILY_TAGS:
        value = _strip_table_style(value, table)
        if not value:
            return ""
    return " " + name + '="' + value.replace('"', "&quot;") + '"'


def _strip_table_style(style: str, table: dict[str, Any]) -> str:
    """Remove style fragments the parser added to force table rendering."""
    style = _TABLE_DISPLAY_RE.sub("", style).lstrip(";")
    if table.get("border"):
        style = _BORDER_RE.sub(lambda m: m.group(0) if "collapse" in m.group(0) else "", style)
    if table.get("cellpadding"):
        style = _PADDING_RE.sub("", style)
    return style

