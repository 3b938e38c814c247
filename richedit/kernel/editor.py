"""
richedit Kernel — Editor

Sits between the pure pieces (history, serializer, menu) and the host
(view binder, parser, resource picker, measure). Owns the editor state and
routes every write through set_data() so the view and the local copy never
drift apart.

Operations: set_content, insert (+ variants), clear, undo/redo,
get_text, get_content

Picker-backed inserts are coroutines. A picker that raises means the user
cancelled: nothing is inserted and no history is recorded. Two picker
requests in flight are not serialized; whichever resolves last inserts last.

The view binder may be async. Synchronous edits (insert, undo, clear, overlay
changes) then schedule the view update on the running loop, in call order;
await drain() to wait for them.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from richedit.config import settings
from richedit.kernel.history import EditHistory
from richedit.kernel.host import (
    EditSession,
    Host,
    picked_labeled,
    picked_sources,
    picked_url,
)
from richedit.kernel.menu import menu_items
from richedit.kernel.overlay import Overlay
from richedit.kernel.paths import apply_patch
from richedit.kernel.serializer import serialize
from richedit.kernel.settle import SettleWatcher
from richedit.kernel.types import (
    BLOCK_TAGS,
    CELL_TAGS,
    MEDIA_TAGS,
    ElementNode,
    Node,
    Rect,
    TextNode,
    empty_document,
    empty_paragraph,
)

logger = logging.getLogger(__name__)

TABLE_STYLE = (
    "display:table;width:100%;margin:10px 0;text-align:center;"
    "border-spacing:0;border-collapse:collapse;border:1px solid gray"
)
CELL_STYLE = "padding:2px;border:1px solid gray"
MEDIA_WRAPPER_STYLE = "text-align:center"

# Returned by _pick when there is nothing to insert
_NO_RESULT = object()


class Editor:
    """
    Editable document bound to one host view.

    data["nodes"] is the top-level node list. data["menu"] and
    data["slider"] hold the overlay payloads shown by the view.
    """

    def __init__(
        self,
        host: Host,
        *,
        editable: bool | None = None,
        history_capacity: int | None = None,
        settle_interval: float | None = None,
        on_event: Callable[[str, Any], Any] | None = None,
    ) -> None:
        self.host = host
        self.editable = settings.EDITABLE if editable is None else editable
        self._history_capacity = history_capacity
        self._on_event = on_event
        self.data: dict[str, Any] = {"nodes": empty_document(), "menu": None, "slider": None}
        self.history = EditHistory(self._publish, history_capacity)
        self.overlay = Overlay(self._publish)
        self.session: EditSession | None = None
        # View updates still in flight when the view binder is async
        self._pending: set[asyncio.Task] = set()
        self._watcher = (
            SettleWatcher(host.measure, self._settled, settle_interval)
            if host.measure is not None
            else None
        )

    @property
    def nodes(self) -> list[Node]:
        return self.data["nodes"]

    def set_data(self, patch: dict[str, Any]) -> Any:
        """Apply a path → value patch locally and forward it to the view."""
        self.data = apply_patch(self.data, patch)
        return self.host.view.apply(patch)

    async def drain(self) -> None:
        """Wait until every scheduled view update has been applied."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _publish(self, patch: dict[str, Any]) -> None:
        """
        set_data() for callers that cannot await. An awaitable returned by
        the view is scheduled on the running loop, or run to completion when
        no loop is running.
        """
        done = self.set_data(patch)
        if not inspect.isawaitable(done):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_resolve(done))
            return
        task = loop.create_task(_resolve(done))
        self._pending.add(task)
        task.add_done_callback(self._view_update_done)

    def _view_update_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Editor: view update failed: %s", task.exception())

    # -- content --

    async def set_content(self, content: str, append: bool = False) -> None:
        """
        Load markup, replacing the document or appending to it.
        Prior history becomes unreachable either way.
        """
        if self.editable:
            self.overlay.dismiss()
            self.session = None

        nodes = self._parse(content)

        if append:
            start = len(self.nodes)
            patch = {f"nodes[{start + j}]": node for j, node in enumerate(nodes)}
        else:
            if self.editable and not nodes:
                nodes = empty_document()
            patch = {"nodes": nodes}

        self.history = EditHistory(self._publish, self._history_capacity)
        # Earlier view updates land before the new content
        await self.drain()
        done = self.set_data(patch)
        if inspect.isawaitable(done):
            await done
        await self.drain()
        self._emit("load", None)

        if self._watcher is not None:
            self._watcher.start()

    def get_content(self) -> str:
        """Serialize the current document to markup."""
        return serialize(self.nodes, self.host.post_processors)

    def get_text(self, nodes: list[Node] | None = None) -> str:
        """Plain text of nodes (default: the whole document)."""
        return extract_text(self.nodes if nodes is None else nodes)

    def detach(self) -> None:
        """Stop background work. Call when the view goes away."""
        if self._watcher is not None:
            self._watcher.cancel()

    # -- history --

    def record_edit(self, path: str, old_value: Any, new_value: Any, apply: bool = False) -> None:
        self.history.push(path, old_value, new_value, apply)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # -- mutation --

    def insert(self, node: Node) -> None:
        """Insert at the cursor when a session is active, else append to the document."""
        if self.session is not None:
            self.session.insert(node)
            return
        nodes = self.nodes
        self.record_edit("nodes", nodes, [*nodes, node], apply=True)

    def clear(self) -> None:
        """Forced reset to a single empty paragraph. Not recorded in the history."""
        self.overlay.dismiss()
        self.session = None
        self._publish({"nodes": empty_document()})

    def insert_html(self, markup: str) -> None:
        for node in self._parse(markup):
            self.insert(node)

    def insert_text(self) -> None:
        self.insert(empty_paragraph())

    def insert_table(self, rows: int, cols: int) -> None:
        table_rows = [
            ElementNode(
                name="tr",
                attrs={},
                children=[
                    ElementNode(name="td", attrs={"style": CELL_STYLE}, children=[TextNode(text="")])
                    for _ in range(cols)
                ],
            )
            for _ in range(rows)
        ]
        self.insert(ElementNode(name="table", attrs={"style": TABLE_STYLE}, children=table_rows))

    async def insert_image(self) -> None:
        value = await self._pick("img")
        if value is _NO_RESULT:
            return
        try:
            src = picked_url(value)
        except ValidationError as e:
            logger.warning("Editor: ignoring invalid img picker result: %s", e)
            return
        self.insert(ElementNode(name="img", attrs={"src": src}))

    async def insert_link(self) -> None:
        value = await self._pick("link")
        if value is _NO_RESULT:
            return
        try:
            url = picked_url(value)
        except ValidationError as e:
            logger.warning("Editor: ignoring invalid link picker result: %s", e)
            return
        self.insert(ElementNode(name="a", attrs={"href": url}, children=[TextNode(text=url)]))

    async def insert_media(self, kind: str) -> None:
        """Insert a centered video or audio element."""
        if kind not in MEDIA_TAGS:
            raise ValueError(f"Unknown media kind: {kind!r}. Valid kinds: {sorted(MEDIA_TAGS)}")
        value = await self._pick(kind)
        if value is _NO_RESULT:
            return
        try:
            if kind == "audio":
                sources, attrs = picked_labeled(value)
            else:
                sources, attrs = picked_sources(value), {}
        except ValidationError as e:
            logger.warning("Editor: ignoring invalid %s picker result: %s", kind, e)
            return
        attrs["controls"] = True
        media = ElementNode(name=kind, attrs=attrs, src=sources)
        self.insert(ElementNode(name="div", attrs={"style": MEDIA_WRAPPER_STYLE}, children=[media]))

    # -- menus --

    def menu_for(self, node: Node) -> list[str]:
        return menu_items(node, self.host.can_pick)

    def show_menu(self, node: Node, top: float, on_select: Callable[[str], Any] | None = None) -> None:
        self.overlay.open_menu(top, self.menu_for(node), on_select)

    # -- internals --

    def _parse(self, markup: str) -> list[Node]:
        if self.host.parser is None:
            raise RuntimeError("No parser configured on host")
        nodes = list(self.host.parser(markup))
        return fill_empty_cells(nodes) if self.editable else nodes

    async def _pick(self, kind: str) -> Any:
        if self.host.picker is None:
            return _NO_RESULT
        try:
            return await self.host.picker(kind)
        except Exception as e:
            logger.debug("Editor: %s picker cancelled: %s", kind, e)
            return _NO_RESULT

    def _settled(self, rect: Rect) -> None:
        self._emit("ready", rect)

    def _emit(self, name: str, payload: Any) -> None:
        if self._on_event is not None:
            self._on_event(name, payload)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


async def _resolve(awaitable: Any) -> Any:
    return await awaitable


def extract_text(nodes: list[Node]) -> str:
    """
    Plain text of a node list.
    Block elements sit on their own lines, <br> is a newline, cells end in a tab.
    """
    parts: list[str] = []

    def ends_with_newline() -> bool:
        return bool(parts) and parts[-1].endswith("\n")

    def walk(items: list[Node]) -> None:
        for node in items:
            if isinstance(node, TextNode):
                if node.text:
                    parts.append(node.text.replace("&amp;", "&"))
                continue
            if node.name == "br":
                parts.append("\n")
                continue
            is_block = node.name in BLOCK_TAGS
            if is_block and parts and not ends_with_newline():
                parts.append("\n")
            if node.children:
                walk(node.children)
            if is_block and not ends_with_newline():
                parts.append("\n")
            elif node.name in CELL_TAGS:
                parts.append("\t")

    walk(nodes)
    return "".join(parts)


def fill_empty_cells(nodes: list[Node]) -> list[Node]:
    """Give every text-less td/th an empty text child so it can take a cursor."""
    result: list[Node] = []
    for node in nodes:
        if isinstance(node, ElementNode) and node.children is not None:
            children = fill_empty_cells(node.children)
            if node.name in CELL_TAGS and not extract_text(children):
                children = [*children, TextNode(text="")]
            node = ElementNode(name=node.name, attrs=node.attrs, children=children, src=node.src, r=node.r)
        result.append(node)
    return result
