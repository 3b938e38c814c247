"""
Kernel test configuration.

Fakes for the host collaborators:
  RecordingView   — view binder that records every patch
  ScriptedPicker  — resource picker that replays queued results
  parse           — minimal markup → node parser built on html.parser
"""

from __future__ import annotations

import asyncio
from html.parser import HTMLParser
from typing import Any

import pytest

from richedit.kernel.editor import Editor
from richedit.kernel.host import Host
from richedit.kernel.types import ElementNode, Node, TextNode

VOID_TAGS = {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}


# ============================================================================
# Fakes
# ============================================================================


class RecordingView:
    """View binder that keeps every patch it receives."""

    def __init__(self, settle: bool = False) -> None:
        self.patches: list[dict[str, Any]] = []
        self.settle = settle
        self.settled = 0

    def apply(self, patch: dict[str, Any]):
        self.patches.append(patch)
        if self.settle:
            return self._settle()
        return None

    async def _settle(self) -> None:
        await asyncio.sleep(0)
        self.settled += 1


class PickerCancelled(Exception):
    """The user closed the picker without choosing."""


class ScriptedPicker:
    """Async resource picker returning queued results in order."""

    def __init__(self, *results: Any) -> None:
        self.results = list(results)
        self.requests: list[str] = []

    async def __call__(self, kind: str) -> Any:
        self.requests.append(kind)
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class RecordingSession:
    """Edit session that takes over inserts."""

    def __init__(self) -> None:
        self.inserted: list[Node] = []

    def insert(self, node: Node) -> None:
        self.inserted.append(node)


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root: list[Node] = []
        self.stack: list[tuple[str, dict[str, Any], list[Node]]] = []

    def _siblings(self) -> list[Node]:
        return self.stack[-1][2] if self.stack else self.root

    def handle_starttag(self, tag, attrs):
        attr_map = {k: True if v is None else v for k, v in attrs}
        if tag in VOID_TAGS:
            self._siblings().append(ElementNode(name=tag, attrs=attr_map))
        else:
            self.stack.append((tag, attr_map, []))

    def handle_startendtag(self, tag, attrs):
        attr_map = {k: True if v is None else v for k, v in attrs}
        self._siblings().append(ElementNode(name=tag, attrs=attr_map))

    def handle_endtag(self, tag):
        if tag in VOID_TAGS:
            return
        while self.stack:
            name, attrs, children = self.stack.pop()
            self._siblings().append(ElementNode(name=name, attrs=attrs, children=children))
            if name == tag:
                break

    def handle_data(self, data):
        self._siblings().append(TextNode(text=data))

    def close(self):
        super().close()
        while self.stack:
            self.handle_endtag(self.stack[-1][0])


def simple_parse(markup: str) -> list[Node]:
    builder = _TreeBuilder()
    builder.feed(markup)
    builder.close()
    return builder.root


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def parse():
    return simple_parse


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def host(view):
    return Host(view=view, parser=simple_parse)


@pytest.fixture
def editor(host):
    return Editor(host, editable=True, history_capacity=30)


@pytest.fixture
def session():
    return RecordingSession()


@pytest.fixture
def make_picker():
    return ScriptedPicker


@pytest.fixture
def cancelled():
    return PickerCancelled("user closed the picker")


@pytest.fixture
def make_view():
    return RecordingView
