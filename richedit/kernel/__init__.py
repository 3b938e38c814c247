"""
richedit Kernel — the editable document core.

Components:
  types       — node tree (TextNode, ElementNode) and shared data classes
  history     — bounded, coalescing undo/redo over state paths
  editor      — mutation façade: insert, clear, load, undo/redo
  menu        — capability-gated contextual actions per node
  overlay     — menu/slider open-closed state machine
  serializer  — node tree → markup, inverting parser-time rewrites
  host        — collaborator registry (view, parser, picker, measure)
  paths       — "nodes[0].children[1]" path addressing for view patches
  settle      — post-load height poll that reports "ready"
"""

from richedit.kernel.editor import Editor
from richedit.kernel.history import EditHistory
from richedit.kernel.host import Host
from richedit.kernel.menu import menu_items
from richedit.kernel.overlay import Overlay
from richedit.kernel.serializer import serialize
from richedit.kernel.types import ElementNode, TextNode, empty_document

__all__ = [
    "Editor",
    "EditHistory",
    "Host",
    "menu_items",
    "Overlay",
    "serialize",
    "ElementNode",
    "TextNode",
    "empty_document",
]
