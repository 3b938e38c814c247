"""
richedit Kernel — Overlays

Transient surfaces drawn above the document: one action menu and one range
slider. Each kind is CLOSED or OPEN; at most one of each is open at a time.

Dismiss callbacks registered with on_dismiss() run exactly once, in
registration order, the next time overlays are dismissed (outside tap) or a
new overlay is opened.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class OverlayKind(enum.Enum):
    MENU = "menu"
    SLIDER = "slider"


class OverlayPhase(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass
class MenuState:
    top: float
    items: list[str]
    on_select: Callable[[str], Any] | None = None

    def view(self) -> dict[str, Any]:
        return {"top": self.top, "items": list(self.items)}


@dataclass
class SliderState:
    min: float
    max: float
    value: float
    top: float
    on_changing: Callable[[float], Any] | None = None
    on_change: Callable[[float], Any] | None = None

    def view(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max, "value": self.value, "top": self.top}


class Overlay:
    """Open/closed state machine for the menu and slider overlays."""

    def __init__(self, publish: Callable[[dict[str, Any]], Any]) -> None:
        self._publish = publish
        self._open: dict[OverlayKind, MenuState | SliderState] = {}
        self._dismiss_callbacks: list[Callable[[], Any]] = []

    def phase(self, kind: OverlayKind) -> OverlayPhase:
        return OverlayPhase.OPEN if kind in self._open else OverlayPhase.CLOSED

    @property
    def menu(self) -> MenuState | None:
        return self._open.get(OverlayKind.MENU)  # type: ignore[return-value]

    @property
    def slider(self) -> SliderState | None:
        return self._open.get(OverlayKind.SLIDER)  # type: ignore[return-value]

    def on_dismiss(self, callback: Callable[[], Any]) -> None:
        """Register a callback for the next dismissal."""
        self._dismiss_callbacks.append(callback)

    # -- transitions --

    def open_menu(
        self,
        top: float,
        items: list[str],
        on_select: Callable[[str], Any] | None = None,
    ) -> None:
        """Show the action menu, replacing any open one."""
        self._flush_callbacks()
        state = MenuState(top=top, items=list(items), on_select=on_select)
        self._open[OverlayKind.MENU] = state
        self._publish({OverlayKind.MENU.value: state.view()})

    def open_slider(
        self,
        min: float,
        max: float,
        value: float,
        top: float,
        on_changing: Callable[[float], Any] | None = None,
        on_change: Callable[[float], Any] | None = None,
    ) -> None:
        """Show the range slider, replacing any open one."""
        self._flush_callbacks()
        state = SliderState(
            min=min, max=max, value=value, top=top,
            on_changing=on_changing, on_change=on_change,
        )
        self._open[OverlayKind.SLIDER] = state
        self._publish({OverlayKind.SLIDER.value: state.view()})

    def select(self, index: int) -> bool:
        """Pick a menu item. Closes the menu. Returns False if nothing was picked."""
        menu = self.menu
        if menu is None or not 0 <= index < len(menu.items):
            return False
        label = menu.items[index]
        del self._open[OverlayKind.MENU]
        self._publish({OverlayKind.MENU.value: None})
        if menu.on_select is not None:
            menu.on_select(label)
        return True

    def slide(self, value: float, final: bool = False) -> bool:
        """Report slider movement; final=True when the user lets go."""
        slider = self.slider
        if slider is None:
            return False
        slider.value = value
        callback = slider.on_change if final else slider.on_changing
        if callback is not None:
            callback(value)
        return True

    def dismiss(self) -> None:
        """Outside tap: run pending callbacks, close everything, clear the view."""
        self._flush_callbacks()
        if not self._open:
            return
        patch = {kind.value: None for kind in self._open}
        self._open.clear()
        self._publish(patch)

    def _flush_callbacks(self) -> None:
        callbacks, self._dismiss_callbacks = self._dismiss_callbacks, []
        if callbacks:
            logger.debug("Overlay: running %d dismiss callbacks", len(callbacks))
        for callback in callbacks:
            callback()
