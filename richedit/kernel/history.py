"""
richedit Kernel — Edit History

Bounded undo/redo over view-binding paths.

Entries are (key, value) snapshots, not diffs: moving the cursor onto an entry
publishes its value at its key. Each edit stores the old value followed by the
new value, so one undo step restores the state before the edit.

Rules on push:
  1. A new edit drops everything after the cursor (the redo branch).
  2. Consecutive edits to the same key coalesce into one step that keeps the
     earliest old value of the streak.
  3. The stack never holds more than `capacity` entries at rest; the oldest
     entries are evicted first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from richedit.config import settings
from richedit.kernel.types import HistoryEntry

logger = logging.getLogger(__name__)

Publish = Callable[[dict[str, Any]], Any]


class EditHistory:
    """
    History stack with a cursor.

    index is -1 when empty and always addresses the entry that represents
    the current state.
    """

    def __init__(self, publish: Publish, capacity: int | None = None) -> None:
        self._publish = publish
        self.capacity = capacity if capacity is not None else settings.HISTORY_CAPACITY
        self.entries: list[HistoryEntry] = []
        self.index = -1

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self.entries) - 1

    # -- navigation --

    def move(self, delta: int) -> bool:
        """
        Move the cursor by delta and publish the entry it lands on.
        Returns False (and does nothing) when no entry exists there.
        """
        target = self.index + delta
        if not 0 <= target < len(self.entries):
            return False
        self.index = target
        entry = self.entries[target]
        self._publish({entry.key: entry.value})
        return True

    def undo(self) -> bool:
        return self.move(-1)

    def redo(self) -> bool:
        return self.move(1)

    # -- recording --

    def push(self, path: str, old_value: Any, new_value: Any, apply: bool = False) -> None:
        """Record a transition of the value at path from old_value to new_value."""
        # Drop the redo branch
        del self.entries[self.index + 1:]

        last = self.entries[-1] if self.entries else None
        if last is None or last.key != path:
            self._append(HistoryEntry(key=path, value=old_value))
        elif len(self.entries) > 1 and self.entries[-2].key == path:
            # The top entry is the previous "new value" of this streak
            self.entries.pop()
            self.index -= 1

        self._append(HistoryEntry(key=path, value=new_value))

        evicted = 0
        while len(self.entries) > self.capacity:
            self.entries.pop(0)
            self.index -= 1
            evicted += 1
        if evicted:
            logger.debug("EditHistory: evicted %d oldest entries (capacity %d)", evicted, self.capacity)

        if apply:
            self._publish({path: new_value})

    def _append(self, entry: HistoryEntry) -> None:
        self.entries.append(entry)
        self.index += 1
