"""
richedit Kernel — Settle Watcher

After content loads, images and media keep changing the rendered height.
The watcher measures the view every `interval` seconds and reports "ready"
once two consecutive measurements agree, then stops.

Starting a watcher always cancels the previous one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from richedit.config import settings
from richedit.kernel.types import Rect

logger = logging.getLogger(__name__)


class SettleWatcher:
    """Cancelable height poll on the running event loop."""

    def __init__(
        self,
        measure: Callable[[], Awaitable[Rect]],
        on_ready: Callable[[Rect], Any],
        interval: float | None = None,
    ) -> None:
        self._measure = measure
        self._on_ready = on_ready
        self.interval = interval if interval is not None else settings.SETTLE_INTERVAL_MS / 1000
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Cancel any running poll and start a new one. Needs a running loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug("SettleWatcher: cancelled running poll")
        self._task = None

    async def _run(self) -> None:
        height: float | None = None
        while True:
            await asyncio.sleep(self.interval)
            try:
                rect = await self._measure()
            except Exception as e:
                # Root not rendered yet; try again next tick
                logger.debug("SettleWatcher: measure failed: %s", e)
                continue
            if rect.height == height:
                self._on_ready(rect)
                return
            height = rect.height
