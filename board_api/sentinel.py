"""Scroll-proximity trigger for the incremental listing loader.

A sentinel is a zero-height marker placed after the last rendered item. The
scroll container measures it and reports an intersection ratio; once the ratio
reaches `threshold` the registered callback runs. `root_margin` grows the
viewport on both edges so loading starts slightly before the marker is
actually on screen.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from .config import settings
from .logging_config import get_logger

logger = get_logger(__name__)

VisibleCallback = Callable[[], Awaitable[None]]


def intersection_ratio(
    top: float,
    height: float,
    viewport_top: float,
    viewport_bottom: float,
    root_margin: float = 0,
) -> float:
    """Fraction of the element inside the viewport expanded by `root_margin`."""
    root_top = viewport_top - root_margin
    root_bottom = viewport_bottom + root_margin
    if height <= 0:
        return 1.0 if root_top <= top <= root_bottom else 0.0
    overlap = min(top + height, root_bottom) - max(top, root_top)
    if overlap <= 0:
        return 0.0
    return min(overlap / height, 1.0)


class VisibilitySentinel:
    def __init__(self, threshold: Optional[float] = None, root_margin: Optional[float] = None):
        self.threshold = settings.LOADER_THRESHOLD if threshold is None else threshold
        self.root_margin = settings.LOADER_ROOT_MARGIN if root_margin is None else root_margin
        self._callback: Optional[VisibleCallback] = None

    @property
    def observing(self) -> bool:
        return self._callback is not None

    def observe(self, callback: VisibleCallback) -> None:
        # one subscriber per sentinel; a new callback replaces the old one
        if self._callback is not None:
            self.disconnect()
        self._callback = callback

    def disconnect(self) -> None:
        self._callback = None

    async def report(self, ratio: float) -> bool:
        """Deliver an intersection change; returns True when the callback ran."""
        callback = self._callback
        if callback is None or ratio < self.threshold:
            return False
        logger.debug("sentinel visible ratio=%.2f", ratio)
        await callback()
        return True

    async def report_position(self, top: float, height: float, viewport_top: float, viewport_bottom: float) -> bool:
        ratio = intersection_ratio(top, height, viewport_top, viewport_bottom, self.root_margin)
        return await self.report(ratio)
