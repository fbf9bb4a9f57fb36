"""Two-phase layout negotiation.

``measure`` asks a root view for its preferred size under a constraint;
``commit`` fixes the final size (never larger than the constraint), lets the
view arrange its children, then records every view's absolute and visible
rectangle for hit-testing.
"""

from __future__ import annotations

import logging

from tessel.geometry import Rect, Vec2, Vec2Like, as_vec2
from tessel.view import View

logger = logging.getLogger(__name__)

__all__ = [
    "UNBOUNDED",
    "LayoutEngine",
    "distribute",
]

# Stand-in for an unlimited constraint along a scrolling axis.
UNBOUNDED = 1 << 30


def distribute(available: int, requests: list[int]) -> list[int]:
    """Share *available* cells among *requests* fairly.

    Every request is granted when they fit.  Otherwise small requests are
    granted in full and the rest split the remainder evenly (earlier items
    take the leftover cells).
    """
    available = max(0, available)
    if sum(requests) <= available:
        return list(requests)

    result = [0] * len(requests)
    order = sorted(range(len(requests)), key=lambda i: requests[i])
    remaining = available
    for rank, index in enumerate(order):
        share = remaining // (len(order) - rank)
        granted = min(requests[index], share)
        result[index] = granted
        remaining -= granted

    # Hand out what integer division left over, in declared order.
    for index in range(len(requests)):
        if remaining <= 0:
            break
        extra = min(remaining, requests[index] - result[index])
        result[index] += extra
        remaining -= extra
    return result


class LayoutEngine:
    """Drives measure and commit for a layer root."""

    def measure(self, view: View, constraint: Vec2Like) -> Vec2:
        """Preferred size of *view*, clamped to *constraint*."""
        constraint = as_vec2(constraint).clamp_non_negative()
        return view.required_size(constraint).min(constraint)

    def commit(self, view: View, size: Vec2Like, origin: Vec2Like = (0, 0)) -> None:
        """Lay *view* out at *size* and record rects below *origin*."""
        size = as_vec2(size).clamp_non_negative()
        view.layout(size)
        rect = Rect.from_size(origin, size)
        self._record(view, rect, rect)

    def negotiate(
        self, view: View, constraint: Vec2Like, origin: Vec2Like = (0, 0)
    ) -> Vec2:
        """Measure then commit; returns the committed size."""
        size = self.measure(view, constraint)
        self.commit(view, size, origin)
        return size

    def _record(self, view: View, rect: Rect, clip: Rect) -> None:
        view.absolute_rect = rect
        view.visible_rect = rect.intersect(clip)
        kids = view.children()
        rects = view.child_rects()
        if len(rects) != len(kids):
            logger.warning(
                "%r arranged %d of %d children", view, len(rects), len(kids)
            )
        for child, child_rect in zip(kids, rects):
            self._record(child, child_rect.translate(rect.origin), view.visible_rect)
        for child in kids[len(rects):]:
            child.absolute_rect = None
            child.visible_rect = None
