"""Per-layer focus tracking, focus cycling and event routing.

The focus is kept as a path of child indices from the layer root plus a
weak reference to the focused view.  Before the path is used it is
revalidated against the live tree: if the view moved the path follows it,
and if it disappeared the focus snaps to the nearest focusable view.
"""

from __future__ import annotations

import logging
import weakref
from typing import Sequence

from tessel.errors import LogicInconsistency
from tessel.event import Event, EventResult, MouseEvent
from tessel.geometry import Direction, Vec2
from tessel.view import View, find_path, resolve_path

logger = logging.getLogger(__name__)

__all__ = ["FocusManager"]


class FocusManager:
    """Focus state of one layer."""

    def __init__(self, tab_wrap: bool = True) -> None:
        self.tab_wrap = tab_wrap
        self._path: tuple[int, ...] = ()
        self._ref: weakref.ReferenceType[View] | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def path(self) -> tuple[int, ...]:
        """Current focus path; empty when nothing (or the root) is focused."""
        return self._path

    @property
    def has_focus(self) -> bool:
        return self._ref is not None and self._ref() is not None

    def focused_view(self) -> View | None:
        return self._ref() if self._ref is not None else None

    def clear(self) -> None:
        old = self.focused_view()
        if old is not None:
            old.focused = False
        self._path = ()
        self._ref = None

    def _apply(self, path: Sequence[int], view: View) -> None:
        old = self.focused_view()
        if old is not None and old is not view:
            old.focused = False
        self._path = tuple(path)
        self._ref = weakref.ref(view)
        view.focused = True

    # ------------------------------------------------------------------
    # Moving the focus
    # ------------------------------------------------------------------

    def focus_first(self, root: View, direction: Direction = Direction.FORWARD) -> bool:
        """Focus the first focusable view in traversal order."""
        sub = root.find_focusable(direction)
        if sub is None:
            self.clear()
            return False
        self._apply(sub, resolve_path(root, sub))
        return True

    def set_path(self, root: View, path: Sequence[int]) -> bool:
        """Focus the view at *path* if it accepts focus."""
        try:
            view = resolve_path(root, path)
        except LogicInconsistency:
            logger.debug("Cannot focus %s: no such path", list(path))
            return False
        if not view.take_focus(Direction.NONE):
            return False
        self._apply(path, view)
        return True

    def focus_view(self, root: View, view: View) -> bool:
        path = find_path(root, view)
        if path is None:
            return False
        return self.set_path(root, path)

    def cycle(self, root: View, direction: Direction) -> bool:
        """Move to the next (or previous) focusable view in traversal order.

        Siblings after the current position are tried first, then the
        search climbs towards the root.  Past the last view the focus wraps
        to the first one when :attr:`tab_wrap` is set.  Returns ``True`` if
        the focus moved (or wrapped back onto itself).
        """
        self.revalidate(root)
        if not self.has_focus:
            return self.focus_first(root, direction)

        chain = self._chain(root, self._path)
        for depth in range(len(self._path) - 1, -1, -1):
            parent = chain[depth]
            index = self._path[depth]
            kids = parent.children()
            if direction is Direction.BACKWARD:
                candidates = range(index - 1, -1, -1)
            else:
                candidates = range(index + 1, len(kids))
            for k in candidates:
                sub = kids[k].find_focusable(direction)
                if sub is not None:
                    path = [*self._path[:depth], k, *sub]
                    self._apply(path, resolve_path(root, path))
                    return True

        if not self.tab_wrap:
            return False
        return self.focus_first(root, direction)

    # ------------------------------------------------------------------
    # Revalidation
    # ------------------------------------------------------------------

    def revalidate(self, root: View) -> None:
        """Make the path point at a live focusable view (or nothing)."""
        view = self.focused_view()
        if view is not None:
            path = find_path(root, view)
            if path is not None and view.take_focus(Direction.NONE):
                if tuple(path) != self._path:
                    logger.debug("Focus path moved %s -> %s", self._path, path)
                    self._path = tuple(path)
                view.focused = True
                return
            logger.debug("Focused %r is gone or unfocusable; snapping", view)
            view.focused = False
            self._ref = None
        self._snap(root)

    def _snap(self, root: View) -> None:
        old = self._path
        levels: list[tuple[list[int], View, int]] = []
        node = root
        prefix: list[int] = []
        for index in old:
            levels.append((list(prefix), node, index))
            kids = node.children()
            if index >= len(kids):
                break
            node = kids[index]
            prefix.append(index)

        for prefix, node, index in reversed(levels):
            kids = node.children()
            start = min(index, len(kids))
            order = [*range(start, len(kids)), *range(start - 1, -1, -1)]
            for k in order:
                sub = kids[k].find_focusable(Direction.FORWARD)
                if sub is not None:
                    path = [*prefix, k, *sub]
                    self._apply(path, resolve_path(root, path))
                    return
            if node.take_focus(Direction.NONE):
                self._apply(prefix, node)
                return

        if not self.focus_first(root):
            self._path = ()

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    @staticmethod
    def _chain(root: View, path: Sequence[int]) -> list[View]:
        """``[root, ..., view at path]``."""
        chain = [root]
        for index in path:
            chain.append(chain[-1].children()[index])
        return chain

    def dispatch(self, root: View, event: Event) -> EventResult:
        """Offer *event* to the focused view, then to each ancestor."""
        self.revalidate(root)
        if not self.has_focus:
            return root.on_event(event)
        for view in reversed(self._chain(root, self._path)):
            result = view.on_event(event)
            if result.is_consumed:
                return result
        return EventResult.ignored()

    def hit_test(self, root: View, position: Vec2) -> list[int] | None:
        """Path to the innermost view whose visible rect contains *position*.

        Later children are drawn on top, so they are tested first.
        """
        if root.visible_rect is None or not root.visible_rect.contains(position):
            return None
        path: list[int] = []
        node = root
        while True:
            kids = node.children()
            for index in range(len(kids) - 1, -1, -1):
                rect = kids[index].visible_rect
                if rect is not None and rect.contains(position):
                    path.append(index)
                    node = kids[index]
                    break
            else:
                return path

    def dispatch_mouse(self, root: View, event: MouseEvent) -> EventResult:
        """Route a mouse event by position.

        A press first moves the focus to the innermost focusable view on the
        hit path.  The event then bubbles from the hit view to the root.
        """
        path = self.hit_test(root, event.position)
        if path is None:
            return EventResult.ignored()
        chain = self._chain(root, path)
        if event.grabs_focus:
            for depth in range(len(path), -1, -1):
                if chain[depth].take_focus(Direction.NONE):
                    self._apply(path[:depth], chain[depth])
                    break
        for view in reversed(chain):
            result = view.on_event(event)
            if result.is_consumed:
                return result
        return EventResult.ignored()
