"""The ``View`` base class and helpers for walking a view tree.

A view takes part in three passes driven by the ``TUI``:

* **measure**: :meth:`View.required_size` answers "how big would you like to
  be within this constraint?".  It may be called many times per frame with
  different constraints, so answers are memoised until the view (or any
  view) is invalidated.
* **commit**: :meth:`View.layout` fixes the final size.  Containers place
  their children by overriding :meth:`View.arrange`.
* **draw**: :meth:`View.draw` paints through a clipped
  :class:`~tessel.printer.Printer`.

Parents own their children; there are no back-pointers.  Views are
identified from outside by *paths* (lists of child indices from a layer
root) or by an optional ``name``.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from tessel.errors import LogicInconsistency
from tessel.event import Event, EventResult
from tessel.geometry import Direction, Rect, Vec2, Vec2Like, as_vec2
from tessel.printer import Printer

__all__ = [
    "View",
    "ViewWrapper",
    "layout_generation",
    "resolve_path",
    "find_path",
    "find_by_name",
    "iter_tree",
    "focused_rect",
]


# ---------------------------------------------------------------------------
# Invalidation
# ---------------------------------------------------------------------------

# Bumped by every View.invalidate(); memoised sizes stamped with an older
# generation are stale.  Only the event-loop thread mutates views.
_generation: int = 0


def layout_generation() -> int:
    """Current invalidation generation."""
    return _generation


def _bump_generation() -> None:
    global _generation
    _generation += 1


# ---------------------------------------------------------------------------
# View
# ---------------------------------------------------------------------------


class View:
    """Base class of every widget.

    Subclasses override :meth:`measure`, :meth:`arrange`, :meth:`draw`,
    :meth:`on_event` and :meth:`take_focus` as needed.  Containers also
    override :meth:`children`.
    """

    def __init__(self) -> None:
        self.name: str | None = None
        self.focused: bool = False
        self.last_size: Vec2 = Vec2.zero()
        # Set by the layout engine after each commit pass.
        self.absolute_rect: Rect | None = None
        self.visible_rect: Rect | None = None
        self._child_rects: list[Rect] = []
        self._size_cache: dict[Vec2, Vec2] = {}
        self._cache_generation: int = -1

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def with_name(self, name: str) -> View:
        """Set :attr:`name` and return ``self`` (builder style)."""
        self.name = name
        return self

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    def children(self) -> Sequence[View]:
        """Direct children, in traversal and draw order."""
        return ()

    def child_rects(self) -> list[Rect]:
        """Rects of :meth:`children` relative to this view, as committed by
        the last :meth:`layout`."""
        return self._child_rects

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def invalidate(self) -> None:
        """Mark layout state dirty.  Call after any change that can alter
        :meth:`required_size` or the arrangement of children."""
        self._size_cache.clear()
        _bump_generation()

    def required_size(self, constraint: Vec2Like) -> Vec2:
        """Preferred size within *constraint*; memoised per constraint.

        The answer may exceed the constraint; the caller decides what the
        view finally gets.
        """
        constraint = as_vec2(constraint).clamp_non_negative()
        if self._cache_generation != _generation:
            self._size_cache.clear()
            self._cache_generation = _generation
        size = self._size_cache.get(constraint)
        if size is None:
            size = as_vec2(self.measure(constraint)).clamp_non_negative()
            self._size_cache[constraint] = size
        return size

    def measure(self, constraint: Vec2) -> Vec2:
        """Compute the preferred size; override instead of
        :meth:`required_size`."""
        return Vec2(1, 1)

    def layout(self, size: Vec2Like) -> None:
        """Commit to *size* and lay out children.  Idempotent."""
        size = as_vec2(size).clamp_non_negative()
        self.last_size = size
        self._child_rects = list(self.arrange(size))

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        """Call ``layout`` on each child and return their rects, in the same
        order as :meth:`children`.  Leaves return nothing."""
        return ()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, printer: Printer) -> None:
        self.draw_children(printer)

    def draw_children(self, printer: Printer) -> None:
        for child, rect in zip(self.children(), self._child_rects):
            child.draw(printer.sub_printer(rect.origin, rect.size))

    # ------------------------------------------------------------------
    # Events and focus
    # ------------------------------------------------------------------

    def on_event(self, event: Event) -> EventResult:
        return EventResult.ignored()

    def take_focus(self, source: Direction) -> bool:
        """Return ``True`` if this view accepts focus coming from *source*."""
        return False

    def find_focusable(self, direction: Direction) -> list[int] | None:
        """Path (relative to this view) to the first focusable view when
        entering from *direction*.

        Children are tried in declared order (reversed for
        ``Direction.BACKWARD``), then the view itself.  An empty list means
        this view takes the focus; ``None`` means nothing here is
        focusable.
        """
        kids = list(enumerate(self.children()))
        if direction is Direction.BACKWARD:
            kids.reverse()
        for index, child in kids:
            sub = child.find_focusable(direction)
            if sub is not None:
                return [index, *sub]
        if self.take_focus(direction):
            return []
        return None

    def has_focus_within(self) -> bool:
        """``True`` if this view or a descendant holds the focus."""
        return any(view.focused for _, view in iter_tree(self))

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label}>"


class ViewWrapper(View):
    """A view with a single child that fills it; override what you need."""

    def __init__(self, view: View) -> None:
        super().__init__()
        self.view = view

    def children(self) -> Sequence[View]:
        return (self.view,)

    def set_view(self, view: View) -> None:
        self.view = view
        self.invalidate()

    def measure(self, constraint: Vec2) -> Vec2:
        return self.view.required_size(constraint)

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        self.view.layout(size)
        return [Rect.from_size((0, 0), size)]

    def take_focus(self, source: Direction) -> bool:
        return False


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def resolve_path(root: View, path: Sequence[int]) -> View:
    """Follow *path* from *root*.

    Raises :class:`LogicInconsistency` if an index does not exist.
    """
    view = root
    for depth, index in enumerate(path):
        kids = view.children()
        if not 0 <= index < len(kids):
            raise LogicInconsistency(
                f"Path {list(path)} is invalid at depth {depth}: "
                f"{view!r} has {len(kids)} children"
            )
        view = kids[index]
    return view


def iter_tree(root: View) -> Iterator[tuple[list[int], View]]:
    """Yield ``(path, view)`` for every view under *root*, pre-order."""
    stack: list[tuple[list[int], View]] = [([], root)]
    while stack:
        path, view = stack.pop()
        yield path, view
        kids = view.children()
        for index in range(len(kids) - 1, -1, -1):
            stack.append(([*path, index], kids[index]))


def find_path(root: View, target: View) -> list[int] | None:
    """Path from *root* to *target* (by identity), or ``None``."""
    for path, view in iter_tree(root):
        if view is target:
            return path
    return None


def find_by_name(root: View, name: str) -> tuple[list[int], View] | None:
    """First view (pre-order) whose ``name`` equals *name*."""
    for path, view in iter_tree(root):
        if view.name == name:
            return path, view
    return None


def focused_rect(root: View) -> Rect | None:
    """Rect of the focused view relative to *root*, from committed layout."""
    if root.focused:
        return Rect.from_size((0, 0), root.last_size)
    for child, rect in zip(root.children(), root.child_rects()):
        inner = focused_rect(child)
        if inner is not None:
            return inner.translate(rect.origin)
    return None
