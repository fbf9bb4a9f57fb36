"""The ``TUI`` application object and its event loop.

One loop iteration (:meth:`TUI.step`):

1. poll the backend for input, waiting at most the poll timeout;
2. route each available event to the top layer (focus path for keys,
   hit-testing for the mouse), falling back to focus cycling for Tab and
   to global callbacks for anything the views ignored;
3. drain the callback queue in FIFO order;
4. if anything changed, lay out every layer, paint into the back buffer and
   flush the difference to the backend.

Only the thread running the loop may touch the view tree.  Other threads
talk to it through :meth:`TUI.callback_sink`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from tessel.backends.base import Backend
from tessel.compositor import Compositor
from tessel.config import Settings
from tessel.event import (
    Callback,
    Event,
    EventResult,
    Key,
    KeyPress,
    MouseEvent,
    Refresh,
    Resize,
)
from tessel.geometry import Direction, Vec2, Vec2Like
from tessel.layers import Layer, LayerPosition, LayerStack, Placement, Position
from tessel.layout import LayoutEngine
from tessel.printer import Printer
from tessel.sink import CallbackQueue, CallbackSink
from tessel.theme import Theme, load_theme
from tessel.view import View, find_by_name, layout_generation

logger = logging.getLogger(__name__)

__all__ = ["TUI"]

# Upper bound on input events handled in one step, so a flood of input
# cannot starve callbacks and redraws.
_MAX_EVENTS_PER_STEP = 64


class TUI:
    """Main controller: layers, focus, input routing and rendering.

    Parameters
    ----------
    backend:
        Where events come from and cells go (see :mod:`tessel.backends`).
    settings:
        Loop settings; defaults to ``Settings()``.
    theme:
        Initial theme; defaults to ``Theme()``.
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        backend: Backend,
        settings: Settings | None = None,
        theme: Theme | None = None,
    ) -> None:
        self.backend = backend
        self.settings = settings if settings is not None else Settings()
        self.theme = theme if theme is not None else Theme()

        self._layers = LayerStack(tab_wrap=self.settings.tab_wrap)
        self._engine = LayoutEngine()
        self._compositor = Compositor()
        self._callbacks = CallbackQueue(waker=backend.wake)
        self._global_callbacks: dict[Event, list[Callback]] = {}

        self._running = False
        self._needs_redraw = True
        self._poll_timeout = self.settings.effective_timeout
        self._autorefresh = self.settings.autorefresh or self.settings.fps is not None
        self._last_generation = -1
        self._last_grid: Vec2 | None = None
        self._last_layer_sizes: list[Vec2] = []
        self._debug_console: View | None = None

        # Optional hook run after each successful frame (e.g. for tests).
        self.on_frame: Callable[[TUI], None] | None = None

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def is_running(self) -> bool:
        return self._running

    def quit(self) -> None:
        """Ask the loop to stop after the current iteration."""
        self._running = False

    def run(self) -> None:
        """Start the backend and run until :meth:`quit` is called."""
        self.backend.start()
        self._running = True
        self._compositor.invalidate()
        try:
            self.refresh()
            while self._running:
                self.step()
        finally:
            self._running = False
            self.backend.stop()

    def step(self, timeout: float | None = None) -> bool:
        """Run one loop iteration.  Returns ``True`` if a frame was drawn."""
        handled = False
        event = self.backend.poll_event(
            self._poll_timeout if timeout is None else timeout
        )
        count = 0
        while event is not None:
            handled = True
            self.on_event(event)
            count += 1
            if count >= _MAX_EVENTS_PER_STEP:
                break
            event = self.backend.poll_event(0)

        if self.process_callbacks():
            handled = True

        if (
            handled
            or self._needs_redraw
            or self._autorefresh
            or layout_generation() != self._last_generation
            or self.backend.grid_size() != self._last_grid
        ):
            return self.refresh()
        return False

    def process_callbacks(self) -> bool:
        """Run every queued callback, FIFO.  Returns ``True`` if any ran."""
        ran = False
        for callback in self._callbacks.drain():
            ran = True
            callback(self)
        return ran

    # ------------------------------------------------------------------
    # Event routing
    # ------------------------------------------------------------------

    def on_event(self, event: Event) -> None:
        """Route *event* as if it came from the backend."""
        self._needs_redraw = True

        if isinstance(event, Resize):
            logger.debug("Resize to %s", event.size)
            self._compositor.invalidate()
            return
        if isinstance(event, Refresh):
            return

        result = EventResult.ignored()
        top = self._layers.top
        if top is not None:
            if isinstance(event, MouseEvent):
                if top.rect.contains(event.position):
                    result = top.focus.dispatch_mouse(top.view, event)
            else:
                result = top.focus.dispatch(top.view, event)

        if result.is_consumed:
            if result.callback is not None:
                result.callback(self)
            return

        if top is not None and isinstance(event, KeyPress):
            if event.key is Key.TAB and self.focus_next():
                return
            if event.key is Key.SHIFT_TAB and self.focus_prev():
                return

        for callback in list(self._global_callbacks.get(event, ())):
            callback(self)

    # ------------------------------------------------------------------
    # Global callbacks
    # ------------------------------------------------------------------

    def add_global_callback(self, event: Event, callback: Callback) -> None:
        """Run *callback* whenever *event* is ignored by every view."""
        self._global_callbacks.setdefault(event, []).append(callback)

    def clear_global_callbacks(self, event: Event) -> None:
        self._global_callbacks.pop(event, None)

    # ------------------------------------------------------------------
    # Callbacks from other threads
    # ------------------------------------------------------------------

    def callback_sink(self) -> CallbackSink:
        """A handle other threads use to run code on the loop thread."""
        return self._callbacks.sink()

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def add_layer(self, view: View, margin: int = 1) -> Layer:
        """Push *view* as a centered floating layer."""
        return self._push(view, Placement.FLOATING, Position.center(), margin)

    def add_fullscreen_layer(self, view: View) -> Layer:
        return self._push(view, Placement.FULLSCREEN, None, 0)

    def add_layer_at(self, position: Vec2Like | Position, view: View) -> Layer:
        """Push *view* as a floating layer at an absolute position."""
        where = position if isinstance(position, Position) else Position.absolute(position)
        return self._push(view, Placement.FLOATING, where, 0)

    def _push(
        self,
        view: View,
        placement: Placement,
        position: Position | None,
        margin: int,
    ) -> Layer:
        layer = self._layers.push(view, placement, position, margin)
        self._needs_redraw = True
        return layer

    def pop_layer(self) -> View | None:
        """Remove the top layer; input goes back to the one below."""
        view = self._layers.pop()
        if view is self._debug_console:
            self._debug_console = None
        self._needs_redraw = True
        return view

    def layer_count(self) -> int:
        return len(self._layers)

    def layer_sizes(self) -> list[Vec2]:
        return self._layers.layer_sizes()

    def reposition_layer(self, layer: LayerPosition, position: Vec2Like | Position) -> None:
        where = position if isinstance(position, Position) else Position.absolute(position)
        self._layers.reposition(layer, where)
        self._needs_redraw = True

    def move_layer(self, source: LayerPosition, target: LayerPosition) -> None:
        self._layers.move_layer(source, target)
        self._needs_redraw = True

    def move_to_front(self, layer: LayerPosition) -> None:
        self._layers.move_to_front(layer)
        self._needs_redraw = True

    def move_to_back(self, layer: LayerPosition) -> None:
        self._layers.move_to_back(layer)
        self._needs_redraw = True

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focus_path(self) -> tuple[int, ...]:
        """Focus path of the top layer (read-only)."""
        top = self._layers.top
        if top is None:
            return ()
        top.focus.revalidate(top.view)
        return top.focus.path

    def focused_view(self) -> View | None:
        top = self._layers.top
        if top is None:
            return None
        top.focus.revalidate(top.view)
        return top.focus.focused_view()

    def focus_next(self) -> bool:
        return self._cycle(Direction.FORWARD)

    def focus_prev(self) -> bool:
        return self._cycle(Direction.BACKWARD)

    def _cycle(self, direction: Direction) -> bool:
        top = self._layers.top
        if top is None:
            return False
        moved = top.focus.cycle(top.view, direction)
        self._needs_redraw = True
        return moved

    def focus_view(self, view: View) -> bool:
        """Focus *view* if it lives in the top layer and accepts focus."""
        top = self._layers.top
        if top is None:
            return False
        self._needs_redraw = True
        return top.focus.focus_view(top.view, view)

    # ------------------------------------------------------------------
    # Named views
    # ------------------------------------------------------------------

    def find_name(self, name: str) -> View | None:
        """First view called *name*, searching from the top layer down."""
        for layer in reversed(list(self._layers)):
            found = find_by_name(layer.view, name)
            if found is not None:
                return found[1]
        return None

    def call_on_name(self, name: str, fn: Callable[[Any], Any]) -> Any:
        """Call ``fn(view)`` on the view called *name*; ``None`` if absent."""
        view = self.find_name(name)
        if view is None:
            return None
        self._needs_redraw = True
        return fn(view)

    def focus_name(self, name: str) -> bool:
        view = self.find_name(name)
        if view is None:
            return False
        return self.focus_view(view)

    # ------------------------------------------------------------------
    # Theme and settings
    # ------------------------------------------------------------------

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme
        self._compositor.invalidate()
        self._needs_redraw = True

    def load_theme(self, data: dict[str, Any]) -> None:
        """Merge *data* into the current theme (see :func:`load_theme`)."""
        self.set_theme(load_theme(data, base=self.theme))

    def set_fps(self, fps: int | None) -> None:
        """Redraw *fps* times per second; ``None`` or ``0`` turns it off."""
        if fps:
            self._poll_timeout = 1.0 / fps
            self._autorefresh = True
        else:
            self._poll_timeout = self.settings.poll_timeout
            self._autorefresh = self.settings.autorefresh

    def set_autorefresh(self, autorefresh: bool) -> None:
        self._autorefresh = autorefresh

    # ------------------------------------------------------------------
    # Debug console
    # ------------------------------------------------------------------

    def toggle_debug_console(self) -> None:
        """Show the captured log records in a layer, or hide them again."""
        from tessel.views.debug import DebugView
        from tessel.views.panel import Panel

        if self._debug_console is not None:
            if self._layers.top is not None and self._layers.top.view is self._debug_console:
                self.pop_layer()
                return
            logger.debug("Debug console is not the top layer; opening another")
        console = Panel(DebugView(), title="Debug console")
        self._debug_console = console
        self.add_layer(console)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def screen_size(self) -> Vec2:
        return self.backend.grid_size()

    def request_redraw(self) -> None:
        """Redraw at the end of the current iteration."""
        self._needs_redraw = True

    def invalidate(self) -> None:
        """Repaint every cell on the next frame."""
        self._compositor.invalidate()
        self._needs_redraw = True

    @property
    def full_redraws(self) -> int:
        return self._compositor.full_redraws

    def refresh(self) -> bool:
        """Lay out, paint and flush one frame.  Returns ``True`` on success."""
        grid = self.backend.grid_size()
        if grid != self._last_grid:
            self._compositor.invalidate()
            self._last_grid = grid

        shadow = self.theme.shadow
        self._layers.layout(self._engine, grid, shadow=shadow)
        sizes = self._layers.layer_sizes()
        if sizes != self._last_layer_sizes:
            self._compositor.invalidate()
            self._last_layer_sizes = sizes
        if self._layers.take_full_redraw():
            self._compositor.invalidate()

        buffer = self._compositor.begin_frame(grid)
        self._layers.draw(Printer(buffer, self.theme), shadow=shadow)

        try:
            self._compositor.flush(self.backend)
        except OSError:
            logger.exception("Backend flush failed; retrying next iteration")
            self._needs_redraw = True
            return False

        self._needs_redraw = False
        self._last_generation = layout_generation()
        if self.on_frame is not None:
            self.on_frame(self)
        return True

    def layers(self) -> Sequence[Layer]:
        return list(self._layers)
