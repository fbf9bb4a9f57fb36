"""Tests for the widgets in tessel.views."""

from __future__ import annotations

import logging

import pytest

from tessel import logger as tessel_logger
from tessel.buffer import ScreenBuffer
from tessel.event import (
    CharInput,
    EventResult,
    Key,
    KeyPress,
    MouseButton,
    MousePress,
    MouseRelease,
)
from tessel.geometry import Direction, Rect, Vec2, Vec2Like, as_vec2
from tessel.layout import LayoutEngine
from tessel.logger import LogBuffer
from tessel.printer import Printer
from tessel.theme import BaseColor, Theme
from tessel.view import View
from tessel.views import (
    Button,
    DebugView,
    Dialog,
    DummyView,
    LinearLayout,
    Panel,
    ScrollView,
    TextView,
)

from .helpers import Probe


def render(view: View, size: Vec2Like) -> ScreenBuffer:
    """Lay *view* out at exactly *size* and draw it into a fresh buffer."""
    size = as_vec2(size)
    LayoutEngine().commit(view, size)
    buf = ScreenBuffer(size)
    view.draw(Printer(buf, Theme()))
    return buf


def noop(tui) -> None:  # type: ignore[no-untyped-def]
    pass


class FakeTUI:
    """Records the calls widget callbacks make."""

    def __init__(self) -> None:
        self.popped = 0
        self.focused: list[View] = []

    def pop_layer(self) -> None:
        self.popped += 1

    def focus_view(self, view: View) -> bool:
        self.focused.append(view)
        return True


# ---------------------------------------------------------------------------
# TextView
# ---------------------------------------------------------------------------


class TestTextView:
    def test_wrap_measures_against_width(self) -> None:
        view = TextView("hello world")
        assert view.required_size((5, 5)) == (5, 2)
        LayoutEngine().negotiate(view, (5, 5))
        assert view.rows() == ["hello", "world"]

    def test_clip_keeps_natural_width(self) -> None:
        view = TextView("hello world", overflow="clip")
        assert view.required_size((5, 5)) == (11, 1)
        assert render(view, (5, 1)).row_text(0) == "hello"

    def test_truncate_adds_ellipsis(self) -> None:
        view = TextView("hello world", overflow="truncate")
        LayoutEngine().negotiate(view, (8, 1))
        assert view.rows() == ["hello..."]

    def test_empty_text(self) -> None:
        assert TextView("").required_size((10, 10)) == (0, 0)

    def test_zero_constraint(self) -> None:
        view = TextView("abc")
        size = LayoutEngine().negotiate(view, (0, 0))
        assert size == (0, 0)

    def test_set_text_invalidates(self) -> None:
        view = TextView("ab")
        assert view.required_size((10, 1)) == (2, 1)
        view.set_text("abcd")
        assert view.required_size((10, 1)) == (4, 1)
        view.append("e")
        assert view.text == "abcde"

    @pytest.mark.parametrize(
        "align, row", [("left", "ab   "), ("center", " ab  "), ("right", "   ab")]
    )
    def test_alignment(self, align: str, row: str) -> None:
        assert render(TextView("ab", align=align), (5, 1)).row_text(0) == row

    def test_invalid_overflow(self) -> None:
        with pytest.raises(ValueError):
            TextView("x", overflow="scroll")


# ---------------------------------------------------------------------------
# Button
# ---------------------------------------------------------------------------


class TestButton:
    def test_measure(self) -> None:
        assert Button("Go", noop).required_size((10, 10)) == (4, 1)

    @pytest.mark.parametrize(
        "event", [KeyPress(Key.ENTER), CharInput(" "), MouseRelease(MouseButton.LEFT, Vec2(0, 0))]
    )
    def test_activation_returns_callback(self, event: object) -> None:
        result = Button("Go", noop).on_event(event)  # type: ignore[arg-type]
        assert result.is_consumed
        assert result.callback is noop

    def test_press_is_consumed_without_callback(self) -> None:
        result = Button("Go", noop).on_event(MousePress(MouseButton.LEFT, Vec2(0, 0)))
        assert result.is_consumed
        assert result.callback is None

    def test_other_keys_are_ignored(self) -> None:
        assert Button("Go", noop).on_event(CharInput("x")).is_ignored

    def test_disabled(self) -> None:
        button = Button("Go", noop)
        button.disable()
        assert button.on_event(KeyPress(Key.ENTER)).is_ignored
        assert not button.take_focus(Direction.FORWARD)
        button.enable()
        assert button.take_focus(Direction.FORWARD)

    def test_draw_focused(self) -> None:
        button = Button("Go", noop)
        button.focused = True
        buf = render(button, (4, 1))
        assert buf.row_text(0) == "<Go>"
        assert buf.get(0, 0).style.bg is BaseColor.RED

    def test_draw_disabled(self) -> None:
        button = Button("Go", noop)
        button.disable()
        assert render(button, (4, 1)).get(0, 1).style.fg is BaseColor.BLUE

    def test_set_label_resizes(self) -> None:
        button = Button("Go", noop)
        button.set_label("Cancel")
        assert button.label == "Cancel"
        assert button.required_size((20, 1)) == (8, 1)


class TestEventResult:
    def test_and_then_chains_callbacks(self) -> None:
        calls: list[str] = []
        first = EventResult.consumed(lambda tui: calls.append("first"))
        chained = first.and_then(lambda tui: calls.append("second"))
        chained.callback(FakeTUI())  # type: ignore[misc]
        assert calls == ["first", "second"]

    def test_and_then_on_plain_consumed(self) -> None:
        chained = EventResult.consumed().and_then(noop)
        assert chained.is_consumed
        assert chained.callback is noop

    def test_and_then_keeps_ignored(self) -> None:
        assert EventResult.ignored().and_then(noop).is_ignored


# ---------------------------------------------------------------------------
# LinearLayout and DummyView
# ---------------------------------------------------------------------------


class TestLinearLayout:
    def test_measure_sums_main_axis(self) -> None:
        layout = LinearLayout.horizontal(Probe(size=(3, 1)), Probe(size=(2, 4)))
        assert layout.required_size((20, 20)) == (5, 4)

    def test_squeezed_children_split_the_space(self) -> None:
        layout = LinearLayout.vertical(Probe(size=(3, 4)), Probe(size=(3, 4)))
        assert LayoutEngine().negotiate(layout, (5, 6)) == (3, 6)
        assert layout.child_rects() == [
            Rect.from_size((0, 0), (3, 3)),
            Rect.from_size((0, 3), (3, 3)),
        ]

    def test_add_and_remove(self) -> None:
        layout = LinearLayout.vertical()
        probe = Probe()
        layout.add_child(Probe()).add_child(probe)
        assert len(layout) == 2
        assert layout.remove_child(1) is probe
        assert len(layout) == 1

    def test_arrow_moves_focus(self) -> None:
        first, second = Button("a", noop), Button("b", noop)
        layout = LinearLayout.horizontal(first, second)
        first.focused = True
        result = layout.on_event(KeyPress(Key.RIGHT))
        assert result.is_consumed
        tui = FakeTUI()
        result.callback(tui)  # type: ignore[misc]
        assert tui.focused == [second]

    def test_arrow_at_edge_is_ignored(self) -> None:
        first, second = Button("a", noop), Button("b", noop)
        layout = LinearLayout.horizontal(first, second)
        first.focused = True
        assert layout.on_event(KeyPress(Key.LEFT)).is_ignored
        assert layout.on_event(KeyPress(Key.DOWN)).is_ignored


class TestDummyView:
    def test_size(self) -> None:
        view = DummyView((3, 2))
        assert view.required_size((10, 10)) == (3, 2)
        view.set_size((1, 1))
        assert view.required_size((10, 10)) == (1, 1)
        assert DummyView().required_size((10, 10)) == (0, 0)


# ---------------------------------------------------------------------------
# Panel
# ---------------------------------------------------------------------------


class TestPanel:
    def test_measure_includes_border_and_title(self) -> None:
        assert Panel(TextView("hi")).required_size((20, 10)) == (4, 3)
        assert Panel(TextView("hi"), "Title").required_size((20, 10)) == (9, 3)

    def test_draw(self) -> None:
        buf = render(Panel(TextView("hi"), "Title"), (9, 3))
        assert buf.text().split("\n") == [
            "┌─Title─┐",
            "│hi     │",
            "└───────┘",
        ]

    def test_title_color(self) -> None:
        buf = render(Panel(TextView("hi"), "Title"), (9, 3))
        assert buf.get(0, 2).style.fg is BaseColor.RED

    def test_set_title(self) -> None:
        panel = Panel(TextView("hi"))
        panel.set_title("A long title")
        assert panel.required_size((40, 10)) == (16, 3)

    def test_set_view(self) -> None:
        panel = Panel(TextView("hi"))
        panel.set_view(TextView("hello"))
        assert panel.required_size((20, 10)) == (7, 3)


# ---------------------------------------------------------------------------
# ScrollView
# ---------------------------------------------------------------------------


def tall_scroll() -> ScrollView:
    lines = [TextView(f"line{i}") for i in range(10)]
    return ScrollView(LinearLayout.vertical(*lines))


class TestScrollView:
    def test_measure_reserves_scrollbar(self) -> None:
        view = tall_scroll()
        assert LayoutEngine().negotiate(view, (10, 4)) == (6, 4)
        assert view.max_offset == (0, 6)
        assert view.is_scrollable()
        assert view.take_focus(Direction.FORWARD)

    def test_arrow_scrolls(self) -> None:
        view = tall_scroll()
        LayoutEngine().negotiate(view, (10, 4))
        assert view.on_event(KeyPress(Key.DOWN)).is_consumed
        assert view.offset == (0, 1)
        buf = ScreenBuffer((6, 4))
        view.draw(Printer(buf, Theme()))
        assert buf.row_text(0).startswith("line1")

    def test_arrow_at_edge_is_ignored(self) -> None:
        view = tall_scroll()
        LayoutEngine().negotiate(view, (10, 4))
        assert view.on_event(KeyPress(Key.UP)).is_ignored

    def test_wheel_scrolls_three_rows(self) -> None:
        view = tall_scroll()
        LayoutEngine().negotiate(view, (10, 4))
        assert view.on_event(MousePress(MouseButton.WHEEL_DOWN, Vec2(0, 0))).is_consumed
        assert view.offset == (0, 3)

    def test_scroll_to_bottom_and_top(self) -> None:
        view = tall_scroll()
        LayoutEngine().negotiate(view, (10, 4))
        view.scroll_to_bottom()
        assert view.offset == (0, 6)
        buf = ScreenBuffer((6, 4))
        view.draw(Printer(buf, Theme()))
        assert buf.row_text(3).startswith("line9")
        view.scroll_to_top()
        assert view.offset == (0, 0)

    def test_scroll_to_is_clamped(self) -> None:
        view = tall_scroll()
        LayoutEngine().negotiate(view, (10, 4))
        view.scroll_to(Vec2(5, 50))
        assert view.offset == (0, 6)
        assert not view.scroll_by(0, 1)

    def test_short_content_does_not_scroll(self) -> None:
        view = ScrollView(TextView("a"))
        assert LayoutEngine().negotiate(view, (10, 4)) == (1, 1)
        assert not view.is_scrollable()
        assert not view.take_focus(Direction.FORWARD)
        assert view.on_event(KeyPress(Key.DOWN)).is_ignored


# ---------------------------------------------------------------------------
# Dialog
# ---------------------------------------------------------------------------


class TestDialog:
    def test_escape_pops_the_layer(self) -> None:
        result = Dialog(TextView("x")).on_event(KeyPress(Key.ESCAPE))
        assert result.is_consumed
        tui = FakeTUI()
        result.callback(tui)  # type: ignore[misc]
        assert tui.popped == 1

    def test_not_dismissible(self) -> None:
        dialog = Dialog(TextView("x"), dismissible=False)
        assert dialog.on_event(KeyPress(Key.ESCAPE)).is_ignored

    def test_buttons_are_separated(self) -> None:
        dialog = Dialog(TextView("Hello"), "T").button("A", noop).button("B", noop)
        assert len(dialog.buttons) == 3
        assert dialog.required_size((40, 20)) == (9, 4)

    def test_draw(self) -> None:
        dialog = Dialog(TextView("Hello"), "T").button("A", noop).button("B", noop)
        buf = render(dialog, (9, 4))
        assert buf.text().split("\n") == [
            "┌───T───┐",
            "│Hello  │",
            "│<A> <B>│",
            "└───────┘",
        ]

    def test_set_content(self) -> None:
        dialog = Dialog(TextView("x"))
        dialog.set_content(TextView("a\nb\nc"))
        assert dialog.required_size((40, 20)) == (4, 5)

    def test_info_has_a_closing_button(self) -> None:
        dialog = Dialog.info("Saved", "Done")
        assert len(dialog.buttons) == 1
        ok = dialog.buttons.children()[0]
        assert isinstance(ok, Button)
        assert ok.label == "Ok"
        tui = FakeTUI()
        ok.on_event(KeyPress(Key.ENTER)).callback(tui)  # type: ignore[misc]
        assert tui.popped == 1


# ---------------------------------------------------------------------------
# DebugView
# ---------------------------------------------------------------------------


def record(msg: str, level: int) -> logging.LogRecord:
    return logging.makeLogRecord(
        {"msg": msg, "levelno": level, "levelname": logging.getLevelName(level)}
    )


class TestDebugView:
    def test_takes_all_space(self) -> None:
        assert DebugView(LogBuffer()).required_size((30, 7)) == (30, 7)

    def test_shows_newest_records(self) -> None:
        buffer = LogBuffer()
        for msg in ("first", "second", "third"):
            buffer.handle(record(msg, logging.INFO))
        buf = render(DebugView(buffer), (40, 2))
        assert buf.row_text(0).rstrip().endswith("second")
        assert buf.row_text(1).rstrip().endswith("third")

    def test_errors_are_colored(self) -> None:
        buffer = LogBuffer()
        buffer.handle(record("boom", logging.ERROR))
        buf = render(DebugView(buffer), (40, 1))
        assert buf.get(0, 0).style.fg is BaseColor.RED

    def test_without_capture(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(tessel_logger, "_buffer", None)
        buf = render(DebugView(), (50, 1))
        assert buf.row_text(0).startswith("Logging is not captured")

    def test_uses_installed_buffer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        buffer = LogBuffer()
        buffer.handle(record("hello", logging.WARNING))
        monkeypatch.setattr(tessel_logger, "_buffer", buffer)
        assert DebugView().buffer is buffer
        assert "hello" in render(DebugView(), (40, 1)).row_text(0)
