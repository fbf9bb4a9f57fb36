"""End-to-end tests of the TUI loop against the headless backend."""

from __future__ import annotations

import threading
import time

import pytest

from tessel.backends.puppet import PuppetBackend
from tessel.config import Settings
from tessel.errors import ConfigurationError
from tessel.event import (
    CharInput,
    Key,
    MouseButton,
    MousePress,
    MouseRelease,
    Refresh,
)
from tessel.geometry import Rect, Vec2
from tessel.layers import LayerPosition
from tessel.logger import init_logging
from tessel.theme import BaseColor, PaletteColor
from tessel.tui import TUI
from tessel.view import View
from tessel.views import Button, Dialog, LinearLayout, ScrollView, TextView

from .helpers import Probe


def make_tui(size: tuple[int, int] = (80, 24), **settings: object) -> tuple[TUI, PuppetBackend]:
    backend = PuppetBackend(size)
    tui = TUI(backend, Settings(**settings))  # type: ignore[arg-type]
    return tui, backend


class Recorder:
    """Counts how often it is called as a callback."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, tui: TUI) -> None:
        self.calls += 1


class FlakyBackend(PuppetBackend):
    def __init__(self, size: tuple[int, int] = (20, 5)) -> None:
        super().__init__(size)
        self.fail_next = False

    def flush(self) -> None:
        if self.fail_next:
            self.fail_next = False
            raise OSError("EIO")
        super().flush()


# ---------------------------------------------------------------------------
# Focus and activation
# ---------------------------------------------------------------------------


class TestButtonsAndTab:
    """Two buttons side by side: Tab moves the focus, Enter activates."""

    def _setup(self, **settings: object) -> tuple[TUI, PuppetBackend, Recorder, Recorder]:
        tui, backend = make_tui(**settings)
        one, two = Recorder(), Recorder()
        tui.add_fullscreen_layer(
            LinearLayout.horizontal(Button("One", one), Button("Two", two))
        )
        tui.refresh()
        return tui, backend, one, two

    def test_first_button_is_focused(self) -> None:
        tui, backend, _, _ = self._setup()
        assert tui.focus_path() == (0,)
        assert backend.row_text(0).startswith("<One><Two>")

    def test_tab_moves_and_wraps(self) -> None:
        tui, backend, _, _ = self._setup()
        backend.push_key(Key.TAB)
        tui.step(0)
        assert tui.focus_path() == (1,)
        backend.push_key(Key.TAB)
        tui.step(0)
        assert tui.focus_path() == (0,)

    def test_shift_tab_goes_backwards(self) -> None:
        tui, backend, _, _ = self._setup()
        backend.push_key(Key.SHIFT_TAB)
        tui.step(0)
        assert tui.focus_path() == (1,)

    def test_tab_without_wrap_stops_at_last(self) -> None:
        tui, backend, _, _ = self._setup(tab_wrap=False)
        backend.push_key(Key.TAB)
        backend.push_key(Key.TAB)
        tui.step(0)
        assert tui.focus_path() == (1,)

    def test_enter_fires_focused_callback_once(self) -> None:
        tui, backend, one, two = self._setup()
        backend.push_key(Key.TAB)
        backend.push_key(Key.ENTER)
        tui.step(0)
        assert two.calls == 1
        assert one.calls == 0

    def test_focused_button_is_highlighted(self) -> None:
        tui, backend, _, _ = self._setup()
        highlight = tui.theme.palette[PaletteColor.HIGHLIGHT]
        assert backend.cell(0, 1).style.bg is highlight
        assert backend.cell(0, 6).style.bg is not highlight

    def test_arrow_key_moves_focus(self) -> None:
        tui, backend, _, _ = self._setup()
        backend.push_key(Key.RIGHT)
        tui.step(0)
        assert tui.focus_path() == (1,)

    def test_click_focuses_and_activates(self) -> None:
        tui, backend, one, two = self._setup()
        backend.push_event(MousePress(MouseButton.LEFT, Vec2(6, 0)))
        tui.step(0)
        assert tui.focus_path() == (1,)
        assert two.calls == 0
        backend.push_event(MouseRelease(MouseButton.LEFT, Vec2(6, 0)))
        tui.step(0)
        assert two.calls == 1
        assert one.calls == 0


# ---------------------------------------------------------------------------
# Resizing
# ---------------------------------------------------------------------------


class TestResize:
    LONG = " ".join(["word"] * 200)

    def test_wrapped_text_reflows(self) -> None:
        tui, backend = make_tui()
        text = TextView(self.LONG)
        tui.add_fullscreen_layer(text)
        tui.refresh()
        assert backend.row_text(0).startswith("word " * 15)

        backend.resize((40, 12))
        assert tui.step(0)
        assert backend.screen.size == Vec2(40, 12)
        assert text.last_size.fits_in((40, 12))
        assert backend.row_text(0) == "word " * 8
        assert tui.full_redraws == 2

    def test_clipped_text_is_cut_at_the_edge(self) -> None:
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView("x" * 60, overflow="clip"))
        tui.refresh()
        backend.resize((40, 12))
        tui.step(0)
        assert backend.row_text(0) == "x" * 40

    def test_shrink_to_nothing_and_back(self) -> None:
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView(self.LONG))
        tui.refresh()
        backend.resize((0, 0))
        assert tui.step(0)
        backend.resize((10, 2))
        assert tui.step(0)
        assert backend.row_text(0) == "word word "

    def test_floating_layer_recentres(self) -> None:
        tui, backend = make_tui()
        tui.add_layer(Probe("dlg", size=(10, 2)))
        tui.refresh()
        backend.resize((40, 12))
        tui.step(0)
        layer = tui.layers()[0]
        # Shadow takes one extra cell right and below.
        assert layer.offset == Vec2(14, 4)


# ---------------------------------------------------------------------------
# Modal layers
# ---------------------------------------------------------------------------


class TestModalDialog:
    def _setup(self) -> tuple[TUI, PuppetBackend, Recorder, Recorder]:
        tui, backend = make_tui()
        base, yes = Recorder(), Recorder()
        tui.add_fullscreen_layer(Button("Base", base))
        tui.add_layer(Dialog(TextView("Sure?"), title="Q").button("Yes", yes))
        tui.refresh()
        return tui, backend, base, yes

    def test_input_goes_to_dialog(self) -> None:
        tui, backend, base, yes = self._setup()
        assert tui.focus_path() == (1, 0)
        backend.push_key(Key.ENTER)
        tui.step(0)
        assert yes.calls == 1
        assert base.calls == 0

    def test_dialog_is_drawn_over_base(self) -> None:
        _, backend, _, _ = self._setup()
        assert backend.find("Sure?")
        assert backend.find("<Yes>")
        assert backend.find("<Base>") == [Vec2(0, 0)]

    def test_escape_pops_and_restores_routing(self) -> None:
        tui, backend, base, _ = self._setup()
        redraws = tui.full_redraws
        clears = backend.clear_count
        backend.push_key(Key.ESCAPE)
        tui.step(0)
        assert tui.layer_count() == 1
        assert tui.full_redraws == redraws + 1
        assert backend.clear_count == clears + 1
        assert not backend.find("Sure?")

        backend.push_key(Key.ENTER)
        tui.step(0)
        assert base.calls == 1

    def test_click_outside_top_layer_is_dropped(self) -> None:
        tui, backend, base, yes = self._setup()
        backend.push_event(MousePress(MouseButton.LEFT, Vec2(0, 0)))
        backend.push_event(MouseRelease(MouseButton.LEFT, Vec2(0, 0)))
        tui.step(0)
        assert base.calls == 0
        assert yes.calls == 0
        assert tui.focus_path() == (1, 0)

    def test_info_dialog_closes_itself(self) -> None:
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView("background"))
        tui.add_layer(Dialog.info("Done", title="Info"))
        tui.refresh()
        backend.push_key(Key.ENTER)
        tui.step(0)
        assert tui.layer_count() == 1


# ---------------------------------------------------------------------------
# Layer management through the TUI
# ---------------------------------------------------------------------------


class TestLayerManagement:
    def test_move_to_front_changes_input_target(self) -> None:
        tui, backend = make_tui()
        first, second = Recorder(), Recorder()
        tui.add_layer_at((0, 0), Button("First", first))
        tui.add_layer_at((0, 5), Button("Second", second))
        tui.refresh()
        tui.move_to_front(LayerPosition.from_back(0))
        backend.push_key(Key.ENTER)
        tui.step(0)
        assert first.calls == 1
        assert second.calls == 0

    def test_reposition_moves_layer(self) -> None:
        tui, backend = make_tui()
        tui.add_layer_at((0, 0), Probe("pp", size=(2, 1)))
        tui.refresh()
        tui.reposition_layer(LayerPosition.front(0), (10, 3))
        tui.refresh()
        assert backend.find("pp") == [Vec2(10, 3)]

    def test_pop_last_layer(self) -> None:
        tui, _ = make_tui()
        tui.add_layer(Probe())
        assert tui.pop_layer() is not None
        assert tui.pop_layer() is None
        assert tui.refresh()


# ---------------------------------------------------------------------------
# Global callbacks, quitting and cross-thread callbacks
# ---------------------------------------------------------------------------


class TestLoop:
    def test_global_callback_quits(self) -> None:
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView("press q"))
        tui.add_global_callback(CharInput("q"), lambda t: t.quit())
        backend.push_event(CharInput("q"))
        tui.run()
        assert not tui.is_running()
        assert backend.started is False
        assert backend.flush_count >= 1

    def test_consumed_event_skips_global_callback(self) -> None:
        tui, backend = make_tui()
        hits = Recorder()
        tui.add_fullscreen_layer(Button("Go", lambda t: None))
        tui.add_global_callback(CharInput(" "), hits)
        backend.push_event(CharInput(" "))
        tui.step(0)
        assert hits.calls == 0

    def test_clear_global_callbacks(self) -> None:
        tui, backend = make_tui()
        hits = Recorder()
        tui.add_global_callback(CharInput("x"), hits)
        tui.clear_global_callbacks(CharInput("x"))
        backend.push_event(CharInput("x"))
        tui.step(0)
        assert hits.calls == 0

    def test_callbacks_run_before_the_redraw_they_request(self) -> None:
        log: list[str] = []

        class LayoutLogger(View):
            def arrange(self, size: Vec2) -> list[Rect]:
                log.append("layout")
                return []

        tui, _ = make_tui()
        tui.add_fullscreen_layer(LayoutLogger())
        tui.refresh()
        log.clear()

        sink = tui.callback_sink()
        sink.send(lambda t: log.append("cb1"))
        sink.send(lambda t: (log.append("cb2"), t.request_redraw()))
        assert tui.step(0)
        assert log == ["cb1", "cb2", "layout"]

    def test_callback_from_another_thread_runs_on_loop_thread(self) -> None:
        tui, backend = make_tui()
        sink = tui.callback_sink()
        loop_thread = threading.current_thread()
        seen: list[bool] = []

        worker = threading.Thread(
            target=lambda: sink.send(lambda t: seen.append(threading.current_thread() is loop_thread))
        )
        worker.start()
        worker.join()
        tui.step(1.0)
        assert seen == [True]
        assert backend.wake_count == 1

    def test_send_wakes_a_blocked_poll(self) -> None:
        tui, _ = make_tui()
        sink = tui.callback_sink()
        ran: list[int] = []

        def later() -> None:
            time.sleep(0.05)
            sink.send(lambda t: ran.append(1))

        threading.Thread(target=later).start()
        started = time.monotonic()
        tui.step(5.0)
        assert ran == [1]
        assert time.monotonic() - started < 4.0

    def test_idle_step_draws_nothing(self) -> None:
        tui, _ = make_tui()
        tui.add_fullscreen_layer(TextView("idle"))
        tui.refresh()
        assert tui.step(0) is False

    def test_refresh_event_forces_a_frame(self) -> None:
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView("idle"))
        tui.refresh()
        backend.push_event(Refresh())
        assert tui.step(0) is True

    def test_unchanged_frame_writes_nothing(self) -> None:
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView("static"))
        tui.refresh()
        tui.request_redraw()
        tui.step(0)
        assert backend.last_frame_writes == 0

    def test_fps_turns_on_autorefresh(self) -> None:
        tui, _ = make_tui()
        tui.add_fullscreen_layer(TextView("tick"))
        tui.refresh()
        tui.set_fps(30)
        assert tui.step(0) is True
        tui.set_fps(None)
        assert tui.step(0) is False

    def test_settings_fps_enables_autorefresh(self) -> None:
        tui, _ = make_tui(fps=10)
        tui.add_fullscreen_layer(TextView("tick"))
        tui.refresh()
        assert tui.step(0) is True

    def test_autorefresh_without_fps(self) -> None:
        tui, _ = make_tui()
        tui.add_fullscreen_layer(TextView("tick"))
        tui.refresh()
        tui.set_autorefresh(True)
        assert tui.step(0) is True
        tui.set_autorefresh(False)
        assert tui.step(0) is False

    def test_screen_size_follows_backend(self) -> None:
        tui, backend = make_tui((30, 10))
        assert tui.screen_size() == (30, 10)
        backend.resize((20, 5))
        assert tui.screen_size() == (20, 5)


# ---------------------------------------------------------------------------
# Named views
# ---------------------------------------------------------------------------


class TestNamedViews:
    def _setup(self) -> tuple[TUI, PuppetBackend, Recorder]:
        tui, backend = make_tui()
        ok = Recorder()
        tui.add_fullscreen_layer(
            LinearLayout.vertical(
                TextView("hello").with_name("label"),
                Button("Ok", ok).with_name("ok"),
                Button("Cancel", lambda t: None).with_name("cancel"),
            )
        )
        tui.refresh()
        return tui, backend, ok

    def test_find_name(self) -> None:
        tui, _, _ = self._setup()
        assert isinstance(tui.find_name("label"), TextView)
        assert tui.find_name("missing") is None

    def test_call_on_name_updates_screen(self) -> None:
        tui, backend, _ = self._setup()
        tui.call_on_name("label", lambda v: v.set_text("changed"))
        tui.step(0)
        assert backend.row_text(0).startswith("changed")

    def test_call_on_missing_name(self) -> None:
        tui, _, _ = self._setup()
        assert tui.call_on_name("missing", lambda v: 1) is None

    def test_focus_name(self) -> None:
        tui, _, _ = self._setup()
        assert tui.focus_name("cancel")
        assert tui.focus_path() == (2,)
        assert not tui.focus_name("label")

    def test_removed_focused_view_snaps_focus(self) -> None:
        tui, _, _ = self._setup()
        tui.focus_name("cancel")
        root = tui.layers()[0].view
        assert isinstance(root, LinearLayout)
        root.remove_child(2)
        tui.step(0)
        assert tui.focus_path() == (1,)


# ---------------------------------------------------------------------------
# Scrolling
# ---------------------------------------------------------------------------


class TestScrolling:
    def test_arrow_keys_scroll(self) -> None:
        tui, backend = make_tui((20, 4))
        lines = "\n".join(f"line{i}" for i in range(10))
        scroll = ScrollView(TextView(lines))
        tui.add_fullscreen_layer(scroll)
        tui.refresh()
        assert tui.focused_view() is scroll
        backend.push_key(Key.DOWN)
        tui.step(0)
        assert scroll.offset == Vec2(0, 1)
        assert backend.row_text(0).startswith("line1")

    def test_focus_scrolls_into_view(self) -> None:
        tui, _ = make_tui((20, 4))
        buttons = [Button(f"b{i}", lambda t: None) for i in range(10)]
        scroll = ScrollView(LinearLayout.vertical(*buttons))
        tui.add_fullscreen_layer(scroll)
        tui.refresh()
        tui.focus_view(buttons[7])
        tui.step(0)
        assert scroll.offset == Vec2(0, 4)


# ---------------------------------------------------------------------------
# Themes, errors and the debug console
# ---------------------------------------------------------------------------


class TestThemeAndErrors:
    def test_load_theme_repaints_everything(self) -> None:
        tui, backend = make_tui((10, 2))
        tui.add_fullscreen_layer(TextView("hi"))
        tui.refresh()
        tui.load_theme({"palette": {"background": "red"}})
        tui.step(0)
        assert tui.theme.palette[PaletteColor.BACKGROUND] is BaseColor.RED
        assert backend.cell(1, 9).style.bg is BaseColor.RED
        assert backend.clear_count == 2

    def test_bad_theme_is_rejected(self) -> None:
        tui, _ = make_tui()
        with pytest.raises(ConfigurationError):
            tui.load_theme({"palette": {"background": "not-a-color"}})

    def test_draw_error_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        class Broken(View):
            def draw(self, printer) -> None:  # type: ignore[no-untyped-def]
                raise RuntimeError("boom")

        tui, _ = make_tui()
        tui.add_fullscreen_layer(Broken())
        assert tui.refresh() is True
        assert any("Error drawing layer" in r.getMessage() for r in caplog.records)

    def test_failed_flush_is_retried_as_full_redraw(self) -> None:
        backend = FlakyBackend()
        tui = TUI(backend)
        tui.add_fullscreen_layer(TextView("retry"))
        assert tui.refresh()
        backend.fail_next = True
        tui.request_redraw()
        assert tui.step(0) is False
        assert tui.step(0) is True
        assert backend.clear_count == 2
        assert backend.row_text(0).startswith("retry")


class TestDebugConsole:
    def test_toggle(self) -> None:
        init_logging()
        tui, backend = make_tui()
        tui.add_fullscreen_layer(TextView("app"))
        tui.toggle_debug_console()
        assert tui.layer_count() == 2
        tui.refresh()
        assert backend.find("Debug console")

        tui.toggle_debug_console()
        assert tui.layer_count() == 1
