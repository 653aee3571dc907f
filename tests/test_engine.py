"""Tests for the navigation engine."""
from __future__ import annotations

import random

import pytest

from conftest import FakeRenderer, ScriptedDevice, wait_for
from gridmenu import engine as engine_module
from gridmenu.engine import Gui
from gridmenu.events import (
    HidEvent,
    ItemSelected,
    Quit,
    RendererSignal,
    StatefulButtonChange,
    StatelessButtonPress,
    TabChanged,
)
from gridmenu.input import ControllerButton, ControllerEvent
from gridmenu.layout import Layout, LayoutError, Tab, Text
from gridmenu.renderer import RenderError


def _two_tabs() -> Layout:
    return (
        Layout.builder()
        .tab("Settings")
            .line()
                .button_stateful("Wi-Fi", True, 1)
        .tab("System")
            .line()
                .button_stateless("Reboot", 2)
        .build()
    )


def _ragged() -> Layout:
    return Layout([
        Tab("Ragged", [
            [Text("a"), Text("b"), Text("c")],
            [Text("d")],
            [],
            [Text("e"), Text("f")],
        ]),
        Tab("Empty"),
    ])


def _run_until_quit(gui: Gui, renderer: FakeRenderer, *events):
    renderer.send(*events, HidEvent.QUIT)
    return gui.next_event()


# ═══════════════════════════════════════════════════════════════════════════════
# CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════════

def test_initial_draw_and_state(renderer):
    """Test construction draws the full header and first tab once."""
    gui = Gui(_two_tabs(), renderer)

    assert renderer.headers == [["Settings", "System"]]
    assert renderer.item_draws == [(0, 0)]
    assert gui.tab_index == 0
    assert gui.item_position == (0, 0)


def test_snapshot_right_after_construction(renderer):
    """Test the snapshot taken before any input."""
    state = Gui(_two_tabs(), renderer).exit_dumping_state()

    assert state.tab_index == 0
    assert state.item_position == (0, 0)
    assert renderer.closed is True


def test_empty_layout_is_rejected(renderer):
    """Test a layout without tabs cannot drive the engine."""
    with pytest.raises(LayoutError):
        Gui(Layout([]), renderer)


def test_initial_draw_failure_propagates():
    """Test the initial draw failure is wrapped in RenderError."""
    with pytest.raises(RenderError) as excinfo:
        Gui(_two_tabs(), FakeRenderer(fail_items=True))
    assert isinstance(excinfo.value.__cause__, OSError)


# ═══════════════════════════════════════════════════════════════════════════════
# END TO END
# ═══════════════════════════════════════════════════════════════════════════════

def test_end_to_end_toggle_change_tab_quit(renderer):
    """Test toggle, tab change and quit in one session."""
    layout = _two_tabs()
    gui = Gui(layout, renderer)

    renderer.send(HidEvent.BUTTON_PRESS)
    assert gui.next_event() == StatefulButtonChange("Wi-Fi", False, 1)

    renderer.send(HidEvent.NEXT_TAB)
    assert gui.next_event() == TabChanged("System", 1)
    assert gui.item_position == (0, 0)

    renderer.send(HidEvent.QUIT)
    assert gui.next_event() == Quit()

    state = gui.exit_dumping_state()
    assert state.tab_index == 1
    assert state.item_position == (0, 0)
    assert state.layout.tab(0).item_at(0, 0).state is False


# ═══════════════════════════════════════════════════════════════════════════════
# ACTIVATION
# ═══════════════════════════════════════════════════════════════════════════════

def test_stateful_button_toggles_only_itself(renderer):
    """Test pressing a toggle flips only the focused button."""
    layout = Layout.builder().tab("T").line() \
        .button_stateful("one", True, 10) \
        .button_stateful("two", True, 20) \
        .build()
    gui = Gui(layout, renderer)

    renderer.send(HidEvent.RIGHT, HidEvent.BUTTON_PRESS)
    assert gui.next_event() == StatefulButtonChange("two", False, 20)

    grid = layout.tab(0).grid
    assert grid[0][0].state is True
    assert grid[0][1].state is False
    assert renderer.item_draws[-1] == (0, 1)

    renderer.send(HidEvent.BUTTON_PRESS)
    assert gui.next_event() == StatefulButtonChange("two", True, 20)


def test_stateless_button_does_not_mutate_layout(renderer):
    """Test a momentary button reports its id and changes nothing."""
    layout = _two_tabs()
    before = layout.to_dict()
    gui = Gui(layout, renderer)

    renderer.send(HidEvent.NEXT_TAB)
    gui.next_event()
    draws = len(renderer.item_draws)

    renderer.send(HidEvent.BUTTON_PRESS)
    assert gui.next_event() == StatelessButtonPress("Reboot", 2)
    assert layout.to_dict() == before
    assert len(renderer.item_draws) == draws


def test_pressing_text_or_empty_cell_is_a_no_op(renderer):
    """Test pressing on text or an empty tab emits nothing."""
    gui = Gui(_ragged(), renderer)

    assert _run_until_quit(gui, renderer, HidEvent.BUTTON_PRESS) == Quit()
    assert renderer.item_draws == [(0, 0)]


# ═══════════════════════════════════════════════════════════════════════════════
# TABS
# ═══════════════════════════════════════════════════════════════════════════════

def test_previous_tab_at_first_tab_is_idempotent(renderer):
    """Test previous tab on the first tab does nothing."""
    gui = Gui(_two_tabs(), renderer)

    assert _run_until_quit(gui, renderer, HidEvent.PREVIOUS_TAB) == Quit()
    assert gui.tab_index == 0
    assert renderer.headers == [["Settings", "System"]]


def test_next_tab_at_last_tab_is_idempotent(renderer):
    """Test next tab on the last tab does nothing."""
    gui = Gui(_two_tabs(), renderer)

    renderer.send(HidEvent.NEXT_TAB)
    assert gui.next_event() == TabChanged("System", 1)

    assert _run_until_quit(gui, renderer, HidEvent.NEXT_TAB) == Quit()
    assert gui.tab_index == 1


def test_last_tab_is_reachable(renderer):
    """Test the last tab can be reached with next tab."""
    layout = Layout.builder().tab("A").tab("B").tab("C").build()
    gui = Gui(layout, renderer)

    renderer.send(HidEvent.NEXT_TAB, HidEvent.NEXT_TAB)
    assert gui.next_event() == TabChanged("B", 1)
    assert gui.next_event() == TabChanged("C", 2)
    assert gui.tab_index == layout.max_tab_index()


def test_tab_change_resets_focus_and_slices_header(renderer):
    """Test a tab change resets focus and redraws the header from the new tab."""
    layout = (
        Layout.builder()
        .tab("A").line().text("1").text("2").line().text("3")
        .tab("B").line().text("x")
        .tab("C")
        .build()
    )
    gui = Gui(layout, renderer)

    renderer.send(HidEvent.DOWN, HidEvent.NEXT_TAB)
    assert gui.next_event() == TabChanged("B", 1)

    assert gui.item_position == (0, 0)
    assert renderer.headers[-1] == ["B", "C"]
    assert renderer.item_draws[-1] == (0, 0)

    renderer.send(HidEvent.PREVIOUS_TAB)
    assert gui.next_event() == TabChanged("A", 0)
    assert renderer.headers[-1] == ["A", "B", "C"]


# ═══════════════════════════════════════════════════════════════════════════════
# FOCUS MOVES
# ═══════════════════════════════════════════════════════════════════════════════

def test_row_move_skips_rows_too_short_for_column(renderer):
    """Test vertical moves onto rows without the current column are skipped."""
    gui = Gui(_ragged(), renderer)

    _run_until_quit(gui, renderer, HidEvent.RIGHT, HidEvent.RIGHT, HidEvent.DOWN)
    assert gui.item_position == (0, 2)

    _run_until_quit(gui, renderer, HidEvent.LEFT, HidEvent.LEFT, HidEvent.DOWN)
    assert gui.item_position == (1, 0)

    # Row 2 is empty: the move is skipped.
    _run_until_quit(gui, renderer, HidEvent.DOWN)
    assert gui.item_position == (1, 0)


def test_column_move_clamps_to_current_row(renderer):
    """Test horizontal moves stop at the ends of the current row."""
    gui = Gui(_ragged(), renderer)

    _run_until_quit(gui, renderer, *[HidEvent.RIGHT] * 5)
    assert gui.item_position == (0, 2)

    _run_until_quit(gui, renderer, *[HidEvent.LEFT] * 5, HidEvent.UP)
    assert gui.item_position == (0, 0)


def test_redraw_only_when_focus_changes(renderer):
    """Test clamped moves do not redraw."""
    gui = Gui(_ragged(), renderer)

    _run_until_quit(gui, renderer, HidEvent.LEFT, HidEvent.UP, HidEvent.RIGHT, HidEvent.RIGHT)
    assert renderer.item_draws == [(0, 0), (0, 1), (0, 2)]
    assert renderer.headers == [["Ragged", "Empty"]]


def test_moves_on_empty_tab_stay_at_origin(renderer):
    """Test moves on a tab without items keep focus at the origin."""
    gui = Gui(_ragged(), renderer)
    renderer.send(HidEvent.NEXT_TAB)
    gui.next_event()

    _run_until_quit(
        gui, renderer,
        HidEvent.DOWN, HidEvent.RIGHT, HidEvent.UP, HidEvent.LEFT, HidEvent.BUTTON_PRESS,
    )
    assert gui.item_position == (0, 0)


def test_focus_always_points_at_an_item():
    """Test random move sequences never leave the grid."""
    moves = [HidEvent.UP, HidEvent.DOWN, HidEvent.LEFT, HidEvent.RIGHT]
    rng = random.Random(1234)
    layout = _ragged()
    renderer = FakeRenderer()
    gui = Gui(layout, renderer)
    tab = layout.tab(0)

    for _ in range(200):
        _run_until_quit(gui, renderer, rng.choice(moves))
        assert tab.item_at(*gui.item_position) is not None


def test_report_focus_emits_item_selected(renderer):
    """Test focus moves are reported when report_focus is set."""
    gui = Gui(_ragged(), renderer, report_focus=True)

    renderer.send(HidEvent.RIGHT)
    assert gui.next_event() == ItemSelected("b", (0, 1))

    renderer.send(HidEvent.LEFT, HidEvent.DOWN)
    assert gui.next_event() == ItemSelected("a", (0, 0))
    assert gui.next_event() == ItemSelected("d", (1, 0))


# ═══════════════════════════════════════════════════════════════════════════════
# RENDERER EVENTS
# ═══════════════════════════════════════════════════════════════════════════════

def test_refresh_redraws_without_moving_focus(renderer):
    """Test a refresh redraws both regions and keeps focus."""
    gui = Gui(_two_tabs(), renderer)

    _run_until_quit(gui, renderer, RendererSignal.REFRESH)
    assert len(renderer.headers) == 2
    assert renderer.item_draws == [(0, 0), (0, 0)]
    assert gui.item_position == (0, 0)


def test_window_closed_quits(renderer):
    """Test a closed window ends the call with Quit."""
    gui = Gui(_two_tabs(), renderer)
    renderer.send(RendererSignal.WINDOW_CLOSED)
    assert gui.next_event() == Quit()


def test_draw_failure_during_loop_propagates(renderer):
    """Test a redraw failure in the loop surfaces as RenderError."""
    gui = Gui(_two_tabs(), renderer)
    renderer.fail_items = True
    renderer.send(RendererSignal.REFRESH)

    with pytest.raises(RenderError) as excinfo:
        gui.next_event()
    assert isinstance(excinfo.value.__cause__, OSError)


def test_ignore_input_discards_but_still_refreshes(renderer):
    """Test ignored input is dropped while refresh still redraws."""
    layout = _two_tabs()
    gui = Gui(layout, renderer)
    gui.set_ignore_input(True)

    renderer.send(
        HidEvent.BUTTON_PRESS,
        HidEvent.NEXT_TAB,
        HidEvent.QUIT,
        RendererSignal.REFRESH,
        RendererSignal.WINDOW_CLOSED,
    )
    assert gui.next_event() == Quit()

    assert layout.tab(0).item_at(0, 0).state is True
    assert gui.tab_index == 0
    assert len(renderer.headers) == 2

    gui.set_ignore_input(False)
    renderer.send(HidEvent.BUTTON_PRESS)
    assert gui.next_event() == StatefulButtonChange("Wi-Fi", False, 1)


def test_tick_runs_between_inputs(renderer):
    """Test the renderer is ticked on idle iterations."""
    gui = Gui(_two_tabs(), renderer)
    _run_until_quit(gui, renderer, HidEvent.LEFT, HidEvent.UP)
    assert renderer.ticks == 2


def test_loop_runs_without_any_source(monkeypatch):
    """Test the loop keeps ticking and sleeping when nothing produces input."""

    class _Stop(Exception):
        pass

    sleeps: list[float] = []
    monkeypatch.setattr(engine_module.time, "sleep", sleeps.append)

    renderer = FakeRenderer(with_events=False)

    def _tick():
        renderer.ticks += 1
        if renderer.ticks == 3:
            raise _Stop

    renderer.tick = _tick
    gui = Gui(_two_tabs(), renderer, poll_timeout=0.002)

    with pytest.raises(_Stop):
        gui.next_event()
    assert sleeps == [0.002] * 3


def test_closed_gui_refuses_events(renderer):
    """Test next_event fails once the engine is shut down."""
    gui = Gui(_two_tabs(), renderer)
    gui.exit_dumping_state()
    with pytest.raises(RuntimeError):
        gui.next_event()


# ═══════════════════════════════════════════════════════════════════════════════
# DEVICE INPUT
# ═══════════════════════════════════════════════════════════════════════════════

def test_device_input_drives_the_engine(renderer):
    """Test controller input moves focus and presses buttons."""
    device = ScriptedDevice([
        ControllerEvent(ControllerButton.SOUTH, pressed=True),
        ControllerEvent(ControllerButton.SOUTH, pressed=False),
        ControllerEvent(ControllerButton.R, pressed=True),
        ControllerEvent(ControllerButton.MODE, pressed=True),
    ])
    gui = Gui(_two_tabs(), renderer, device=device)

    assert gui.next_event() == StatefulButtonChange("Wi-Fi", False, 1)
    assert gui.next_event() == TabChanged("System", 1)
    assert gui.next_event() == Quit()

    gui.exit_dumping_state()
    device.unplug()


def test_device_input_has_priority_over_renderer_input(renderer):
    """Test queued controller input is handled before renderer input."""
    device = ScriptedDevice([ControllerEvent(ControllerButton.SOUTH)])
    gui = Gui(_two_tabs(), renderer, device=device)
    assert wait_for(lambda: gui._device_source.queue.qsize() == 1)

    renderer.send(HidEvent.NEXT_TAB)
    assert gui.next_event() == StatefulButtonChange("Wi-Fi", False, 1)
    assert gui.next_event() == TabChanged("System", 1)

    gui.exit_dumping_state()
    device.unplug()


def test_device_only_without_renderer_events():
    """Test a renderer without events still works with a controller."""
    renderer = FakeRenderer(with_events=False)
    device = ScriptedDevice([
        ControllerEvent(ControllerButton.L),
        ControllerEvent(ControllerButton.MODE),
    ])
    gui = Gui(_two_tabs(), renderer, device=device)

    assert gui.next_event() == Quit()
    assert gui.tab_index == 0

    gui.exit_dumping_state()
    device.unplug()


def test_unplugged_device_stops_contributing(renderer):
    """Test an unplugged controller leaves renderer input working."""
    device = ScriptedDevice([])
    gui = Gui(_two_tabs(), renderer, device=device)
    assert device.exhausted.wait(2.0)
    device.unplug()
    assert wait_for(lambda: not gui._device_source.is_alive())

    renderer.send(HidEvent.BUTTON_PRESS)
    assert gui.next_event() == StatefulButtonChange("Wi-Fi", False, 1)
