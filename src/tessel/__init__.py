"""tessel: a terminal UI engine with layered views and differential rendering."""

# Backends
from tessel.backends import Backend, PuppetBackend, TerminalBackend

# Screen buffers and rendering
from tessel.buffer import Cell, ScreenBuffer
from tessel.compositor import Compositor, diff_buffers

# Settings
from tessel.config import Settings

# Errors
from tessel.errors import (
    BackendError,
    ConfigurationError,
    LogicInconsistency,
    TesselError,
)

# Events
from tessel.event import (
    AltChar,
    Callback,
    CharInput,
    CtrlChar,
    Event,
    EventResult,
    FunctionKey,
    Key,
    KeyPress,
    MouseButton,
    MouseHold,
    MousePress,
    MouseRelease,
    Refresh,
    Resize,
)

# Geometry
from tessel.geometry import Direction, Orientation, Rect, Vec2

# Layers
from tessel.layers import LayerPosition, Placement, Position

# Logging capture
from tessel.logger import LogBuffer, init_logging

from tessel.printer import Printer
from tessel.sink import CallbackSink

# Themes
from tessel.theme import (
    BaseColor,
    BorderStyle,
    ColorStyle,
    Effect,
    PaletteColor,
    Rgb,
    Style,
    Theme,
    load_theme,
)
from tessel.tui import TUI

# Views
from tessel.view import View, ViewWrapper
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

__all__ = [
    # Application
    "TUI",
    "Settings",
    "CallbackSink",
    # Backends
    "Backend",
    "PuppetBackend",
    "TerminalBackend",
    # Rendering
    "Cell",
    "ScreenBuffer",
    "Compositor",
    "diff_buffers",
    "Printer",
    # Errors
    "TesselError",
    "ConfigurationError",
    "BackendError",
    "LogicInconsistency",
    # Events
    "Event",
    "EventResult",
    "Callback",
    "Key",
    "FunctionKey",
    "CtrlChar",
    "AltChar",
    "KeyPress",
    "CharInput",
    "MouseButton",
    "MousePress",
    "MouseRelease",
    "MouseHold",
    "Resize",
    "Refresh",
    # Geometry
    "Vec2",
    "Rect",
    "Direction",
    "Orientation",
    # Layers
    "LayerPosition",
    "Placement",
    "Position",
    # Logging
    "LogBuffer",
    "init_logging",
    # Themes
    "BaseColor",
    "BorderStyle",
    "ColorStyle",
    "Effect",
    "PaletteColor",
    "Rgb",
    "Style",
    "Theme",
    "load_theme",
    # Views
    "View",
    "ViewWrapper",
    "Button",
    "DebugView",
    "Dialog",
    "DummyView",
    "LinearLayout",
    "Panel",
    "ScrollView",
    "TextView",
]
