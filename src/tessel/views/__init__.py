"""Widgets built on the view contract."""

from tessel.views.button import Button
from tessel.views.debug import DebugView
from tessel.views.dialog import Dialog
from tessel.views.dummy import DummyView
from tessel.views.linear import LinearLayout
from tessel.views.panel import Panel
from tessel.views.scroll import ScrollView
from tessel.views.text import Align, Overflow, TextView

__all__ = [
    "Align",
    "Button",
    "DebugView",
    "Dialog",
    "DummyView",
    "LinearLayout",
    "Overflow",
    "Panel",
    "ScrollView",
    "TextView",
]
