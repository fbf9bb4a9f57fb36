"""Backends: where events come from and where cells go."""

from tessel.backends.base import Backend
from tessel.backends.input import InputDecoder, parse_sequence
from tessel.backends.puppet import PuppetBackend
from tessel.backends.terminal import TerminalBackend

__all__ = [
    "Backend",
    "InputDecoder",
    "parse_sequence",
    "PuppetBackend",
    "TerminalBackend",
]
