"""
Command senders: where dispatch output goes.

A sender is the origin of a command and the only sink for its output. It has two
logical channels, normal and error, both with printf-style formatting:

    sender.print("Removed %d cookie%s", 2, "s")
    sender.print_err("[CommandErr] <%s> - Not found", "bogus")

Formatting is applied only when arguments are given, so a message carrying a
literal '%' (user input, for instance) prints untouched. None prints as "null".

Implementations
- ConsoleSender: rich consoles (stdout for output, stderr for errors).
- MemorySender: records every line; handy for bots, tests and transcripts.
"""
from collections import defaultdict
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

from .utils import *


def _format(format, args, /):
    if format is None:
        return "null"
    if args:
        return str(format) % tuple("null" if arg is None else arg for arg in args)
    return str(format)


@runtime_checkable
class CommandSender(Protocol):
    """
    Structural type of a sender: anything with print/print_err works.
    """

    def print(self, format, /, *args): ...

    def print_err(self, format, /, *args): ...


class ConsoleSender:
    """
    Sender writing to rich consoles.

    Markup, emoji and highlighting are disabled: command output is user text and
    must never be interpreted (“[CommandErr]” is not a style tag).

    Palette keys
    - output: normal channel
    - error: error channel

    Customization
    - Define a mapping named __styles__ in __main__ to override any palette entry.
    - When colorful is False, styling is suppressed.
    """

    def __init__(self, *, colorful=True, stdout=Unset, stderr=Unset):
        self.colorful = bool(colorful)
        self.stdout = Console() if stdout is Unset else stdout
        self.stderr = Console(stderr=True) if stderr is Unset else stderr

    def _styler(self, style):
        styles = defaultdict(str, {
            "output": "",
            "error": "bold #FF4DA6",  # friendly pinky errors
        } | getattr(__import__("__main__"), "__styles__", {}))
        return styles[style] if self.colorful else ""

    def print(self, format, /, *args):
        self.stdout.print(
            Text(_format(format, args), self._styler("output")),
            markup=False, emoji=False, highlight=False, soft_wrap=True,
        )

    def print_err(self, format, /, *args):
        self.stderr.print(
            Text(_format(format, args), self._styler("error")),
            markup=False, emoji=False, highlight=False, soft_wrap=True,
        )


class MemorySender:
    """
    Sender that records lines instead of printing them.

    Properties
    - lines: every (channel, line) pair in order; channel is "out" or "err".
    - output: normal-channel lines.
    - errors: error-channel lines.
    """

    def __init__(self):
        self._lines = []

    @property
    def lines(self):
        return tuple(self._lines)

    @property
    def output(self):
        return tuple(line for channel, line in self._lines if channel == "out")

    @property
    def errors(self):
        return tuple(line for channel, line in self._lines if channel == "err")

    def print(self, format, /, *args):
        self._lines.append(("out", _format(format, args)))

    def print_err(self, format, /, *args):
        self._lines.append(("err", _format(format, args)))

    def clear(self):
        self._lines.clear()

    def __repr__(self):
        return f"memory-sender(lines={len(self._lines)})"


__all__ = (
    "CommandSender",
    "ConsoleSender",
    "MemorySender",
)
