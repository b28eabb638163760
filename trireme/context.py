"""
Dispatch contexts: the per-call bundle handed to a command handler.

A CommandContext is created once per dispatch and never reused. It carries the
sender, the resolved prefix (the path the user typed to reach the command), the
resolved Command, its ParsedArguments, and an Attachments slot where hooks can
leave data for the handler (or for did_dispatch) without subclassing anything.
"""
from collections.abc import MutableMapping

from .faults import trigger
from .utils import *

_scalars = (type(None), bool, int, float, str, bytes)


def _check_attachment(key, value, /):
    if not isinstance(key, str):
        raise TypeError("attachment keys must be strings")
    elif not key:
        raise ValueError("attachment keys cannot be empty")
    if isinstance(value, tuple):
        if not all(isinstance(item, _scalars) for item in value):
            raise TypeError(f"attachment {key!r} must be a tuple of None, bool, int, float, str or bytes")
    elif not isinstance(value, _scalars):
        raise TypeError(f"attachment {key!r} must be None, bool, int, float, str, bytes or a tuple of those")


class Attachments(MutableMapping):
    """
    String-keyed data attached to a context.

    Values are limited to a closed set of kinds: None, bool, int, float, str,
    bytes, and flat tuples of those. Anything else raises TypeError on assignment.
    """

    def __init__(self, data=(), /, **kwargs):
        self._data = {}
        self.update(data, **kwargs)

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value):
        _check_attachment(key, value)
        self._data[key] = value

    def __delitem__(self, key):
        del self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return f"attachments({self._data!r})"


class CommandContext(metaclass=IntrospectableType):
    """
    Holds command invocation information: what was run, by whom, with what.

    Properties
    - prefix: the command path as typed (e.g., "cookie eat").
    - sender: the CommandSender (may be None for programmatic calls).
    - command: the resolved Command.
    - parsed: the ParsedArguments of this call.
    - extra: leftover tokens not bound to a declared positional.
    - attachments: Attachments owned by this context.
    """

    __introspectable__ = (
        "prefix",
        "sender",
        "command",
        "parsed",
    )

    def __init__(self, prefix, sender, command, parsed, /, report=Unset):
        self._prefix = prefix
        self._sender = sender
        self._command = command
        self._parsed = parsed
        self._attachments = Attachments()
        self._report = report

    @property
    def attachments(self):
        # not mirrored: the mapping stays writable
        return self._attachments

    @property
    def extra(self):
        return self._parsed.extra

    def get(self, name, default=None, /):
        """
        Coerced value of the argument `name` (or `default`).
        """
        return self._parsed.get(name, default)

    def record(self, name, /):
        return self._parsed.record(name)

    def input_for(self, name, /):
        """
        Raw token supplied for `name`, or None.
        """
        return self._parsed.input(name)

    def has_input_for(self, name, /):
        """
        True if and only if the argument exists and a token was supplied for it.
        """
        return self.input_for(name) is not None

    def inputs_joined(self, delimiter=" ", /):
        return delimiter.join(self._parsed.inputs())

    def extra_joined(self, delimiter=" ", /):
        return delimiter.join(self._parsed.extra)

    @property
    def full_command(self):
        """
        The full command as sent: prefix, argument inputs and extra tokens.
        """
        return " ".join(part for part in (self._prefix, self.inputs_joined(), self.extra_joined()) if part)

    def print(self, format, /, *args):
        """
        Shortcut for sender.print(...); no-op without a sender.
        """
        if self._sender is not None:
            self._sender.print(format, *args)

    def print_err(self, format, /, *args):
        """
        Shortcut for sender.print_err(...); no-op without a sender.
        """
        if self._sender is not None:
            self._sender.print_err(format, *args)

    def report(self, fault, /):
        """
        Surface a fault on behalf of the handler.

        The registry dispatching this context hands it to its fallback, or prints it
        on the sender's error channel. Without a registry, trigger(fault, sender).
        """
        if self._report is Unset:
            trigger(fault, self._sender)
        else:
            self._report(fault)

    def run_self(self):
        """
        Invoke the command's handler with this context.

        Never call this from the handler already running for this same context:
        there is no recursion guard and the call stack will be exhausted.

        Returns
        - False when the command has no handler, True once the handler returned.
        """
        if (handler := self._command.handler) is None:
            return False
        handler(self)
        return True

    def __rich_repr__(self):
        yield "name", self._command.name
        for record in self._parsed:
            yield record.argument.name, record.input


__all__ = (
    "Attachments",
    "CommandContext",
)
