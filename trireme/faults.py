"""
Trireme faults (build-time errors and dispatch-time failures).

Scope
- RegistrationError: raised to the caller when a command name/alias collides
  inside a registry. Build-time misuse otherwise raises TypeError/ValueError.
- FaultCode: stable numeric identifiers for dispatch-time failures, grouped by
  domain so logs and host-side handling stay predictable.
- CommandException and subclasses: dispatch-time failures. They are never raised
  out of CommandRegistry.dispatch(); the registry builds one, and surfaces it with
  trigger(), which prints its message on the sender's error channel.
- trigger(): central entry point to surface a fault to a sender.

Message formats
- Every fault carries the exact, user-facing message it prints. The formats of
  the routing, arity, input and delegated faults are fixed and reproduced
  verbatim, hosts parse them.
"""
import copy
import logging
from enum import IntEnum
from types import MappingProxyType

from .utils import Unset

logger = logging.getLogger(__name__)


class RegistrationError(ValueError):
    """
    A command's name or one of its aliases is already taken in a registry.
    """


class FaultCode(IntEnum):
    """
    canonical fault codes used by the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND
    - arguments (1112x)
      • NOT_ENOUGH_ARGUMENTS, INVALID_INPUT
    - delegated errors (1113x)
      • DELEGATED_ERROR
    - help (1115x)
      • UNKNOWN_HELP_TOPIC, MISSING_PAGE
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102

    # --- argument errors (11xxx) ---
    NOT_ENOUGH_ARGUMENTS        = 11122
    INVALID_INPUT               = 11124

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR             = 11131

    # --- help errors (11xxx) ---
    UNKNOWN_HELP_TOPIC          = 11151
    MISSING_PAGE                = 11152


class CommandException(Exception):
    """
    Base class of dispatch-time failures.

    A fault holds a message and a read-only mapping of options (code, prefix,
    input, argument, ...). Options are merged with copy.replace(), so a fault can
    be enriched right before it is triggered.
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": self.code} | options)

    def __str__(self):
        return str(self.message)

    def __trigger__(self, sender, /):
        """
        Print the message on the sender's error channel (no-op without a sender).
        """
        if sender is None:
            return
        sender.print_err(self.message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND


class UnknownSubcommandError(CommandException):
    code = FaultCode.UNKNOWN_SUBCOMMAND


class NotEnoughArgumentsError(CommandException):
    code = FaultCode.NOT_ENOUGH_ARGUMENTS


class InvalidInputError(CommandException):
    code = FaultCode.INVALID_INPUT


class DelegatedCommandError(CommandException):
    code = FaultCode.DELEGATED_ERROR


class UnknownHelpTopicError(CommandException):
    code = FaultCode.UNKNOWN_HELP_TOPIC


class MissingPageError(CommandException):
    code = FaultCode.MISSING_PAGE


def trigger(fault, sender, /, **options):
    """
    surface a fault to a sender with the given extra options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace(fault, **options) before
      triggering.
    - the (merged) fault is returned so callers can hand it on (e.g., to a fallback).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    if options:
        fault = copy.replace(fault, **options)
    logger.debug("%s: %s", getattr(fault.options.get("code"), "name", type(fault).__name__), fault)
    fault.__trigger__(sender)
    return fault


__all__ = (
    "RegistrationError",
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "NotEnoughArgumentsError",
    "InvalidInputError",
    "DelegatedCommandError",
    "UnknownHelpTopicError",
    "MissingPageError",
    "trigger",
)
