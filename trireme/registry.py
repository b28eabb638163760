"""
Trireme command registry: resolution and dispatch.

A CommandRegistry is an ordered set of Commands addressed by name or alias
(case-insensitive). Registries nest: a Command holding a registry of its own
routes the next token to one of its sub-commands.

Dispatch of one input line
1. Split the line on runs of whitespace (no quoting; empty input does nothing).
2. Resolve the path greedily: the first token names a top-level command, then
   while the current command holds sub-commands and the next token names one
   of them, descend. The consumed tokens form the prefix, the rest are the
   command's argument tokens.
3. Create the context (fails when fewer tokens than the schema minimum), then
   call context_created(context), even when creation failed.
4. Reject a required, non-nullable argument whose value is None.
5. Ask will_dispatch(command, context); a veto stops silently.
6. Run the handler. An exception raised by it is logged and reported; it never
   escapes dispatch().
7. Call did_dispatch(command, context) after a successful run.

Every failure is reported as a fault (see trireme.faults) on the sender's error
channel, or handed to the registry fallback when one is registered.

Hooks
- Pass `before=` / `after=` callables, or subclass and override
  context_created / will_dispatch / did_dispatch.
"""
import copy
import logging
import operator
from typing import NamedTuple

from .arguments import Argument
from .commands import Command
from .faults import *
from .listing import HelpListing
from .matchers import NUMBER, STRING
from .utils import *

logger = logging.getLogger(__name__)


class CommandInfo(NamedTuple):
    """
    Result of path resolution.

    - prefix: the consumed tokens joined by single spaces, as typed.
    - command: the deepest command reached.
    - tokens: the tokens left for the command's arguments.
    """
    prefix: str
    command: Command
    tokens: tuple


def _tokens(line, /):
    if line is None:
        return ()
    if isinstance(line, str):
        return tuple(line.split())
    tokens = tuple(line)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("dispatch() input must be a string or an iterable of strings")
    return tokens


class CommandRegistry(metaclass=IntrospectableType):
    """
    Ordered collection of commands with dispatch.

    Parameters
    - *commands: Command
      Registered in order (see register()).
    - listing: Callable[[str, Sequence[Command]], HelpListing]
      Factory of help listings, HelpListing by default.
    - before: Unset | Callable[[Command, CommandContext], bool]
      Consulted by will_dispatch(); a falsy result vetoes the dispatch.
    - after: Unset | Callable[[Command, CommandContext], None]
      Called by did_dispatch() after a successful run.
    """

    __introspectable__ = (
        "commands",
        "listing",
    )

    __displayable__ = (
        "commands",
    )

    def __init__(self, *commands, listing=HelpListing, before=Unset, after=Unset):
        if not callable(listing):
            raise TypeError(f"{type(self).__typename__} 'listing' must be callable")
        for name, hook in (("before", before), ("after", after)):
            if hook is not Unset and not callable(hook):
                raise TypeError(f"{type(self).__typename__} {name!r} must be callable")

        self._commands = []
        self._listing = listing
        self._before = before
        self._after = after
        self._fallback = Unset

        for command in commands:
            self.register(command)

    def attach(self, command, /):
        """
        Add a command without sealing it.

        Used by Command.command() while a tree is still being built; prefer
        register() everywhere else.

        Raises
        - TypeError: when `command` is not a Command.
        - RegistrationError: when one of its names is already taken here.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} can only hold commands")
        for alias in command.names:
            if self.has_command_with_alias(alias):
                raise RegistrationError(f"A command with the alias {alias!r} already exists")
        self._commands.append(command)
        # lets with_alias() see the siblings
        command._registries.append(self)
        logger.debug("attached command %r", command.name)
        return self

    def register(self, command, /):
        """
        Add a command and seal it (and its sub-tree).

        Returns
        - self, for chaining.
        """
        self.attach(command)
        command.seal()
        return self

    push = register

    def lookup(self, token, /):
        """
        The command whose name or alias is `token` (case-insensitive), or None.
        """
        for command in self._commands:
            if command.has_alias(token):
                return command
        return None

    def has_command_with_alias(self, token, /):
        return self.lookup(token) is not None

    def visible_commands(self, sender, /):
        """
        Commands shown to `sender` in help listings: every non-hidden one.
        """
        return tuple(command for command in self._commands if not command.hidden)

    def resolve_path(self, tokens, /):
        """
        Resolve the longest command path prefix of `tokens`.

        Returns
        - CommandInfo, or None when the first token names no command here.
        """
        tokens = list(_tokens(tokens))
        if not tokens or (command := self.lookup(tokens[0])) is None:
            return None

        prefix = [tokens.pop(0)]
        while tokens and command.subcommands is not None:
            if (child := command.subcommands.lookup(tokens[0])) is None:
                break
            command = child
            prefix.append(tokens.pop(0))

        return CommandInfo(" ".join(prefix), command, tuple(tokens))

    def create_context(self, sender, name, tokens, /):
        """
        Single-level shortcut: context of the command named `name`, or None.
        """
        if (command := self.lookup(name)) is None:
            return None
        return command.create_context(sender, name, tokens)

    def context_created(self, context, /):
        """
        Hook: called right after context creation; `context` is None when it failed.
        """

    def will_dispatch(self, command, context, /):
        """
        Hook: return False to veto the dispatch (silently).
        """
        if self._before is Unset:
            return True
        return bool(self._before(command, context))

    def did_dispatch(self, command, context, /):
        """
        Hook: called after the handler returned normally.
        """
        if self._after is not Unset:
            self._after(command, context)

    def fallback(self, fallback, /):
        """
        Register a one-time receiver of dispatch faults.

        When set, faults are passed to it (with the sender in their options)
        instead of being printed on the sender's error channel.

        Returns
        - The same callable, enabling decorator-style usage: @registry.fallback
        """
        if not callable(fallback):
            raise TypeError(f"{type(self).__typename__} fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError(f"{type(self).__typename__} fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def _fail(self, fault, sender, /):
        fault = copy.replace(fault, sender=sender)
        if self._fallback is Unset:
            trigger(fault, sender)
        else:
            logger.debug("%s handed to fallback", fault.options["code"].name)
            self._fallback(fault)
        return False

    def dispatch(self, sender, line, /):
        """
        Dispatch one input line (a string, or already split tokens).

        Returns
        - True when a handler ran to completion, False otherwise. Failures are
          reported to the sender, never raised.
        """
        if not (tokens := _tokens(line)):
            return False

        if (info := self.resolve_path(tokens)) is None:
            logger.debug("no command for %r", tokens[0])
            return self._fail(UnknownCommandError("[CommandErr] <%s> - Not found" % tokens[0], input=tokens[0]), sender)

        logger.debug("resolved %r with %d token(s) left", info.prefix, len(info.tokens))
        return self._dispatch(sender, info)

    def _dispatch(self, sender, info, /):
        prefix, command, tokens = info

        context = command.create_context(sender, prefix, tokens, report=lambda fault: self._fail(fault, sender))
        self.context_created(context)
        if context is None:
            minimum = command.arguments.minimum
            return self._fail(NotEnoughArgumentsError(
                "[CommandErr] '%s' - Expected at least %d argument(s), but got %d" % (prefix, minimum, len(tokens)),
                prefix=prefix, minimum=minimum, given=len(tokens),
            ), sender)

        for record in context.parsed:
            argument = record.argument
            if argument.required and not argument.nullable and record.value is None:
                return self._fail(InvalidInputError(
                    "[CommandErr] '%s' - Invalid input for argument '%s': \"%s\"" % (
                        prefix, argument.display, "null" if record.input is None else record.input,
                    ),
                    prefix=prefix, argument=argument.name, input=record.input,
                ), sender)

        if not self.will_dispatch(command, context):
            logger.debug("dispatch of %r vetoed", prefix)
            return False

        try:
            if not context.run_self():
                logger.debug("%r has no handler", prefix)
                return False
        except Exception:
            logger.exception("handler of %r failed", prefix)
            return self._fail(DelegatedCommandError("An error occurred while running this command", prefix=prefix), sender)

        self.did_dispatch(command, context)
        logger.debug("dispatched %r", prefix)
        return True

    def help_listing(self, path, sender, /):
        return self._listing(path, self.visible_commands(sender))

    def register_help_command(self, name=Unset, /, *aliases):
        """
        Register the built-in help command.

        Without arguments the command is named "help" with the alias "?". Its one
        optional argument is a page number or the name of a sibling command:
            help            first page of the listing
            help 2          second page
            help eat        detailed help of "eat"
        """
        if name is Unset:
            name, aliases = "help", ("?",)
        command = Command(name, *aliases, descr="View help").with_argument(Argument(
            "arg",
            "page | command",
            "The page to view or a command to get help for",
            types=(NUMBER, STRING),
        ))
        return self.register(command.with_handler(self._help))

    def _help(self, context, /):
        path = " ".join(context.prefix.split()[:-1])
        listing = self.help_listing(path, context.sender)

        match context.get("arg"):
            case None:
                page = 1
            case str() as topic:
                if (command := self.lookup(topic)) is None:
                    context.report(UnknownHelpTopicError(
                        "Sub-command with name/alias '%s' does not exist" % topic, topic=topic,
                    ))
                    return
                for line in listing.command_details(command):
                    context.print(line)
                return
            case number:
                page = int(number)

        if (lines := listing.page(page)) is None:
            context.report(MissingPageError("Page %d does not exist" % page, page=page))
            return
        for line in lines:
            context.print(line)

    def sort(self, key=Unset, /, reverse=False):
        """
        Sort commands in place, by name unless `key` is given.
        """
        self._commands.sort(key=coalesce(key, operator.attrgetter("name")), reverse=reverse)
        return self

    def __contains__(self, object):
        if isinstance(object, Command):
            return any(command is object for command in self._commands)
        return self.has_command_with_alias(object)

    def __iter__(self):
        return iter(tuple(self._commands))

    def __len__(self):
        return len(self._commands)


__all__ = (
    "CommandInfo",
    "CommandRegistry",
)
