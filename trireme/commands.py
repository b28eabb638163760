"""
Trireme command layer: the nodes of a command tree.

What this module provides
- Command: a named node of the command tree with:
  • A name plus case-insensitive aliases.
  • A positional argument schema (see trireme.arguments).
  • An optional handler, called with a CommandContext on dispatch.
  • An optional nested CommandRegistry of sub-commands.
  • A hidden flag (hidden commands are omitted from help listings).

- UNKNOWN_SUBCOMMAND: ready-made handler for “group” commands that only exist
  to hold sub-commands; it reports the first unknown token back to the sender.

Lifecycle
- Setup phase: builder methods (with_argument, with_alias, ...) configure the
  command and return it, so calls chain.
- Registration into a CommandRegistry seals the command (and its sub-tree): from
  then on builder methods raise TypeError. The registry itself is not sealed, it
  should still be fully built before serving.

Quick start
    from trireme import Command, CommandRegistry, INT

    cookie = Command("cookie", "cookies", descr="Cookie commands").with_unknown_subcommand_handler()

    @cookie.command("eat", descr="Eat a cookie").with_argument("amount", types=(INT,), default=1).handle
    def eat(context):
        context.print("Ate %d cookie(s)", context.get("amount"))

    registry = CommandRegistry(cookie)
    registry.dispatch(sender, "cookie eat 2")
"""
import logging
import re

from .arguments import Argument, Arguments
from .context import CommandContext
from .faults import RegistrationError, UnknownSubcommandError
from .parsing import parse
from .utils import *

logger = logging.getLogger(__name__)


def _sanitize_alias(cls, alias, /):
    if not isinstance(alias, str):
        raise TypeError(f"{cls.__typename__} names and aliases must be strings")
    elif not alias:
        raise ValueError(f"{cls.__typename__} names and aliases cannot be empty")
    elif re.search(r"\s", alias):
        raise ValueError(f"{cls.__typename__} name or alias {alias!r} cannot contain whitespace")
    return alias


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate command metadata in place.

    - name/aliases: non-empty, whitespace-free strings, unique case-insensitively.
    - descr: Unset | non-empty string after trimming; defaults to None.
    - handler: Unset | callable; defaults to None.
    - subcommands: Unset | CommandRegistry; defaults to None.
    """
    from .registry import CommandRegistry

    seen = set()
    for alias in (metadata["name"], *metadata["aliases"]):
        if (key := _sanitize_alias(cls, alias).casefold()) in seen:
            raise ValueError(f"{cls.__typename__} name or alias {alias!r} is repeated")
        seen.add(key)
    metadata["aliases"] = list(metadata["aliases"])

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if (handler := metadata["handler"]) is not Unset and not callable(handler):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")
    metadata["handler"] = coalesce(handler)

    if not isinstance(subcommands := metadata["subcommands"], CommandRegistry | Unset):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be a command registry")
    metadata["subcommands"] = coalesce(subcommands)


class Command(metaclass=IntrospectableType):
    """
    A node of the command tree.

    Properties
    - name: primary name, as declared.
    - aliases: alternative names (the name excluded).
    - names: name followed by aliases.
    - descr: short description shown in help (None when omitted).
    - arguments: the Arguments schema.
    - handler: callable(context) or None.
    - subcommands: nested CommandRegistry or None.
    - hidden: omitted from help listings when True.
    - sealed: True once registered; builder methods then raise TypeError.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "arguments",
        "handler",
        "subcommands",
        "hidden",
        "sealed",
    )

    __displayable__ = (
        "name",
        "aliases",
        "descr",
        "arguments",
        "subcommands",
        "hidden",
    )

    def __init__(self, name, /, *aliases, descr=Unset, handler=Unset, subcommands=Unset, hidden=False):
        metadata = {
            "name": name,
            "aliases": aliases,
            "descr": descr,
            "handler": handler,
            "subcommands": subcommands,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(type(self), metadata)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)
        self._arguments = Arguments()
        self._sealed = False
        self._registries = []

    @property
    def names(self):
        return (self._name, *self._aliases)

    def _unsealed(self):
        if self._sealed:
            raise TypeError(f"{type(self).__typename__} {self._name!r} is registered and cannot be modified")

    def seal(self):
        """
        Freeze the builder surface of this command and of its whole sub-tree.

        Called by CommandRegistry.register(); calling it again is harmless.
        """
        self._sealed = True
        self._arguments.seal()
        if self._subcommands is not None:
            for command in self._subcommands:
                command.seal()
        return self

    def with_argument(self, argument, /, *args, **kwargs):
        """
        Append a positional argument.

        Accepts an Argument, or the arguments of the Argument constructor:
            command.with_argument("amount", "count", "How many", types=(INT,), default=1)
        """
        self._unsealed()
        if isinstance(argument, str):
            argument = Argument(argument, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("with_argument() takes extra arguments only when building from a name")
        self._arguments.add(argument)
        return self

    def with_arguments(self, arguments, /):
        """
        Append every argument of an Arguments schema (extra slot included) or iterable.
        """
        self._unsealed()
        for argument in arguments:
            self._arguments.add(argument)
        if isinstance(arguments, Arguments) and arguments.extra is not None:
            self._arguments.add(arguments.extra)
        return self

    def with_extra(self, display, /, descr=Unset, required=False, **kwargs):
        """
        Declare the trailing extra slot (see Argument.extra).
        """
        self._unsealed()
        self._arguments.add(Argument.extra(display, descr, required, **kwargs))
        return self

    def with_alias(self, alias, /):
        """
        Add an alias.

        Raises
        - ValueError: when the alias is already one of this command's names.
        - RegistrationError: when a sibling in a registry holding this command
          already answers to it.
        """
        self._unsealed()
        if self.has_alias(_sanitize_alias(type(self), alias)):
            raise ValueError(f"{type(self).__typename__} name or alias {alias!r} is repeated")
        for registry in self._registries:
            if registry.has_command_with_alias(alias):
                raise RegistrationError(f"A command with the alias {alias!r} already exists")
        self._aliases.append(alias)
        return self

    def with_handler(self, handler, /):
        self._unsealed()
        if not callable(handler):
            raise TypeError(f"{type(self).__typename__} 'handler' must be callable")
        self._handler = handler
        return self

    def with_unknown_subcommand_handler(self):
        """
        Equivalent to with_handler(UNKNOWN_SUBCOMMAND).
        """
        return self.with_handler(UNKNOWN_SUBCOMMAND)

    def with_subcommands(self, subcommands, /):
        from .registry import CommandRegistry

        self._unsealed()
        if not isinstance(subcommands, CommandRegistry):
            raise TypeError(f"{type(self).__typename__} 'subcommands' must be a command registry")
        self._subcommands = subcommands
        return self

    def hide(self, hidden=True, /):
        self._unsealed()
        self._hidden = bool(hidden)
        return self

    def handle(self, handler, /):
        """
        Decorator form of with_handler(): returns the handler unchanged.

            @command.handle
            def run(context): ...
        """
        self.with_handler(handler)
        return handler

    def command(self, name, /, *aliases, **kwargs):
        """
        Create a sub-command, attach it under this command, and return it.

        The nested registry is created on first use. The child is not sealed yet:
        it is sealed together with this command when the tree gets registered.

        Raises
        - RegistrationError: when the name or an alias is taken among siblings.
        """
        from .registry import CommandRegistry

        self._unsealed()
        if self._subcommands is None:
            self._subcommands = CommandRegistry()
        child = type(self)(name, *aliases, **kwargs)
        self._subcommands.attach(child)
        return child

    def has_alias(self, token, /):
        """
        True if `token` is the name or one of the aliases (case-insensitive).
        """
        if not isinstance(token, str):
            return False
        token = token.casefold()
        return any(alias.casefold() == token for alias in self.names)

    def has_aliases(self):
        return bool(self._aliases)

    def is_nested(self):
        """
        True if a sub-command registry is attached (even an empty one).
        """
        return self._subcommands is not None

    def has_subcommands(self):
        return self._subcommands is not None and len(self._subcommands) > 0

    def create_context(self, sender, prefix, tokens, /, report=Unset):
        """
        Build the dispatch context of one call of this command.

        Parameters
        - sender: CommandSender | None
        - prefix: str
          The path as typed by the user.
        - tokens: Iterable[str]
          The tokens left after path resolution.
        - report: Unset | Callable[[CommandException], None]
          Receiver of faults reported through context.report() (see CommandContext).

        Returns
        - None when fewer tokens than the schema minimum were given; a fresh
          CommandContext otherwise.
        """
        tokens = tuple(tokens)
        if len(tokens) < self._arguments.minimum:
            logger.debug("%r needs %d token(s), got %d", prefix, self._arguments.minimum, len(tokens))
            return None
        return CommandContext(prefix, sender, self, parse(self._arguments, tokens), report=report)


def UNKNOWN_SUBCOMMAND(context, /):
    """
    Handler reporting the first leftover token as an unknown sub-command.

    The fault goes through context.report(), so a registry fallback receives it.
    Does nothing when no (or an empty) token was left over.
    """
    if not context.extra or not (token := context.extra[0]):
        return
    context.report(UnknownSubcommandError(
        "Unknown sub-command: '%s'" % token, prefix=context.prefix, input=token,
    ))


__all__ = (
    "Command",
    "UNKNOWN_SUBCOMMAND",
)
