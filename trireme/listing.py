"""
Help listings: the text layout behind the built-in help command.

HelpListing is a strategy object. A registry builds one per help request
(`listing(path, commands)`), so every formatting step can be replaced by passing
a subclass, or any factory with the same call shape, as `listing=` to the
registry:

    class Terse(HelpListing):
        def format_description(self, descr):
            return ""

    registry = CommandRegistry(listing=Terse)
    registry = CommandRegistry(listing=functools.partial(HelpListing, page_size=10))

Layout of a page
    Usage: cookie <command>

    Commands:
      eat [amount] [type] - Eat a cookie
      give <player> [amount] - Give cookies
    Page 1/2                   (only when page_size splits the listing)
"""
import math

from .utils import *


def _slots(arguments, /):
    return (*arguments, arguments.extra) if arguments.extra is not None else tuple(arguments)


class HelpListing(metaclass=IntrospectableType):
    """
    Paginated help of the commands visible at one level of the tree.

    Parameters
    - path: str
      The path leading to this level ("" at the root).
    - commands: Iterable[Command]
      The commands to list, in order.
    - page_size: Unset | int
      Commands per page; a single page holds everything when Unset.
    """

    __introspectable__ = (
        "path",
        "commands",
        "page_size",
    )

    def __init__(self, path, commands, /, page_size=Unset):
        if not isinstance(path, str):
            raise TypeError(f"{type(self).__typename__} 'path' must be a string")
        if not isinstance(page_size, int | Unset) or isinstance(page_size, bool):
            raise TypeError(f"{type(self).__typename__} 'page_size' must be an integer")
        elif page_size is not Unset and page_size < 1:
            raise ValueError(f"{type(self).__typename__} 'page_size' must be positive")
        self._path = path
        self._commands = list(commands)
        self._page_size = page_size

    def format_full_command(self, path, /):
        return path

    def format_argument(self, display, required, /):
        return f"<{display}>" if required else f"[{display}]"

    def format_arguments(self, arguments, /):
        """
        Format every positional of a schema, then its extra slot if any.
        """
        return " ".join(self.format_argument(argument.display, argument.required) for argument in _slots(arguments))

    def format_aliases(self, names, /):
        return "/".join(names)

    def format_description(self, descr, /):
        if not descr:
            return ""
        return f"- {descr}"

    def format_command(self, command, /):
        """
        One line for a leaf command: names, argument slots and description.
        """
        listing = f"{self.format_aliases(command.names)} {self.format_arguments(command.arguments)}".strip()
        return f"{listing} {self.format_description(command.descr)}".strip()

    def format_nested_command(self, command, /):
        """
        One line for a command holding sub-commands: names, "<command>" and description.
        """
        listing = f"{self.format_aliases(command.names)} {self.format_argument('command', True)}".strip()
        return f"{listing} {self.format_description(command.descr)}".strip()

    def command_help(self, command, /):
        if command.is_nested():
            return self.format_nested_command(command)
        return self.format_command(command)

    def command_details(self, command, /):
        """
        Detailed help of one command: its full usage line, then one line per argument.
        """
        lines = [f"{self.format_full_command(self._path)} {self.format_command(command)}".strip()]
        for argument in _slots(command.arguments):
            line = f"{self.format_argument(argument.display, argument.required)} {self.format_description(argument.descr)}"
            lines.append("  " + line.strip())
        return lines

    @property
    def pages(self):
        if self._page_size is Unset or not self._commands:
            return 1
        return math.ceil(len(self._commands) / self._page_size)

    def page(self, number=1, /):
        """
        Lines of the 1-based page `number`, or None when there is no such page.
        """
        if not isinstance(number, int) or not 1 <= number <= self.pages:
            return None

        commands = self._commands
        if self._page_size is not Unset:
            start = (number - 1) * self._page_size
            commands = commands[start:start + self._page_size]

        usage = " ".join(filter(None, (self.format_full_command(self._path), "<command>")))
        lines = [f"Usage: {usage}", "", "Commands:"]
        lines.extend("  " + self.command_help(command) for command in commands)
        if self.pages > 1:
            lines.append(f"Page {number}/{self.pages}")
        return lines


__all__ = (
    "HelpListing",
)
