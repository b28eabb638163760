"""
Positional binding of raw tokens to an argument schema.

parse(arguments, tokens) walks the schema left to right:
1. each declared argument consumes the next token, if any remains;
2. a consumed token is coerced by the argument's matchers in order; when none
   accepts it the value is None but the raw input is kept, so later checks can
   tell “no input” from “invalid input”;
3. without a token the declared default is bound (input stays None), or None;
4. leftovers are kept verbatim as `extra` and, when the schema declares an extra
   slot, also bound to it as a tuple.

Missing required input is not an error at this level: callers compare the token
count against `Arguments.minimum` before parsing.
"""
import logging
from typing import NamedTuple

from .arguments import Argument, Arguments
from .utils import *

logger = logging.getLogger(__name__)


class ParsedArgument(NamedTuple):
    """
    Binding of one schema entry for a single dispatch.

    - argument: the Argument specification.
    - input: the raw token, or None when no token was supplied.
    - value: the coerced value, the default, or None.
    """
    argument: Argument
    input: str | None
    value: object

    @property
    def name(self):
        return self.argument.name

    @property
    def supplied(self):
        return self.input is not None

    @property
    def invalid(self):
        """
        True when a token was supplied but no matcher accepted it.
        """
        return self.input is not None and self.value is None


class ParsedArguments(metaclass=IntrospectableType):
    """
    Ordered, read-only result of parse(): one record per schema entry plus the
    leftover token bucket (`extra`).
    """

    __introspectable__ = (
        "records",
        "extra",
    )

    def __init__(self, records, extra=(), /):
        self._records = tuple(records)
        self._extra = tuple(extra)
        self._index = {record.argument.name: record for record in self._records}

    def record(self, name, /):
        """
        Full ParsedArgument for `name`, or None when the schema has no such entry.
        """
        return self._index.get(name)

    def get(self, name, default=None, /):
        """
        Coerced value for `name`; `default` when the entry is unknown or its value is None.
        """
        if (record := self._index.get(name)) is None or record.value is None:
            return default
        return record.value

    def input(self, name, /):
        """
        Raw token bound to `name`, or None.
        """
        if (record := self._index.get(name)) is None:
            return None
        return record.input

    def inputs(self):
        """
        Raw tokens bound to declared positionals, in order (unsupplied entries skipped).
        """
        return tuple(
            record.input for record in self._records
            if record.input is not None and not record.argument.variadic
        )

    def __contains__(self, name):
        return name in self._index

    def __iter__(self):
        return iter(self._records)

    def __len__(self):
        return len(self._records)


def parse(arguments, tokens, /):
    """
    Bind `tokens` to `arguments` and return a fresh ParsedArguments.

    Parameters
    - arguments: Arguments
      The command schema.
    - tokens: Iterable[str]
      Raw tokens left after path resolution.

    Returns
    - ParsedArguments: never shared between calls.
    """
    if not isinstance(arguments, Arguments):
        raise TypeError("parse() first argument must be an argument schema")

    tokens = list(tokens)
    records = []
    index = 0

    for argument in arguments:
        if index < len(tokens):
            token = tokens[index]
            index += 1
            records.append(ParsedArgument(argument, token, argument.match(token)))
        elif argument.has_default:
            records.append(ParsedArgument(argument, None, argument.default))
        else:
            records.append(ParsedArgument(argument, None, None))

    extra = tokens[index:]

    if (slot := arguments.extra) is not None:
        if extra:
            records.append(ParsedArgument(slot, " ".join(extra), tuple(extra)))
        else:
            records.append(ParsedArgument(slot, None, coalesce(slot.default)))

    logger.debug("bound %d token(s) to %d argument(s), %d left over", index, len(arguments), len(extra))
    return ParsedArguments(records, extra)


__all__ = (
    "ParsedArgument",
    "ParsedArguments",
    "parse",
)
