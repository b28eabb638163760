r"""
Trireme argument specifications and schemas.

Overview
- Argument: one positional slot of a command schema.
  • name (lookup key), display (label in help and errors), descr (short help).
  • required / nullable flags.
  • types: ordered, accepted matchers (first successful coercion wins).
  • default: value used when no token is left for the slot (Unset when none).
- Argument.extra(...): the trailing “extra” slot that absorbs every token
  beyond the declared positionals, verbatim.
- Arguments: the ordered schema of a command (positionals + at most one extra slot).

Metadata (sanitized on construction)
- name: non-empty string without whitespace.
- display: defaults to the name; non-empty when provided.
- descr: Unset | str, trimmed, non-empty when provided (None when omitted).
- types: non-empty iterable of matchers or registered matcher names, no duplicates.
  Variadic slots accept no matchers (their value is the raw leftovers).

Schema invariants (enforced by Arguments.add)
- Names are unique across the schema, extra slot included.
- A required argument cannot follow an optional one. The minimum-count check
  performed before parsing counts required arguments from the start of the
  schema, so an out-of-order schema would silently mis-bind; it is rejected here.
- At most one extra slot; a required extra slot needs every positional to be
  required too (same reason as above).

Quick example:
    >>> from trireme.arguments import Argument, Arguments
    >>> from trireme.matchers import INT, STRING
    >>> schema = Arguments(
    ...     Argument("target", descr="who to greet", required=True),
    ...     Argument("times", types=(INT,), default=1),
    ... )
    >>> schema.minimum
    1
"""
import re
from collections.abc import Iterable

from . import matchers
from .matchers import STRING
from .utils import *


def _sanitize_name(cls, name, field, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    elif re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespace")
    return name


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate argument metadata in place.

    Responsibilities
    - name: non-empty, whitespace-free string.
    - display: Unset | non-empty string after trimming; defaults to the name.
    - descr: Unset | non-empty string after trimming; defaults to None.
    - types: resolved into a tuple of Matcher objects; duplicates rejected.
      Empty is only legal (and mandatory) for the variadic slot.

    Raises
    - TypeError: for values of the wrong kind.
    - ValueError: for empty strings, duplicated matchers, or a variadic slot with matchers.
    """
    metadata["name"] = _sanitize_name(cls, metadata["name"], "name")

    if not isinstance(display := metadata["display"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'display' must be a string")
    elif isinstance(display, str) and not (display := display.strip()):
        raise ValueError(f"{cls.__typename__} 'display' cannot be empty")
    metadata["display"] = coalesce(display, metadata["name"])

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(types := metadata["types"], Iterable) or isinstance(types, str):
        raise TypeError(f"{cls.__typename__} 'types' must be an iterable of matchers")

    sanitized = []
    for matcher in map(matchers.resolve, types):
        if matcher in sanitized:
            raise ValueError(f"{cls.__typename__} 'types' cannot contain duplicates")
        sanitized.append(matcher)

    if metadata["variadic"] and sanitized:
        raise ValueError(f"variadic {cls.__typename__} cannot declare 'types'")
    if not metadata["variadic"] and not sanitized:
        raise ValueError(f"{cls.__typename__} must accept at least one type")
    metadata["types"] = tuple(sanitized)


class Argument(metaclass=IntrospectableType):
    """
    Positional argument specification.

    An Argument is immutable once built: every field is exposed through a
    read-only property mirroring the sanitized metadata.

    Properties
    - name, display, descr, required, nullable, types, default, variadic
    - has_default: True when a default was declared (even a default of None).
    """

    __introspectable__ = (
        "name",
        "display",
        "descr",
        "required",
        "nullable",
        "types",
        "default",
        "variadic",
    )

    __displayable__ = (
        "name",
        "display",
        "required",
        "nullable",
        "types",
        "default",
    )

    def __init__(
            self,
            name,
            /,
            display=Unset,
            descr=Unset,
            required=False,
            *,
            types=(STRING,),
            default=Unset,
            nullable=False,
            variadic=False,
    ):
        """
        Construct an Argument with the provided metadata.

        Parameters
        - name: str
          Lookup key of the argument in parsed results.
        - display: Unset | str
          Label shown in help and error messages (defaults to name).
        - descr: Unset | str
          Short description for help.
        - required: bool
          Required arguments count towards the schema minimum.
        - types: Iterable[Matcher | str]
          Accepted matchers, in priority order.
        - default: Any
          Value bound when no token remains for this slot. Not validated.
        - nullable: bool
          When True, a required argument may end up with a None value
          (an unmatched token) without failing dispatch.
        - variadic: bool
          Marks the trailing extra slot; prefer Argument.extra(...).
        """
        metadata = {
            "name": name,
            "display": display,
            "descr": descr,
            "required": bool(required),
            "nullable": bool(nullable),
            "types": () if variadic and types == (STRING,) else types,
            "default": default,
            "variadic": bool(variadic),
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @classmethod
    def extra(cls, display, /, descr=Unset, required=False, *, name="extra", default=Unset):
        """
        Build the trailing extra slot of a schema.

        The slot absorbs every token left after the positionals; its parsed
        value is the tuple of those raw tokens.
        """
        return cls(name, display, descr, required, types=(), default=default, variadic=True)

    @property
    def has_default(self):
        return self._default is not Unset

    def match(self, token, /):
        """
        Coerce a raw token with the accepted matchers, in order.

        Returns the first non-None coercion, or None when no matcher accepts it.
        """
        for matcher in self._types:
            if (value := matcher(token)) is not None:
                return value
        return None

    def __argument__(self):
        """
        Introspection hook: identify this object as an Argument.
        """
        return self


class Arguments(metaclass=IntrospectableType):
    """
    Ordered argument schema: positionals followed by at most one extra slot.

    Iteration, len() and index access cover the positional arguments only; the
    extra slot is reachable through `extra`. Name lookups (`get`, `in`) cover both.
    """

    __introspectable__ = (
        "extra",
        "sealed",
    )

    __displayable__ = (
        "positionals",
        "extra",
        "minimum",
    )

    def __init__(self, *arguments):
        self._arguments = []
        self._extra = None
        self._sealed = False
        for argument in arguments:
            self.add(argument)

    @property
    def positionals(self):
        return tuple(self._arguments)

    @property
    def minimum(self):
        """
        Number of tokens a command needs before its schema is even parsed.
        """
        return sum(argument.required for argument in self._arguments) + bool(self._extra and self._extra.required)

    def add(self, argument, /):
        """
        Append an argument (or set the extra slot when `argument.variadic`).

        Raises
        - TypeError: when `argument` is not an Argument, or when the schema is sealed.
        - ValueError: on duplicated names, required-after-optional ordering, or a
          second extra slot.

        Returns
        - self, for chaining.
        """
        if self._sealed:
            raise TypeError(f"sealed {type(self).__typename__} cannot be modified")
        if not isinstance(argument, Argument) and hasattr(argument, "__argument__") and callable(argument.__argument__):
            argument = argument.__argument__()
            if not isinstance(argument, Argument):
                raise TypeError("__argument__() non-argument returned")
        if not isinstance(argument, Argument):
            raise TypeError("arguments can only hold argument specifications")
        if argument.name in self:
            raise ValueError(f"argument name {argument.name!r} is already in use")

        if argument.variadic:
            if self._extra is not None:
                raise ValueError("arguments can only have one extra slot")
            if argument.required and not all(x.required for x in self._arguments):
                raise ValueError("a required extra slot cannot follow optional arguments")
            self._extra = argument
            return self

        if argument.required and self._arguments and not self._arguments[-1].required:
            raise ValueError(
                f"required argument {argument.name!r} cannot follow optional argument {self._arguments[-1].name!r}"
            )
        if not argument.required and self._extra is not None and self._extra.required:
            raise ValueError(f"optional argument {argument.name!r} cannot precede a required extra slot")
        self._arguments.append(argument)
        return self

    def seal(self):
        """
        Reject any further add(); copies start unsealed.
        """
        self._sealed = True
        return self

    def get(self, name, default=None, /):
        """
        Return the argument (or extra slot) named `name`, else `default`.
        """
        for argument in self._arguments:
            if argument.name == name:
                return argument
        if self._extra is not None and self._extra.name == name:
            return self._extra
        return default

    def copy(self):
        arguments = type(self)(*self._arguments)
        if self._extra is not None:
            arguments.add(self._extra)
        return arguments

    def __contains__(self, name):
        return self.get(name) is not None

    def __iter__(self):
        return iter(tuple(self._arguments))

    def __len__(self):
        return len(self._arguments)

    def __getitem__(self, index):
        return self._arguments[index]

    def __bool__(self):
        return bool(self._arguments) or self._extra is not None


__all__ = (
    # Classes (specifications)
    "Argument",
    "Arguments",
)
