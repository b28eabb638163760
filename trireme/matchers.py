"""
Trireme type matchers: named, ordered, non-throwing token coercions.

Overview
- Matcher: a named wrapper around a pure `(str) -> value | None` function.
  • None means “no match”; a matcher never raises for bad input.
  • ValueError, TypeError, ArithmeticError and LookupError raised by the wrapped
    function are absorbed and reported as “no match”.
- Built-ins (registered under their names)
  • STRING  ("string")  any token, returned verbatim.
  • INT     ("int")     base-10 integers with an optional sign.
  • FLOAT   ("float")   finite floats.
  • NUMBER  ("number")  int when the token is integral, otherwise a finite float.
  • BOOLEAN ("boolean") true/false, yes/no, on/off, 1/0 (case-insensitive).
- Factories
  • enum_value(enumtype): member lookup by name (case-insensitive, '-' reads as '_').
  • choice(*values): one of a fixed set of strings, answering the declared spelling.
- Registry
  • register(name, function), lookup(name), matchers().

Ordering
- An argument lists its accepted matchers in priority order; the parser tries
  them left to right and keeps the first success. Declaring (NUMBER, STRING)
  lets one argument accept “a page number or a command name”.
"""
import logging
import math
import re
from enum import Enum
from types import MappingProxyType

from .utils import *

logger = logging.getLogger(__name__)

_registry = {}


class Matcher(metaclass=IntrospectableType):
    """
    Named, side-effect free coercion of a raw token into a typed value.

    Calling a matcher returns the coerced value, or None when the token does not
    match. Matchers compare and hash by identity; two matchers with the same
    name are still different matchers.
    """

    __introspectable__ = (
        "name",
        "function",
    )
    __displayable__ = (
        "name",
    )

    def __init__(self, name, function, /):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if not callable(function):
            raise TypeError(f"{type(self).__typename__} 'function' must be callable")
        self._name = name
        self._function = function

    def __call__(self, token, /):
        if not isinstance(token, str):
            return None
        try:
            return self._function(token)
        except (ValueError, TypeError, ArithmeticError, LookupError):
            return None

    def __matcher__(self):
        """
        Introspection hook: identify this object as a Matcher.
        """
        return self


def register(name, function, /):
    """
    Register a coercion function under a unique name and return its Matcher.

    Raises
    - TypeError: when the function is not callable (or name is not a string).
    - ValueError: when the name is empty or already registered.
    """
    matcher = Matcher(name, function)
    if matcher.name in _registry:
        raise ValueError(f"matcher {matcher.name!r} is already registered")
    _registry[matcher.name] = matcher
    logger.debug("registered matcher %r", matcher.name)
    return matcher


def lookup(name, /):
    """
    Return the matcher registered under `name`, or None.
    """
    return _registry.get(name)


def matchers():
    """
    Read-only view of every registered matcher, keyed by name.
    """
    return MappingProxyType(_registry)


def resolve(object, /):
    """
    Normalize a matcher reference into a Matcher.

    Accepts a Matcher, a registered name, or any object providing __matcher__().
    """
    if isinstance(object, Matcher):
        return object
    if hasattr(object, "__matcher__") and callable(object.__matcher__):
        if not isinstance(matcher := object.__matcher__(), Matcher):
            raise TypeError("__matcher__() non-matcher returned")
        return matcher
    if isinstance(object, str):
        if (matcher := lookup(object)) is None:
            raise ValueError(f"unknown matcher {object!r}")
        return matcher
    raise TypeError("matchers must be given as matcher objects or registered names")


def _string(token):
    return token


def _int(token):
    if not re.fullmatch(r"[+-]?\d+", token):
        return None
    return int(token)


def _float(token):
    value = float(token)
    if not math.isfinite(value):
        return None
    return value


def _number(token):
    if (value := _int(token)) is not None:
        return value
    return _float(token)


_truthy = frozenset({"true", "yes", "on", "1"})
_falsy = frozenset({"false", "no", "off", "0"})


def _boolean(token):
    if (lowered := token.lower()) in _truthy:
        return True
    if lowered in _falsy:
        return False
    return None


STRING = register("string", _string)
INT = register("int", _int)
FLOAT = register("float", _float)
NUMBER = register("number", _number)
BOOLEAN = register("boolean", _boolean)


def enum_value(enumtype, /):
    """
    Build a matcher accepting the member names of an Enum.

    Matching is case-insensitive and treats '-' as '_' so "chocolate-chip",
    "Chocolate_Chip" and "CHOCOLATE_CHIP" all resolve to the same member. The
    matcher is not added to the registry.
    """
    if not isinstance(enumtype, type) or not issubclass(enumtype, Enum):
        raise TypeError("enum_value() argument must be an enum type")
    members = {name.lower(): member for name, member in enumtype.__members__.items()}
    return Matcher(enumtype.__name__.lower(), lambda token: members.get(token.lower().replace("-", "_")))


def choice(*values):
    """
    Build a matcher accepting one of a fixed set of strings (case-insensitive).

    The declared spelling is returned, not the user's spelling.
    """
    if not values:
        raise TypeError("choice() requires at least one value")
    table = {}
    for value in values:
        if not isinstance(value, str):
            raise TypeError("choice() values must be strings")
        elif not value or value.lower() in table:
            raise ValueError("choice() values must be non-empty and unique")
        table[value.lower()] = value
    return Matcher("choice", lambda token: table.get(token.lower()))


__all__ = (
    # Classes
    "Matcher",

    # Registry
    "register",
    "lookup",
    "matchers",
    "resolve",

    # Built-ins
    "STRING",
    "INT",
    "FLOAT",
    "NUMBER",
    "BOOLEAN",

    # Factories
    "enum_value",
    "choice",
)
