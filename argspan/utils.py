"""
argspan utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the declaration, parsing and fault layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level arguments/parsers layers.

Overview
- UnsetType / Unset
  • Sentinel for “value not provided”, distinct from None. Falsey, printable
    as "Unset", sealed, and preserved as the same object by copy and pickle.
  • Usable on the right of a PEP 604 union: isinstance(x, str | Unset).

- coalesce(*objects, default=None)
  • First object that is not Unset, or default when every object is Unset.
    Falsey values like None, 0 or "" count as provided.

- @rename("name")
  • Give generated methods (__repr__, property getters) a stable
    __name__/__qualname__ for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as an
    immutable view (tuple, frozenset or mapping proxy) so specs cannot be mutated
    through their public API.

- ordinal(number)
  • Human-friendly ordinal for 1-based token positions ("first", "12th", ...), used
    by fault messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(Unset, Unset, default=0)
    0
    >>> ordinal(3), ordinal(11), ordinal(22)
    ('third', '11th', '22nd')
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel; UnsetType() always returns Unset.
    """
    __slots__ = ()

    def __new__(cls):
        try:
            return Unset
        except NameError:
            return super().__new__(cls)

    def __ror__(self, other, /):
        # str | Unset -> str | UnsetType, so the sentinel can sit in isinstance() unions.
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(*objects, default=None):
    """
    Return the first of `objects` that is not Unset, or `default`.

    Examples
    - coalesce("name", "fallback")           -> "name"
    - coalesce(Unset, "fallback")            -> "fallback"
    - coalesce(None, "fallback")             -> None
    - coalesce(Unset, Unset, default=Unset)  -> Unset
    """
    for object in objects:
        if object is not Unset:
            return object
    return default


def rename(name, /):
    """
    Decorator that sets __name__ and __qualname__ of a generated callable.

    Raises
    - TypeError when the name is not a string or the target is not a function.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    """
    Return an immutable view of a container; other objects pass through.

    - Sequence (non-str) → tuple
    - Mapping            → MappingProxyType
    - Set                → frozenset
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" from the instance and returns an
    immutable view for container types (see _freeze).

    Example
    - Given self._choices, declare choices = mirror("choices") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth") for nicer phrasing.
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
