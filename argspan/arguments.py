r"""
argspan argument declarations.

Overview
- Arity: the arity contract of a switch, either an exact count (0, 1, 2, ...)
  or one of the quantifiers "?" (zero-or-one), "*" (zero-or-more) and
  "+" (one-or-more).
- Switch: named slot matched by a short (-x) and/or long (--name) alias; owns
  the tokens that follow each of its occurrences.
- Positional: unnamed-by-token slot bound to exactly one leftover token, in
  declaration order.

Introspection & representation
- ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
  the fields listed in __introspectable__ as read-only properties (containers
  are returned as tuples/frozensets).
- Declarations are immutable once built; parse state never lives on them.

Metadata (sanitized on construction)
- Shared
  • choices: Iterable[str] (duplicates rejected unless a Set).
  • check: Unset | Callable[[str], bool | tuple[bool, str]] (per-token assertion).
  • map: Unset | Callable[[str], Any] (per-token transform, applied after checks).
  • descr / metavar: Unset | str | Text, non-empty when provided (carried for
    external help renderers).
- Switch only
  • aliases: bare ("a", "a-switch") or prefixed ("-a", "--a-switch"). A bare
    one-character alias is short, a longer one is long; at most one of each.
  • nargs: Unset | int (>= 0) | "<digits>" | "?" | "*" | "+" | Arity.
  • required / duplicates: bool.
  • requires / excludes: Iterable[str] of other switch names or aliases.

Quick example:
    >>> from argspan.arguments import Switch, Positional
    >>> Switch("A", "a-switch", nargs="+", duplicates=True).name
    'a-switch'
    >>> Positional("X").name
    'X'
"""
import functools
import operator
import re
from collections.abc import Iterable, Set
from types import MappingProxyType

from rich.text import Text

from .faults import FaultCode, MissingNameError, InvalidArityError, getdoc
from .utils import *


class Arity:
    """
    Arity contract of a switch.

    Every contract reduces to a (lower, upper) bound on the number of tokens
    a switch may bind; upper is None when unbounded:

        exact n  → (n, n)
        "?"      → (0, 1)
        "*"      → (0, None)
        "+"      → (1, None)

    Exact contracts of at least one token also "reclaim": when they end the
    token stream, surplus tokens after the claimed ones go back to the
    positional pool instead of failing.
    """
    __slots__ = ("_spelling", "_count", "_lower", "_upper")

    _quantifiers = MappingProxyType({
        "?": (0, 1),
        "*": (0, None),
        "+": (1, None),
    })

    def __new__(cls, spelling=Unset, /):
        if isinstance(spelling, Arity):
            return spelling

        if spelling is Unset:
            spelling = 0
        elif isinstance(spelling, str):
            spelling = spelling.strip() or 0

        if isinstance(spelling, bool) or not isinstance(spelling, int | str):
            raise TypeError("arity must be an integer or a string")

        if isinstance(spelling, str) and re.fullmatch(r"[0-9]+", spelling):
            spelling = int(spelling)

        self = super().__new__(cls)
        if isinstance(spelling, int):
            if spelling < 0:
                raise InvalidArityError(
                    "arity %r cannot be negative" % spelling,
                    title="invalid arity",
                    code=FaultCode.INVALID_ARITY,
                    hint="use a non-negative count or one of '?', '*' or '+'",
                    given=spelling,
                    docs=getdoc(FaultCode.INVALID_ARITY),
                )
            self._spelling = str(spelling)
            self._count = spelling
            self._lower = self._upper = spelling
            return self

        try:
            self._lower, self._upper = cls._quantifiers[spelling]
        except KeyError:
            raise InvalidArityError(
                "arity %r is neither a count nor a quantifier" % spelling,
                title="invalid arity",
                code=FaultCode.INVALID_ARITY,
                hint="use a non-negative count or one of '?', '*' or '+'",
                given=spelling,
                docs=getdoc(FaultCode.INVALID_ARITY),
            ) from None
        self._spelling = spelling
        self._count = None
        return self

    spelling = mirror("spelling")
    count = mirror("count")
    lower = mirror("lower")
    upper = mirror("upper")

    @property
    def exact(self):
        return self._count is not None

    @property
    def reclaims(self):
        return self.exact and self._count > 0

    def compare(self, given, /):
        """
        Compare a number of bound tokens against the contract.

        Returns -1 when too few, 1 when too many and 0 when acceptable.
        """
        if given < self._lower:
            return -1
        if self._upper is not None and given > self._upper:
            return 1
        return 0

    def __eq__(self, other):
        if isinstance(other, Arity):
            return self._spelling == other._spelling
        return NotImplemented

    def __hash__(self):
        return hash((Arity, self._spelling))

    def __str__(self):
        return self._spelling

    def __repr__(self):
        return "arity(%r)" % self._spelling


class ArgumentType(type):
    """
    Metaclass that turns declarations into introspectable, read-only specs.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property backed
      by "_{name}" (see mirror()).
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    - Derive __typename__ from the class name for use in messages.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__displayable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the descriptive fields shared by all specs.

    - descr / metavar: Unset | str | Text. Strings are trimmed and must not be
      empty. Unset becomes None.
    """
    for field in ("descr", "metavar"):
        if not isinstance(value := metadata[field], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        metadata[field] = coalesce(value)


def _sanitize_content_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the per-token hooks shared by all specs.

    - choices: must be a non-string iterable of strings. If not a Set,
      duplicates are rejected and the collection is normalized to a tuple
      (declaration order is kept for messages).
    - check / map: Unset or callable. Unset becomes None.
    """
    if isinstance(choices := metadata["choices"], str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    if not isinstance(choices, Set):
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        choices = tuple(sanitized)
    if not all(isinstance(choice, str) for choice in choices):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    metadata["choices"] = choices

    for hook in ("check", "map"):
        if (value := metadata[hook]) is not Unset and not callable(value):
            raise TypeError(f"{cls.__typename__} {hook!r} must be callable")
        metadata[hook] = coalesce(value)


def _sanitize_aliases(cls, metadata, /):
    """
    Internal: split the given aliases into a short and a long form.

    Accepted spellings
    - "-x" / "-xyz": short alias (the single dash decides)
    - "--name":      long alias
    - "x":           short alias (bare, one character)
    - "name":        long alias (bare, longer)
    Empty strings are ignored. The switch name is its long alias when present,
    otherwise its short alias.

    Raises
    - MissingNameError: no usable alias remains.
    - TypeError: an alias is not a string, or more than one short/long alias.
    - ValueError: an alias contains whitespace or '=' or is only dashes.
    """
    short = long = Unset
    for alias in metadata.pop("aliases"):
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        if not (alias := alias.strip()):
            continue

        if alias.startswith("--"):
            kind, alias = "long", alias[2:]
        elif alias.startswith("-"):
            kind, alias = "short", alias[1:]
        else:
            kind = "short" if len(alias) == 1 else "long"

        if not re.fullmatch(r"[^\s=-][^\s=]*", alias):
            raise ValueError(f"{cls.__typename__} alias {alias!r} is not a valid switch spelling")

        if kind == "short":
            if short is not Unset:
                raise TypeError(f"{cls.__typename__} accepts at most one short alias")
            short = alias
        else:
            if long is not Unset:
                raise TypeError(f"{cls.__typename__} accepts at most one long alias")
            long = alias

    if short is Unset and long is Unset:
        raise MissingNameError(
            "%s declared without a short or long alias" % cls.__typename__,
            title="missing name",
            code=FaultCode.MISSING_NAME,
            hint="pass a short alias (for example: 'v') and/or a long alias (for example: 'verbose')",
            docs=getdoc(FaultCode.MISSING_NAME),
        )

    metadata["short"] = coalesce(short)
    metadata["long"] = coalesce(long)
    metadata["name"] = coalesce(long, short)


def _sanitize_dependencies(cls, metadata, /):
    """
    Internal: normalize requires/excludes into tuples of bare switch names.

    Leading dashes are stripped so "-a", "--a-switch" and "a-switch" all refer
    to the same switch; resolution happens at parse time.
    """
    for field in ("requires", "excludes"):
        if isinstance(names := metadata[field], str) or not isinstance(names, Iterable):
            raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
        sanitized = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
            if not (name := name.strip().lstrip("-")):
                raise ValueError(f"{cls.__typename__} {field!r} cannot contain empty names")
            if name not in sanitized:
                sanitized.append(name)
        metadata[field] = tuple(sanitized)


class Switch(metaclass=ArgumentType):
    """
    Switch (keyword option) declaration.

    A switch is matched by "-" + short or "--" + long and owns the tokens that
    follow each of its occurrences, up to the next occurrence of any switch.
    Its arity contract decides how many tokens it may finally bind.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata values.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "arity",
        "required",
        "duplicates",
        "choices",
        "check",
        "map",
        "requires",
        "excludes",
        "descr",
        "metavar",
    )

    __displayable__ = (
        "name",
        "aliases",
        "arity",
        "required",
        "duplicates",
        "choices",
        "requires",
        "excludes",
    )

    def __new__(
            cls,
            *aliases,
            nargs=Unset,
            required=False,
            duplicates=False,
            choices=(),
            check=Unset,
            map=Unset,
            requires=(),
            excludes=(),
            descr=Unset,
            metavar=Unset,
    ):
        """
        Construct a Switch declaration.

        Parameters
        - aliases: one or two str (see _sanitize_aliases).
        - nargs: arity contract; Unset means exactly zero tokens (presence-only).
        - required: the switch must occur at least once.
        - duplicates: the switch may occur more than once; its spans are
          concatenated in stream order.
        - choices / check / map: per-token hooks (see _sanitize_content_metadata).
        - requires / excludes: other switches that must / must not be present
          whenever this one is.
        - descr / metavar: carried for help renderers.

        Raises
        - MissingNameError, InvalidArityError (both ValueError subclasses).
        - TypeError / ValueError for malformed metadata.
        """
        metadata = {
            "aliases": aliases,
            "nargs": nargs,
            "required": bool(required),
            "duplicates": bool(duplicates),
            "choices": choices,
            "check": check,
            "map": map,
            "requires": requires,
            "excludes": excludes,
            "descr": descr,
            "metavar": metavar,
        }
        _sanitize_aliases(cls, metadata)
        metadata["arity"] = Arity(metadata.pop("nargs"))
        _sanitize_content_metadata(cls, metadata)
        _sanitize_dependencies(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def aliases(self):
        """
        Prefixed spellings of this switch, short first ("-A", "--a-switch").
        """
        aliases = []
        if self._short is not None:
            aliases.append("-" + self._short)
        if self._long is not None:
            aliases.append("--" + self._long)
        return tuple(aliases)

    @property
    def keys(self):
        """
        Every key this switch answers to: bare and prefixed aliases.
        """
        return tuple(filter(None, (self._short, self._long))) + self.aliases

    def matches(self, token, /):
        """
        Test one token against this switch: short form first, then long form.
        """
        if self._short is not None and token == "-" + self._short:
            return True
        return self._long is not None and token == "--" + self._long


class Positional(metaclass=ArgumentType):
    """
    Positional declaration.

    A positional receives exactly one token from the pool of tokens no switch
    claimed; the first declared positional gets the first pool token, and so on.
    """

    __introspectable__ = (
        "name",
        "choices",
        "check",
        "map",
        "descr",
        "metavar",
    )

    __displayable__ = (
        "name",
        "choices",
    )

    def __new__(
            cls,
            name=Unset,
            /,
            choices=(),
            check=Unset,
            map=Unset,
            descr=Unset,
            metavar=Unset,
    ):
        """
        Construct a Positional declaration.

        Raises
        - MissingNameError: the name is missing or blank.
        - TypeError / ValueError for malformed metadata.
        """
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} name must be a string")
        if not (name := coalesce(name, "").strip()):
            raise MissingNameError(
                "%s declared without a name" % cls.__typename__,
                title="missing name",
                code=FaultCode.MISSING_NAME,
                hint="pass a non-empty name (for example: 'FILE')",
                docs=getdoc(FaultCode.MISSING_NAME),
            )

        metadata = {
            "name": name,
            "choices": choices,
            "check": check,
            "map": map,
            "descr": descr,
            "metavar": metavar,
        }
        _sanitize_content_metadata(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def keys(self):
        return (self._name,)


__all__ = (
    "Arity",
    "Switch",
    "Positional",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
