"""
argspan parse results.

Namespace is the read-only view a successful parse returns:
- keys are switch names and positional names, in declaration order;
- switch lookups also accept every alias, bare or prefixed ("A", "-A",
  "a-switch", "--a-switch");
- numeric keys ("0", "1", ...) and at(index) expose the raw pool tokens (the
  tokens no switch claimed) by position, including those beyond the
  declared positionals.
"""
import re
from collections.abc import Mapping
from types import MappingProxyType

from .utils import *


class Namespace(Mapping):
    """
    Name → values mapping produced by Parser.parse().

    Every declared switch has an entry (an empty tuple when it never
    occurred); every positional maps to a one-element tuple.
    """
    __slots__ = ("_values", "_aliases", "_found", "_pool", "_bound")

    def __init__(self, values, aliases, found, pool, bound):
        self._values = MappingProxyType(dict(values))
        self._aliases = MappingProxyType(dict(aliases))
        self._found = frozenset(found)
        self._pool = tuple(pool)
        self._bound = bound

    @classmethod
    def from_context(cls, context, /):
        """
        Project a validated parse context into a Namespace.
        """
        values = {}
        aliases = {}
        for switch in context.switches:
            values[switch.name] = tuple(context.values.get(switch, ()))
            aliases.update(dict.fromkeys(switch.keys, switch.name))
        for positional in context.positionals:
            values[positional.name] = (context.bindings[positional],)

        return cls(
            values,
            aliases,
            (switch.name for switch in context.switches if context.found(switch)),
            context.pool,
            len(context.positionals),
        )

    def __getitem__(self, key, /):
        if not isinstance(key, str):
            raise KeyError(key)
        try:
            return self._values[key]
        except KeyError:
            pass
        try:
            return self._values[self._aliases[key]]
        except KeyError:
            pass
        if re.fullmatch(r"[0-9]+", key):
            try:
                return (self._pool[int(key)],)
            except IndexError:
                pass
        raise KeyError(key)

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    @property
    def pool(self):
        """
        Every unclaimed token: head, reclaimed tail and post-terminator tail.
        """
        return self._pool

    @property
    def extras(self):
        """
        Unclaimed tokens beyond those bound to declared positionals.
        """
        return self._pool[self._bound:]

    def at(self, index, default=Unset, /):
        """
        Return the raw pool token at `index`, or `default` when out of range.

        Raises
        - IndexError when out of range and no default was given.
        """
        try:
            return self._pool[index]
        except IndexError:
            if default is Unset:
                raise IndexError("namespace pool index out of range") from None
            return default

    def found(self, key, /):
        """
        Whether the switch known by `key` (name or alias) occurred.
        """
        return self._aliases.get(key, key) in self._found

    def flag(self, key, /):
        """
        Presence-only convenience: like found(), but unknown keys raise KeyError.
        """
        if key not in self._aliases and key not in self._values:
            raise KeyError(key)
        return self.found(key)

    def todict(self):
        """
        Plain dict of name → list of values.
        """
        return {name: list(values) for name, values in self._values.items()}

    def __eq__(self, other):
        if isinstance(other, Namespace):
            return dict(self._values) == dict(other._values) and self._pool == other._pool
        return super().__eq__(other)

    __hash__ = None

    def __repr__(self):
        return "namespace(%s)" % ", ".join("%s=%r" % item for item in self._values.items())

    def __rich_repr__(self):
        yield from self._values.items()
        if extras := self.extras:
            yield "extras", extras


__all__ = (
    "Namespace",
)
