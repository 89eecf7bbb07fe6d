"""
argspan parser: declare switches and positionals, then parse token streams.

What this module provides
- Parser: the declaration registry plus the entry point that runs the
  scan → extract → validate pipeline over one token stream and returns a
  Namespace.

Quick start
    from argspan import Parser

    parser = Parser()
    parser.switch("A", "a-switch", nargs="+", duplicates=True)
    parser.switch("B", "b-switch", nargs=1)
    parser.positional("X")

    namespace = parser.parse(["11", "-A", "1", "--a-switch", "2", "-B", "a", "b"])
    namespace["A"]      # ('1', '2')
    namespace["X"]      # ('11',)
    namespace.extras    # ('b',)

Design notes
- Declarations are immutable and the parse state lives on a Context built
  per parse() call, so one Parser can serve any number of parses.
- Faults go through Parser.trigger(): raised by default, printed on stderr
  followed by exit status 1 when shell=True.
- Declaration faults (missing name, name conflict, invalid arity) are always
  raised: they are programming errors, not user input errors.
"""
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .arguments import Switch, Positional
from .faults import *
from .parsing import Context, scan, extract, validate
from .results import Namespace
from .utils import *


def _tokenize(prompt, /):
    """
    Normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: used verbatim (tokens are not trimmed; "" is a token).
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class Parser:
    """
    Declaration registry and parse entry point.

    Parameters
    - argv: Unset | str | Iterable[str]
      default token stream for parse(); Unset reads sys.argv[1:] at parse time.
    - shell: print faults on stderr (rich) and exit with status 1 instead of raising.
    - fancy: render faults inside a rich panel.
    - colorful: style fault output.
    - deferred: batch the validation faults of a parse into one ParseExit.
    - prog: program name shown in fault headers (defaults to __prog__ in
      __main__, then to the basename of sys.argv[0]).
    """

    switches = mirror("switches")
    positionals = mirror("positionals")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    deferred = mirror("deferred")

    def __init__(self, argv=Unset, /, *, shell=False, fancy=False, colorful=True, deferred=False, prog=Unset):
        if argv is not Unset and not isinstance(argv, str | Iterable):
            raise TypeError("parser 'argv' must be a string or an iterable of strings")
        if not isinstance(prog, str | Unset):
            raise TypeError("parser 'prog' must be a string")

        self._argv = argv if isinstance(argv, str | Unset) else list(argv)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._deferred = bool(deferred)
        self._prog = coalesce(prog)

        self._switches = {}
        self._positionals = {}
        self._keys = {}

    def add(self, spec, /):
        """
        Register a Switch or Positional declaration and return it.

        Raises
        - TypeError: spec is neither a Switch nor a Positional.
        - NameConflictError: any of its names/aliases is already taken by a
          switch or a positional.
        """
        if not isinstance(spec, Switch | Positional):
            raise TypeError("add() argument must be a switch or a positional")

        for key in spec.keys:
            if (other := self._keys.get(key)) is not None:
                raise NameConflictError(
                    "%s %r conflicts with %s %r" % (
                        type(spec).__typename__, key, type(other).__typename__, other.name
                    ),
                    title="name conflict",
                    code=FaultCode.NAME_CONFLICT,
                    hint="use a name that no other switch or positional uses",
                    argument=spec,
                    input=key,
                    conflict=other,
                    docs=getdoc(FaultCode.NAME_CONFLICT),
                )

        if isinstance(spec, Switch):
            self._switches[spec.name] = spec
        else:
            self._positionals[spec.name] = spec
        self._keys.update(dict.fromkeys(spec.keys, spec))
        return spec

    def switch(self, *aliases, **metadata):
        """
        Declare a switch (see Switch for the accepted metadata) and return it.
        """
        return self.add(Switch(*aliases, **metadata))

    def required(self, *aliases, **metadata):
        """
        Declare a switch that must occur at least once.
        """
        return self.switch(*aliases, **metadata | {"required": True})

    def positional(self, name, /, **metadata):
        """
        Declare the next positional (order matters) and return it.
        """
        return self.add(Positional(name, **metadata))

    def resolve(self, key, /):
        """
        Return the declaration known by `key`: a switch name or alias (bare
        or prefixed) or a positional name.

        Raises
        - KeyError when nothing is declared under `key`.
        """
        return self._keys[key]

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's runtime options merged in.
        """
        trigger(
            fault,
            **options,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            prog=self._prog,
        )

    def parse(self, argv=Unset, /):
        """
        Parse one token stream and return its Namespace.

        Parameters
        - argv: Unset | str | Iterable[str]
          the token stream; Unset falls back to the parser's argv, then to
          sys.argv[1:].

        Raises
        - any ParseException subclass (fail-fast), or ParseExit in deferred
          mode when validation found several faults; in shell mode the fault
          is printed and the process exits instead.
        """
        context = Context(
            _tokenize(coalesce(argv, self._argv, default=Unset)),
            self._switches.values(),
            self._positionals.values(),
            MappingProxyType(self._keys),
        )
        try:
            scan(context)
            extract(context)
            validate(context, deferred=self._deferred)
        except (ParseException, ParseExit) as fault:
            self.trigger(fault)
        return Namespace.from_context(context)

    def parse_map(self, argv=Unset, /):
        """
        Parse one token stream and return a plain dict of name → list of values.
        """
        return self.parse(argv).todict()

    def __repr__(self):
        return "parser(switches=%r, positionals=%r)" % (tuple(self._switches), tuple(self._positionals))

    def __rich_repr__(self):
        yield "switches", tuple(self._switches.values())
        yield "positionals", tuple(self._positionals.values())
        yield "shell", self._shell
        yield "deferred", self._deferred


__all__ = (
    "Parser",
)
