"""
argspan faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse failure.
  Codes are grouped by stage so logs and searches stay predictable.
- ParseException: base type that carries a message + options and knows how to
  render itself (rich) in a friendly, lowercased, actionable way.
- One subclass per failure kind (declaration, scanning, arity, positionals,
  content, dependencies).
- ParseExit: groups several faults of one parse (deferred mode).
- trigger(): central entry point to surface a fault (raise, or print and exit
  in shell mode).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages where a position exists (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parser raises faults through trigger(fault, **options).
- In non-shell mode exceptions are raised; in shell mode they are rendered via
  rich on stderr and the process exits with status 1.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by pipeline stage)
    - declaration (2110x)
      • MISSING_NAME, NAME_CONFLICT, INVALID_ARITY
    - scanning (2111x)
      • NO_ARGS, DUPLICATE
    - arity (2112x)
      • LESS_ARGS, EXCESS_ARGS
    - positionals (2113x)
      • LESS_POSITIONAL_ARGS
    - content (2114x)
      • INVALID_CHOICE, ASSERTION_FAILURE
    - dependencies (2115x)
      • MISSING_DEPS, UNALLOWED_DEPS

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- declaration errors ---
    MISSING_NAME         = 21101
    NAME_CONFLICT        = 21102
    INVALID_ARITY        = 21103

    # --- scanning errors ---
    NO_ARGS              = 21111
    DUPLICATE            = 21112

    # --- arity errors ---
    LESS_ARGS            = 21121
    EXCESS_ARGS          = 21122

    # --- positional errors ---
    LESS_POSITIONAL_ARGS = 21131

    # --- content errors ---
    INVALID_CHOICE       = 21141
    ASSERTION_FAILURE    = 21142

    # --- dependency errors ---
    MISSING_DEPS         = 21151
    UNALLOWED_DEPS       = 21152

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _progname(options):
    # explicit prog, then the host's __prog__, then the running script.
    return (
        options.get("prog") or
        getattr(__import__("__main__"), "__prog__", None) or
        os.path.basename(sys.argv[0]) or
        "argspan"
    )


def _stylist(options, defaults):
    styles = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))
    colorful = options.get("colorful", True)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), style)

    return styler, text


class ParseException(Exception):
    """
    base class of every fault raised while declaring or parsing.

    attributes
    - message: one-sentence, lowercased description.
    - options: read-only mapping with the rendering knobs (code, title, hint,
      docs, shell, fancy, colorful, prog) and the fault context (argument,
      input, index, expected, given, choices, value, dependency, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styler, text = _stylist(self.options, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(_progname(self.options), styler("prog-name")),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy"):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# declaration faults are also ValueErrors: they reject a bad specification.
class MissingNameError(ParseException, ValueError): ...
class NameConflictError(ParseException, ValueError): ...
class InvalidArityError(ParseException, ValueError): ...

class NoArgsError(ParseException): ...
class DuplicateError(ParseException): ...
class LessArgsError(ParseException): ...
class ExcessArgsError(ParseException): ...
class LessPositionalArgsError(ParseException): ...
class InvalidChoiceError(ParseException): ...
class AssertionFailureError(ParseException): ...
class MissingDepsError(ParseException): ...
class UnallowedDepsError(ParseException): ...


class ParseExit(ExceptionGroup):
    """
    every fault collected during one deferred parse, raised together.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad parse", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad parse", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styler, text = _stylist(self.options, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Parse)
        })

        header = Text.assemble(
            "[ ",
            text(_progname(self.options), styler("prog-name")),
            " — ",
            text(self.message.title(), styler("title")),
            " ]"
        )
        renders = [
            copy.replace(
                exception,
                fancy=False,
                colorful=self.options.get("colorful", True),
                prog=self.options.get("prog", exception.options.get("prog")),
            )
            for exception in self.exceptions
        ]

        if self.options.get("fancy"):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options)
      before triggering.
    - in shell mode, rendering happens via the rich stderr console followed by
      sys.exit(1); otherwise, the fault is raised.

    typical options
    - shell, fancy, colorful, prog, title, code, hint, docs and any context the
      renderer may want to show (argument, input, index, expected, given, ...).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    returns None when no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ParseException",
    "MissingNameError",
    "NameConflictError",
    "InvalidArityError",
    "NoArgsError",
    "DuplicateError",
    "LessArgsError",
    "ExcessArgsError",
    "LessPositionalArgsError",
    "InvalidChoiceError",
    "AssertionFailureError",
    "MissingDepsError",
    "UnallowedDepsError",
    "ParseExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
