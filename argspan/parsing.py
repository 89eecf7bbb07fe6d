"""
argspan parsing pipeline: scan, extract, validate.

Stages
- scanner:   locate(tokens, switch) finds every position where a switch
  occurs; scan(context) pools those positions as Occurrence records.
- extractor: partition(tokens, occurrences, positionals, tail) sorts the
  occurrences, hands each one the span of tokens up to the next occurrence,
  reconciles the final span against its arity and binds the unclaimed tokens
  (head + reclaimed tail + post-terminator tail) to positionals.
- validator: validate(context) re-checks arity, choices, assertions and
  requires/excludes constraints, then applies the map hooks.

State
- Everything a parse accumulates lives on a Context built for that parse
  only; declarations (Switch/Positional) are never mutated.
- Every stage consumes the previous one in full; the first fault aborts the
  parse (deferred mode only batches the validation stage, see validate()).

Example
    >>> from argspan.arguments import Switch, Positional
    >>> a = Switch("a", nargs=2)
    >>> context = Context(["x", "-a", "1", "2", "y"], [a], [Positional("X")])
    >>> scan(context); extract(context); validate(context)
    >>> context.values[a], context.pool
    (['1', '2'], ['x', 'y'])
"""
import collections
import itertools
import operator

from .faults import *
from .utils import *

Occurrence = collections.namedtuple("Occurrence", ("switch", "index"))
Occurrence.__doc__ = "one matched switch alias at a given stream position"

TERMINATOR = "--"


class Context:
    """
    Per-parse state.

    Attributes
    - tokens:      the stream before the first "--" (list[str]).
    - tail:        the stream after the first "--" (list[str]); never scanned.
    - switches:    declared switches, in declaration order.
    - positionals: declared positionals, in declaration order.
    - keys:        mapping of bare keys (aliases and names) to declarations,
                   used to resolve requires/excludes.
    - positions:   Switch -> list of stream positions where it occurred.
    - occurrences: every Occurrence, in scan order (unsorted).
    - values:      Switch -> list of bound tokens (one list per switch).
    - bindings:    Positional -> bound token.
    - pool:        unclaimed tokens, in positional binding order.
    """
    __slots__ = (
        "tokens",
        "tail",
        "switches",
        "positionals",
        "keys",
        "positions",
        "occurrences",
        "values",
        "bindings",
        "pool",
    )

    def __init__(self, tokens, switches=(), positionals=(), keys=Unset):
        tokens = list(tokens)
        try:
            cut = tokens.index(TERMINATOR)
        except ValueError:
            self.tokens, self.tail = tokens, []
        else:
            self.tokens, self.tail = tokens[:cut], tokens[cut + 1:]

        self.switches = tuple(switches)
        self.positionals = tuple(positionals)
        if keys is Unset:
            keys = {key: spec for spec in self.switches + self.positionals for key in spec.keys}
        self.keys = keys

        self.positions = {}
        self.occurrences = []
        self.values = {}
        self.bindings = {}
        self.pool = []

    def resolve(self, name, /):
        """
        Return the switch a requires/excludes name refers to, or None.
        """
        spec = self.keys.get(name)
        return spec if spec in self.positions else None

    def found(self, switch, /):
        return bool(self.positions.get(switch))

    def alias(self, switch, /):
        """
        The spelling used for a switch in messages: the token it was matched
        by, or its preferred alias when it never occurred.
        """
        if positions := self.positions.get(switch):
            return self.tokens[positions[0]]
        return switch.aliases[-1]


def _describe(arity, /):
    match arity.spelling:
        case "?":
            return "at most one value"
        case "*":
            return "any number of values"
        case "+":
            return "at least one value"
        case "0":
            return "no values"
        case "1":
            return "exactly one value"
        case spelling:
            return "exactly %s values" % spelling


def _arity_fault(switch, alias, index, given, verdict, /):
    """
    Build the LessArgsError/ExcessArgsError for a switch bound to `given` tokens.
    """
    if verdict < 0:
        kind, code, title, hint = (
            LessArgsError,
            FaultCode.LESS_ARGS,
            "not enough values",
            "pass %s after %s" % (_describe(switch.arity), alias),
        )
    else:
        kind, code, title, hint = (
            ExcessArgsError,
            FaultCode.EXCESS_ARGS,
            "too many values",
            "pass %s after %s, or move the extra tokens after '--'" % (_describe(switch.arity), alias),
        )
    return kind(
        "switch %r at %s position expects %s, got %d" % (alias, ordinal(index + 1), _describe(switch.arity), given),
        title=title,
        code=code,
        hint=hint,
        argument=switch,
        input=alias,
        index=index,
        expected=switch.arity.spelling,
        given=given,
        docs=getdoc(code),
    )


def locate(tokens, switch, /):
    """
    Return every position of `tokens` where `switch` occurs.

    Each token is tested against the short form first and against the long
    form only when the short form did not match.

    Raises
    - NoArgsError:    a required switch never occurs.
    - DuplicateError: the switch occurs more than once without duplicates.
    """
    positions = [index for index, token in enumerate(tokens) if switch.matches(token)]

    if not positions and switch.required:
        raise NoArgsError(
            "required switch %r was not passed" % switch.aliases[-1],
            title="missing required switch",
            code=FaultCode.NO_ARGS,
            hint="pass %s" % " or ".join(switch.aliases),
            argument=switch,
            input=switch.aliases[-1],
            docs=getdoc(FaultCode.NO_ARGS),
        )

    if len(positions) > 1 and not switch.duplicates:
        first, second = positions[:2]
        raise DuplicateError(
            "switch %r at %s position was already passed at %s position" % (
                tokens[second], ordinal(second + 1), ordinal(first + 1)
            ),
            title="duplicated switch",
            code=FaultCode.DUPLICATE,
            hint="pass %s only once" % tokens[second],
            argument=switch,
            input=tokens[second],
            index=second,
            positions=tuple(positions),
            docs=getdoc(FaultCode.DUPLICATE),
        )

    return positions


def scan(context, /):
    """
    Locate every declared switch and pool its occurrences into the context.
    """
    for switch in context.switches:
        context.positions[switch] = positions = locate(context.tokens, switch)
        context.values[switch] = []
        context.occurrences.extend(Occurrence(switch, index) for index in positions)


def _reconcile(tokens, last, /):
    """
    Split the span after the final occurrence into (claimed, reclaimed).
    """
    arity = last.switch.arity
    remaining = tokens[last.index + 1:]

    if arity.reclaims:
        if len(remaining) < arity.count:
            raise _arity_fault(last.switch, tokens[last.index], last.index, len(remaining), -1)
        return remaining[:arity.count], remaining[arity.count:]

    if verdict := arity.compare(len(remaining)):
        raise _arity_fault(last.switch, tokens[last.index], last.index, len(remaining), verdict)
    return remaining, []


def partition(tokens, occurrences, positionals, tail=(), /):
    """
    Bind spans of `tokens` to switches and leftover tokens to positionals.

    Parameters
    - tokens:      the pre-terminator stream.
    - occurrences: Occurrence records from the scanner, in any order.
    - positionals: declared positionals, in declaration order.
    - tail:        tokens after the terminator, appended to the pool verbatim.

    Returns
    - (values, bindings, pool):
      • values:   Switch -> list of tokens, spans concatenated in stream order.
      • bindings: Positional -> token.
      • pool:     head + reclaimed tail + tail; positionals take its first
                  len(positionals) tokens, the rest stays for index access.

    Raises
    - LessArgsError / ExcessArgsError: the final span violates its arity.
    - LessPositionalArgsError: the pool is shorter than the positionals.
    """
    occurrences = sorted(occurrences, key=operator.attrgetter("index"))
    values = {occurrence.switch: [] for occurrence in occurrences}

    if occurrences:
        pool = list(tokens[:occurrences[0].index])
        for current, following in itertools.pairwise(occurrences):
            values[current.switch].extend(tokens[current.index + 1:following.index])
        claimed, reclaimed = _reconcile(tokens, occurrences[-1])
        values[occurrences[-1].switch].extend(claimed)
        pool.extend(reclaimed)
    else:
        pool = list(tokens)
    pool.extend(tail)

    if len(pool) < len(positionals := tuple(positionals)):
        missing = positionals[len(pool)]
        raise LessPositionalArgsError(
            "expected %d positional values, got %d (missing %r)" % (len(positionals), len(pool), missing.name),
            title="not enough positional values",
            code=FaultCode.LESS_POSITIONAL_ARGS,
            hint="pass a value for %s" % ", ".join(positional.name for positional in positionals[len(pool):]),
            argument=missing,
            input=missing.name,
            expected=len(positionals),
            given=len(pool),
            docs=getdoc(FaultCode.LESS_POSITIONAL_ARGS),
        )

    return values, dict(zip(positionals, pool)), pool


def extract(context, /):
    """
    Run partition() over the context and store its results.
    """
    values, context.bindings, context.pool = partition(
        context.tokens, context.occurrences, context.positionals, context.tail
    )
    for switch, tokens in values.items():
        context.values[switch].extend(tokens)


def _content_fault(spec, alias, value, context, /):
    """
    Check one raw token against choices/check; return a fault or None.
    """
    kind = "switch" if spec in context.positions else "positional"

    if spec.choices:
        if value in spec.choices:
            return None
        choices = tuple(sorted(spec.choices)) if isinstance(spec.choices, frozenset) else spec.choices
        return InvalidChoiceError(
            "invalid choice %r for %s %r" % (value, kind, alias),
            title="invalid choice",
            code=FaultCode.INVALID_CHOICE,
            hint="choose from %s" % ", ".join(map(repr, choices)),
            argument=spec,
            input=alias,
            value=value,
            choices=choices,
            docs=getdoc(FaultCode.INVALID_CHOICE),
        )

    if spec.check is None:
        return None

    exception = None
    try:
        outcome = spec.check(value)
    except Exception as caught:
        outcome, exception = (False, str(caught) or type(caught).__name__), caught
    ok, reason = outcome if isinstance(outcome, tuple) else (outcome, Unset)
    if ok:
        return None

    reason = coalesce(reason, "assertion failed")
    return AssertionFailureError(
        "value %r for %s %r failed its check: %s" % (value, kind, alias, reason),
        title="assertion failure",
        code=FaultCode.ASSERTION_FAILURE,
        hint="check the value passed for %s" % alias,
        argument=spec,
        input=alias,
        value=value,
        reason=reason,
        exception=exception,
        docs=getdoc(FaultCode.ASSERTION_FAILURE),
    )


def _switch_fault(switch, context, /):
    """
    Return the first violation for a matched switch, or None.
    """
    alias = context.alias(switch)
    values = context.values[switch]

    if verdict := switch.arity.compare(len(values)):
        return _arity_fault(switch, alias, context.positions[switch][0], len(values), verdict)

    for value in values:
        if fault := _content_fault(switch, alias, value, context):
            return fault

    for name in switch.requires:
        if not context.found(dependency := context.resolve(name)):
            return MissingDepsError(
                "switch %r requires %r, which was not passed" % (alias, name),
                title="missing dependency",
                code=FaultCode.MISSING_DEPS,
                hint="pass %s together with %s" % (name, alias),
                argument=switch,
                input=alias,
                dependency=dependency.name if dependency else name,
                docs=getdoc(FaultCode.MISSING_DEPS),
            )

    for name in switch.excludes:
        if context.found(dependency := context.resolve(name)):
            return UnallowedDepsError(
                "switch %r cannot be combined with %r" % (alias, context.alias(dependency)),
                title="unallowed dependency",
                code=FaultCode.UNALLOWED_DEPS,
                hint="remove either %s or %s" % (alias, context.alias(dependency)),
                argument=switch,
                input=alias,
                dependency=dependency.name,
                docs=getdoc(FaultCode.UNALLOWED_DEPS),
            )

    return None


def validate(context, /, *, deferred=False):
    """
    Validate every matched switch and every bound positional, then map them.

    Checks run on raw tokens (arity, choices, check, requires, excludes) and
    map hooks are applied only once a declaration passed all of them.
    Switches that never occurred are not checked.

    Parameters
    - deferred: collect the first fault of every declaration and raise them
      together as a ParseExit instead of raising the first one.
    """
    faults = []

    for switch in context.switches:
        if not context.found(switch):
            continue
        if fault := _switch_fault(switch, context):
            if not deferred:
                raise fault
            faults.append(fault)
            continue
        if switch.map is not None:
            context.values[switch][:] = map(switch.map, context.values[switch])

    for positional, value in context.bindings.items():
        if fault := _content_fault(positional, positional.name, value, context):
            if not deferred:
                raise fault
            faults.append(fault)
            continue
        if positional.map is not None:
            context.bindings[positional] = positional.map(value)

    if faults:
        raise ParseExit(faults)


__all__ = (
    "Occurrence",
    "Context",
    "TERMINATOR",
    "locate",
    "scan",
    "partition",
    "extract",
    "validate",
)
