# python
"""
Parser and Namespace behavioral tests.

Scope
- Registry: declarations, name conflicts, resolution, read-only views.
- Entry point: prompt normalization, reuse across parses, shell mode.
- Namespace: name/alias/index lookup, extras, flags, plain-dict projection.

Conventions
- Test method names follow CamelCase per project convention.
"""

import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argspan import (
    Parser,
    Namespace,
    Switch,
    Positional,
    NameConflictError,
    MissingNameError,
    NoArgsError,
    InvalidChoiceError,
    MissingDepsError,
    ParseExit,
)

STREAM = ["11", "-A", "1", "2", "3", "--a-switch", "4", "5", "6", "-B", "a", "b", "--", "1", "2", "3"]


def build():
    parser = Parser()
    parser.switch("A", "a-switch", nargs="+", duplicates=True)
    parser.switch("B", nargs=1)
    parser.switch("c")
    parser.positional("X")
    return parser


class TestRegistry(TestCase):

    def testDeclarationsReturnSpecs(self):
        parser = Parser()
        switch = parser.switch("v", "verbose")
        positional = parser.positional("FILE")
        self.assertIsInstance(switch, Switch)
        self.assertIsInstance(positional, Positional)
        self.assertEqual(tuple(parser.switches), ("verbose",))
        self.assertEqual(tuple(parser.positionals), ("FILE",))

    def testRequiredDeclaration(self):
        self.assertTrue(Parser().required("r").required)

    def testAddPrebuiltSpec(self):
        parser = Parser()
        switch = Switch("a")
        self.assertIs(parser.add(switch), switch)
        with self.assertRaises(TypeError):
            parser.add("a")

    def testSwitchConflictsWithSwitch(self):
        parser = Parser()
        parser.switch("a", "alpha")
        with self.assertRaises(NameConflictError):
            parser.switch("b", "alpha")
        with self.assertRaises(NameConflictError):
            parser.switch("a")

    def testSwitchConflictsWithPositional(self):
        parser = Parser()
        parser.positional("X")
        with self.assertRaises(NameConflictError) as context:
            parser.switch("X")
        self.assertIsInstance(context.exception, ValueError)
        self.assertEqual(context.exception.options["input"], "X")

    def testConflictLeavesRegistryUntouched(self):
        parser = Parser()
        parser.switch("a")
        with self.assertRaises(NameConflictError):
            parser.switch("-a", "--b")
        self.assertEqual(tuple(parser.switches), ("a",))
        with self.assertRaises(KeyError):
            parser.resolve("b")

    def testDeclarationFaultsRaiseInShellMode(self):
        with self.assertRaises(MissingNameError):
            Parser(shell=True).switch()

    def testResolve(self):
        parser = build()
        a = parser.resolve("--a-switch")
        self.assertIs(parser.resolve("A"), a)
        self.assertIs(parser.resolve("-A"), a)
        self.assertEqual(parser.resolve("X").name, "X")
        with self.assertRaises(KeyError):
            parser.resolve("missing")

    def testViewsAreReadOnly(self):
        parser = build()
        with self.assertRaises(TypeError):
            parser.switches["z"] = Switch("z")
        with self.assertRaises(AttributeError):
            parser.shell = True

    def testBadOptionsRejected(self):
        with self.assertRaises(TypeError):
            Parser(1)
        with self.assertRaises(TypeError):
            Parser(prog=1)


class TestParse(TestCase):

    def testConcreteScenario(self):
        namespace = build().parse(STREAM)
        self.assertEqual(namespace["a-switch"], ("1", "2", "3", "4", "5", "6"))
        self.assertEqual(namespace["B"], ("a",))
        self.assertEqual(namespace["c"], ())
        self.assertEqual(namespace["X"], ("11",))
        self.assertEqual(namespace.pool, ("11", "b", "1", "2", "3"))
        self.assertEqual(namespace.extras, ("b", "1", "2", "3"))

    def testStringPrompt(self):
        parser = Parser()
        parser.switch("m", nargs=1)
        parser.positional("FILE")
        namespace = parser.parse("'my file.txt' -m 'a b'")
        self.assertEqual(namespace["FILE"], ("my file.txt",))
        self.assertEqual(namespace["m"], ("a b",))

    def testDefaultArgv(self):
        parser = Parser(["-c"])
        parser.switch("c")
        self.assertTrue(parser.parse().found("c"))
        self.assertFalse(parser.parse([]).found("c"))

    def testSysArgvFallback(self):
        parser = Parser()
        parser.positional("FILE")
        with mock.patch.object(sys, "argv", ["prog", "input.txt"]):
            self.assertEqual(parser.parse()["FILE"], ("input.txt",))

    def testBadPromptRejected(self):
        with self.assertRaises(TypeError):
            build().parse(42)
        with self.assertRaises(TypeError):
            build().parse(["11", 1])

    def testParsesAreIndependent(self):
        parser = build()
        first = parser.parse(STREAM)
        second = parser.parse(["x", "-c"])
        self.assertEqual(first["a-switch"], ("1", "2", "3", "4", "5", "6"))
        self.assertEqual(second["a-switch"], ())
        self.assertEqual(parser.parse(STREAM), first)

    def testParseMap(self):
        self.assertEqual(
            build().parse_map(STREAM),
            {"a-switch": ["1", "2", "3", "4", "5", "6"], "B": ["a"], "c": [], "X": ["11"]},
        )

    def testFaultsRaiseWithRuntimeOptions(self):
        parser = Parser(prog="tool")
        parser.required("r")
        with self.assertRaises(NoArgsError) as context:
            parser.parse([])
        self.assertFalse(context.exception.options["shell"])
        self.assertEqual(context.exception.options["prog"], "tool")

    def testDeferredParse(self):
        parser = Parser(deferred=True)
        parser.switch("a", nargs=1, choices=("x",))
        parser.switch("b", requires=("c",))
        parser.switch("c")
        with self.assertRaises(ParseExit) as context:
            parser.parse(["-a", "y", "-b"])
        self.assertEqual(
            [type(fault) for fault in context.exception.exceptions],
            [InvalidChoiceError, MissingDepsError],
        )
        self.assertTrue(parser.deferred)

    def testExplicitProgBeatsHostProg(self):
        stream = io.StringIO()
        parser = Parser(shell=True, prog="explicit")
        parser.switch("n", nargs=1)
        with (
            mock.patch("__main__.__prog__", "hostprog", create=True),
            mock.patch("argspan.faults.console", Console(file=stream, color_system=None, width=120)),
            self.assertRaises(SystemExit),
        ):
            parser.parse(["-n"])
        self.assertIn("[ explicit", stream.getvalue())
        self.assertNotIn("hostprog", stream.getvalue())

    def testHostProgWhenNoExplicitProg(self):
        stream = io.StringIO()
        parser = Parser(shell=True)
        parser.switch("n", nargs=1)
        with (
            mock.patch("__main__.__prog__", "hostprog", create=True),
            mock.patch("argspan.faults.console", Console(file=stream, color_system=None, width=120)),
            self.assertRaises(SystemExit),
        ):
            parser.parse(["-n"])
        self.assertIn("[ hostprog", stream.getvalue())

    def testDeferredShellModeNamesEveryFault(self):
        stream = io.StringIO()
        parser = Parser(shell=True, deferred=True, prog="explicit")
        parser.switch("a", nargs=1, choices=("x",))
        parser.switch("b", nargs=1, choices=("x",))
        with (
            mock.patch("argspan.faults.console", Console(file=stream, color_system=None, width=120)),
            self.assertRaises(SystemExit),
        ):
            parser.parse(["-a", "y", "-b", "z"])
        headers = [line for line in stream.getvalue().splitlines() if line.startswith("[ ")]
        self.assertEqual(len(headers), 3)
        self.assertTrue(all(header.startswith("[ explicit ") for header in headers))

    def testShellModePrintsAndExits(self):
        stream = io.StringIO()
        parser = Parser(shell=True, prog="tool")
        parser.required("r", "release")
        with mock.patch("argspan.faults.console", Console(file=stream, color_system=None, width=120)):
            with self.assertRaises(SystemExit) as context:
                parser.parse([])
        self.assertEqual(context.exception.code, 1)
        output = stream.getvalue()
        self.assertIn("tool", output)
        self.assertIn("--release", output)


class TestNamespace(TestCase):

    def setUp(self):
        self.namespace = build().parse(STREAM)

    def testIsMapping(self):
        self.assertIsInstance(self.namespace, Namespace)
        self.assertEqual(list(self.namespace), ["a-switch", "B", "c", "X"])
        self.assertEqual(len(self.namespace), 4)
        self.assertIn("X", self.namespace)

    def testAliasLookup(self):
        expected = ("1", "2", "3", "4", "5", "6")
        for key in ("A", "-A", "a-switch", "--a-switch"):
            with self.subTest(key=key):
                self.assertEqual(self.namespace[key], expected)
        self.assertEqual(self.namespace.get("-B"), ("a",))

    def testIndexLookup(self):
        self.assertEqual(self.namespace["0"], ("11",))
        self.assertEqual(self.namespace["1"], ("b",))
        self.assertEqual(self.namespace["4"], ("3",))
        with self.assertRaises(KeyError):
            self.namespace["5"]

    def testUnknownKey(self):
        for key in ("missing", "-1", 0):
            with self.subTest(key=key), self.assertRaises(KeyError):
                self.namespace[key]

    def testAt(self):
        self.assertEqual(self.namespace.at(0), "11")
        self.assertEqual(self.namespace.at(-1), "3")
        self.assertIsNone(self.namespace.at(9, None))
        with self.assertRaises(IndexError):
            self.namespace.at(9)

    def testFoundAndFlag(self):
        self.assertTrue(self.namespace.found("A"))
        self.assertTrue(self.namespace.found("B"))
        self.assertFalse(self.namespace.found("c"))
        self.assertFalse(self.namespace.flag("-c"))
        with self.assertRaises(KeyError):
            self.namespace.flag("missing")

    def testTodictIsDetached(self):
        mapping = self.namespace.todict()
        mapping["B"].append("z")
        self.assertEqual(self.namespace["B"], ("a",))

    def testEmptyBoundary(self):
        namespace = Parser().parse([])
        self.assertEqual(dict(namespace), {})
        self.assertEqual(namespace.pool, ())

    def testNotHashable(self):
        with self.assertRaises(TypeError):
            hash(self.namespace)

    def testRepr(self):
        self.assertTrue(repr(self.namespace).startswith("namespace(a-switch=("))


if __name__ == "__main__":
    unittest.main()
