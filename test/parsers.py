"""
Parsers module behavioral tests (argv walk, command selection, typed lookups, policy).

Scope
- Validate the four dispatch rules and command activation.
- Validate typed retrieval through get(), including soft-fail on mismatched kinds.
- Validate the raise_error/print_usage policy and warning replay.
- Validate the plain-text and rich usage renderers.

Conventions
- Test method names follow CamelCase per project convention.
- stderr is captured with contextlib.redirect_stderr when the parser renders.
"""

from __future__ import annotations

import contextlib
import io
import unittest
import warnings
from decimal import Decimal
from unittest import TestCase

from argvector import (
    Argument,
    Command,
    Parser,
    MalformedValueError,
    OutOfRangeError,
    UnknownArgumentError,
    UnexpectedPositionalError,
    ExpectedArgumentError,
    RepeatedArgumentWarning,
)


def _parser(*flags, **options):
    parser = Parser(*flags, **options)
    parser.add_argument(Argument("bool", "--verbose", "-v", "chatty output"))
    parser.add_argument(Argument("string", "config"))
    build = parser.command("build", "build a target")
    build.add_argument(Argument("string", "target"))
    build.add_argument(Argument("int", "--jobs", "-j", "parallel jobs", default=1))
    return parser


class TestParserWalk(TestCase):
    """Behavioral tests for token dispatch and command selection."""

    def testCommandActivatesAndTakesPositionals(self):
        parser = Parser()
        build = parser.command("build")
        build.add_argument(Argument("string", "target"))
        parser.parse(["tool", "build", "app"])
        self.assertEqual(parser.get_active_command_name(), "build")
        self.assertIs(parser.get_active_command(), build)
        self.assertTrue(build.is_active())
        self.assertEqual(parser.get("string", "build", "target"), "app")

    def testCommandNameAfterUnmatchedPositionalIsNotACommand(self):
        parser = Parser()
        parser.add_argument(Argument("bool", "--verbose"))
        build = parser.command("build")
        build.add_argument(Argument("string", "target"))
        with self.assertRaises(UnexpectedPositionalError) as context:
            parser.parse(["tool", "app", "build"])
        self.assertEqual(context.exception.options["command"], "default")
        self.assertEqual(parser.get_active_command_name(), "")
        self.assertIsNone(parser.get_active_command())

    def testDefaultPositionalsComeBeforeTheCommand(self):
        parser = _parser()
        parser.parse(["tool", "-v", "site.toml", "build", "app", "-j", "4"])
        self.assertIs(parser.get("bool", "verbose"), True)
        self.assertEqual(parser.get("string", "config"), "site.toml")
        self.assertEqual(parser.get("string", "build", "target"), "app")
        self.assertEqual(parser.get("int", "build", "jobs"), 4)

    def testPositionalsFillInDeclarationOrder(self):
        parser = Parser()
        parser.add_argument(Argument("string", "a"))
        parser.add_argument(Argument("string", "b"))
        with self.assertRaises(UnknownArgumentError):
            parser.parse(["tool", "first", "second", "third"])
        self.assertEqual(parser.get("string", "a"), "first")
        self.assertEqual(parser.get("string", "b"), "second")

    def testOptionsAfterACommandBelongToIt(self):
        parser = _parser()
        with self.assertRaises(UnknownArgumentError) as context:
            parser.parse(["tool", "build", "app", "-v"])
        self.assertEqual(context.exception.options["command"], "build")
        self.assertEqual(parser.get("string", "build", "target"), "app")
        self.assertIsNone(parser.get("bool", "verbose"))

    def testMissingOptionValue(self):
        parser = Parser()
        parser.add_argument(Argument("int", "--count"))
        with self.assertRaises(ExpectedArgumentError) as context:
            parser.parse(["tool", "--count"])
        self.assertIn("expected argument", str(context.exception))

    def testConversionFaultsStopTheWalk(self):
        parser = _parser()
        with self.assertRaises(MalformedValueError) as context:
            parser.parse(["tool", "build", "-j", "many", "app"])
        self.assertEqual(context.exception.options["argument"], "jobs")
        self.assertEqual(parser.tokens, ("many", "app"))
        self.assertIsNone(parser.get("string", "build", "target"))

    def testApplicationNameIsNotParsed(self):
        parser = _parser()
        parser.parse(["/usr/bin/tool"])
        self.assertEqual(parser.application_name, "/usr/bin/tool")
        self.assertEqual(parser.tokens, ())

    def testShellStringIsSplit(self):
        parser = _parser()
        parser.parse("tool build 'my app'")
        self.assertEqual(parser.get("string", "build", "target"), "my app")

    def testEmptyVector(self):
        parser = _parser()
        parser.parse([])
        self.assertEqual(parser.application_name, "")
        self.assertIsNone(parser.get("string", "config"))

    def testInvalidVectors(self):
        with self.assertRaises(TypeError):
            _parser().parse(42)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            _parser().parse(["tool", 1])  # type: ignore[list-item]

    def testParsesOnlyOnce(self):
        parser = _parser()
        parser.parse(["tool"])
        with self.assertRaises(RuntimeError):
            parser.parse(["tool"])


class TestParserLookup(TestCase):
    """Behavioral tests for get() and command registration."""

    def testEveryKindRoundTripsThroughLookup(self):
        cases = [
            ("string", "hello", "hello"),
            ("int", "42", 42),
            ("long", "9000000000", 9000000000),
            ("unsigned long", "18446744073709551615", 18446744073709551615),
            ("long long", "9223372036854775807", 9223372036854775807),
            ("unsigned long long", "18446744073709551615", 18446744073709551615),
            ("float", "1.5", 1.5),
            ("double", "2.25", 2.25),
            ("long double", "3.5", Decimal("3.5")),
            ("bool", "no", False),
        ]
        parser = Parser()
        for index, (kind, _, _) in enumerate(cases):
            parser.add_argument(Argument(kind, "value%d" % index))
        parser.parse(["tool", *(token for _, token, _ in cases)])
        for index, (kind, _, expected) in enumerate(cases):
            with self.subTest(kind=kind):
                self.assertEqual(parser.get(kind, "value%d" % index), expected)

    def testOptionValuesRoundTripThroughLookup(self):
        parser = Parser()
        parser.add_argument(Argument("unsigned long long", "--size"))
        parser.add_argument(Argument("long double", "--scale"))
        parser.parse(["tool", "--size", "00018446744073709551615", "--scale", "1e400"])
        self.assertEqual(parser.get("unsigned long long", "size"), 2 ** 64 - 1)
        self.assertEqual(parser.get("long double", "scale"), Decimal("1e400"))

    def testDefaultsAreReturnedWhenAbsent(self):
        parser = _parser()
        parser.parse(["tool", "build"])
        self.assertEqual(parser.get("int", "build", "jobs"), 1)
        self.assertIsNone(parser.get("string", "build", "target"))

    def testMismatchedKindIsAbsent(self):
        parser = _parser()
        parser.parse(["tool", "build", "app", "-j", "2"])
        self.assertIsNone(parser.get("long", "build", "jobs"))
        self.assertIsNone(parser.get("string", "build", "jobs"))
        self.assertIsNone(parser.get("complex", "build", "jobs"))

    def testUnknownPathsAreAbsent(self):
        parser = _parser()
        parser.parse(["tool"])
        self.assertIsNone(parser.get("int", "deploy", "jobs"))
        self.assertIsNone(parser.get("int", "jobs"))
        self.assertEqual(parser.get("int", "deploy", "jobs", default=7), 7)
        self.assertEqual(parser.get("string", "config", default="local.toml"), "local.toml")

    def testLookupArity(self):
        parser = _parser()
        with self.assertRaises(TypeError):
            parser.get("int")
        with self.assertRaises(TypeError):
            parser.get("int", "build", "jobs", "extra")

    def testAddCommandReplacesByName(self):
        parser = _parser()
        deploy = Command("build", "replacement")
        self.assertIs(parser.add_command(deploy), deploy)
        self.assertIs(parser.commands["build"], deploy)
        self.assertEqual(len(parser.commands), 1)

    def testAddCommandRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            Parser().add_command("build")  # type: ignore[arg-type]

    def testDescriptionMustBeText(self):
        with self.assertRaises(TypeError):
            Parser(descr=42)  # type: ignore[arg-type]


class TestParserPolicy(TestCase):
    """Behavioral tests for raise_error/print_usage and warning replay."""

    def testRaisedFaultsCarryTheProgramName(self):
        parser = _parser()
        with self.assertRaises(ExpectedArgumentError) as context:
            parser.parse(["/usr/bin/tool", "build", "-j"])
        self.assertEqual(context.exception.options["prog"], "tool")
        self.assertFalse(context.exception.options["shell"])

    def testShellModePrintsUsageAndExits(self):
        parser = _parser(False)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            parser.parse(["tool", "build", "-j"])
        self.assertEqual(context.exception.code, 1)
        self.assertIn("usage:", stderr.getvalue())
        self.assertIn("expected argument", stderr.getvalue())

    def testShellModeWithoutUsage(self):
        parser = _parser(False, False)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit):
            parser.parse(["tool", "--nope"])
        self.assertNotIn("usage:", stderr.getvalue())
        self.assertIn("unknown argument", stderr.getvalue())

    def testOversizedNumeralIsAConversionFault(self):
        parser = Parser()
        parser.add_argument(Argument("int", "--count"))
        with self.assertRaises(OutOfRangeError):
            parser.parse(["tool", "--count", "9" * 5000])

    def testOversizedNumeralExitsInShellMode(self):
        parser = Parser(False, False)
        parser.add_argument(Argument("int", "--count"))
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            parser.parse(["tool", "--count", "9" * 5000])
        self.assertEqual(context.exception.code, 1)

    def testParseFaultWinsOverEscalatedWarnings(self):
        parser = _parser()
        with warnings.catch_warnings():
            warnings.simplefilter("error", RepeatedArgumentWarning)
            with self.assertRaises(UnexpectedPositionalError):
                parser.parse(["tool", "build", "app", "-j", "2", "-j", "3", "extra"])
        self.assertEqual(parser.get("int", "build", "jobs"), 3)

    def testRepeatedOptionWarnsAndLastValueWins(self):
        parser = _parser()
        with self.assertWarns(RepeatedArgumentWarning):
            parser.parse(["tool", "build", "app", "-j", "2", "--jobs", "3"])
        self.assertEqual(parser.get("int", "build", "jobs"), 3)

    def testRepeatedOptionIsRenderedInShellMode(self):
        parser = _parser(False)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            parser.parse(["tool", "-v", "-v"])
        self.assertIn("already provided", stderr.getvalue())
        self.assertIs(parser.get("bool", "verbose"), True)


class TestParserUsage(TestCase):
    """Behavioral tests for usage() and print_usage()."""

    def testPlainUsage(self):
        parser = _parser()
        parser.parse(["/usr/bin/tool"])
        self.assertEqual(
            parser.usage(),
            "usage: tool [--verbose|-v] <config>\n"
            "       tool build [--jobs|-j <int>] <target>"
        )

    def testRichUsage(self):
        parser = _parser(descr="demo tool")
        parser.parse(["tool"])
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            parser.print_usage()
        output = stderr.getvalue()
        self.assertIn("usage: tool", output)
        self.assertIn("demo tool", output)
        self.assertIn("--jobs, -j", output)
        self.assertIn("(default: 1)", output)

    def testFancyUsageIsBoxed(self):
        parser = _parser(fancy=True)
        parser.parse(["tool"])
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            parser.print_usage()
        self.assertIn("TOOL", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
