"""
Binder behavioral tests (scenarios, value kinds, fail-fast faults).

Scope
- Successful bindings: defaults, flags, space/inline forms, arrays.
- Faults: kind, offending parameter and message for every binding error.
- BindingResult contract.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from sigil.binder import *
from sigil.faults import *
from sigil.signatures import *


def deploy_signature():
    return Signature(
        positional("email"),
        positional("password"),
        long_option("user"),
        short_option("f", "force", ValueKind.BOOL),
    )


class TestScenarios(TestCase):

    def testEmptyInputMissesFirstArgument(self):
        result = bind(deploy_signature(), [])
        self.assertFalse(result)
        self.assertIsInstance(result.error, MissingArgumentError)
        self.assertEqual(result.error.kind, FaultCode.MISSING_ARGUMENT)
        self.assertEqual(result.error.parameter, "email")
        self.assertEqual(str(result.error), "missing required argument 'email'")

    def testFullInputBinds(self):
        result = bind(deploy_signature(), ["a@b.com", "pw", "--user=joe", "-f"])
        self.assertTrue(result)
        self.assertEqual(dict(result.values), {"email": "a@b.com", "password": "pw", "user": "joe", "force": True})

    def testOptionalDefault(self):
        result = bind(Signature(long_option("team", default="dev")), [])
        self.assertEqual(dict(result.values), {"team": "dev"})

    def testUnknownOption(self):
        result = bind(deploy_signature(), ["a@b.com", "pw", "--bogus"])
        self.assertIsInstance(result.error, UnknownOptionError)
        self.assertEqual(result.error.parameter, "--bogus")
        self.assertEqual(str(result.error), "unknown option '--bogus' at third position")

    def testUnknownOptionSuggestsCloseName(self):
        result = bind(deploy_signature(), ["--usr=joe"])
        self.assertEqual(result.error.hint, "did you mean '--user'?")
        self.assertEqual(result.error.options["suggestions"], ("--user",))

    def testMissingRequiredOption(self):
        result = bind(deploy_signature(), ["a@b.com", "pw"])
        self.assertIsInstance(result.error, MissingOptionError)
        self.assertEqual(result.error.parameter, "user")
        self.assertEqual(str(result.error), "missing required option '--user'")


class TestDefaults(TestCase):

    def testAllOptionalEmptyInputEqualsDefaults(self):
        signature = Signature(
            positional("target", default="prod"),
            long_option("count", ValueKind.INT, default=3),
            long_option("ids", ValueKind.ARRAY, default=["a"]),
            long_option("team", nullable=True),
            short_option("v", "verbose", ValueKind.BOOL),
        )
        result = bind(signature, [])
        self.assertTrue(result)
        self.assertEqual(dict(result.values), signature.defaults())

    def testMappingHasEveryParameterInDeclarationOrder(self):
        signature = Signature(long_option("b", default="2"), positional("a"), short_option("c", "c", ValueKind.BOOL))
        self.assertEqual(list(bind(signature, ["1"]).values), ["b", "a", "c"])

    def testRequiredParameterMakesEmptyInputFail(self):
        self.assertFalse(bind(Signature(long_option("team", default="dev"), long_option("user")), []))


class TestFlags(TestCase):

    def setUp(self):
        self.signature = Signature(long_option("dry_run", ValueKind.BOOL), short_option("f", "force", ValueKind.BOOL))

    def testPresenceAndAbsence(self):
        self.assertEqual(dict(bind(self.signature, ["--dry-run"]).values), {"dry_run": True, "force": False})
        self.assertEqual(dict(bind(self.signature, ["-f"]).values), {"dry_run": False, "force": True})

    def testInlineValueRejected(self):
        for raw in ("--dry-run=yes", "--dry-run=", "-f=1"):
            with self.subTest(raw=raw):
                result = bind(self.signature, [raw])
                self.assertIsInstance(result.error, UnexpectedValueError)
                self.assertEqual(result.error.kind, FaultCode.UNEXPECTED_VALUE)


class TestValues(TestCase):

    def setUp(self):
        self.signature = Signature(
            long_option("name", default="x"),
            short_option("n", "count", ValueKind.INT, default=0),
            long_option("ratio", ValueKind.FLOAT, default=1.0),
        )

    def testInlineAndSpaceForms(self):
        self.assertEqual(bind(self.signature, ["--name=joe"]).values["name"], "joe")
        self.assertEqual(bind(self.signature, ["--name", "joe"]).values["name"], "joe")
        self.assertEqual(bind(self.signature, ["-n", "4"]).values["count"], 4)
        self.assertEqual(bind(self.signature, ["-n=4"]).values["count"], 4)

    def testEmptyInlineValue(self):
        self.assertEqual(bind(self.signature, ["--name="]).values["name"], "")

    def testSpaceFormTakesNextTokenWhateverItsShape(self):
        self.assertEqual(bind(self.signature, ["--name", "--ratio"]).values["name"], "--ratio")
        self.assertEqual(bind(self.signature, ["--name", "-n=2"]).values["name"], "-n=2")
        self.assertEqual(bind(self.signature, ["-n", "-5"]).values["count"], -5)

    def testMissingValueAtEnd(self):
        result = bind(self.signature, ["--name"])
        self.assertIsInstance(result.error, MissingValueError)
        self.assertEqual(result.error.parameter, "name")

    def testNumbers(self):
        self.assertEqual(bind(self.signature, ["-n=+7"]).values["count"], 7)
        self.assertEqual(bind(self.signature, ["--ratio=1e3"]).values["ratio"], 1000.0)
        self.assertEqual(bind(self.signature, ["--ratio=.5"]).values["ratio"], 0.5)
        self.assertEqual(bind(self.signature, ["--ratio=-2"]).values["ratio"], -2.0)

    def testStrictIntegers(self):
        for raw in ("1_000", " 7", "0x10", "1.5", "", "٣"):
            with self.subTest(raw=raw):
                result = bind(self.signature, ["-n=" + raw])
                self.assertIsInstance(result.error, InvalidTypeError)
                self.assertEqual(result.error.kind, FaultCode.INVALID_TYPE)
                self.assertEqual(result.error.parameter, "count")

    def testStrictFloats(self):
        for raw in ("nan", "inf", "1_0.5", "1.5.2", "abc"):
            with self.subTest(raw=raw):
                self.assertIsInstance(bind(self.signature, ["--ratio=" + raw]).error, InvalidTypeError)

    def testNumbersOutOfRange(self):
        for raw in ("1e999", "-1e999"):
            with self.subTest(raw=raw):
                self.assertIsInstance(bind(self.signature, ["--ratio=" + raw]).error, InvalidTypeError)
        with self.assertRaises(ValueError):
            coerce(ValueKind.FLOAT, "1e400")

    def testLongLiteralIsShortenedInMessage(self):
        raw = "1" * 5000
        result = bind(self.signature, ["-n=" + raw])
        self.assertIsInstance(result.error, InvalidTypeError)
        self.assertEqual(
            str(result.error),
            "invalid integer '" + "1" * 29 + "...' for option '-n' at first position",
        )
        self.assertEqual(result.error.options["input"], raw)

    def testInvalidTypeMessage(self):
        result = bind(self.signature, ["--name=a", "-n", "many"])
        self.assertEqual(str(result.error), "invalid integer 'many' for option '-n' at second position")


class TestArrays(TestCase):

    def testRepeatedInlineOptionAccumulates(self):
        signature = Signature(long_option("ids", ValueKind.ARRAY))
        result = bind(signature, ["--ids=1", "--ids=2", "--ids=3"])
        self.assertEqual(result.values["ids"], ("1", "2", "3"))

    def testSpaceFormRejected(self):
        result = bind(Signature(long_option("ids", ValueKind.ARRAY)), ["--ids", "1"])
        self.assertIsInstance(result.error, MissingValueError)
        self.assertEqual(result.error.kind, FaultCode.MISSING_VALUE)

    def testGivenOptionReplacesDefault(self):
        signature = Signature(long_option("ids", ValueKind.ARRAY, default=["9"]))
        self.assertEqual(bind(signature, ["--ids=1"]).values["ids"], ("1",))
        self.assertEqual(bind(signature, []).values["ids"], ("9",))

    def testPositionalSplitsOnCommas(self):
        signature = Signature(positional("ids", ValueKind.ARRAY))
        self.assertEqual(bind(signature, ["1,2,3,4,5"]).values["ids"], ("1", "2", "3", "4", "5"))


class TestPositionals(TestCase):

    def testTooManyArguments(self):
        result = bind(Signature(positional("name")), ["a", "b"])
        self.assertIsInstance(result.error, TooManyArgumentsError)
        self.assertEqual(result.error.parameter, "b")
        self.assertEqual(str(result.error), "unexpected argument 'b' at second position")

    def testDashIsPositional(self):
        self.assertEqual(bind(Signature(positional("path")), ["-"]).values["path"], "-")

    def testTypedPositional(self):
        signature = Signature(positional("port", ValueKind.INT))
        self.assertEqual(bind(signature, ["8080"]).values["port"], 8080)
        self.assertIsInstance(bind(signature, ["http"]).error, InvalidTypeError)

    def testNullablePositional(self):
        signature = Signature(positional("name"), positional("team", nullable=True))
        self.assertEqual(dict(bind(signature, ["joe"]).values), {"name": "joe", "team": None})

    def testOptionsInterleave(self):
        result = bind(deploy_signature(), ["-f", "a@b.com", "--user", "joe", "pw"])
        self.assertEqual(dict(result.values), {"email": "a@b.com", "password": "pw", "user": "joe", "force": True})


class TestFailFast(TestCase):

    def testFirstErrorWins(self):
        result = bind(Signature(positional("name")), ["--bogus", "a", "b", "-n=x"])
        self.assertIsInstance(result.error, UnknownOptionError)

    def testScanErrorsBeforeMissingChecks(self):
        result = bind(deploy_signature(), ["-f=1"])
        self.assertIsInstance(result.error, UnexpectedValueError)


class TestBindingResult(TestCase):

    def testExactlyOneField(self):
        with self.assertRaises(TypeError):
            BindingResult()
        with self.assertRaises(TypeError):
            BindingResult(values={}, error=MissingArgumentError("x", parameter="x"))
        with self.assertRaises(TypeError):
            BindingResult(error=ValueError("x"))

    def testUnwrap(self):
        self.assertEqual(dict(BindingResult(values={"a": 1}).unwrap()), {"a": 1})
        error = MissingArgumentError("missing", parameter="a")
        with self.assertRaises(MissingArgumentError):
            BindingResult(error=error).unwrap()

    def testValuesAreReadOnly(self):
        result = bind(Signature(positional("name")), ["joe"])
        with self.assertRaises(TypeError):
            result.values["name"] = "other"

    def testStringInputIsSplit(self):
        self.assertEqual(dict(bind(deploy_signature(), "a@b.com 'p w' --user joe").values)["password"], "p w")


class TestCoerce(TestCase):

    def testKinds(self):
        self.assertEqual(coerce(ValueKind.INT, "-12"), -12)
        self.assertEqual(coerce(ValueKind.FLOAT, "2.5"), 2.5)
        self.assertEqual(coerce(ValueKind.STRING, "text"), "text")
        self.assertEqual(coerce(ValueKind.ARRAY, "a,b"), ("a", "b"))

    def testRejections(self):
        with self.assertRaises(ValueError):
            coerce(ValueKind.INT, "1.0")
        with self.assertRaises(TypeError):
            coerce(ValueKind.BOOL, "true")
        with self.assertRaises(TypeError):
            coerce("int", "1")


if __name__ == '__main__':
    unittest.main()
