"""
Fault tests: codes, options, rendering and copies.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from sigil.faults import *


class TestFaultCode(TestCase):

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND, 11101)
        self.assertEqual(FaultCode.MISSING_ARGUMENT, 11125)
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))

    def testNormalize(self):
        self.assertEqual(FaultCode.INVALID_TYPE.normalize(), "11131")
        main = __import__("__main__")
        main.__codes__ = {FaultCode.INVALID_TYPE: "E-TYPE"}
        try:
            self.assertEqual(FaultCode.INVALID_TYPE.normalize(), "E-TYPE")
            self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "11117")
        finally:
            del main.__codes__


class TestExceptions(TestCase):

    def testKindsCarryCodes(self):
        kinds = {
            UnknownOptionError: FaultCode.UNKNOWN_OPTION,
            MissingArgumentError: FaultCode.MISSING_ARGUMENT,
            MissingOptionError: FaultCode.MISSING_OPTION,
            MissingValueError: FaultCode.MISSING_VALUE,
            UnexpectedValueError: FaultCode.UNEXPECTED_VALUE,
            TooManyArgumentsError: FaultCode.TOO_MANY_ARGUMENTS,
            InvalidTypeError: FaultCode.INVALID_TYPE,
            UnknownCommandError: FaultCode.UNKNOWN_COMMAND,
        }
        for cls, code in kinds.items():
            with self.subTest(cls=cls.__name__):
                error = cls("message")
                self.assertIsInstance(error, CommandException)
                self.assertEqual(error.kind, code)
                self.assertEqual(error.code, code)

    def testMessageAndOptions(self):
        error = MissingValueError("option '--user' requires a value", parameter="user", hint="add a value")
        self.assertEqual(str(error), "option '--user' requires a value")
        self.assertEqual(error.fragment, str(error))
        self.assertEqual(error.parameter, "user")
        self.assertEqual(error.hint, "add a value")
        self.assertEqual(error.title, "missing option value")
        with self.assertRaises(TypeError):
            error.options["hint"] = "other"

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            CommandException(42)
        self.assertEqual(str(CommandException()), "")

    def testEqualityAndReplace(self):
        error = UnknownOptionError("unknown option '--x'", parameter="--x")
        self.assertEqual(error, UnknownOptionError("unknown option '--x'", parameter="--x"))
        self.assertNotEqual(error, MissingOptionError("unknown option '--x'", parameter="--x"))

        copy = error.__replace__(hint="did you mean '--y'?")
        self.assertIsNot(copy, error)
        self.assertEqual(copy.hint, "did you mean '--y'?")
        self.assertEqual(copy.parameter, "--x")
        self.assertIsNone(error.hint)


class TestRendering(TestCase):

    def render(self, error):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        console.print(error)
        return console.file.getvalue()

    def testPlain(self):
        error = InvalidTypeError("invalid integer 'x'", parameter="count", hint="use a valid integer", prog="tool")
        self.assertEqual(self.render(error).splitlines(), [
            "[ tool — 11131 | Invalid Value ]",
            "invalid integer 'x'",
            " → use a valid integer",
        ])

    def testFancy(self):
        error = UnknownCommandError("unknown command 'x'", prog="tool", fancy=True, colorful=False)
        output = self.render(error)
        self.assertIn("[ tool — 11101 | Unknown Command ]", output)
        self.assertIn("unknown command 'x'", output)


if __name__ == '__main__':
    unittest.main()
