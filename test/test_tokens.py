"""
Tokenizer tests: classification by shape only, order preserved.
"""
import unittest
from unittest import TestCase

from sigil.tokens import *


class TestClassify(TestCase):

    def testLongOptions(self):
        self.assertEqual(classify("--user"), LongOption("user", None))
        self.assertEqual(classify("--user=joe"), LongOption("user", "joe"))
        self.assertEqual(classify("--user="), LongOption("user", ""))
        # Only the first "=" separates the value.
        self.assertEqual(classify("--query=a=b"), LongOption("query", "a=b"))

    def testShortOptions(self):
        self.assertEqual(classify("-f"), ShortOption("f", None))
        self.assertEqual(classify("-x=1"), ShortOption("x", "1"))
        self.assertEqual(classify("-x="), ShortOption("x", ""))

    def testPositionals(self):
        for raw in ("a@b.com", "-", "-5", "-1.5", "-fb", "1,2,3", ""):
            with self.subTest(raw=raw):
                self.assertEqual(classify(raw), Positional(raw))

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            classify(5)


class TestTokenize(TestCase):

    def testOrderPreserved(self):
        self.assertEqual(
            tokenize(["a@b.com", "--user=joe", "pw", "-f"]),
            (Positional("a@b.com"), LongOption("user", "joe"), Positional("pw"), ShortOption("f")),
        )

    def testShellString(self):
        self.assertEqual(
            tokenize("deploy 'two words' --user joe"),
            (Positional("deploy"), Positional("two words"), LongOption("user"), Positional("joe")),
        )

    def testEmpty(self):
        self.assertEqual(tokenize([]), ())
        self.assertEqual(tokenize(""), ())

    def testRejectsNonIterables(self):
        with self.assertRaises(TypeError):
            tokenize(5)
        with self.assertRaises(TypeError):
            tokenize([5])

    def testSpellingRebuildsRawText(self):
        for raw in ("--user=joe", "--user", "--user=", "-x=1", "-f", "plain", "-5"):
            with self.subTest(raw=raw):
                self.assertEqual(spelling(classify(raw)), raw)
        with self.assertRaises(TypeError):
            spelling("raw")


if __name__ == '__main__':
    unittest.main()
