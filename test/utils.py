"""
Utility tests (Unset sentinel, coalesce, rename, sformat, wrap).

Scope
- Validate sentinel semantics and coalescing.
- Validate printf-style message building used by error builders.
- Validate line-wise help wrapping.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from multicommand.utils import Unset, UnsetType, coalesce, rename, sformat, wrap


class TestUnset(TestCase):

    def testSentinel(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertTrue(isinstance(Unset, str | Unset))
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRename(self):
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")

        @rename("decorated")
        def original():
            pass

        self.assertEqual(original.__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename()


class TestFormat(TestCase):

    def testStringAndNumbers(self):
        self.assertEqual(sformat("%s has %d files", "dir", 4), "dir has 4 files")
        self.assertEqual(sformat("%d", "12.5"), "12.5")
        self.assertEqual(sformat("%d", 2.0), "2")
        self.assertEqual(sformat("%i", 3.9), "3")
        self.assertEqual(sformat("%f", "2"), "2.0")
        self.assertEqual(sformat("%d %i %f", "a", "b", None), "NaN NaN NaN")

    def testJsonAndRepr(self):
        circular = []
        circular.append(circular)
        self.assertEqual(sformat("%j", {"a": 1}), '{"a": 1}')
        self.assertEqual(sformat("%j", circular), "[Circular]")
        self.assertEqual(sformat("%o and %O", "x", [1]), "'x' and [1]")
        self.assertEqual(sformat("a%cb", "css"), "ab")

    def testPercent(self):
        self.assertEqual(sformat("%s at 100%%", "cpu"), "cpu at 100%")
        self.assertEqual(sformat("100%%"), "100%%")

    def testMissingAndSurplus(self):
        self.assertEqual(sformat("%s and %s", "one"), "one and %s")
        self.assertEqual(sformat("failed", "x", 1), "failed x 1")
        self.assertEqual(sformat(5, "x"), "5 x")


class TestWrap(TestCase):

    def testIndentedContinuation(self):
        self.assertEqual(wrap("  a summary that is long", 12), "  a summary\n  that is\n  long")

    def testLinesWrapIndependently(self):
        self.assertEqual(wrap("one\n   \nsee-also and\n", 8), "one\n\nsee-also\nand\n")

    def testShortTextUnchanged(self):
        text = "FROB [-x]\n  Frobnicate.\n"
        self.assertEqual(wrap(text, 80), text)

    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            wrap(None, 10)
        with self.assertRaises(TypeError):
            wrap("text", True)
        with self.assertRaises(ValueError):
            wrap("text", 0)


if __name__ == "__main__":
    unittest.main()
