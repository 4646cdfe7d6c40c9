"""
Tests for faults (errors, warnings, rendering and triggering).

This module verifies:
- FaultCode normalization and host overrides through __main__.
- trigger(): raising, warning and shell rendering.
- copy.replace on faults merges options without losing the message.
- getdoc() lookups and argument validation.
"""
import copy
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from helmsman import (
    CommandException,
    CommandWarning,
    DiscardedExecutorWarning,
    FaultCode,
    MissingArgumentError,
    getdoc,
    trigger,
)


def fault():
    return MissingArgumentError(
        "missing value for 'msg' (first position)",
        code=FaultCode.MISSING_ARGUMENT,
        title="missing argument",
        hint="expected 1 argument(s) but got 0",
    )


class FaultCodeTest(TestCase):

    def testNormalizeDefaultsToNumber(self):
        with mock.patch("__main__.__codes__", {}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")

    def testNormalizeHostOverride(self):
        with mock.patch("__main__.__codes__", {FaultCode.UNKNOWN_COMMAND: "E-404"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "E-404")

    def testWarningCodesAreSeparated(self):
        self.assertGreaterEqual(FaultCode.DISCARDED_EXECUTOR, 12000)
        self.assertTrue(all(code < 12000 for code in FaultCode if code is not FaultCode.DISCARDED_EXECUTOR))


class TriggerTest(TestCase):

    def setUp(self):
        self.buffer = io.StringIO()
        patcher = mock.patch("helmsman.faults.console", Console(file=self.buffer, width=120))
        patcher.start()
        self.addCleanup(patcher.stop)

    def testRaisesOutsideShell(self):
        with self.assertRaises(MissingArgumentError) as context:
            trigger(fault(), command="say")
        self.assertEqual(context.exception.options["command"], "say")
        self.assertEqual(str(context.exception), "missing value for 'msg' (first position)")

    def testWarnsOutsideShell(self):
        with self.assertWarns(DiscardedExecutorWarning):
            trigger(DiscardedExecutorWarning("executor discarded", code=FaultCode.DISCARDED_EXECUTOR))

    def testRendersInShell(self):
        trigger(fault(), shell=True, colorful=False)
        output = self.buffer.getvalue()
        self.assertIn("11121", output)
        self.assertIn("Missing Argument", output)
        self.assertIn("→ expected 1 argument(s) but got 0", output)

    def testWarningRendersInShell(self):
        trigger(DiscardedExecutorWarning("executor discarded", code=FaultCode.DISCARDED_EXECUTOR,
                                         title="discarded executor"), shell=True, colorful=False)
        self.assertIn("Discarded Executor", self.buffer.getvalue())

    def testDocsAreAppended(self):
        with mock.patch("__main__.__docs__", {FaultCode.MISSING_ARGUMENT: "every parameter needs a value"},
                        create=True):
            trigger(fault(), shell=True, colorful=False)
        self.assertIn("every parameter needs a value", self.buffer.getvalue())

    def testRejectsForeignObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class ReplaceTest(TestCase):

    def testReplaceMergesOptions(self):
        original = fault()
        replaced = copy.replace(original, command="say")
        self.assertIsInstance(replaced, MissingArgumentError)
        self.assertIsNot(replaced, original)
        self.assertEqual(replaced.message, original.message)
        self.assertEqual(replaced.options["command"], "say")
        self.assertNotIn("command", original.options)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            fault().options["code"] = None

    def testHierarchy(self):
        self.assertTrue(issubclass(MissingArgumentError, CommandException))
        self.assertTrue(issubclass(DiscardedExecutorWarning, CommandWarning))
        self.assertTrue(issubclass(DiscardedExecutorWarning, Warning))


class GetDocTest(TestCase):

    def testMissingDocs(self):
        with mock.patch("__main__.__docs__", {}, create=True):
            self.assertIsNone(getdoc(FaultCode.NAME_TAKEN))

    def testRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(11131)


if __name__ == "__main__":
    unittest.main()
