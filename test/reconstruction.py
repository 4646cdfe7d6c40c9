"""
Reconstruction behavioral tests (composite shapes, missing values, compiled executors).

Scope
- Validate the composite shape for zero, one, two and more parameters.
- Validate that declaration order drives the nesting.
- Validate missing-value faults and that executors are never called on failure.
- Validate compile(): outcomes are forwarded unchanged.

Conventions
- Test method names follow CamelCase per project convention.
- Lookups return Unset for absent values, exactly like the registry does.
"""
import unittest
from unittest import TestCase

from helmsman import MissingArgumentError, CommandException, FaultCode, reconstruct, double, string
from helmsman.reconstruction import compile
from helmsman.utils import Unset


SOURCE = object()


def lookup(values):
    return lambda key: values.get(key, Unset)


class TestReconstruct(TestCase):
    """Composite shapes produced by reconstruct()."""

    def testZeroParametersYieldsSourceAlone(self):
        self.assertIs(reconstruct(SOURCE, (), lookup({})), SOURCE)

    def testOneParameterYieldsFlatPair(self):
        self.assertEqual(reconstruct(SOURCE, ("msg",), lookup({"msg": "hello"})), (SOURCE, "hello"))

    def testTwoParametersYieldLeftNestedPairs(self):
        composite = reconstruct(SOURCE, ("x", "y"), lookup({"x": 1.5, "y": 2.5}))
        self.assertEqual(composite, ((SOURCE, 1.5), 2.5))

    def testDeclarationOrderDrivesNesting(self):
        values = lookup({"x": 1, "y": 2})
        self.assertEqual(reconstruct(SOURCE, ("x", "y"), values), ((SOURCE, 1), 2))
        self.assertEqual(reconstruct(SOURCE, ("y", "x"), values), ((SOURCE, 2), 1))
        self.assertNotEqual(reconstruct(SOURCE, ("x", "y"), values), (SOURCE, 1, 2))

    def testShapeMatchesWideningForManyParameters(self):
        for count in range(6):
            keys = tuple(f"p{index}" for index in range(count))
            composite = reconstruct(SOURCE, keys, lookup({key: index for index, key in enumerate(keys)}))

            # unwind the nesting from the outside in
            for index in reversed(range(count)):
                self.assertIsInstance(composite, tuple)
                self.assertEqual(len(composite), 2)
                composite, value = composite
                self.assertEqual(value, index)
            self.assertIs(composite, SOURCE)

    def testFalseyValuesAreNotMissing(self):
        composite = reconstruct(SOURCE, ("a", "b", "c"), lookup({"a": 0, "b": "", "c": None}))
        self.assertEqual(composite, (((SOURCE, 0), ""), None))


class TestMissingArgument(TestCase):
    """Missing values surface as MissingArgumentError."""

    def testSingleMissingValueRaises(self):
        with self.assertRaises(MissingArgumentError):
            reconstruct(SOURCE, ("msg",), lookup({}))

    def testAnyMissingValueRaises(self):
        with self.assertRaises(MissingArgumentError):
            reconstruct(SOURCE, ("x", "y"), lookup({"x": 1.5}))

    def testFaultCarriesCodeAndMissingKeys(self):
        with self.assertRaises(MissingArgumentError) as context:
            reconstruct(SOURCE, ("x", "y", "z"), lookup({"y": 2.0}))
        fault = context.exception
        self.assertEqual(fault.options["code"], FaultCode.MISSING_ARGUMENT)
        self.assertEqual(fault.options["missing"], ("x", "z"))
        self.assertIn("first position", str(fault))
        self.assertIn("third position", str(fault))

    def testFaultIsARecoverableCommandException(self):
        with self.assertRaises(CommandException):
            reconstruct(SOURCE, ("x",), lookup({}))


class TestCompile(TestCase):
    """Compiled executors: reconstruction + invocation."""

    def testExecutorCalledOnceWithCompositeAndOutcomeForwarded(self):
        calls = []
        outcome = object()

        def executor(arguments):
            calls.append(arguments)
            return outcome

        execute = compile(executor, (double("x"), double("y")))
        self.assertIs(execute(SOURCE, {"x": 1.5, "y": 2.5}), outcome)
        self.assertEqual(calls, [((SOURCE, 1.5), 2.5)])

    def testExecutorNeverCalledOnMissingValue(self):
        calls = []
        execute = compile(calls.append, (string("msg"),))
        with self.assertRaises(MissingArgumentError):
            execute(SOURCE, {})
        self.assertEqual(calls, [])

    def testExecutorWithoutParametersReceivesSource(self):
        calls = []
        compile(calls.append, ())(SOURCE, {"ignored": 1})
        self.assertEqual(calls, [SOURCE])

    def testNonCallableExecutorRejected(self):
        with self.assertRaises(TypeError):
            compile("executor", ())


if __name__ == "__main__":
    unittest.main()
