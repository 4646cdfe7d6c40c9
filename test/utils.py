"""
Tests for the internal helpers.

This module verifies:
- Unset sentinel semantics (singleton, falsy, copy identity, finality, unions).
- coalesce(), rename(), mirror() and ordinal().
- Frozen build phase and immutability afterwards.
"""
import copy
import pickle
import unittest
from threading import Lock, Thread
from types import MappingProxyType
from unittest import TestCase

from helmsman.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertEqual(repr(Unset), "Unset")

    def testCopyPreservesIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testThreadSafeConstruction(self):
        results, lock = [], Lock()

        def create():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads = [Thread(target=create) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertTrue(all(instance is Unset for instance in results))

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance(Unset, Unset | str)
        self.assertNotIsInstance(None, str | Unset)


class HelpersTest(TestCase):

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, "fallback"), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRenameDirect(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRenameErrors(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(print, 42)
        with self.assertRaises(TypeError):
            rename()

    def testOrdinal(self):
        self.assertEqual([ordinal(number) for number in (1, 2, 3, 10)], ["first", "second", "third", "tenth"])
        self.assertEqual([ordinal(number) for number in (11, 12, 13, 21, 22, 23, 111)],
                         ["11th", "12th", "13th", "21st", "22nd", "23rd", "111th"])


class Point(Frozen):
    values = mirror("values")
    mapping = mirror("mapping")

    def __new__(cls, values, mapping):
        with super().__new__(cls) as self:
            self._values = values
            self._mapping = mapping
        return self


class FrozenTest(TestCase):

    def testBuildPhaseWrites(self):
        point = Point([1, 2], {"a": 1})
        self.assertEqual(point.values, (1, 2))
        self.assertIsInstance(point.mapping, MappingProxyType)

    def testImmutableAfterBuild(self):
        point = Point([1, 2], {})
        with self.assertRaises(AttributeError):
            point._values = [3]
        with self.assertRaises(AttributeError):
            del point._values
        with self.assertRaises(AttributeError):
            point.values = (3,)

    def testMirrorReturnsFrozenView(self):
        point = Point([1, 2], {"a": 1})
        with self.assertRaises(TypeError):
            point.mapping["b"] = 2
        self.assertEqual(point.values, (1, 2))

    def testCopiesReturnSameInstance(self):
        point = Point([1, 2], {})
        self.assertIs(copy.copy(point), point)
        self.assertIs(copy.deepcopy(point), point)

    def testPicklingRefused(self):
        with self.assertRaises(TypeError):
            pickle.dumps(Point([1], {}))

    def testMirrorRequiresString(self):
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == "__main__":
    unittest.main()
