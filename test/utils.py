"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel (singleton identity, falsy semantics, finality, unions).
- coalesce() only replaces Unset.
- rename() as a decorator.
- mirror() read-only properties and their container snapshots.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from declopt.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.unset, UnsetType())
        self.assertIs(Unset, self.unset)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testNotEqualToNoneOrFalse(self) -> None:
        """
        Falsy does not imply equality with other falsy values.
        """
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712
        self.assertNotEqual(Unset, 0)

    def testUnionWithTypes(self) -> None:
        """
        `str | Unset` works in isinstance checks.
        """
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testPickleByReference(self) -> None:
        """
        Every protocol stores a reference to the module constant, not a new instance.
        """
        for protocol in range(pickle.HIGHEST_PROTOCOL + 1):
            with self.subTest(protocol=protocol):
                self.assertIn(b"Unset", pickle.dumps(Unset, protocol))
                self.assertIs(pickle.loads(pickle.dumps(Unset, protocol)), Unset)

    def testUnionOnTheLeftIsUnsupported(self) -> None:
        with self.assertRaises(TypeError):
            Unset | str  # type: ignore[operator]

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testReplacesUnset(self):
        self.assertEqual(coalesce(Unset, 7), 7)
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalseyValues(self):
        self.assertIsNone(coalesce(None, 7))
        self.assertEqual(coalesce(0, 7), 0)
        self.assertEqual(coalesce("", 7), "")
        self.assertIs(coalesce(False, 7), False)


class RenameTest(TestCase):

    def testRenamesNameAndQualname(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testReturnsTheSameCallable(self):
        def function():
            pass

        self.assertIs(rename("renamed")(function), function)

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename("name")(42)
        with self.assertRaises(TypeError):
            rename("name")(len)


class MirrorTest(TestCase):

    def setUp(self):
        class Holder:
            items = mirror("items")
            pair = mirror("pair")
            label = mirror("label")

            def __init__(self):
                self._items = ["a", "b"]
                self._pair = (1, 2)
                self._label = "text"

        self.holder = Holder()

    def testListsAreSnapshotAsTuples(self):
        self.assertEqual(self.holder.items, ("a", "b"))
        self.assertIsInstance(self.holder.items, tuple)

    def testTuplesAndStringsAreReturnedAsIs(self):
        self.assertIs(self.holder.pair, self.holder._pair)
        self.assertEqual(self.holder.label, "text")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.holder.items = ()

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == '__main__':
    unittest.main()
