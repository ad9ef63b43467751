"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel: singleton identity, falsiness, representation, finality.
- coalesce(): only Unset is replaced.
- rename(): function and decorator forms.
- mirror()/Introspective: read-only views, type names, and representations.
"""
import copy
import unittest
from collections import deque
from types import MappingProxyType
from unittest import TestCase

from argvector.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testUnionWithTypes(self) -> None:
        """
        Unset participates in isinstance() unions through its type.
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("name", str | Unset)
        self.assertNotIsInstance(42, str | Unset)

    def testCopyPreservesIdentity(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFinal(self) -> None:
        """
        The sentinel type cannot be subclassed.
        """
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # noqa
                pass


class CoalesceTest(TestCase):
    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalsyValues(self) -> None:
        for value in (None, 0, "", False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):
    def testFunctionForm(self) -> None:
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecoratorForm(self) -> None:
        @rename("accessor")
        def function():
            pass

        self.assertEqual(function.__name__, "accessor")

    def testInvalidArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "named")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename()


class IntrospectiveTest(TestCase):
    """
    Test suite for mirrored properties and the Introspective metaclass.
    """

    def setUp(self) -> None:
        class SampleHolder(metaclass=Introspective):
            __introspectable__ = ("items", "table", "tags", "label")
            __displayable__ = ("label",)

            def __init__(self):
                self._items = deque(["a", "b"])
                self._table = {"key": "value"}
                self._tags = {"x"}
                self._label = "sample"

        self.holder = SampleHolder()

    def testTypename(self) -> None:
        self.assertEqual(type(self.holder).__typename__, "sample-holder")

    def testReadOnlyViews(self) -> None:
        self.assertEqual(self.holder.items, ("a", "b"))
        self.assertIsInstance(self.holder.table, MappingProxyType)
        self.assertEqual(self.holder.tags, frozenset({"x"}))
        with self.assertRaises(TypeError):
            self.holder.table["other"] = "value"

    def testViewsAreLive(self) -> None:
        table = self.holder.table
        self.holder._table["other"] = "value"
        self.assertEqual(table["other"], "value")

    def testPropertiesAreReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.label = "other"

    def testRepr(self) -> None:
        self.assertEqual(repr(self.holder), "sample-holder(label='sample')")
        self.assertEqual(list(self.holder.__rich_repr__()), [("label", "sample")])

    def testMirrorRequiresAName(self) -> None:
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == "__main__":
    unittest.main()
