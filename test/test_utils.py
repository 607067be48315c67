"""
Internal helper tests (sentinel, freezing, records, async bridging).

Scope
- Validate the Unset singleton and coalesce() semantics.
- Validate freeze() and the Record base (read-only fields, __replace__, repr).
- Validate settle()/coroutine() sync/async bridging and rename().

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import inspect
import unittest
from types import MappingProxyType
from unittest import IsolatedAsyncioTestCase, TestCase

from salvo.utils import Record, Unset, UnsetType, coalesce, coroutine, freeze, rename, settle


class Point(Record):
    __slots__ = ("x", "y")


class Box(Record):
    __slots__ = ("label", "payload")
    __thawed__ = ("payload",)


class TestUnset(TestCase):
    """Unset / coalesce()"""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testFinalType(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", []):
            self.assertIs(coalesce(value, "fallback"), value)


class TestFreeze(TestCase):
    """freeze()"""

    def testNestedContainers(self):
        frozen = freeze({"a": [1, {"b": {2, 3}}]})
        self.assertIsInstance(frozen, MappingProxyType)
        self.assertEqual(frozen["a"][0], 1)
        self.assertIsInstance(frozen["a"], tuple)
        self.assertIsInstance(frozen["a"][1], MappingProxyType)
        self.assertEqual(frozen["a"][1]["b"], frozenset({2, 3}))

    def testSourceIsCopied(self):
        source = {"a": 1}
        frozen = freeze(source)
        source["b"] = 2
        self.assertEqual(list(frozen), ["a"])

    def testStringsAndRecordsUntouched(self):
        point = Point(x=1, y=2)
        self.assertIs(freeze("text"), "text")
        self.assertIs(freeze(point), point)

    def testIgnoredKeysStayMutable(self):
        payload = []
        frozen = freeze({"payload": payload, "other": []}, ("payload",))
        self.assertIs(frozen["payload"], payload)
        self.assertEqual(frozen["other"], ())


class TestRecord(TestCase):
    """Record base"""

    def testFieldsAreFrozen(self):
        point = Point(x=[1, 2], y={"z": 3})
        self.assertEqual(point.x, (1, 2))
        with self.assertRaises(TypeError):
            point.y["z"] = 4  # type: ignore[index]

    def testReadOnly(self):
        point = Point(x=1, y=2)
        with self.assertRaises(AttributeError):
            point.x = 3  # type: ignore[misc]
        with self.assertRaises(AttributeError):
            del point.y

    def testMissingAndUnexpectedFields(self):
        with self.assertRaises(TypeError):
            Point(x=1)
        with self.assertRaises(TypeError):
            Point(x=1, y=2, z=3)

    def testReplaceReturnsCopy(self):
        point = Point(x=1, y=2)
        moved = point.__replace__(y=5)
        self.assertEqual((moved.x, moved.y), (1, 5))
        self.assertEqual(point.y, 2)
        with self.assertRaises(TypeError):
            point.__replace__(z=1)

    def testCopyModuleUsesReplace(self):
        if not hasattr(copy, "replace"):
            self.skipTest("copy.replace() requires Python 3.13")
        self.assertEqual(copy.replace(Point(x=1, y=2), x=9).x, 9)

    def testThawedFieldsKeepIdentity(self):
        payload = []
        box = Box(label=["a"], payload=payload)
        self.assertIs(box.payload, payload)
        self.assertEqual(box.label, ("a",))

    def testRepr(self):
        self.assertEqual(repr(Point(x=1, y="a")), "point(x=1, y='a')")
        self.assertEqual(Box.__typename__, "box")


class TestRename(TestCase):
    """rename()"""

    def testDirectForm(self):
        def original():
            pass

        self.assertIs(rename(original, "renamed"), original)
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            rename("not callable", "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename()


class TestAsyncBridging(IsolatedAsyncioTestCase):
    """settle() / coroutine()"""

    async def testSettleAwaitsAwaitables(self):
        async def produce():
            return "awaited"

        self.assertEqual(await settle(produce()), "awaited")
        self.assertEqual(await settle("plain"), "plain")

    async def testCoroutineWrapsSyncCallable(self):
        def greet(name):
            return f"hello {name}"

        wrapped = coroutine(greet)
        self.assertTrue(inspect.iscoroutinefunction(wrapped))
        self.assertEqual(wrapped.__name__, "greet")
        self.assertEqual(await wrapped("world"), "hello world")

    async def testCoroutineSettlesReturnedAwaitable(self):
        async def inner():
            return "inner"

        self.assertEqual(await coroutine(lambda: inner())(), "inner")

    async def testCoroutineFunctionReturnedUnchanged(self):
        async def already():
            return None

        self.assertIs(coroutine(already), already)

    def testCoroutineRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            coroutine("nope")


if __name__ == "__main__":
    unittest.main()
