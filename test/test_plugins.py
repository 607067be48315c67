"""
Plugin descriptors and dependency ordering tests.

Scope
- Validate load order (dependencies first, input order otherwise, deterministic).
- Validate fatal faults for missing required dependencies and cycles.
- Validate optional dependencies and duplicate id warnings.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from salvo import Dependency, Plugin, plugin, resolve_dependencies
from salvo.faults import CircularDependencyError, DuplicatePluginWarning, MissingDependencyError


def ids(plugins):
    return [plugin.id for plugin in plugins]


class TestPluginDescriptor(TestCase):
    """Plugin construction and validation."""

    def testStringDependenciesAreRequired(self):
        descriptor = Plugin("a", dependencies=["b", Dependency("c", optional=True)])
        self.assertEqual([(dependency.id, dependency.optional) for dependency in descriptor.dependencies], [
            ("b", False),
            ("c", True),
        ])

    def testEmptyIdRejected(self):
        with self.assertRaises(TypeError):
            Plugin("")

    def testOnExtensionRequiresExtension(self):
        with self.assertRaises(TypeError):
            Plugin("a", on_extension=lambda ctx, command: None)

    def testDescriptorIsReadOnly(self):
        descriptor = Plugin("a")
        with self.assertRaises(AttributeError):
            descriptor.id = "b"  # type: ignore[misc]

    def testDecoratorBuildsPluginFromSetup(self):
        @plugin("my:plugin", name="mine", dependencies=["g:globals"])
        def setup(ctx):
            pass

        self.assertIsInstance(setup, Plugin)
        self.assertEqual(setup.id, "my:plugin")
        self.assertEqual(setup.name, "mine")
        self.assertEqual(ids(setup.dependencies), ["g:globals"])
        self.assertIsNotNone(setup.setup)
        self.assertIsNone(setup.extension)

    def testExtensionDeclaresFactory(self):
        factory = lambda ctx, command: {"ok": True}  # NOQA: E731
        descriptor = Plugin("a", extension=factory)
        self.assertIs(descriptor.extension.factory, factory)
        self.assertEqual(descriptor.extension.id, "a")


class TestResolveDependencies(TestCase):
    """Topological ordering of plugins."""

    def testDependenciesLoadFirst(self):
        a = Plugin("a", dependencies=["b"])
        b = Plugin("b", dependencies=["c"])
        c = Plugin("c")
        self.assertEqual(ids(resolve_dependencies([a, b, c])), ["c", "b", "a"])

    def testIndependentPluginsKeepInputOrder(self):
        plugins = [Plugin("x"), Plugin("y"), Plugin("z")]
        self.assertEqual(ids(resolve_dependencies(plugins)), ["x", "y", "z"])

    def testEveryPluginFollowsItsRequiredDependencies(self):
        plugins = [
            Plugin("app", dependencies=["auth", "log"]),
            Plugin("auth", dependencies=["store"]),
            Plugin("log", dependencies=["store"]),
            Plugin("store"),
            Plugin("extra"),
        ]
        order = ids(resolve_dependencies(plugins))
        self.assertEqual(sorted(order), sorted(ids(plugins)))
        for descriptor in plugins:
            for dependency in descriptor.dependencies:
                self.assertLess(order.index(dependency.id), order.index(descriptor.id))

    def testOrderIsDeterministic(self):
        plugins = [Plugin("b", dependencies=["a"]), Plugin("c"), Plugin("a")]
        self.assertEqual(ids(resolve_dependencies(plugins)), ids(resolve_dependencies(plugins)))
        self.assertEqual(ids(resolve_dependencies(plugins)), ["a", "b", "c"])

    def testCycleNamesThePath(self):
        plugins = [Plugin("a", dependencies=["b"]), Plugin("b", dependencies=["a"])]
        with self.assertRaises(CircularDependencyError) as caught:
            resolve_dependencies(plugins)
        self.assertIn("a -> b -> a", str(caught.exception))
        self.assertEqual(caught.exception.options["cycle"], ("a", "b", "a"))

    def testCycleExcludesPluginsLeadingIntoIt(self):
        plugins = [
            Plugin("x", dependencies=["a"]),
            Plugin("a", dependencies=["b"]),
            Plugin("b", dependencies=["a"]),
        ]
        with self.assertRaises(CircularDependencyError) as caught:
            resolve_dependencies(plugins)
        self.assertEqual(caught.exception.options["cycle"], ("a", "b", "a"))

    def testSelfDependencyIsACycle(self):
        with self.assertRaises(CircularDependencyError) as caught:
            resolve_dependencies([Plugin("a", dependencies=["a"])])
        self.assertIn("a -> a", str(caught.exception))

    def testMissingRequiredDependencyRaises(self):
        with self.assertRaises(MissingDependencyError) as caught:
            resolve_dependencies([Plugin("a", dependencies=["missing"])])
        self.assertIn("'missing'", str(caught.exception))
        self.assertIn("'a'", str(caught.exception))
        self.assertEqual(caught.exception.options["dependency"], "missing")
        self.assertEqual(caught.exception.options["plugin"], "a")

    def testMissingOptionalDependencyIsSkipped(self):
        plugins = [Plugin("a", dependencies=[Dependency("missing", optional=True)])]
        self.assertEqual(ids(resolve_dependencies(plugins)), ["a"])

    def testPresentOptionalDependencyStillLoadsFirst(self):
        plugins = [Plugin("a", dependencies=[Dependency("b", optional=True)]), Plugin("b")]
        self.assertEqual(ids(resolve_dependencies(plugins)), ["b", "a"])

    def testDuplicateIdWarnsAndKeepsBoth(self):
        first, second = Plugin("dup"), Plugin("dup")
        with self.assertWarns(DuplicatePluginWarning):
            order = resolve_dependencies([first, second])
        self.assertEqual(len(order), 2)
        self.assertIs(order[0], first)
        self.assertIs(order[1], second)


if __name__ == "__main__":
    unittest.main()
