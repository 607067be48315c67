"""
Command definition tests (concrete, lazy and resolved commands).

Scope
- Validate command()/lazy() factories and their defaults.
- Validate naming rules (first assignment wins, copies only).
- Validate resolve_lazy_command() with and without loading.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import IsolatedAsyncioTestCase, TestCase

from salvo import (
    Arg,
    Command,
    LazyCommand,
    ResolvedCommand,
    command,
    entry_command,
    lazy,
    named,
    resolve_lazy_command,
    sub_commands_of,
)
from salvo.faults import LazyCommandError


class TestCommandFactories(TestCase):
    """command() / lazy()"""

    def testDecoratorUsesFunctionNameAndDocstring(self):
        @command
        def build(ctx):
            """Build the project."""

        self.assertIsInstance(build, Command)
        self.assertEqual(build.name, "build")
        self.assertEqual(build.descr, "Build the project.")

    def testDecoratorOptionsOverrideDefaults(self):
        @command(name="compile", descr="Compile sources", args={"fast": Arg("boolean")})
        def build(ctx):
            """Build the project."""

        self.assertEqual(build.name, "compile")
        self.assertEqual(build.descr, "Compile sources")
        self.assertEqual(list(build.args), ["fast"])

    def testLambdaStaysUnnamed(self):
        self.assertIsNone(command(lambda ctx: None).name)

    def testLazyDecorator(self):
        @lazy(descr="Deploy the project")
        def deploy():
            return lambda ctx: "deployed"

        self.assertIsInstance(deploy, LazyCommand)
        self.assertEqual(deploy.command_name, "deploy")
        self.assertEqual(deploy.descr, "Deploy the project")

    def testInvalidDefinitionsRejected(self):
        with self.assertRaises(TypeError):
            Command("not callable")
        with self.assertRaises(TypeError):
            Command(args={"bad": "schema"})
        with self.assertRaises(TypeError):
            Command(sub_commands={"bad": lambda ctx: None})
        with self.assertRaises(TypeError):
            LazyCommand("not callable")

    def testCommandIsReadOnly(self):
        definition = Command(lambda ctx: None)
        with self.assertRaises(AttributeError):
            definition.name = "late"  # type: ignore[misc]
        with self.assertRaises(TypeError):
            definition.sub_commands["late"] = Command()  # type: ignore[index]


class TestNaming(TestCase):
    """named() / entry_command() / sub_commands_of()"""

    def testNamedAssignsOnCopy(self):
        original = Command(lambda ctx: None)
        copy = named(original, "build")
        self.assertEqual(copy.name, "build")
        self.assertIsNone(original.name)
        self.assertIs(copy.run, original.run)

    def testNamedFirstAssignmentWins(self):
        original = LazyCommand(lambda: None, name="ship")
        self.assertIs(named(original, "deploy"), original)

    def testEntryCommandWrapsRunner(self):
        def runner(ctx):
            return None

        entry = entry_command(runner)
        self.assertIsInstance(entry, Command)
        self.assertTrue(entry.entry)
        self.assertIsNone(entry.name)
        self.assertIs(entry.run, runner)

    def testEntryCommandRejectsGarbage(self):
        with self.assertRaises(TypeError):
            entry_command(42)

    def testSubCommandsOf(self):
        self.assertIsNone(sub_commands_of(Command()))
        nested = Command(sub_commands={"child": Command()})
        self.assertEqual(list(sub_commands_of(nested)), ["child"])


class TestResolveLazyCommand(IsolatedAsyncioTestCase):
    """resolve_lazy_command()"""

    async def testConcreteCommandResolved(self):
        definition = Command(lambda ctx: None, descr="Build")
        resolved = await resolve_lazy_command(definition, "build")
        self.assertIsInstance(resolved, ResolvedCommand)
        self.assertEqual(resolved.name, "build")
        self.assertIs(resolved.run, definition.run)
        self.assertIsNone(definition.name)

    async def testMetadataOnlyDoesNotLoad(self):
        calls = []
        definition = LazyCommand(lambda: calls.append("loaded"), name="deploy", descr="Deploy")
        resolved = await resolve_lazy_command(definition)
        self.assertEqual(resolved.name, "deploy")
        self.assertIsNone(resolved.run)
        self.assertEqual(calls, [])

    async def testLoadedRunnerBecomesRun(self):
        def runner(ctx):
            return "ran"

        resolved = await resolve_lazy_command(LazyCommand(lambda: runner), "deploy", load=True)
        self.assertIs(resolved.run, runner)
        self.assertEqual(resolved.name, "deploy")

    async def testLoadedCommandReplacesMetadata(self):
        nested = {"up": Command()}
        loaded = Command(lambda ctx: None, descr="Loaded", args={"force": Arg("boolean")})
        definition = LazyCommand(lambda: loaded, name="deploy", descr="Lazy", sub_commands=nested)
        resolved = await resolve_lazy_command(definition, load=True)
        self.assertEqual(resolved.name, "deploy")
        self.assertEqual(resolved.descr, "Loaded")
        self.assertEqual(list(resolved.args), ["force"])
        self.assertEqual(list(resolved.sub_commands), ["up"])

    async def testResolvedCommandIsFrozen(self):
        resolved = await resolve_lazy_command(LazyCommand(lambda: (lambda ctx: None), args={"a": Arg()}), "x", load=True)
        with self.assertRaises(AttributeError):
            resolved.run = None  # type: ignore[misc]
        with self.assertRaises(TypeError):
            resolved.args["b"] = Arg()  # type: ignore[index]

    async def testLoadedCommandWithoutRunRejected(self):
        with self.assertRaises(LazyCommandError):
            await resolve_lazy_command(LazyCommand(lambda: Command(), name="deploy"), load=True)

    async def testUnresolvableLoaderRejected(self):
        with self.assertRaises(LazyCommandError) as caught:
            await resolve_lazy_command(LazyCommand(lambda: "nope"), "deploy", load=True)
        self.assertEqual(str(caught.exception), "Cannot resolve command: deploy")


if __name__ == "__main__":
    unittest.main()
