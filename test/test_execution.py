"""
Execution orchestrator tests.

Scope
- Validate result coercion, lifecycle hook ordering and error propagation.
- Validate lazy loading at execution time and decorator application.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import IsolatedAsyncioTestCase

from salvo import Command, CommandEnvironment, LazyCommand, create_command_context, execute_command
from salvo.faults import LazyCommandError


async def context(command, **hooks):
    return await create_command_context(command=command, env=CommandEnvironment(**hooks))


class TestExecuteCommand(IsolatedAsyncioTestCase):
    """execute_command()"""

    async def testStringResultReturned(self):
        command = Command(lambda ctx: "hello")
        self.assertEqual(await execute_command(command, await context(command)), "hello")

    async def testNonStringResultIsDropped(self):
        command = Command(lambda ctx: 42)
        self.assertIsNone(await execute_command(command, await context(command)))

    async def testCommandWithoutRunIsNoop(self):
        command = Command()
        self.assertIsNone(await execute_command(command, await context(command)))

    async def testAsyncRunnerIsAwaited(self):
        async def run(ctx):
            return "async"

        command = Command(run)
        self.assertEqual(await execute_command(command, await context(command)), "async")

    async def testHooksRunAroundCommand(self):
        events = []

        def run(ctx):
            events.append("run")
            return "result"

        command = Command(run)
        ctx = await context(
            command,
            on_before_command=lambda ctx: events.append("before"),
            on_after_command=lambda ctx, result: events.append(("after", result)),
            on_error_command=lambda ctx, error: events.append("error"),
        )
        await execute_command(command, ctx)
        self.assertEqual(events, ["before", "run", ("after", "result")])

    async def testErrorHookCalledOnceAndOriginalReraised(self):
        failure = RuntimeError("boom")
        events = []

        def run(ctx):
            raise failure

        command = Command(run)
        ctx = await context(
            command,
            on_after_command=lambda ctx, result: events.append("after"),
            on_error_command=lambda ctx, error: events.append(error),
        )
        with self.assertRaises(RuntimeError) as caught:
            await execute_command(command, ctx)
        self.assertIs(caught.exception, failure)
        self.assertEqual(events, [failure])

    async def testFailingErrorHookIsLogged(self):
        failure = ValueError("original")

        def run(ctx):
            raise failure

        def hook(ctx, error):
            raise RuntimeError("hook failed")

        command = Command(run)
        ctx = await context(command, on_error_command=hook)
        with self.assertLogs("salvo.execution", level="ERROR"):
            with self.assertRaises(ValueError) as caught:
                await execute_command(command, ctx)
        self.assertIs(caught.exception, failure)

    async def testFailingBeforeHookReachesErrorHook(self):
        events = []

        def before(ctx):
            raise RuntimeError("before failed")

        command = Command(lambda ctx: events.append("run"))
        ctx = await context(command, on_before_command=before, on_error_command=lambda ctx, error: events.append("error"))
        with self.assertRaises(RuntimeError):
            await execute_command(command, ctx)
        self.assertEqual(events, ["error"])

    async def testDecoratorsWrapRunner(self):
        calls = []

        def tracing(marker):
            def decorator(runner):
                async def traced(ctx):
                    calls.append(marker)
                    return await runner(ctx)
                return traced
            return decorator

        command = Command(lambda ctx: calls.append("R") or "ok")
        result = await execute_command(command, await context(command), (tracing("c1"), tracing("c2")))
        self.assertEqual(result, "ok")
        self.assertEqual(calls, ["c1", "c2", "R"])

    async def testDecoratorErrorReachesErrorHook(self):
        events = []

        def broken(runner):
            def fail(ctx):
                raise KeyError("decorator")
            return fail

        command = Command(lambda ctx: "never")
        ctx = await context(command, on_error_command=lambda ctx, error: events.append(type(error)))
        with self.assertRaises(KeyError):
            await execute_command(command, ctx, (broken,))
        self.assertEqual(events, [KeyError])


class TestLazyExecution(IsolatedAsyncioTestCase):
    """Lazy commands are loaded when executed."""

    async def testLoaderReturningRunner(self):
        command = LazyCommand(lambda: (lambda ctx: "lazy"), name="deploy")
        self.assertEqual(await execute_command(command, await context(command)), "lazy")

    async def testAsyncLoaderReturningCommand(self):
        async def loader():
            return Command(lambda ctx: "loaded")

        command = LazyCommand(loader, name="deploy")
        self.assertEqual(await execute_command(command, await context(command)), "loaded")

    async def testLoaderReturningCommandWithoutRun(self):
        command = LazyCommand(lambda: Command(), name="deploy")
        with self.assertRaises(LazyCommandError) as caught:
            await execute_command(command, await context(command))
        self.assertEqual(str(caught.exception), "'run' is required in command: deploy")

    async def testLoaderReturningGarbage(self):
        command = LazyCommand(lambda: 42)
        with self.assertRaises(LazyCommandError) as caught:
            await execute_command(command, await context(command), (), name="deploy")
        self.assertEqual(str(caught.exception), "Cannot resolve command: deploy")
        self.assertIsInstance(caught.exception, TypeError)


if __name__ == "__main__":
    unittest.main()
