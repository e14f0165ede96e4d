"""
Command definition behavioral tests (metadata, hooks, error builders, decorator).

Scope
- Validate descriptors derived from class metadata and get_info().
- Validate the default hooks and the error/usage_error builders.
- Validate confirm() answers and the @command() capability form.

Conventions
- Test method names follow CamelCase per project convention.
- Operator input is simulated by patching rich's Prompt.ask.
"""

from __future__ import annotations

import io
import unittest
from unittest import IsolatedAsyncioTestCase, TestCase, mock

from rich.console import Console
from rich.prompt import Prompt

from multicommand import (
    CommandDefinition,
    CommandDescriptor,
    CommandError,
    CommandRegistry,
    CommandUsageError,
    FaultCode,
    OptionSchema,
    command,
)


class Copy(CommandDefinition):
    syntax = "  copy <source> <target>"
    summary = "Copy one file over another."


class Computed(CommandDefinition):

    @classmethod
    def get_info(cls):
        return {"syntax": "computed", "summary": "Metadata built at runtime.", "hidden": True}


def _bound(command_class):
    registry = CommandRegistry(console=Console(file=io.StringIO()), prog="tool")
    registry.register([command_class])
    descriptor = registry.descriptors[0]
    return descriptor.command_class(registry, descriptor)


class TestDescriptor(TestCase):

    def testDescribeDerivesNames(self):
        descriptor = CommandDescriptor.describe(Copy)
        self.assertEqual(descriptor.name, "copy")
        self.assertEqual(descriptor.normname, "copy")
        self.assertIs(descriptor.command_class, Copy)
        self.assertFalse(descriptor.first_of_group)

    def testDescribeKeepsExtraInfo(self):
        descriptor = CommandDescriptor.describe(Computed, first_of_group=True)
        self.assertEqual(descriptor.syntax, "computed")
        self.assertEqual(dict(descriptor.extra), {"hidden": True})
        self.assertTrue(descriptor.first_of_group)

    def testDescribeRejectsMalformedInfo(self):
        class Blank(CommandDefinition):
            syntax = "   "
            summary = "No name."

        class Silent(CommandDefinition):
            syntax = "silent"

        with self.assertRaises(ValueError):
            CommandDescriptor.describe(Blank)
        with self.assertRaises(TypeError):
            CommandDescriptor.describe(Silent)
        with self.assertRaises(TypeError):
            CommandDescriptor.describe(int)


class TestDefinition(TestCase):

    def testConstructionBindsRegistryAndInfo(self):
        copy = _bound(Copy)
        self.assertEqual(copy.name, "copy")
        self.assertIsInstance(copy.registry, CommandRegistry)
        self.assertEqual(copy.info.summary, "Copy one file over another.")

    def testConstructionRequiresDescriptor(self):
        with self.assertRaises(TypeError):
            Copy(CommandRegistry(), {"syntax": "copy"})

    def testDefaultHooks(self):
        copy = _bound(Copy)
        seed = OptionSchema.seed()
        self.assertIs(copy.add_options(seed), seed)
        self.assertIsNone(copy.parse_args({}))
        with self.assertRaises(CommandError) as context:
            copy.do_command({})
        self.assertEqual(context.exception.code, FaultCode.NOT_IMPLEMENTED)
        self.assertEqual(str(context.exception), "Command 'copy' not implemented")

    def testDefaultHelpIsSummaryEntry(self):
        self.assertEqual(_bound(Copy).get_help(80), "COPY <source> <target>\n  Copy one file over another.\n")

    def testErrorBuilders(self):
        copy = _bound(Copy)

        error = copy.error("cannot open %s (%d)", "a.txt", 2)
        self.assertIs(type(error), CommandError)
        self.assertEqual(error.message, "cannot open a.txt (2)")

        usage = copy.usage_error("missing %s", "target", "extra")
        self.assertIsInstance(usage, CommandUsageError)
        self.assertEqual(str(usage), "missing target extra")
        self.assertEqual(usage.code, FaultCode.USAGE)

    def testReprNamesTheCommand(self):
        self.assertIn("'copy'", repr(_bound(Copy)))


class TestConfirm(IsolatedAsyncioTestCase):

    async def testAffirmativeAnswers(self):
        copy = _bound(Copy)
        for answer in ("y", "YES", " Yes "):
            with mock.patch.object(Prompt, "ask", return_value=answer) as ask:
                self.assertTrue(await copy.confirm("overwrite?"))
            self.assertEqual(ask.call_args.args, ("overwrite? (y/n)",))

    async def testOtherAnswers(self):
        copy = _bound(Copy)
        for answer in ("n", "", "yeah", "no"):
            with mock.patch.object(Prompt, "ask", return_value=answer):
                self.assertFalse(await copy.confirm("overwrite?"))


class TestCommandDecorator(IsolatedAsyncioTestCase):

    async def testDecoratedFunctionBecomesCommand(self):
        def options(self, options):
            return options.add(boolean="loud")

        def validate(self, args):
            self.who = args.next()

        @command("Greet <name> [--loud]", "Say hello.", options=options, validate=validate)
        async def greet(self, args):
            """Greets someone."""
            message = "hello %s" % self.who
            return message.upper() if args["loud"] else message

        self.assertTrue(issubclass(greet, CommandDefinition))
        self.assertEqual(greet.__name__, "greet")
        self.assertEqual(greet.__doc__, "Greets someone.")

        registry = CommandRegistry(console=Console(file=io.StringIO()), prog="tool")
        registry.register([greet])
        self.assertEqual(await registry.dispatch(["greet", "ada"]), "hello ada")
        self.assertEqual(await registry.dispatch(["GREET", "--loud", "ada"]), "HELLO ADA")

    async def testHelpHook(self):
        @command("about", "Describe the tool.", help=lambda self, right_margin: "about %s\n" % self.name)
        def about(self, args):
            pass

        console = Console(file=io.StringIO())
        registry = CommandRegistry(console=console)
        registry.register([about])
        self.assertIsNone(await registry.dispatch(["about", "--help"]))
        self.assertEqual(console.file.getvalue(), "about about\n")

    def testDecoratorValidation(self):
        with self.assertRaises(TypeError):
            command(1, "summary")
        with self.assertRaises(TypeError):
            command("name", "summary", validate="not callable")
        with self.assertRaises(TypeError):
            command("name", "summary")("not callable")


if __name__ == "__main__":
    unittest.main()
