"""
Registry module behavioral tests (resolution, dispatch, hooks, help).

Scope
- Validate registration rules (case-insensitive collisions, sealing).
- Validate greedy path resolution and the prefix/remaining tokens split.
- Validate the dispatch state machine and its verbatim failure messages.
- Validate hooks (constructor callables and overrides), the fallback, and the
  built-in help command.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with MemorySender.
"""

from __future__ import annotations

import functools
import unittest
from enum import Enum
from unittest import TestCase

from trireme import (
    Command,
    CommandRegistry,
    FaultCode,
    HelpListing,
    INT,
    MemorySender,
    MissingPageError,
    RegistrationError,
    UnknownCommandError,
    UnknownHelpTopicError,
    UnknownSubcommandError,
    enum_value,
)


class CookieType(Enum):
    CHOCOLATE_CHIP = "chocolate chip"
    SUGAR = "sugar"
    OATMEAL = "oatmeal"


def _cookies(eaten, **kwargs):
    """
    cookie (cookies)
      eat <type> [amount]
      help/? [page | command]
    """
    cookie = Command("cookie", "cookies", descr="Cookie commands").with_unknown_subcommand_handler()
    eat = (
        cookie.command("eat", descr="Eat cookies")
        .with_argument("type", "type", "The type of cookie", True, types=(enum_value(CookieType),))
        .with_argument("amount", "amount", "How many", types=(INT,), default=1)
    )

    @eat.handle
    def _(context):
        amount = context.get("amount")
        eaten.append((context.get("type"), amount))
        context.print("Removed %d cookie%s", amount, "" if amount == 1 else "s")

    cookie.subcommands.register_help_command()
    return CommandRegistry(cookie, **kwargs)


class TestScenarios(TestCase):
    """End-to-end dispatch of the cookie tree."""

    def setUp(self):
        self.eaten = []
        self.sender = MemorySender()
        self.registry = _cookies(self.eaten)

    def testEatWithAmount(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie eat chocolate_chip 2"))
        self.assertEqual(self.eaten, [(CookieType.CHOCOLATE_CHIP, 2)])
        self.assertEqual(self.sender.output, ("Removed 2 cookies",))

    def testEatDefaultsAmount(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie eat chocolate_chip"))
        self.assertEqual(self.eaten, [(CookieType.CHOCOLATE_CHIP, 1)])
        self.assertEqual(self.sender.output, ("Removed 1 cookie",))

    def testUnknownCommand(self):
        self.assertFalse(self.registry.dispatch(self.sender, "bogus"))
        self.assertEqual(self.sender.errors, ("[CommandErr] <bogus> - Not found",))

    def testInvalidInput(self):
        self.assertFalse(self.registry.dispatch(self.sender, "cookie eat not_a_flavor"))
        self.assertEqual(self.sender.errors, (
            "[CommandErr] 'cookie eat' - Invalid input for argument 'type': \"not_a_flavor\"",
        ))
        self.assertEqual(self.eaten, [])

    def testHelpFirstPage(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie help"))
        self.assertEqual(self.sender.output, (
            "Usage: cookie <command>",
            "",
            "Commands:",
            "  eat <type> [amount] - Eat cookies",
            "  help/? [page | command] - View help",
        ))

    def testNotEnoughArguments(self):
        self.assertFalse(self.registry.dispatch(self.sender, "cookie eat"))
        self.assertEqual(self.sender.errors, ("[CommandErr] 'cookie eat' - Expected at least 1 argument(s), but got 0",))
        self.assertEqual(self.eaten, [])

    def testUnknownSubcommand(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie bake 2"))
        self.assertEqual(self.sender.errors, ("Unknown sub-command: 'bake'",))

    def testGroupWithoutTokensIsSilent(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie"))
        self.assertEqual(self.sender.lines, ())

    def testResolutionIsCaseInsensitive(self):
        self.assertTrue(self.registry.dispatch(self.sender, "COOKIES Eat SUGAR"))
        self.assertEqual(self.eaten, [(CookieType.SUGAR, 1)])

    def testTokensInput(self):
        self.assertTrue(self.registry.dispatch(self.sender, ["cookie", "eat", "oatmeal", "3"]))
        self.assertEqual(self.eaten, [(CookieType.OATMEAL, 3)])

    def testEmptyInput(self):
        self.assertFalse(self.registry.dispatch(self.sender, "   "))
        self.assertFalse(self.registry.dispatch(self.sender, []))
        self.assertFalse(self.registry.dispatch(self.sender, None))
        self.assertEqual(self.sender.lines, ())

    def testMessagesKeepPercentSigns(self):
        self.assertFalse(self.registry.dispatch(self.sender, "100%"))
        self.assertEqual(self.sender.errors, ("[CommandErr] <100%> - Not found",))


class TestHelp(TestCase):
    """Behavioral tests for the built-in help command."""

    def setUp(self):
        self.sender = MemorySender()
        self.registry = _cookies([])

    def testHelpByNumber(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie ? 1"))
        self.assertEqual(self.sender.output[0], "Usage: cookie <command>")

    def testMissingPage(self):
        self.registry.dispatch(self.sender, "cookie help 2")
        self.assertEqual(self.sender.errors, ("Page 2 does not exist",))
        self.assertEqual(self.sender.output, ())

    def testHelpTopic(self):
        self.assertTrue(self.registry.dispatch(self.sender, "cookie help eat"))
        self.assertEqual(self.sender.output, (
            "cookie eat <type> [amount] - Eat cookies",
            "  <type> - The type of cookie",
            "  [amount] - How many",
        ))

    def testUnknownHelpTopic(self):
        self.registry.dispatch(self.sender, "cookie help bake")
        self.assertEqual(self.sender.errors, ("Sub-command with name/alias 'bake' does not exist",))

    def testRootHelp(self):
        self.registry.register_help_command("help")
        self.assertTrue(self.registry.dispatch(self.sender, "help"))
        self.assertEqual(self.sender.output, (
            "Usage: <command>",
            "",
            "Commands:",
            "  cookie/cookies <command> - Cookie commands",
            "  help [page | command] - View help",
        ))

    def testHiddenCommandsAreNotListed(self):
        self.registry.register(Command("secret").hide())
        self.registry.register_help_command()
        self.registry.dispatch(self.sender, "help")
        self.assertNotIn("  secret", self.sender.output)
        self.assertEqual(len(self.sender.output), 5)

    def testPagination(self):
        registry = CommandRegistry(
            Command("alpha"),
            Command("beta"),
            Command("gamma"),
            listing=functools.partial(HelpListing, page_size=2),
        ).register_help_command()
        registry.dispatch(self.sender, "help 2")
        self.assertEqual(self.sender.output, (
            "Usage: <command>",
            "",
            "Commands:",
            "  gamma",
            "  help/? [page | command] - View help",
            "Page 2/2",
        ))


class TestRegistration(TestCase):
    """Behavioral tests for registration and lookup."""

    def testCollisionIsCaseInsensitive(self):
        registry = CommandRegistry(Command("cookie", "cookies"))
        with self.assertRaises(RegistrationError):
            registry.register(Command("COOKIES"))
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.commands[0].name, "cookie")

    def testCollisionLeavesCommandUnsealed(self):
        registry = CommandRegistry(Command("cookie"))
        command = Command("cake", "Cookie")
        with self.assertRaises(RegistrationError):
            registry.register(command)
        self.assertFalse(command.sealed)

    def testRegistrationErrorIsValueError(self):
        self.assertTrue(issubclass(RegistrationError, ValueError))

    def testPushIsRegister(self):
        registry = CommandRegistry()
        self.assertIs(registry.push(Command("eat")), registry)
        self.assertIn("EAT", registry)

    def testRegisterRequiresCommand(self):
        with self.assertRaises(TypeError):
            CommandRegistry().register("eat")  # type: ignore[arg-type]

    def testSortByName(self):
        registry = CommandRegistry(Command("gamma"), Command("alpha"), Command("beta"))
        self.assertEqual([command.name for command in registry.sort()], ["alpha", "beta", "gamma"])
        self.assertEqual([command.name for command in registry.sort(reverse=True)], ["gamma", "beta", "alpha"])

    def testCreateContextSingleLevel(self):
        registry = _cookies([])
        context = registry.create_context(None, "cookie", ["eat"])
        self.assertEqual(context.extra, ("eat",))
        self.assertIsNone(registry.create_context(None, "bogus", []))


class TestResolution(TestCase):
    """Behavioral tests for resolve_path()."""

    def setUp(self):
        self.registry = _cookies([])

    def testPrefixAndRemainingTokens(self):
        info = self.registry.resolve_path("cookie eat sugar 3 extra")
        self.assertEqual(info.prefix, "cookie eat")
        self.assertEqual(info.command.name, "eat")
        self.assertEqual(info.tokens, ("sugar", "3", "extra"))

    def testPrefixKeepsTokensAsTyped(self):
        self.assertEqual(self.registry.resolve_path(["Cookie", "EAT"]).prefix, "Cookie EAT")

    def testUnknownNestedTokenStopsDescent(self):
        info = self.registry.resolve_path(["cookie", "bake", "eat"])
        self.assertEqual(info.prefix, "cookie")
        self.assertEqual(info.tokens, ("bake", "eat"))

    def testUnknownRoot(self):
        self.assertIsNone(self.registry.resolve_path(["bogus", "eat"]))
        self.assertIsNone(self.registry.resolve_path([]))


class TestHooks(TestCase):
    """Behavioral tests for dispatch hooks, failure containment and the fallback."""

    def testBeforeCanVeto(self):
        eaten = []
        sender = MemorySender()
        registry = _cookies(eaten, before=lambda command, context: False)
        self.assertFalse(registry.dispatch(sender, "cookie eat sugar"))
        self.assertEqual(eaten, [])
        self.assertEqual(sender.lines, ())

    def testAfterRunsOnSuccess(self):
        seen = []
        registry = _cookies([], after=lambda command, context: seen.append((command.name, context.prefix)))
        registry.dispatch(MemorySender(), "cookie eat sugar")
        self.assertEqual(seen, [("eat", "cookie eat")])

    def testContextsAreIndependent(self):
        contexts = []
        registry = _cookies([], after=lambda command, context: contexts.append(context))
        registry.dispatch(None, "cookie eat sugar 2")
        registry.dispatch(None, "cookie eat sugar 2")
        first, second = contexts
        self.assertIsNot(first, second)
        self.assertIsNot(first.parsed, second.parsed)
        first.attachments["done"] = True
        self.assertNotIn("done", second.attachments)

    def testContextCreatedSeesFailedCreation(self):
        created = []

        class Recording(CommandRegistry):
            def context_created(self, context, /):
                created.append(context)

        registry = Recording(Command("give").with_argument("player", required=True).with_handler(lambda context: None))
        self.assertFalse(registry.dispatch(MemorySender(), "give"))
        self.assertTrue(registry.dispatch(MemorySender(), "give bob"))
        self.assertIsNone(created[0])
        self.assertEqual(created[1].get("player"), "bob")

    def testOverriddenWillDispatch(self):
        class Locked(CommandRegistry):
            def will_dispatch(self, command, context, /):
                return context.get("player") != "mallory"

        calls = []
        registry = Locked(Command("give").with_argument("player", required=True).with_handler(calls.append))
        self.assertFalse(registry.dispatch(None, "give mallory"))
        self.assertTrue(registry.dispatch(None, "give bob"))
        self.assertEqual(len(calls), 1)

    def testHandlerFailureIsContained(self):
        seen = []

        def explode(context):
            raise RuntimeError("boom")

        sender = MemorySender()
        registry = CommandRegistry(Command("boom").with_handler(explode), after=lambda *unused: seen.append(unused))
        with self.assertLogs("trireme.registry", "ERROR"):
            self.assertFalse(registry.dispatch(sender, "boom"))
        self.assertEqual(sender.errors, ("An error occurred while running this command",))
        self.assertEqual(seen, [])

    def testMissingHandlerIsSilentFailure(self):
        sender = MemorySender()
        registry = CommandRegistry(Command("noop"))
        self.assertFalse(registry.dispatch(sender, "noop"))
        self.assertEqual(sender.lines, ())

    def testArityFailureNeverRunsHandler(self):
        calls = []
        registry = CommandRegistry(Command("give").with_argument("a", required=True).with_argument("b", required=True).with_handler(calls.append))
        for line in ("give", "give one"):
            self.assertFalse(registry.dispatch(None, line))
        self.assertEqual(calls, [])

    def testNullableRequiredArgument(self):
        calls = []
        registry = CommandRegistry(
            Command("give").with_argument("amount", required=True, types=(INT,), nullable=True).with_handler(calls.append)
        )
        self.assertTrue(registry.dispatch(None, "give lots"))
        self.assertIsNone(calls[0].get("amount"))
        self.assertEqual(calls[0].input_for("amount"), "lots")

    def testFallbackReceivesFaults(self):
        faults = []
        sender = MemorySender()
        registry = _cookies([])
        registry.fallback(faults.append)
        self.assertFalse(registry.dispatch(sender, "bogus"))
        self.assertEqual(sender.lines, ())
        fault, = faults
        self.assertIsInstance(fault, UnknownCommandError)
        self.assertEqual(fault.message, "[CommandErr] <bogus> - Not found")
        self.assertIs(fault.options["sender"], sender)
        self.assertEqual(fault.options["code"], FaultCode.UNKNOWN_COMMAND)

    def testFallbackReceivesUnknownSubcommand(self):
        faults = []
        sender = MemorySender()
        registry = _cookies([])
        registry.fallback(faults.append)
        self.assertTrue(registry.dispatch(sender, "cookie bake 2"))
        self.assertEqual(sender.lines, ())
        fault, = faults
        self.assertIsInstance(fault, UnknownSubcommandError)
        self.assertEqual(fault.message, "Unknown sub-command: 'bake'")
        self.assertEqual(fault.options["prefix"], "cookie")
        self.assertIs(fault.options["sender"], sender)

    def testFallbackReceivesHelpFaults(self):
        faults = []
        sender = MemorySender()
        registry = _cookies([])
        registry.fallback(faults.append)
        registry.dispatch(sender, "cookie help 2")
        registry.dispatch(sender, "cookie help bake")
        self.assertEqual(sender.lines, ())
        self.assertEqual([type(fault) for fault in faults], [MissingPageError, UnknownHelpTopicError])

    def testFallbackIsOneTime(self):
        registry = CommandRegistry()
        registry.fallback(print)
        with self.assertRaises(TypeError):
            registry.fallback(print)

    def testHooksMustBeCallable(self):
        with self.assertRaises(TypeError):
            CommandRegistry(before=True)


if __name__ == "__main__":
    unittest.main()
