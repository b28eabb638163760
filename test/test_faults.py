"""
Faults module behavioral tests (codes, options, trigger()).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from trireme import (
    CommandException,
    DelegatedCommandError,
    FaultCode,
    MemorySender,
    MissingPageError,
    NotEnoughArgumentsError,
    trigger,
)


class TestFaults(TestCase):
    """Behavioral tests for fault objects."""

    def testCodeIsPartOfOptions(self):
        fault = NotEnoughArgumentsError("too few", prefix="give")
        self.assertEqual(fault.options["code"], FaultCode.NOT_ENOUGH_ARGUMENTS)
        self.assertEqual(fault.options["prefix"], "give")
        self.assertEqual(str(fault), "too few")

    def testOptionsAreReadOnly(self):
        fault = MissingPageError("Page 3 does not exist", page=3)
        with self.assertRaises(TypeError):
            fault.options["page"] = 4  # type: ignore[index]

    def testReplaceMergesOptions(self):
        fault = MissingPageError("Page 3 does not exist", page=3)
        replaced = copy.replace(fault, sender="somebody")
        self.assertIsInstance(replaced, MissingPageError)
        self.assertEqual(replaced.options["page"], 3)
        self.assertEqual(replaced.options["sender"], "somebody")
        self.assertNotIn("sender", fault.options)

    def testFaultsAreCommandExceptions(self):
        self.assertTrue(issubclass(DelegatedCommandError, CommandException))
        self.assertTrue(issubclass(CommandException, Exception))


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testPrintsOnErrorChannel(self):
        sender = MemorySender()
        fault = trigger(DelegatedCommandError("An error occurred while running this command"), sender)
        self.assertIsInstance(fault, DelegatedCommandError)
        self.assertEqual(sender.errors, ("An error occurred while running this command",))
        self.assertEqual(sender.output, ())

    def testMessageIsNotFormatted(self):
        sender = MemorySender()
        trigger(DelegatedCommandError("50% done"), sender)
        self.assertEqual(sender.errors, ("50% done",))

    def testOptionsAreMerged(self):
        fault = trigger(MissingPageError("Page 2 does not exist"), None, page=2)
        self.assertEqual(fault.options["page"], 2)

    def testWithoutSenderIsNoOp(self):
        trigger(DelegatedCommandError("nobody listens"), None)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"), MemorySender())


if __name__ == "__main__":
    unittest.main()
