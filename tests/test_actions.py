"""Action dispatcher tests: close first, then hand off the selected path."""

from __future__ import annotations

import unittest
from unittest import mock

from cder.actions import attach_mappings, wrap
from cder.entries import DirectoryEntry

from fake_host import FakeHost


class WrapTests(unittest.TestCase):
    def test_action_closes_picker_then_calls_handler_with_value(self) -> None:
        host = FakeHost()
        host.selection = DirectoryEntry(value="/tmp/x", display="x", ordinal="/tmp/x")
        events = []
        host.close_list = lambda: events.append("close")
        action = wrap(host, lambda directory: events.append(("handler", directory)))

        action()

        self.assertEqual(events, ["close", ("handler", "/tmp/x")])

    def test_missing_selection_closes_without_calling_handler(self) -> None:
        host = FakeHost()
        handler = mock.Mock()

        wrap(host, handler)()

        self.assertEqual(host.closed, 1)
        handler.assert_not_called()

    def test_handler_errors_propagate(self) -> None:
        host = FakeHost()
        host.selection = DirectoryEntry(value="/tmp/x", display="x", ordinal="/tmp/x")

        def broken(directory: str) -> None:
            raise OSError(directory)

        with self.assertRaises(OSError):
            wrap(host, broken)()
        self.assertEqual(host.closed, 1)


class AttachMappingsTests(unittest.TestCase):
    def test_default_replaces_select_and_others_bind_in_both_modes(self) -> None:
        host = FakeHost()
        cd = mock.Mock()
        tcd = mock.Mock()

        attach_mappings(host, {"default": cd, "<C-t>": tcd})

        self.assertIsNotNone(host.default_action)
        self.assertEqual(set(host.bindings), {("i", "<C-t>"), ("n", "<C-t>")})

        host.selection = DirectoryEntry(value="/a", display="a", ordinal="/a")
        host.bindings[("n", "<C-t>")]()
        tcd.assert_called_once_with("/a")
        cd.assert_not_called()

    def test_default_trigger_is_never_bound_as_a_key(self) -> None:
        host = FakeHost()

        attach_mappings(host, {"default": mock.Mock()})

        self.assertEqual(host.bindings, {})


if __name__ == "__main__":
    unittest.main()
