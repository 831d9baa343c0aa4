"""Tests for the visit stack, cursor wraparound and jump bookkeeping."""

from __future__ import annotations

import unittest

from nixinspect.model import (
    MAX_RECENTS,
    ROOT_MENU_ROOT_INDEX,
    InputState,
    Model,
    next_index,
    prev_index,
    select_next,
    select_prev,
)
from nixinspect.path import ROOT, BrowserPath
from nixinspect.path_data import LIST_TYPE_ATTRSET, PathData
from nixinspect.stack import BOOKMARKS, RECENTS, ROOT_ITEM, BrowserStack


class BrowserStackTests(unittest.TestCase):
    def test_new_stack_holds_only_the_root_menu(self) -> None:
        stack = BrowserStack()
        self.assertEqual(stack.items, [ROOT_ITEM])
        self.assertIsNone(stack.current())
        self.assertIsNone(stack.prev_item())

    def test_truncate_never_removes_the_bottom_item(self) -> None:
        stack = BrowserStack()
        stack.push(BOOKMARKS)
        self.assertTrue(stack.truncate())
        self.assertFalse(stack.truncate())
        self.assertEqual(len(stack), 1)
        self.assertIs(stack.top, ROOT_ITEM)

    def test_current_only_reports_paths(self) -> None:
        stack = BrowserStack()
        stack.push(RECENTS)
        self.assertIsNone(stack.current())
        with self.assertRaises(RuntimeError):
            stack.current_force()
        stack.push_path(ROOT.child("a"))
        self.assertEqual(stack.current_force(), ROOT.child("a"))
        self.assertIs(stack.prev_item(), RECENTS)

    def test_concrete_suffix_stops_at_first_marker(self) -> None:
        stack = BrowserStack([ROOT_ITEM, ROOT, ROOT.child("a")])
        self.assertEqual(stack.concrete_suffix(), [ROOT, ROOT.child("a")])

    def test_replace_rejects_empty_stack(self) -> None:
        with self.assertRaises(ValueError):
            BrowserStack().replace([])

    def test_push_and_truncate_sequences_keep_a_bottom_item(self) -> None:
        stack = BrowserStack()
        for step in range(20):
            if step % 3 == 0:
                stack.truncate()
                stack.truncate()
            else:
                current = stack.current()
                stack.push_path(ROOT if current is None else current.child(str(step)))
            self.assertGreaterEqual(len(stack), 1)
            self.assertIs(stack[0], ROOT_ITEM)
            suffix = stack.concrete_suffix()
            for outer, inner in zip(suffix, suffix[1:]):
                self.assertEqual(inner.parent(), outer)


class WraparoundTests(unittest.TestCase):
    def test_prev_undoes_next(self) -> None:
        for length in range(1, 6):
            for i in range(length):
                self.assertEqual(prev_index(next_index(i, length), length), i)

    def test_indices_wrap_at_both_ends(self) -> None:
        self.assertEqual(next_index(2, 3), 0)
        self.assertEqual(prev_index(0, 3), 2)

    def test_select_helpers_handle_empty_and_unset(self) -> None:
        self.assertIsNone(select_next(0, 0))
        self.assertIsNone(select_prev(None, 0))
        self.assertEqual(select_next(None, 3), 0)
        self.assertEqual(select_prev(None, 3), 0)


class InputStateTests(unittest.TestCase):
    def test_edit_keys(self) -> None:
        state = InputState()
        state.activate("ab")
        self.assertTrue(state.handle_key("c"))
        self.assertFalse(state.handle_key("LEFT"))
        self.assertTrue(state.handle_key("BACKSPACE"))
        self.assertEqual(state.text, "ac")
        self.assertEqual(state.cursor, 1)
        self.assertFalse(state.handle_key("UP"))
        self.assertTrue(state.handle_key("CTRL_U"))
        self.assertEqual(state.text, "")

    def test_deactivate_returns_text_and_clears(self) -> None:
        state = InputState()
        state.activate("label")
        self.assertEqual(state.deactivate(), "label")
        self.assertFalse(state.active)
        self.assertEqual(state.text, "")


class ModelJumpTests(unittest.TestCase):
    def test_update_parent_selection_rebuilds_route_and_cursors(self) -> None:
        model = Model()
        hosts = ROOT.child("hosts")
        model.path_data.insert(ROOT, PathData.list_of(LIST_TYPE_ATTRSET, ["a", "hosts"]))
        model.path_data.insert(hosts, PathData.list_of(LIST_TYPE_ATTRSET, ["x", "y", "web"]))
        target = hosts.child("web")

        model.update_parent_selection(target)

        self.assertEqual(model.visit_stack.items, [ROOT_ITEM, ROOT, hosts, target])
        self.assertEqual(model.visit_stack.current_force(), target)
        self.assertEqual(model.path_data.current_list(ROOT).selected, 1)
        self.assertEqual(model.path_data.current_list(hosts).selected, 2)
        self.assertEqual(model.root_selected, ROOT_MENU_ROOT_INDEX)

    def test_update_parent_selection_tolerates_uncached_ancestors(self) -> None:
        model = Model()
        target = BrowserPath.rooted("a.b.c")
        model.update_parent_selection(target)
        self.assertEqual(len(model.visit_stack), 5)
        self.assertEqual(model.visit_stack.current_force(), target)

    def test_recents_are_most_recent_first_and_deduplicated(self) -> None:
        model = Model()
        a, b = ROOT.child("a"), ROOT.child("b")
        model.record_recent(a)
        model.record_recent(b)
        model.record_recent(a)
        self.assertEqual(model.recents, [a, b])

    def test_recents_are_capped(self) -> None:
        model = Model()
        for idx in range(MAX_RECENTS + 10):
            model.record_recent(ROOT.child(str(idx)))
        self.assertEqual(len(model.recents), MAX_RECENTS)
        self.assertEqual(model.recents[0], ROOT.child(str(MAX_RECENTS + 9)))

    def test_active_input_reports_the_open_text_box(self) -> None:
        model = Model()
        self.assertIsNone(model.active_input())
        model.search_input.activate()
        self.assertIs(model.active_input(), model.search_input)


if __name__ == "__main__":
    unittest.main()
