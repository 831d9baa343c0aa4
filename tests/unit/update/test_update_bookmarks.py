"""Tests for creating and deleting bookmarks from the browser.

Bookmarks are written through to the config file on every change.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from nixinspect import messages as msg
from nixinspect.config import load_config, save_config
from nixinspect.errors import PersistenceError
from nixinspect.messages import Message
from nixinspect.model import Bookmark, Config, Model
from nixinspect.path import ROOT
from nixinspect.render import ViewData
from nixinspect.stack import BOOKMARKS
from nixinspect.update import UpdateContext


def _send(context: UpdateContext, model: Model, message: Message) -> None:
    view = ViewData()
    pending = message
    while pending is not None:
        pending = context.update(view, model, pending)


def _create(context: UpdateContext, model: Model, label: str) -> None:
    _send(context, model, Message.simple(msg.BOOKMARK_INPUT_ENTER))
    for ch in label:
        _send(context, model, Message.input_key(msg.BOOKMARK_INPUT, ch))
    _send(context, model, Message.exit_input(msg.BOOKMARK_INPUT_EXIT, commit=True))


class CreateBookmarkTests(unittest.TestCase):
    def test_create_appends_and_persists(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            context = UpdateContext(lambda _path: None, config_path)
            model = Model()
            model.visit_stack.push_path(ROOT.child("hosts").child("web.lan"))

            _create(context, model, "web")

            self.assertFalse(model.new_bookmark_input.active)
            self.assertEqual(model.config.bookmarks, [Bookmark("web", ROOT.child("hosts").child("web.lan"))])
            self.assertEqual(load_config(config_path).bookmarks, model.config.bookmarks)
            self.assertIn("web", model.status_message)

    def test_blank_label_falls_back_to_path_text(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            context = UpdateContext(lambda _path: None, Path(tmp) / "config.json")
            model = Model()
            model.visit_stack.push_path(ROOT.child("a"))
            _create(context, model, "  ")
            self.assertEqual(model.config.bookmarks[0].display, "a")

    def test_input_is_not_opened_outside_a_path_view(self) -> None:
        context = UpdateContext(lambda _path: None)
        model = Model()
        _send(context, model, Message.simple(msg.BOOKMARK_INPUT_ENTER))
        self.assertFalse(model.new_bookmark_input.active)

    def test_cancel_discards_label(self) -> None:
        context = UpdateContext(lambda _path: None)
        model = Model()
        model.visit_stack.push_path(ROOT)
        _send(context, model, Message.simple(msg.BOOKMARK_INPUT_ENTER))
        _send(context, model, Message.input_key(msg.BOOKMARK_INPUT, "x"))
        _send(context, model, Message.exit_input(msg.BOOKMARK_INPUT_EXIT, commit=False))
        self.assertFalse(model.new_bookmark_input.active)
        self.assertEqual(model.config.bookmarks, [])

    def test_persistence_failure_rolls_back_and_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("not a directory", encoding="utf-8")
            context = UpdateContext(lambda _path: None, blocker / "config.json")
            model = Model()
            model.visit_stack.push_path(ROOT.child("a"))
            with self.assertRaises(PersistenceError):
                _create(context, model, "a")
            self.assertEqual(model.config.bookmarks, [])
            self.assertFalse(model.new_bookmark_input.active)


class DeleteBookmarkTests(unittest.TestCase):
    def _model_with_bookmarks(self, count: int) -> Model:
        bookmarks = [Bookmark(f"b{idx}", ROOT.child(f"b{idx}")) for idx in range(count)]
        model = Model(config=Config(bookmarks=bookmarks))
        model.visit_stack.push(BOOKMARKS)
        return model

    def test_delete_removes_selected_and_clamps_cursor(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            context = UpdateContext(lambda _path: None, config_path)
            model = self._model_with_bookmarks(2)
            model.bookmark_selected = 1
            _send(context, model, Message.simple(msg.DELETE_BOOKMARK))
            self.assertEqual([b.display for b in model.config.bookmarks], ["b0"])
            self.assertEqual(model.bookmark_selected, 0)
            self.assertEqual(load_config(config_path).bookmarks, model.config.bookmarks)

    def test_delete_outside_bookmarks_view_is_ignored(self) -> None:
        context = UpdateContext(lambda _path: None)
        model = self._model_with_bookmarks(1)
        model.visit_stack.truncate()
        _send(context, model, Message.simple(msg.DELETE_BOOKMARK))
        self.assertEqual(len(model.config.bookmarks), 1)

    def test_delete_failure_restores_bookmark_in_place(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("x", encoding="utf-8")
            context = UpdateContext(lambda _path: None, blocker / "config.json")
            model = self._model_with_bookmarks(3)
            model.bookmark_selected = 1
            with self.assertRaises(PersistenceError):
                _send(context, model, Message.simple(msg.DELETE_BOOKMARK))
            self.assertEqual([b.display for b in model.config.bookmarks], ["b0", "b1", "b2"])

    def test_add_then_remove_leaves_config_file_byte_identical(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config = Config(bookmarks=[Bookmark("host", ROOT.child("nixosConfigurations").child("host"))])
            save_config(config, config_path)
            before = config_path.read_bytes()

            context = UpdateContext(lambda _path: None, config_path)
            model = Model(config=load_config(config_path))
            model.visit_stack.push_path(ROOT.child("extra"))
            _create(context, model, "extra")
            self.assertNotEqual(config_path.read_bytes(), before)

            model.visit_stack.truncate()
            model.visit_stack.push(BOOKMARKS)
            model.bookmark_selected = 1
            _send(context, model, Message.simple(msg.DELETE_BOOKMARK))

            self.assertEqual(config_path.read_bytes(), before)


if __name__ == "__main__":
    unittest.main()
