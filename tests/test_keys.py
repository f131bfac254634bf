"""Tests for composer key classification."""

from __future__ import annotations

import unittest

from ollama_vision_chat.keys import classify_key


class ClassifyKeyTests(unittest.TestCase):
    def test_plain_enter_sends(self) -> None:
        self.assertEqual(classify_key("enter"), "send")

    def test_shift_enter_and_ctrl_j_insert_newline(self) -> None:
        self.assertEqual(classify_key("shift+enter"), "newline")
        self.assertEqual(classify_key("ctrl+j"), "newline")

    def test_other_keys_are_ignored(self) -> None:
        for key in ("a", "tab", "ctrl+enter", "escape", ""):
            self.assertIsNone(classify_key(key), key)

    def test_key_names_are_normalized(self) -> None:
        self.assertEqual(classify_key(" Enter "), "send")
        self.assertEqual(classify_key("Shift+Enter"), "newline")


if __name__ == "__main__":
    unittest.main()
