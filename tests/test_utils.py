"""
tests/test_utils.py
Unit tests for rapier.utils: case conversion, identifier checks,
indentation and file writing.
"""

from __future__ import annotations

import pathlib

import pytest

from rapier.utils import (
    Timer,
    camelized,
    capitalize_first,
    count_lines,
    indent,
    is_identifier,
    is_swift_keyword,
    write_file,
)


class TestCamelized:
    @pytest.mark.parametrize(
        "wire, expected",
        [
            ("chat_id", "chatId"),
            ("text", "text"),
            ("reply_to_message_id", "replyToMessageId"),
            ("status_string", "statusString"),
            ("parse_mode_string", "parseModeString"),
        ],
    )
    def test_examples(self, wire: str, expected: str) -> None:
        assert camelized(wire) == expected

    def test_first_component_lowercased(self) -> None:
        assert camelized("Chat_ID") == "chatId"

    def test_later_components_lowercased_after_first_char(self) -> None:
        assert camelized("file_ID") == "fileId"

    def test_double_underscore_drops_empty_component(self) -> None:
        assert camelized("chat__id") == "chatId"

    def test_no_underscore_is_lowercased(self) -> None:
        assert camelized("Username") == "username"


class TestSmallHelpers:
    def test_capitalize_first(self) -> None:
        assert capitalize_first("getMe") == "GetMe"
        assert capitalize_first("") == ""

    @pytest.mark.parametrize("name", ["User", "_private", "chatId2"])
    def test_valid_identifiers(self, name: str) -> None:
        assert is_identifier(name)

    @pytest.mark.parametrize("name", ["", "2fa", "chat-id", "a b"])
    def test_invalid_identifiers(self, name: str) -> None:
        assert not is_identifier(name)

    def test_swift_keywords(self) -> None:
        assert is_swift_keyword("struct")
        assert is_swift_keyword("self")
        assert not is_swift_keyword("from")

    def test_indent_skips_blank_lines(self) -> None:
        assert indent("a\n\nb") == "    a\n\n    b"
        assert indent("x", level=2) == "        x"

    def test_count_lines(self) -> None:
        assert count_lines("") == 0
        assert count_lines("one") == 1
        assert count_lines("one\ntwo\n") == 2


class TestWriteFile:
    def test_creates_parent_directories(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "a" / "b" / "Types.swift"
        written = write_file(target, "import Foundation\n")
        assert target.read_text(encoding="utf-8") == "import Foundation\n"
        assert written == len("import Foundation\n")

    def test_replaces_existing_content(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "Types.swift"
        target.write_text("old", encoding="utf-8")
        write_file(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_leaves_no_temp_files(self, tmp_path: pathlib.Path) -> None:
        write_file(tmp_path / "Methods.swift", "x")
        assert [p.name for p in tmp_path.iterdir()] == ["Methods.swift"]

    def test_non_atomic_write(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "plain.txt"
        assert write_file(target, "héllo", atomic=False) == len("héllo".encode("utf-8"))
        assert target.read_text(encoding="utf-8") == "héllo"

    def test_parent_is_a_file_raises(self, tmp_path: pathlib.Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(OSError):
            write_file(blocker / "Types.swift", "x")


class TestTimer:
    def test_elapsed_is_recorded(self) -> None:
        with Timer("noop") as t:
            pass
        assert t.elapsed >= 0.0
        assert "noop" in repr(t)
