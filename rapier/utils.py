# File: rapier/utils.py
"""
Rapier - Utility Functions & Helpers
=====================================
String transformation, file I/O and timing helpers used throughout the
generation pipeline.

- Name conversions are decorated with ``@lru_cache(maxsize=None)``; the same
  wire names are camelized once per type and once per method.
- File writes go through a temporary file in the target directory followed
  by a rename, so a reader never observes a half-written source file.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import FrozenSet, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier.utils")

# ---------------------------------------------------------------------------
# Identifier rules for the emitted Swift code
# ---------------------------------------------------------------------------

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SWIFT_KEYWORDS: FrozenSet[str] = frozenset({
    "associatedtype", "class", "deinit", "enum", "extension", "fileprivate",
    "func", "import", "init", "inout", "internal", "let", "open",
    "operator", "private", "protocol", "public", "rethrows", "static",
    "struct", "subscript", "typealias", "var", "break", "case", "continue",
    "default", "defer", "do", "else", "fallthrough", "for", "guard", "if",
    "in", "repeat", "return", "switch", "where", "while", "as", "Any",
    "catch", "false", "is", "nil", "super", "self", "Self", "throw",
    "throws", "true", "try",
})


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def camelized(name: str) -> str:
    """
    Convert a snake_case wire name to lowerCamelCase.

    The first ``_``-delimited component is lowercased; every following
    component gets an uppercase first character and a lowercased remainder.

    Examples:
        >>> camelized("chat_id")
        'chatId'
        >>> camelized("reply_to_message_id")
        'replyToMessageId'
        >>> camelized("text")
        'text'
    """
    components: List[str] = name.split("_")
    first: str = components[0].lower()
    rest: str = "".join(
        part[:1].upper() + part[1:].lower() for part in components[1:]
    )
    return first + rest


@functools.lru_cache(maxsize=None)
def capitalize_first(name: str) -> str:
    """Uppercase only the first character: ``getMe`` -> ``GetMe``."""
    return name[:1].upper() + name[1:]


def is_identifier(name: str) -> bool:
    """True when *name* is usable as a Swift identifier (ASCII subset)."""
    return bool(_IDENTIFIER_RE.match(name))


def is_swift_keyword(name: str) -> bool:
    return name in SWIFT_KEYWORDS


# ---------------------------------------------------------------------------
# Indentation
# ---------------------------------------------------------------------------


def indent(text: str, level: int = 1, size: int = 4) -> str:
    """Indent every non-blank line of *text* by *level* x *size* spaces."""
    prefix: str = " " * (level * size)
    lines: List[str] = text.split("\n")
    return "\n".join(prefix + line if line.strip() else line for line in lines)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path* as UTF-8.

    When *atomic* is True, writes to a temporary file in the same directory
    and then replaces the target, which prevents partial writes on crash.
    Errors propagate to the caller.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if not atomic:
        path.write_bytes(encoded)
        logger.debug("Wrote %d bytes to %s", len(encoded), path)
        return len(encoded)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("generate types") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.info("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SWIFT_KEYWORDS",
    "Timer",
    "camelized",
    "capitalize_first",
    "count_lines",
    "ensure_directory",
    "indent",
    "is_identifier",
    "is_swift_keyword",
    "write_file",
]
