"""
Line-oriented config file editing.

A ConfigFile is read once into a list of lines, edited in memory with
whole-line primitives, and written back once through an atomic rename.
No external stream editor is involved, so there are no platform
dialects to care about.

Patterns are regular expressions matched with ``re.match`` against each
line (i.e. anchored at the start of the line).
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from aisetup.core.persistence.atomic import write_text_atomic

logger = logging.getLogger(__name__)

Pattern = str | re.Pattern[str]


def _compile(pattern: Pattern) -> re.Pattern[str]:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


class ConfigFile:
    """In-memory, line-based view of a shell configuration file."""

    def __init__(self, path: Path, lines: list[str], *, exists: bool, trailing_newline: bool = True):
        self.path = path
        self.lines = lines
        self.exists = exists
        self._trailing_newline = trailing_newline
        self._dirty = False

    @classmethod
    def load(cls, path: Path) -> ConfigFile:
        """Read ``path``. A missing file yields an empty, non-existent view.

        Raises:
            OSError: If the file exists but cannot be read.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return cls(path, [], exists=False)
        return cls(
            path,
            text.splitlines(),
            exists=True,
            trailing_newline=text.endswith("\n") or not text,
        )

    @property
    def dirty(self) -> bool:
        return self._dirty

    # ── Queries ─────────────────────────────────────────────────

    def find(self, pattern: Pattern) -> list[int]:
        """Indexes of lines matching ``pattern``."""
        rx = _compile(pattern)
        return [i for i, line in enumerate(self.lines) if rx.match(line)]

    def contains(self, pattern: Pattern) -> bool:
        rx = _compile(pattern)
        return any(rx.match(line) for line in self.lines)

    def contains_line(self, line: str) -> bool:
        return line in self.lines

    # ── Mutations ───────────────────────────────────────────────

    def replace_line_matching(self, pattern: Pattern, new_line: str) -> int:
        """Replace every line matching ``pattern`` with ``new_line``.

        Returns:
            Number of lines replaced.
        """
        count = 0
        for i in self.find(pattern):
            if self.lines[i] != new_line:
                self.lines[i] = new_line
                self._dirty = True
            count += 1
        return count

    def substitute_prefix(self, pattern: Pattern, replacement: str) -> int:
        """Replace only the matched prefix of each matching line.

        ``replacement`` is a ``re`` template, so groups of ``pattern``
        (``\\g<1>``) can be carried over. The remainder of the line is
        kept verbatim.

        Returns:
            Number of lines changed.
        """
        rx = _compile(pattern)
        count = 0
        for i, line in enumerate(self.lines):
            m = rx.match(line)
            if m:
                self.lines[i] = m.expand(replacement) + line[m.end():]
                self._dirty = self._dirty or self.lines[i] != line
                count += 1
        return count

    def delete_lines_matching(self, pattern: Pattern) -> int:
        """Delete every line matching ``pattern``.

        Returns:
            Number of lines deleted.
        """
        rx = _compile(pattern)
        kept = [line for line in self.lines if not rx.match(line)]
        removed = len(self.lines) - len(kept)
        if removed:
            self.lines = kept
            self._dirty = True
        return removed

    def append_line(self, line: str) -> None:
        self.lines.append(line)
        self._dirty = True

    # ── Persistence ─────────────────────────────────────────────

    def render(self) -> str:
        text = "\n".join(self.lines)
        if self.lines and (self._trailing_newline or self._dirty):
            text += "\n"
        return text

    def save(self) -> bool:
        """Write the file back if anything changed.

        Returns:
            True if the file was written.

        Raises:
            OSError: If the atomic write fails.
        """
        if not self._dirty:
            return False
        write_text_atomic(self.path, self.render(), prefix=f".{self.path.name}_")
        self.exists = True
        self._dirty = False
        logger.debug("Saved %s (%d lines)", self.path, len(self.lines))
        return True
