"""
Enabled registry — the persisted set of enabled extension ids.

On-disk format (line oriented, YAML-compatible)::

    enabled:
      - SuperClaude
      - custom-commands

Entries are deduplicated and sorted ascending (code-point order).
Reading is tolerant: a missing or empty file is an empty registry,
non-matching lines are ignored, extra whitespace and quotes around
ids are accepted. Every write rewrites the whole file in canonical
form through an atomic temp-file rename, so ``rebuild()`` can be
called unconditionally at the end of every run.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from aisetup.core.persistence.atomic import write_text_atomic

logger = logging.getLogger(__name__)

HEADER = "enabled:"
_ENTRY_RE = re.compile(r"""^\s*-\s*(["']?)([A-Za-z0-9_][A-Za-z0-9_.+-]*)\1\s*$""")


@dataclass
class RebuildReport:
    """Outcome of a registry rebuild."""

    entries: list[str] = field(default_factory=list)
    recovered: bool = False        # on-disk file was not canonical
    dropped_lines: int = 0         # unrecognised lines discarded
    duplicates: int = 0            # duplicate entries collapsed

    def absorb(self, earlier: RebuildReport) -> None:
        """Fold in repairs found before the run touched the file.

        Between the two reads only canonical writes happen, so the
        same damage is seen at most once by each and max() is exact.
        """
        self.recovered = self.recovered or earlier.recovered
        self.dropped_lines = max(self.dropped_lines, earlier.dropped_lines)
        self.duplicates = max(self.duplicates, earlier.duplicates)

    def to_dict(self) -> dict:
        return {
            "entries": self.entries,
            "recovered": self.recovered,
            "dropped_lines": self.dropped_lines,
            "duplicates": self.duplicates,
        }


def canonical(entries: set[str] | list[str]) -> str:
    """Serialize entries in canonical form."""
    lines = [HEADER] + [f"  - {e}" for e in sorted(set(entries))]
    return "\n".join(lines) + "\n"


def parse(text: str) -> tuple[list[str], int]:
    """Salvage entry ids from registry text.

    Returns:
        (ids in file order including duplicates, count of dropped lines).
        The header line and blank lines are not counted as dropped.
    """
    ids: list[str] = []
    dropped = 0
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line == HEADER or line.startswith("#"):
            continue
        m = _ENTRY_RE.match(raw)
        if m:
            ids.append(m.group(2))
        else:
            dropped += 1
    return ids, dropped


class RegistryStore:
    """Read/write access to the enabled-extensions registry file."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read_text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read registry %s: %s — treating as empty", self._path, e)
            return ""

    def entries(self) -> list[str]:
        """Enabled ids, deduplicated and sorted. Never touches the disk."""
        ids, _ = parse(self._read_text())
        return sorted(set(ids))

    def is_enabled(self, extension_id: str) -> bool:
        return extension_id in self.entries()

    def add(self, extension_id: str) -> bool:
        """Mark an extension enabled.

        Always leaves the file in canonical form, even when the id was
        already present.

        Returns:
            True if the id was newly added.
        """
        ids, _ = parse(self._read_text())
        current = set(ids)
        added = extension_id not in current
        current.add(extension_id)
        write_text_atomic(self._path, canonical(current), prefix=".enabled_")
        if added:
            logger.info("Registry: enabled %s", extension_id)
        return added

    def inspect(self) -> RebuildReport:
        """What a rebuild would repair right now. Read-only.

        Taken before a run mutates the registry, since every ``add``
        already leaves the file canonical.
        """
        return _analyze(self._read_text())

    def rebuild(self) -> RebuildReport:
        """Rewrite the registry from whatever is salvageable on disk.

        Idempotent: a second call produces byte-identical output.
        """
        text = self._read_text()
        report = _analyze(text)
        content = canonical(report.entries)

        if text != content:
            write_text_atomic(self._path, content, prefix=".enabled_")
            if report.recovered:
                logger.warning(
                    "Registry %s was not canonical — rebuilt (%d dropped, %d duplicates)",
                    self._path, report.dropped_lines, report.duplicates,
                )
        else:
            logger.debug("Registry %s already canonical", self._path)

        return report


def _analyze(text: str) -> RebuildReport:
    ids, dropped = parse(text)
    unique = sorted(set(ids))
    return RebuildReport(
        entries=unique,
        dropped_lines=dropped,
        duplicates=len(ids) - len(unique),
        recovered=bool(text.strip()) and text != canonical(unique),
    )
