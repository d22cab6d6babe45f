"""
Run ledger — append-only history of reconcile runs.

Every ``aisetup setup`` run appends one NDJSON line summarising what
happened. The ledger is for humans debugging "what did the last run
do to my dotfiles"; nothing in the engine reads it back to make
decisions.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_DIR = Path(".local") / "state" / "aisetup"
DEFAULT_AUDIT_FILE = "audit.ndjson"


class AuditEntry(BaseModel):
    """A single run record."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    run_id: str = ""
    mode: str = ""                 # interactive, forced
    mock: bool = False

    shell_kind: str = ""
    config_path: str = ""

    # Results
    status: str = ""               # ok, partial, failed
    present: int = 0
    installed: int = 0
    skipped: int = 0
    failed: int = 0
    duration_ms: int = 0
    registry_recovered: bool = False

    failures: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class AuditWriter:
    """Append-only run ledger writer."""

    def __init__(self, path: Path | None = None, home: Path | None = None):
        if path is not None:
            self._path = path
        elif home is not None:
            self._path = home / DEFAULT_AUDIT_DIR / DEFAULT_AUDIT_FILE
        else:
            self._path = Path.home() / DEFAULT_AUDIT_DIR / DEFAULT_AUDIT_FILE

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append an entry. Failures are logged, never raised."""
        data = entry.model_dump(mode="json")
        line = json.dumps(data, ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Audit entry written: %s", entry.run_id)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)

    def read_all(self) -> list[AuditEntry]:
        """Read all entries, oldest first. Corrupt lines are skipped."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(AuditEntry.model_validate(json.loads(line)))
                    except ValueError as e:
                        logger.warning("Skipping corrupt audit entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read audit ledger: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        """Read the most recent N entries."""
        return self.read_all()[-n:]
