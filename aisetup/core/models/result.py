"""
Receipt and UnitResult — the outcome contract.

Receipts describe the result of one external action (a package
install, an extension install step). UnitResults describe what
happened to one managed unit during a reconcile run. Components
return these values; they never signal outcomes by raising.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of an external action.

    Adapters and extension install actions NEVER raise — failures
    are captured here.
    """

    source: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the action succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the action failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, source: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(source=source, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, source: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(source=source, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, source: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(source=source, action_id=action_id, status="skipped", output=reason, **kwargs)


UnitKind = Literal["tool", "extension", "env", "alias", "registry"]
UnitStatus = Literal["present", "installed", "skipped", "failed"]


class UnitResult(BaseModel):
    """What happened to one managed unit during a run."""

    kind: UnitKind
    unit_id: str
    status: UnitStatus
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status in ("present", "installed")

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def label(self) -> str:
        return {
            "present": "already present",
            "installed": "newly installed",
            "skipped": "skipped",
            "failed": "failed",
        }[self.status]

    @classmethod
    def already_present(cls, kind: UnitKind, unit_id: str, reason: str = "") -> UnitResult:
        return cls(kind=kind, unit_id=unit_id, status="present", reason=reason)

    @classmethod
    def installed(cls, kind: UnitKind, unit_id: str, reason: str = "") -> UnitResult:
        return cls(kind=kind, unit_id=unit_id, status="installed", reason=reason)

    @classmethod
    def skipped(cls, kind: UnitKind, unit_id: str, reason: str = "") -> UnitResult:
        return cls(kind=kind, unit_id=unit_id, status="skipped", reason=reason)

    @classmethod
    def failed_with(cls, kind: UnitKind, unit_id: str, reason: str) -> UnitResult:
        return cls(kind=kind, unit_id=unit_id, status="failed", reason=reason)
