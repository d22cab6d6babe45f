"""
Reconciler — the central convergence run.

Takes the desired state, probes the machine, asks (or, in forced mode,
assumes) the user's decisions, applies changes, and reports per unit.

Flow:
    tools → extensions → env vars → alias migration → alias install
          → deprecated alias cleanup → registry rebuild → re-probe summary

The run is strictly sequential. Every step returns result values;
nothing unwinds across steps. An unexpected exception inside one unit
is logged and becomes a failed result for that unit only. The registry
rebuild runs unconditionally, and the final summary is built from a
fresh probe rather than from remembered step results.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from aisetup.adapters.base import PackageManager
from aisetup.adapters.prompt import Confirmer
from aisetup.adapters.shell.command import CommandRunner
from aisetup.core.config.desired import DesiredState
from aisetup.core.extensions.base import ExtensionContext
from aisetup.core.models.profile import ShellProfile
from aisetup.core.models.result import UnitKind, UnitResult
from aisetup.core.persistence.registry_store import RebuildReport, RegistryStore
from aisetup.core.services.alias_reconciler import AliasReconciler
from aisetup.core.services.env_vars import EnvVarInstaller
from aisetup.core.services.extension_installer import ExtensionInstaller
from aisetup.core.services.state_probe import StateProbe
from aisetup.core.services.tool_installer import ToolInstaller

logger = logging.getLogger(__name__)


def generate_run_id() -> str:
    """Generate a unique run ID."""
    ts = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"run-{ts}-{short}"


@dataclass
class ProbedUnit:
    """Ground-truth state of one unit after a run."""

    kind: UnitKind
    unit_id: str
    present: bool
    where: str | None = None
    enabled: bool | None = None  # extensions only

    def to_dict(self) -> dict:
        data = {
            "kind": self.kind,
            "id": self.unit_id,
            "present": self.present,
            "where": self.where,
        }
        if self.enabled is not None:
            data["enabled"] = self.enabled
        return data


@dataclass
class ReconcileReport:
    """Result of a reconcile run."""

    run_id: str = ""
    force: bool = False
    results: list[UnitResult] = field(default_factory=list)
    registry: RebuildReport | None = None
    summary: list[ProbedUnit] = field(default_factory=list)
    duration_ms: int = 0

    def count(self, status: str) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def failures(self) -> list[UnitResult]:
        return [r for r in self.results if r.failed]

    @property
    def registry_recovered(self) -> bool:
        return bool(self.registry and self.registry.recovered)

    @property
    def status(self) -> str:
        if not self.failures:
            return "ok"
        if any(r.ok for r in self.results):
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "mode": "forced" if self.force else "interactive",
            "status": self.status,
            "counts": {
                s: self.count(s) for s in ("present", "installed", "skipped", "failed")
            },
            "results": [r.model_dump(mode="json") for r in self.results],
            "registry": self.registry.to_dict() if self.registry else None,
            "summary": [u.to_dict() for u in self.summary],
            "duration_ms": self.duration_ms,
        }


@dataclass
class ReconcileContext:
    """Everything one run needs. Built once, never changed mid-run."""

    home: Path
    profile: ShellProfile
    desired: DesiredState
    probe: StateProbe
    confirmer: Confirmer
    package_manager: PackageManager
    runner: CommandRunner
    registry: RegistryStore
    environ: Mapping[str, str] | None = None

    @property
    def force(self) -> bool:
        return self.confirmer.force


def summarize(
    desired: DesiredState,
    probe: StateProbe,
    registry: RegistryStore,
) -> list[ProbedUnit]:
    """Re-probe every desired unit. Read-only."""
    enabled = set(registry.entries())
    units: list[ProbedUnit] = []
    for tool in desired.tools:
        units.append(ProbedUnit("tool", tool.id, *_probe(probe, tool)))
    for ext in desired.extensions:
        present, where = _probe(probe, ext)
        units.append(ProbedUnit("extension", ext.name, present, where, enabled=ext.name in enabled))
    for var in desired.env_vars:
        units.append(ProbedUnit("env", var.id, *_probe(probe, var)))
    for alias in desired.aliases:
        units.append(ProbedUnit("alias", alias.id, *_probe(probe, alias)))
    return units


def _probe(probe: StateProbe, unit) -> tuple[bool, str | None]:
    where = probe.where(unit)
    return where is not None, where


class Reconciler:
    """Drive one convergence run over a ReconcileContext."""

    def __init__(self, ctx: ReconcileContext):
        self.ctx = ctx
        self.tools = ToolInstaller(
            ctx.probe, ctx.package_manager, ctx.confirmer, skip=ctx.desired.skip_tools
        )
        self.extensions = ExtensionInstaller(
            ctx.desired.extensions,
            ctx.probe,
            ctx.registry,
            ctx.confirmer,
            ExtensionContext(
                home=ctx.home,
                runner=ctx.runner,
                package_manager=ctx.package_manager,
                force=ctx.force,
            ),
        )
        self.env_vars = EnvVarInstaller(
            ctx.profile,
            ctx.probe,
            ctx.confirmer,
            values=ctx.desired.env_values,
            environ=ctx.environ,
        )
        self.aliases = AliasReconciler(ctx.profile, ctx.probe, ctx.confirmer)

    def tool_present(self, tool_id: str) -> bool:
        tool = self.ctx.desired.tool(tool_id)
        if tool is None:
            return self.ctx.runner.is_available(tool_id)
        return self.ctx.probe.check(tool)

    def _guard(self, kind: UnitKind, unit_id: str, step: Callable[[], UnitResult]) -> UnitResult:
        try:
            return step()
        except Exception as e:
            logger.exception("Unexpected error while reconciling %s %s", kind, unit_id)
            return UnitResult.failed_with(kind, unit_id, f"unexpected error: {e}")

    def run(self) -> ReconcileReport:
        ctx = self.ctx
        desired = ctx.desired
        report = ReconcileReport(run_id=generate_run_id(), force=ctx.force)
        start = time.monotonic()
        results = report.results

        logger.info("Reconcile %s started (%s)", report.run_id, "forced" if ctx.force else "interactive")
        # Extension installs rewrite the registry canonically; note damage first
        salvage = ctx.registry.inspect()

        # ── Tools ────────────────────────────────────────────────
        for tool in desired.tools:
            results.append(self._guard("tool", tool.id, lambda t=tool: self.tools.ensure(t)))

        # ── Extensions ───────────────────────────────────────────
        for ext in desired.extensions:
            results.append(
                self._guard(
                    "extension", ext.name,
                    lambda e=ext: self.extensions.ensure(e.name, force=ctx.force),
                )
            )

        # ── Environment variables ────────────────────────────────
        for var in desired.env_vars:
            results.append(
                self._guard("env", var.id, lambda v=var: self.env_vars.ensure(v, self.tool_present))
            )

        # ── Aliases ──────────────────────────────────────────────
        results.extend(self._migrate())
        results.extend(self._install_aliases())
        results.extend(self._remove_deprecated())

        # ── Registry (always) ────────────────────────────────────
        try:
            report.registry = ctx.registry.rebuild()
            report.registry.absorb(salvage)
        except OSError as e:
            logger.error("Registry rebuild failed: %s", e)
            results.append(UnitResult.failed_with("registry", str(ctx.registry.path), str(e)))

        # ── Ground truth ─────────────────────────────────────────
        report.summary = summarize(desired, ctx.probe, ctx.registry)
        report.duration_ms = int((time.monotonic() - start) * 1000)

        logger.info(
            "Reconcile %s finished: %s (%d installed, %d failed)",
            report.run_id, report.status, report.count("installed"), report.count("failed"),
        )
        return report

    def _migrate(self) -> list[UnitResult]:
        try:
            migration = self.aliases.migrate(self.ctx.desired.migrations)
        except Exception as e:
            logger.exception("Alias migration failed")
            return [UnitResult.failed_with("alias", "migration", f"unexpected error: {e}")]

        results = [
            UnitResult.installed("alias", m.new_id, reason=f"renamed from {m.old_id}")
            for m in migration.applied
        ]
        results += [
            UnitResult.skipped("alias", m.old_id, reason=f"migration to {m.new_id} declined")
            for m in migration.declined
        ]
        if migration.error:
            results.append(UnitResult.failed_with("alias", "migration", migration.error))
        return results

    def _install_aliases(self) -> list[UnitResult]:
        try:
            return self.aliases.install_missing(self.ctx.desired.aliases, self.tool_present)
        except Exception as e:
            logger.exception("Alias installation failed")
            return [UnitResult.failed_with("alias", "install", f"unexpected error: {e}")]

    def _remove_deprecated(self) -> list[UnitResult]:
        try:
            removal = self.aliases.remove_deprecated(self.ctx.desired.deprecated_aliases)
        except Exception as e:
            logger.exception("Deprecated alias cleanup failed")
            return [UnitResult.failed_with("alias", "cleanup", f"unexpected error: {e}")]

        results = [
            UnitResult.installed("alias", a, reason="removed (deprecated)") for a in removal.applied
        ]
        results += [
            UnitResult.skipped("alias", a, reason="removal declined") for a in removal.declined
        ]
        if removal.error:
            results.append(UnitResult.failed_with("alias", "cleanup", removal.error))
        return results
