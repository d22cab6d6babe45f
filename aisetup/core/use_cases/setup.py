"""
Setup use case — one full reconcile run from CLI intent to audit entry.

Loads config, resolves the shell profile, wires real or mock adapters,
runs the Reconciler, and appends a ledger entry. Config errors are
reported before anything on disk is touched.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from aisetup.adapters.base import PackageManager, Prompter, SessionAliasLookup
from aisetup.adapters.prompt import ClickPrompter, Confirmer
from aisetup.adapters.shell.command import CommandRunner
from aisetup.core.config.desired import DesiredState, build_desired_state
from aisetup.core.config.loader import ConfigError, find_config_file, load_config
from aisetup.core.engine.reconciler import ReconcileContext, Reconciler, ReconcileReport
from aisetup.core.models.profile import ShellProfile
from aisetup.core.persistence.audit import AuditEntry, AuditWriter
from aisetup.core.persistence.registry_store import RegistryStore
from aisetup.core.services.shell_profile import ShellProfileLocator
from aisetup.core.services.state_probe import StateProbe

logger = logging.getLogger(__name__)


@dataclass
class SetupResult:
    """Result of a setup run."""

    report: ReconcileReport | None = None
    profile: ShellProfile | None = None
    desired: DesiredState | None = None
    config_path: Path | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None or bool(self.report and self.report.failures)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["config_path"] = str(self.config_path) if self.config_path else None
        if self.profile:
            result["profile"] = self.profile.to_dict()
        if self.report:
            result["report"] = self.report.to_dict()
        return result


@dataclass
class Collaborators:
    """External collaborators of a run. Tests and --mock supply doubles."""

    runner: CommandRunner
    package_manager: PackageManager
    session: SessionAliasLookup
    prompter: Prompter


def real_collaborators(environ: Mapping[str, str] | None = None) -> Collaborators:
    from aisetup.adapters.package_manager import NpmPackageManager
    from aisetup.adapters.session import ShellSessionAliases

    environ = os.environ if environ is None else environ
    runner = CommandRunner()
    return Collaborators(
        runner=runner,
        package_manager=NpmPackageManager(runner),
        session=ShellSessionAliases(environ.get("SHELL", ""), runner),
        prompter=ClickPrompter(),
    )


def mock_collaborators(prompter: Prompter | None = None) -> Collaborators:
    """Simulated installs and no subprocesses; session aliases are not consulted.

    Installer commands are not run, so extensions that depend on one
    are reported skipped rather than enabled.
    """
    from aisetup.adapters.mock import MockCommandRunner, MockPackageManager
    from aisetup.adapters.session import StaticSessionAliases

    return Collaborators(
        runner=MockCommandRunner(dry_run=True),
        package_manager=MockPackageManager(),
        session=StaticSessionAliases(),
        prompter=prompter or ClickPrompter(),
    )


def build_context(
    home: Path,
    desired: DesiredState,
    collaborators: Collaborators,
    force: bool = False,
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> ReconcileContext:
    profile = ShellProfileLocator(home, environ=environ, platform=platform).resolve()
    probe = StateProbe(
        profile,
        home,
        session=collaborators.session,
        package_manager=collaborators.package_manager,
        which=collaborators.runner.which,
    )
    return ReconcileContext(
        home=home,
        profile=profile,
        desired=desired,
        probe=probe,
        confirmer=Confirmer(collaborators.prompter, force=force),
        package_manager=collaborators.package_manager,
        runner=collaborators.runner,
        registry=RegistryStore(desired.registry_path),
        environ=environ,
    )


def run_setup(
    home: Path,
    config_path: Path | None = None,
    force: bool = False,
    mock_mode: bool = False,
    collaborators: Collaborators | None = None,
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
    audit: AuditWriter | None = None,
) -> SetupResult:
    """Converge ``home`` onto the desired state.

    Args:
        home: Home directory whose dotfiles are managed.
        config_path: Explicit config file (default: auto-detect).
        force: Forced mode — approve everything, refresh installs.
        mock_mode: Simulate package installs and installer commands.
        collaborators: Pre-built adapters (tests).
        environ: Environment override (tests).
        platform: ``sys.platform`` override (tests).
        audit: Ledger writer (default: under ``home``).

    Returns:
        SetupResult with the reconcile report.
    """
    result = SetupResult()

    try:
        result.config_path = find_config_file(config_path, home=home, environ=environ)
        config = load_config(result.config_path)
        desired = build_desired_state(config, home)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.desired = desired

    if collaborators is None:
        collaborators = mock_collaborators() if mock_mode else real_collaborators(environ)

    ctx = build_context(home, desired, collaborators, force=force, environ=environ, platform=platform)
    result.profile = ctx.profile

    report = Reconciler(ctx).run()
    result.report = report

    writer = audit or AuditWriter(home=home)
    writer.write(
        AuditEntry(
            run_id=report.run_id,
            mode="forced" if force else "interactive",
            mock=mock_mode,
            shell_kind=ctx.profile.shell_kind.value,
            config_path=str(ctx.profile.primary_config_path),
            status=report.status,
            present=report.count("present"),
            installed=report.count("installed"),
            skipped=report.count("skipped"),
            failed=report.count("failed"),
            duration_ms=report.duration_ms,
            registry_recovered=report.registry_recovered,
            failures=[f"{r.kind}:{r.unit_id}: {r.reason}" for r in report.failures],
        )
    )

    return result
