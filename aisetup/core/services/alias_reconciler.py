"""
Alias reconciler — migrate, install and retire shell aliases.

All edits go to ``profile.alias_path`` through ConfigFile: one full
read-modify-write per mutation, no partial patches.

A full run always calls, in this order:

    migrate            rename deprecated ids, keeping the command verbatim
    install_missing    append desired aliases that are not present anywhere
    remove_deprecated  delete leftovers (one prompt for the whole batch)

Migration and removal only look at the alias file itself, never at the
live session, and never create the file. Declining a migration is
allowed: old and new alias then coexist until a later run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from aisetup.adapters.prompt import Confirmer
from aisetup.core.models.profile import ShellProfile
from aisetup.core.models.result import UnitResult
from aisetup.core.models.units import Alias, AliasMigration
from aisetup.core.services import shell_syntax
from aisetup.core.services.config_edit import ConfigFile
from aisetup.core.services.state_probe import StateProbe

logger = logging.getLogger(__name__)


@dataclass
class AliasChangeReport:
    """Outcome of a remove_deprecated pass (alias ids)."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "skipped": self.skipped,
            "declined": self.declined,
            "error": self.error,
        }


@dataclass
class MigrationReport:
    """Outcome of a migrate pass."""

    applied: list[AliasMigration] = field(default_factory=list)
    skipped: list[AliasMigration] = field(default_factory=list)
    declined: list[AliasMigration] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "applied": [str(m) for m in self.applied],
            "skipped": [str(m) for m in self.skipped],
            "declined": [str(m) for m in self.declined],
            "error": self.error,
        }


class AliasReconciler:
    """Apply alias changes to the resolved alias file."""

    def __init__(self, profile: ShellProfile, probe: StateProbe, confirmer: Confirmer):
        self._profile = profile
        self._probe = probe
        self._confirmer = confirmer

    @property
    def path(self) -> Path:
        return self._profile.alias_path

    def _in_file(self, alias_id: str) -> bool:
        return self._probe.alias_in_file(self.path, alias_id)

    # ── Migration ───────────────────────────────────────────────

    def migrate(self, migrations: Iterable[AliasMigration]) -> MigrationReport:
        """Rename each old alias present in the file to its replacement."""
        report = MigrationReport()
        kind = self._profile.shell_kind

        if not self.path.is_file():
            report.skipped = list(migrations)
            if report.skipped:
                logger.info("Alias file %s does not exist, nothing to migrate", self.path)
            return report

        for migration in migrations:
            if not self._in_file(migration.old_id):
                report.skipped.append(migration)
                continue

            if self._in_file(migration.new_id):
                # Renaming would define new_id twice; removal pass handles old_id
                logger.info("Not migrating %s: %s is already defined", migration, migration.new_id)
                report.skipped.append(migration)
                continue

            if not self._confirmer.confirm(
                f"Rename alias '{migration.old_id}' to '{migration.new_id}' in {self.path}?",
                default=True,
            ):
                report.declined.append(migration)
                continue

            pattern, replacement = shell_syntax.rename_alias_prefix(
                kind, migration.old_id, migration.new_id
            )
            try:
                config = ConfigFile.load(self.path)
                changed = config.substitute_prefix(pattern, replacement)
                config.save()
            except OSError as e:
                report.error = f"Cannot update {self.path}: {e}"
                logger.error("Migration %s failed: %s", migration, e)
                break

            if changed:
                logger.info("Migrated alias %s", migration)
                report.applied.append(migration)
            else:
                report.skipped.append(migration)

        return report

    # ── Installation ────────────────────────────────────────────

    def install_missing(
        self,
        aliases: Iterable[Alias],
        tool_present: Callable[[str], bool],
    ) -> list[UnitResult]:
        """Append every desired alias that is not present anywhere.

        Aliases whose required tools are missing are skipped. The user
        is asked once for the whole batch.
        """
        results: list[UnitResult] = []
        missing: list[Alias] = []

        for alias in aliases:
            if self._probe.check(alias):
                results.append(UnitResult.already_present("alias", alias.id))
                continue
            lacking = [t for t in alias.requires if not tool_present(t)]
            if lacking:
                results.append(
                    UnitResult.skipped("alias", alias.id, reason=f"requires {', '.join(lacking)}")
                )
                continue
            missing.append(alias)

        if not missing:
            return results

        names = ", ".join(a.id for a in missing)
        if not self._confirmer.confirm(f"Install the missing aliases ({names})?", default=True):
            return results + [
                UnitResult.skipped("alias", a.id, reason="declined") for a in missing
            ]

        kind = self._profile.shell_kind
        try:
            config = ConfigFile.load(self.path)
            if not config.contains_line(shell_syntax.ALIAS_HEADER):
                config.append_line(shell_syntax.ALIAS_HEADER)
            for alias in missing:
                config.append_line(shell_syntax.alias_line(kind, alias.id, alias.desired_value))
            config.save()
        except OSError as e:
            logger.error("Cannot write aliases to %s: %s", self.path, e)
            return results + [
                UnitResult.failed_with("alias", a.id, f"cannot write {self.path}: {e}")
                for a in missing
            ]

        logger.info("Added %d aliases to %s", len(missing), self.path)
        return results + [
            UnitResult.installed("alias", a.id, reason=str(self.path)) for a in missing
        ]

    # ── Deprecation ─────────────────────────────────────────────

    def remove_deprecated(self, ids: Iterable[str]) -> AliasChangeReport:
        """Delete every deprecated alias defined in the file."""
        report = AliasChangeReport()
        ids = list(dict.fromkeys(ids))

        if not self.path.is_file():
            report.skipped = ids
            return report

        present = [i for i in ids if self._in_file(i)]
        report.skipped = [i for i in ids if i not in present]
        if not present:
            return report

        if not self._confirmer.confirm(
            f"Remove deprecated aliases ({', '.join(present)}) from {self.path}?",
            default=True,
        ):
            report.declined = present
            return report

        kind = self._profile.shell_kind
        try:
            config = ConfigFile.load(self.path)
            for alias_id in present:
                if config.delete_lines_matching(shell_syntax.alias_pattern(kind, alias_id)):
                    report.applied.append(alias_id)
            config.save()
        except OSError as e:
            report.applied = []
            report.error = f"Cannot update {self.path}: {e}"
            logger.error("Removing deprecated aliases failed: %s", e)
            return report

        logger.info("Removed deprecated aliases: %s", ", ".join(report.applied))
        return report
