"""
State probe — is a managed unit currently present, and where?

Read-only. A probe never raises: an unreadable file or directory is
treated as absent, which errs toward re-installing rather than
silently skipping.

Per unit kind:

    Tool       executable on PATH  OR  package-manager install record
    EnvVar     assignment line in the primary config
    Alias      session alias  OR  config definition  OR  alternate alias file
    Extension  ALL marker artifacts exist

Two alias signals are kept apart on purpose. ``check`` answers
"is this alias usable" and consults the live session. ``alias_in_file``
answers "can this alias be edited" and only reads the given file.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from aisetup.adapters.base import PackageManager, SessionAliasLookup
from aisetup.core.extensions.base import Extension
from aisetup.core.models.profile import ShellKind, ShellProfile
from aisetup.core.models.units import Alias, EnvVar, Tool
from aisetup.core.services import shell_syntax
from aisetup.core.services.config_edit import ConfigFile

logger = logging.getLogger(__name__)

ALTERNATE_ALIAS_FILES = (".aliases", ".alias", ".bash_aliases")

SESSION = "session"


class StateProbe:
    """Probe the live machine for managed units.

    Args:
        profile: Resolved shell profile for the run.
        home: Home directory.
        session: Aliases active in the user's shell.
        package_manager: Second signal for tool presence.
        which: Executable lookup (``shutil.which`` by default).
    """

    def __init__(
        self,
        profile: ShellProfile,
        home: Path,
        session: SessionAliasLookup,
        package_manager: PackageManager | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ):
        self.profile = profile
        self.home = home
        self._session = session
        self._package_manager = package_manager
        self._which = which

    # ── Dispatch ────────────────────────────────────────────────

    def check(self, unit: Tool | EnvVar | Alias | Extension) -> bool:
        """Whether ``unit`` is currently present. Never raises."""
        return self.where(unit) is not None

    def where(self, unit: Tool | EnvVar | Alias | Extension) -> str | None:
        """Where ``unit`` was found, or None if absent. Never raises."""
        try:
            if isinstance(unit, Tool):
                return self._where_tool(unit)
            if isinstance(unit, EnvVar):
                return self._where_env(unit)
            if isinstance(unit, Alias):
                return self._where_alias(unit.id)
            if isinstance(unit, Extension):
                return self._where_extension(unit)
        except Exception as e:
            logger.warning("Probe for %r failed, treating as absent: %s", unit, e)
            return None
        logger.warning("Unknown unit type: %s", type(unit).__name__)
        return None

    # ── Tools ───────────────────────────────────────────────────

    def _where_tool(self, tool: Tool) -> str | None:
        resolved = self._which(tool.command)
        if resolved:
            return resolved
        pm = self._package_manager
        if tool.package and pm is not None and pm.is_available():
            if pm.is_installed(tool.package):
                return f"{pm.name}:{tool.package}"
        return None

    # ── Environment variables ───────────────────────────────────

    def _where_env(self, var: EnvVar) -> str | None:
        path = self.profile.primary_config_path
        pattern = shell_syntax.env_pattern(self.profile.shell_kind, var.id)
        return str(path) if _file_contains(path, pattern) else None

    # ── Aliases ─────────────────────────────────────────────────

    def _where_alias(self, alias_id: str) -> str | None:
        if self._session.has(alias_id):
            return SESSION

        kind = self.profile.shell_kind
        for path in dict.fromkeys([self.profile.primary_config_path, self.profile.alias_path]):
            if self.alias_in_file(path, alias_id, kind):
                return str(path)

        for name in ALTERNATE_ALIAS_FILES:
            path = self.home / name
            if self.alias_in_file(path, alias_id, ShellKind.POSIX_SH):
                return str(path)
        return None

    def alias_in_file(
        self,
        path: Path,
        alias_id: str,
        kind: ShellKind | None = None,
    ) -> bool:
        """File-only alias check, used to decide whether a file can be edited."""
        pattern = shell_syntax.alias_pattern(kind or self.profile.shell_kind, alias_id)
        return _file_contains(path, pattern)

    # ── Extensions ──────────────────────────────────────────────

    def missing_markers(self, extension: Extension) -> list[Path]:
        missing = []
        for marker in extension.markers(self.home):
            try:
                if not marker.exists():
                    missing.append(marker)
            except OSError:
                missing.append(marker)
        return missing

    def _where_extension(self, extension: Extension) -> str | None:
        markers = extension.markers(self.home)
        if not markers:
            return None
        missing = self.missing_markers(extension)
        if missing:
            logger.debug(
                "%s: %d/%d markers missing (first: %s)",
                extension.name, len(missing), len(markers), missing[0],
            )
            return None
        return str(markers[0])


def _file_contains(path: Path, pattern) -> bool:
    try:
        return ConfigFile.load(path).contains(pattern)
    except (OSError, UnicodeDecodeError):
        return False
