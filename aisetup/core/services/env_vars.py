"""
Environment variable installer — persist API keys in the primary config.

Values come from, in order: the unit's own desired value, the config
file's ``env`` mapping, the current process environment, and finally
a hidden prompt (interactive mode only). Forced mode never prompts; a
variable with no value available is skipped.

Values are secrets. They are registered with the logging secret
filter before anything is logged.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping

from aisetup.adapters.prompt import Confirmer
from aisetup.core.models.profile import ShellProfile
from aisetup.core.models.result import UnitResult
from aisetup.core.models.units import EnvVar
from aisetup.core.observability.logging_config import register_secret
from aisetup.core.services import shell_syntax
from aisetup.core.services.config_edit import ConfigFile
from aisetup.core.services.state_probe import StateProbe

logger = logging.getLogger(__name__)


class EnvVarInstaller:
    """Add or refresh ``export NAME="value"`` lines."""

    def __init__(
        self,
        profile: ShellProfile,
        probe: StateProbe,
        confirmer: Confirmer,
        values: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._profile = profile
        self._probe = probe
        self._confirmer = confirmer
        self._values = dict(values or {})
        self._environ = os.environ if environ is None else environ

    def _known_value(self, var: EnvVar) -> str:
        return (
            var.desired_value
            or self._values.get(var.id)
            or self._environ.get(var.id)
            or ""
        )

    def ensure(self, var: EnvVar, tool_present: Callable[[str], bool]) -> UnitResult:
        if var.requires_tool and not tool_present(var.requires_tool):
            return UnitResult.skipped("env", var.id, reason=f"{var.requires_tool} not installed")

        present = self._probe.check(var)
        if present and not self._confirmer.force:
            return UnitResult.already_present("env", var.id)

        value = self._known_value(var)
        if not value and self._confirmer.interactive:
            hint = f" (get one at {var.help_url})" if var.help_url else ""
            label = var.description or var.id
            if not self._confirmer.confirm(f"Set up your {label} now?{hint}", default=True):
                return UnitResult.skipped("env", var.id, reason="declined")
            value = self._confirmer.secret(f"Enter your {label}")

        if not value:
            if present:
                return UnitResult.already_present("env", var.id)
            return UnitResult.skipped("env", var.id, reason="no value supplied")

        if var.secret:
            register_secret(value)

        return self._write(var, value, replace=present)

    def _write(self, var: EnvVar, value: str, *, replace: bool) -> UnitResult:
        kind = self._profile.shell_kind
        path = self._profile.primary_config_path
        line = shell_syntax.env_line(kind, var.id, value)

        try:
            config = ConfigFile.load(path)
            if replace:
                config.replace_line_matching(shell_syntax.env_pattern(kind, var.id), line)
            else:
                config.append_line(line)
            written = config.save()
        except OSError as e:
            logger.error("Cannot write %s to %s: %s", var.id, path, e)
            return UnitResult.failed_with("env", var.id, f"cannot write {path}: {e}")

        if replace and not written:
            return UnitResult.already_present("env", var.id, reason="unchanged")

        logger.info("%s %s in %s", "Updated" if replace else "Added", var.id, path)
        return UnitResult.installed("env", var.id, reason=str(path))
