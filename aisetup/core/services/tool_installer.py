"""
Tool installer — make sure the AI CLIs are on the machine.

Tools with a package identifier are installed through the package
manager after confirmation. Tools without one (node, npm, tmux) are
prerequisites the engine only checks: a missing required one fails
with an install hint, a missing optional one is skipped.
"""

from __future__ import annotations

import logging

from aisetup.adapters.base import PackageManager
from aisetup.adapters.prompt import Confirmer
from aisetup.core.models.result import UnitResult
from aisetup.core.models.units import Tool
from aisetup.core.services.state_probe import StateProbe

logger = logging.getLogger(__name__)


class ToolInstaller:
    def __init__(
        self,
        probe: StateProbe,
        package_manager: PackageManager,
        confirmer: Confirmer,
        skip: frozenset[str] = frozenset(),
    ):
        self._probe = probe
        self._package_manager = package_manager
        self._confirmer = confirmer
        self._skip = skip

    def ensure(self, tool: Tool) -> UnitResult:
        if tool.id in self._skip:
            return UnitResult.skipped("tool", tool.id, reason="disabled in config")

        where = self._probe.where(tool)
        if where:
            return UnitResult.already_present("tool", tool.id, reason=where)

        if not tool.package:
            reason = tool.install_hint or f"{tool.command} not found"
            if tool.required:
                return UnitResult.failed_with("tool", tool.id, f"{tool.command} is required. {reason}")
            return UnitResult.skipped("tool", tool.id, reason=reason)

        pm = self._package_manager
        if not pm.is_available():
            return UnitResult.skipped("tool", tool.id, reason=f"{pm.name} is not available")

        optional = "" if tool.required else " (optional)"
        label = tool.description or tool.id
        if not self._confirmer.confirm(f"Install {label} ({tool.package})?{optional}", default=tool.required):
            return UnitResult.skipped("tool", tool.id, reason="declined")

        receipt = pm.install(tool.package)
        if receipt.ok:
            logger.info("Installed %s", tool.package)
            return UnitResult.installed("tool", tool.id, reason=tool.package)
        if receipt.status == "skipped":
            return UnitResult.skipped("tool", tool.id, reason=receipt.output)
        return UnitResult.failed_with("tool", tool.id, receipt.error or "install failed")
