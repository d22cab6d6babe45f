"""
Extension installer — generic over the Extension interface.

    present, not forced   → mark enabled, AlreadyPresent
    absent, or forced     → confirm (interactive), run install action
        install ok        → re-check markers, then mark enabled, Installed
        markers missing   → Failed, registry untouched
        user declined     → Skipped, registry untouched
        precondition gone → Skipped, registry untouched
        install failed    → Failed(reason), registry untouched

Marking an already-present extension enabled covers artifacts the
user installed by hand. A failed install never marks the extension
enabled, so the registry cannot claim a half-installed extension.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from aisetup.adapters.prompt import Confirmer
from aisetup.core.extensions.base import Extension, ExtensionContext
from aisetup.core.models.result import UnitResult
from aisetup.core.persistence.registry_store import RegistryStore
from aisetup.core.services.state_probe import StateProbe

logger = logging.getLogger(__name__)


class ExtensionInstaller:
    def __init__(
        self,
        extensions: Iterable[Extension],
        probe: StateProbe,
        registry: RegistryStore,
        confirmer: Confirmer,
        context: ExtensionContext,
    ):
        self._extensions = {e.name: e for e in extensions}
        self._probe = probe
        self._registry = registry
        self._confirmer = confirmer
        self._context = context

    def ensure(self, extension_id: str, force: bool = False) -> UnitResult:
        extension = self._extensions.get(extension_id)
        if extension is None:
            return UnitResult.failed_with("extension", extension_id, "unknown extension")

        present = self._probe.check(extension)
        if present and not force:
            return self._mark_enabled(extension_id, UnitResult.already_present("extension", extension_id))

        if not present:
            missing = self._probe.missing_markers(extension)
            logger.info("%s not installed (%d artifacts missing)", extension.label, len(missing))

        verb = "Reinstall" if present else "Install"
        if not self._confirmer.confirm(f"{verb} {extension.label}?", default=True):
            return UnitResult.skipped("extension", extension_id, reason="declined")

        try:
            receipt = extension.install(self._context)
        except Exception as e:
            logger.exception("%s install action raised", extension.label)
            return UnitResult.failed_with("extension", extension_id, f"install error: {e}")

        if receipt.ok:
            missing = self._probe.missing_markers(extension)
            if missing:
                logger.warning(
                    "%s installer succeeded but %d artifacts are missing (first: %s)",
                    extension.label, len(missing), missing[0],
                )
                return UnitResult.failed_with(
                    "extension",
                    extension_id,
                    f"installer succeeded but {len(missing)} artifacts missing",
                )
            return self._mark_enabled(
                extension_id,
                UnitResult.installed("extension", extension_id, reason=receipt.output),
            )
        if receipt.status == "skipped":
            return UnitResult.skipped("extension", extension_id, reason=receipt.output)
        return UnitResult.failed_with("extension", extension_id, receipt.error or "install failed")

    def _mark_enabled(self, extension_id: str, result: UnitResult) -> UnitResult:
        try:
            self._registry.add(extension_id)
        except OSError as e:
            logger.error("Cannot record %s in %s: %s", extension_id, self._registry.path, e)
            return UnitResult.failed_with(
                "extension", extension_id, f"installed but not recorded in registry: {e}"
            )
        return result
