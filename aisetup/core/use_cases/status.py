"""
Status use case — ground-truth view of the machine, no mutation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from aisetup.core.config.desired import build_desired_state
from aisetup.core.config.loader import ConfigError, find_config_file, load_config
from aisetup.core.engine.reconciler import ProbedUnit, summarize
from aisetup.core.models.profile import ShellProfile
from aisetup.core.persistence.registry_store import RegistryStore
from aisetup.core.use_cases.setup import Collaborators, build_context, real_collaborators


@dataclass
class StatusResult:
    """Probed state of every managed unit."""

    profile: ShellProfile | None = None
    units: list[ProbedUnit] = field(default_factory=list)
    registry_path: Path | None = None
    registry_entries: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def present_count(self) -> int:
        return sum(1 for u in self.units if u.present)

    def by_kind(self, kind: str) -> list[ProbedUnit]:
        return [u for u in self.units if u.kind == kind]

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["profile"] = self.profile.to_dict() if self.profile else None
        result["units"] = [u.to_dict() for u in self.units]
        result["registry"] = {
            "path": str(self.registry_path) if self.registry_path else None,
            "enabled": self.registry_entries,
        }
        result["summary"] = {"total": len(self.units), "present": self.present_count}
        return result


def get_status(
    home: Path,
    config_path: Path | None = None,
    collaborators: Collaborators | None = None,
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> StatusResult:
    result = StatusResult()

    try:
        config = load_config(find_config_file(config_path, home=home, environ=environ))
        desired = build_desired_state(config, home)
    except ConfigError as e:
        result.error = str(e)
        return result

    ctx = build_context(
        home,
        desired,
        collaborators or real_collaborators(environ),
        environ=environ,
        platform=platform,
    )
    registry = RegistryStore(desired.registry_path)

    result.profile = ctx.profile
    result.units = summarize(desired, ctx.probe, registry)
    result.registry_path = registry.path
    result.registry_entries = registry.entries()
    return result
