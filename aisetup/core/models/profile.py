"""
ShellProfile — the resolved persistent configuration target for a run.

Resolved once per run by the ShellProfileLocator and then treated as
read-only by every component that mutates shell configuration.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel


class ShellKind(str, Enum):
    """Shell families the engine knows how to write configuration for."""

    POSIX_SH = "posix-sh"
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    UNKNOWN = "unknown"

    @property
    def is_fish(self) -> bool:
        return self is ShellKind.FISH


class ShellProfile(BaseModel):
    """Where environment variables and aliases are persisted.

    EnvVar mutations always target ``primary_config_path``. Alias
    mutations target the secondary aliases file when the primary config
    sources one, otherwise the primary config.
    """

    model_config = {"frozen": True}

    shell_kind: ShellKind = ShellKind.UNKNOWN
    primary_config_path: Path
    secondary_alias_path: Path | None = None
    detected: bool = True  # False when the kind fell back to a default

    @property
    def alias_path(self) -> Path:
        """The authoritative file for alias mutations."""
        return self.secondary_alias_path or self.primary_config_path

    def to_dict(self) -> dict:
        return {
            "shell_kind": self.shell_kind.value,
            "primary_config_path": str(self.primary_config_path),
            "secondary_alias_path": (
                str(self.secondary_alias_path) if self.secondary_alias_path else None
            ),
            "alias_path": str(self.alias_path),
            "detected": self.detected,
        }
