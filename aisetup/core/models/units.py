"""
Managed units — the things the engine can check and install.

Units are constructed fresh for every run from the desired-state
definitions and compared against probed reality. They are never
persisted; ``installed`` is always derived by the StateProbe.

Extensions carry behaviour (marker artifacts, an install action) and
live in ``aisetup.core.extensions`` rather than here.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

_ALIAS_ID = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.:+-]*$")
_ENV_ID = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Tool(BaseModel):
    """An external CLI binary.

    ``package`` is the package-manager identifier used both as a second
    presence signal and as the install target. Tools without a package
    are check-only prerequisites.
    """

    model_config = {"frozen": True}

    kind: Literal["tool"] = "tool"
    id: str
    executable: str = ""
    package: str | None = None
    required: bool = True
    description: str = ""
    install_hint: str = ""

    @property
    def command(self) -> str:
        """Executable name to resolve on PATH."""
        return self.executable or self.id


class EnvVar(BaseModel):
    """A persisted environment variable.

    ``desired_value`` may be None for secrets; the value is then
    supplied at run time (config file, process environment or prompt).
    """

    model_config = {"frozen": True}

    kind: Literal["env"] = "env"
    id: str
    desired_value: str | None = None
    requires_tool: str | None = None
    description: str = ""
    help_url: str = ""
    secret: bool = True

    @field_validator("id")
    @classmethod
    def _valid_name(cls, v: str) -> str:
        if not _ENV_ID.match(v):
            raise ValueError(f"Invalid environment variable name: {v!r}")
        return v


class Alias(BaseModel):
    """A named shell shortcut bound to a command string."""

    model_config = {"frozen": True}

    kind: Literal["alias"] = "alias"
    id: str
    desired_value: str
    requires: list[str] = Field(default_factory=list)
    description: str = ""

    @field_validator("id")
    @classmethod
    def _valid_name(cls, v: str) -> str:
        if not _ALIAS_ID.match(v):
            raise ValueError(f"Invalid alias name: {v!r}")
        return v


class AliasMigration(BaseModel):
    """Rename of a deprecated alias id to its replacement.

    Migrating keeps the bound command verbatim and only changes the name.
    """

    model_config = {"frozen": True}

    old_id: str
    new_id: str

    def __str__(self) -> str:
        return f"{self.old_id} → {self.new_id}"
