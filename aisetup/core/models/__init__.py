"""
Domain models — Pydantic types for the setup engine.

All models are re-exported here for convenient access:

    from aisetup.core.models import Tool, EnvVar, Alias, ShellProfile, UnitResult
"""

from aisetup.core.models.profile import ShellKind, ShellProfile
from aisetup.core.models.result import Receipt, UnitResult
from aisetup.core.models.units import Alias, AliasMigration, EnvVar, Tool

__all__ = [
    # units.py
    "Alias",
    "AliasMigration",
    "EnvVar",
    # result.py
    "Receipt",
    # profile.py
    "ShellKind",
    "ShellProfile",
    "Tool",
    "UnitResult",
]
