"""Adapters — bindings for the external collaborators of the engine.

Public re-exports for convenient access.
"""

from aisetup.adapters.base import PackageManager, Prompter, SessionAliasLookup
from aisetup.adapters.mock import MockCommandRunner, MockPackageManager, ScriptedPrompter
from aisetup.adapters.prompt import AutoApprovePrompter, ClickPrompter, Confirmer

__all__ = [
    "AutoApprovePrompter",
    "ClickPrompter",
    "Confirmer",
    "MockCommandRunner",
    "MockPackageManager",
    "PackageManager",
    "Prompter",
    "ScriptedPrompter",
    "SessionAliasLookup",
]
