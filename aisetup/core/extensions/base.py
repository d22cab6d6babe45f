"""
Extension base — what every extension must supply.

The ExtensionInstaller is generic over this interface. Adding an
extension means writing a subclass (or instantiating an existing one
with different parameters); the installer's control flow never changes.

An extension is installed only when ALL of its marker artifacts exist.
A partial install counts as not installed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from aisetup.adapters.base import PackageManager
from aisetup.adapters.shell.command import CommandRunner
from aisetup.core.models.result import Receipt


@dataclass(frozen=True)
class ExtensionContext:
    """Everything an install action may touch."""

    home: Path
    runner: CommandRunner
    package_manager: PackageManager | None = None
    force: bool = False

    @property
    def claude_dir(self) -> Path:
        return self.home / ".claude"


class Extension(ABC):
    """Abstract base class for extensions.

    To create a new extension:
        1. Subclass Extension
        2. Implement name, markers, install
        3. Add an instance to the desired state
    """

    display_name: str = ""
    tags: tuple[str, ...] = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry id (e.g., 'custom-commands')."""

    @abstractmethod
    def markers(self, home: Path) -> list[Path]:
        """Files/directories that must all exist once installed."""

    @abstractmethod
    def install(self, ctx: ExtensionContext) -> Receipt:
        """Copy or generate the marker artifacts.

        MUST never raise. Failures are captured in the Receipt; a
        'skipped' receipt means a precondition is missing.
        """

    @property
    def label(self) -> str:
        return self.display_name or self.name

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
