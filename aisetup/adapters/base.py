"""
Adapter base — the protocol contract between engine and the outside world.

The engine only talks to package managers, prompts and the running
shell session through these interfaces, never directly. Each has a
real implementation and a test double.

Adapters NEVER raise for expected failures. Package-manager actions
return a Receipt; probes return plain booleans.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from aisetup.core.models.result import Receipt


class PackageManager(ABC):
    """Global package install/probe collaborator.

    Both operations are opaque: the engine does not retry and does not
    inspect anything beyond success or failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The package manager identifier (e.g., 'npm')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package manager itself can be invoked.

        Should be fast and never raise.
        """

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        """Whether ``package`` has a global install record."""

    @abstractmethod
    def install(self, package: str) -> Receipt:
        """Install ``package`` globally.

        MUST never raise. Failures are captured in the Receipt.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class Prompter(ABC):
    """Interactive yes/no and secret-input collaborator."""

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def secret(self, question: str) -> str:
        """Ask for a value without echoing it. Empty string means none."""


class SessionAliasLookup(ABC):
    """Read-only view of the aliases active in the user's shell session.

    The engine never writes through this interface.
    """

    @abstractmethod
    def names(self) -> set[str]:
        """All alias names currently defined in the session."""

    def has(self, alias_id: str) -> bool:
        return alias_id in self.names()
