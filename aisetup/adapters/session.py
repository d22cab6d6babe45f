"""
Session alias lookup — which aliases the user's shell currently defines.

A Python process cannot see the aliases of its parent shell, so the
real implementation spawns the login shell once in interactive mode
(so its rc files are sourced) and parses the output of ``alias``.
The result is memoized for the run.
"""

from __future__ import annotations

import logging
import os

from aisetup.adapters.base import SessionAliasLookup
from aisetup.adapters.shell.command import CommandRunner
from aisetup.core.services.shell_syntax import parse_alias_listing

logger = logging.getLogger(__name__)


class ShellSessionAliases(SessionAliasLookup):
    """Aliases reported by ``$SHELL -i -c alias``."""

    def __init__(
        self,
        shell: str | None = None,
        runner: CommandRunner | None = None,
        timeout: int = 10,
    ):
        self._shell = shell if shell is not None else os.environ.get("SHELL", "")
        self._runner = runner or CommandRunner()
        self._timeout = timeout
        self._names: set[str] | None = None

    def names(self) -> set[str]:
        if self._names is None:
            self._names = self._load()
        return self._names

    def _load(self) -> set[str]:
        if not self._shell:
            logger.debug("No login shell known, session aliases unavailable")
            return set()

        receipt = self._runner.run(
            [self._shell, "-i", "-c", "alias"],
            action_id="session-aliases",
            timeout=self._timeout,
        )
        if not receipt.ok:
            logger.debug("Could not list session aliases: %s", receipt.error)
            return set()

        names = parse_alias_listing(receipt.output)
        logger.debug("Session defines %d aliases", len(names))
        return names


class StaticSessionAliases(SessionAliasLookup):
    """A fixed alias set, for tests and non-interactive runs."""

    def __init__(self, names: set[str] | list[str] | None = None):
        self._names = set(names or ())

    def names(self) -> set[str]:
        return set(self._names)
