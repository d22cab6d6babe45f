"""
npm package manager adapter.

The AI CLIs are distributed as global npm packages. Only two
operations are needed: "is package X globally installed" and
"install package X globally".
"""

from __future__ import annotations

import logging

from aisetup.adapters.base import PackageManager
from aisetup.adapters.shell.command import CommandRunner
from aisetup.core.models.result import Receipt

logger = logging.getLogger(__name__)


class NpmPackageManager(PackageManager):
    """Global npm installs.

    ``is_installed`` uses ``npm list -g --depth=0 <pkg>``, which exits
    non-zero when the package is absent.
    """

    def __init__(self, runner: CommandRunner | None = None, executable: str = "npm"):
        self._runner = runner or CommandRunner()
        self._executable = executable

    @property
    def name(self) -> str:
        return self._executable

    def is_available(self) -> bool:
        return self._runner.is_available(self._executable)

    def is_installed(self, package: str) -> bool:
        if not self.is_available():
            return False
        receipt = self._runner.run(
            [self._executable, "list", "-g", "--depth=0", package],
            action_id=f"list:{package}",
            timeout=60,
        )
        return receipt.ok

    def install(self, package: str) -> Receipt:
        if not self.is_available():
            return Receipt.skip(
                self.name, f"install:{package}", reason=f"{self._executable} is not installed"
            )
        logger.info("Installing %s globally via %s", package, self._executable)
        receipt = self._runner.run(
            [self._executable, "install", "-g", package],
            action_id=f"install:{package}",
            timeout=600,
        )
        if receipt.failed:
            logger.warning("Install of %s failed: %s", package, receipt.error)
        return receipt
