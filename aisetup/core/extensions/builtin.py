"""
Built-in extension kinds.

    CommandBundleExtension   copies a directory of ``*.md`` command
                             definitions into ``~/.claude/commands/``
    CommandExtension         runs an external installer command that
                             generates its own artifacts
"""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path

from aisetup.core.extensions.base import Extension, ExtensionContext
from aisetup.core.models.result import Receipt

logger = logging.getLogger(__name__)

_SOURCE = "extension"


class CommandBundleExtension(Extension):
    """Slash-command definitions copied from a source directory.

    Markers are the destination directory plus one file per source
    command, so removing any single command file makes the bundle
    count as not installed.
    """

    def __init__(
        self,
        name: str,
        source_dir: Path,
        *,
        display_name: str = "",
        tags: tuple[str, ...] = ("commands",),
        subdir: str = "commands",
    ):
        self._name = name
        self.source_dir = source_dir
        self.display_name = display_name
        self.tags = tags
        self._subdir = subdir

    @property
    def name(self) -> str:
        return self._name

    def source_files(self) -> list[Path]:
        try:
            return sorted(p for p in self.source_dir.glob("*.md") if p.is_file())
        except OSError:
            return []

    def destination(self, home: Path) -> Path:
        return home / ".claude" / self._subdir

    def markers(self, home: Path) -> list[Path]:
        dest = self.destination(home)
        return [dest] + [dest / src.name for src in self.source_files()]

    def install(self, ctx: ExtensionContext) -> Receipt:
        start = time.monotonic()
        files = self.source_files()
        if not files:
            return Receipt.failure(
                _SOURCE,
                self.name,
                error=f"No command files found in {self.source_dir}",
            )

        dest = self.destination(ctx.home)
        copied: list[str] = []
        try:
            dest.mkdir(parents=True, exist_ok=True)
            for src in files:
                shutil.copyfile(src, dest / src.name)
                copied.append(src.name)
        except OSError as e:
            return Receipt.failure(
                _SOURCE,
                self.name,
                error=f"Copy failed after {len(copied)}/{len(files)} files: {e}",
                metadata={"copied": copied},
            )

        logger.info("Copied %d command files to %s", len(copied), dest)
        return Receipt.success(
            _SOURCE,
            self.name,
            output=f"Copied {len(copied)} commands to {dest}",
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"copied": copied},
        )


class CommandExtension(Extension):
    """An extension with its own installer program.

    Args:
        name: Registry id.
        command: Installer argv. The first element must resolve on PATH.
        marker_paths: Artifacts relative to the home directory.
        installer_package: Package that provides ``command[0]``. Installed
            through the package manager when the installer is missing.
    """

    def __init__(
        self,
        name: str,
        command: list[str],
        marker_paths: list[str],
        *,
        display_name: str = "",
        tags: tuple[str, ...] = (),
        timeout: int = 600,
        installer_package: str | None = None,
    ):
        self._name = name
        self.command = list(command)
        self.marker_paths = list(marker_paths)
        self.installer_package = installer_package
        self.display_name = display_name
        self.tags = tags
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._name

    def markers(self, home: Path) -> list[Path]:
        return [home / rel for rel in self.marker_paths]

    def install(self, ctx: ExtensionContext) -> Receipt:
        if not self.command:
            return Receipt.failure(_SOURCE, self.name, error="No installer command configured")

        executable = self.command[0]
        if not ctx.runner.is_available(executable):
            blocked = self._provide_installer(ctx, executable)
            if blocked is not None:
                return blocked

        receipt = ctx.runner.run(
            self.command,
            action_id=self.name,
            timeout=self._timeout,
            cwd=ctx.home,
        )
        if receipt.failed:
            logger.warning("%s installer failed: %s", self.label, receipt.error)
        return receipt

    def _provide_installer(self, ctx: ExtensionContext, executable: str) -> Receipt | None:
        """Install the package providing ``executable``.

        Returns:
            None when the installer can now be run, otherwise the
            receipt to report.
        """
        pm = ctx.package_manager
        if not self.installer_package or pm is None or not pm.is_available():
            return Receipt.skip(_SOURCE, self.name, reason=f"{executable} is not installed")

        logger.info("Installing %s to provide %s", self.installer_package, executable)
        receipt = pm.install(self.installer_package)
        if receipt.ok:
            return None
        if receipt.failed:
            return Receipt.failure(
                _SOURCE,
                self.name,
                error=f"Cannot install {self.installer_package}: {receipt.error}",
            )
        return Receipt.skip(_SOURCE, self.name, reason=receipt.output or f"{executable} is not installed")
