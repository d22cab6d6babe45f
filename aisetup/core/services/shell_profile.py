"""
Shell profile locator — which shell is active and which file to edit.

Detection order:

    1. $SHELL (the login shell) matched by its last path component
    2. $ZSH_VERSION / $BASH_VERSION runtime markers
    3. fall back to a generic POSIX profile (~/.profile)

Detection never fails: whatever happens, a run ends up with one valid
target path. The result is memoized so every component of a run sees
the same profile.

A separate aliases file (~/.aliases or ~/.alias) becomes the alias
target when the primary config sources it and the file exists.
Environment variables always go to the primary config.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Mapping
from pathlib import Path

from aisetup.core.models.profile import ShellKind, ShellProfile

logger = logging.getLogger(__name__)

_SHELL_NAMES: tuple[tuple[str, ShellKind], ...] = (
    ("zsh", ShellKind.ZSH),
    ("bash", ShellKind.BASH),
    ("fish", ShellKind.FISH),
    ("sh", ShellKind.POSIX_SH),
)

# Checked in order; the first sourced-and-existing file wins.
SECONDARY_ALIAS_FILES = (".aliases", ".alias")


def _source_pattern(filename: str) -> re.Pattern[str]:
    # `source ~/.aliases`, `. "$HOME/.aliases"`, `[ -f x ] && source x`
    return re.compile(rf"(?:^|[\s;&|])(?:source|\.)\s+\S*{re.escape(filename)}\b")


class ShellProfileLocator:
    """Resolve the ShellProfile for a run.

    Args:
        home: Home directory whose dotfiles are managed.
        environ: Environment to read $SHELL and version markers from.
        platform: ``sys.platform`` override (tests).
    """

    def __init__(
        self,
        home: Path,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
    ):
        self._home = home
        self._environ = os.environ if environ is None else environ
        self._platform = platform or sys.platform
        self._profile: ShellProfile | None = None

    def resolve(self) -> ShellProfile:
        """Return the profile, detecting it on first call only."""
        if self._profile is None:
            self._profile = self._detect()
            logger.info(
                "Shell: %s, config: %s, aliases: %s",
                self._profile.shell_kind.value,
                self._profile.primary_config_path,
                self._profile.alias_path,
            )
        return self._profile

    def detect_kind(self) -> ShellKind:
        shell = self._environ.get("SHELL", "")
        if shell:
            basename = shell.rstrip("/").rsplit("/", 1)[-1]
            for shell_name, kind in _SHELL_NAMES:
                if basename == shell_name:
                    return kind

        if self._environ.get("ZSH_VERSION"):
            return ShellKind.ZSH
        if self._environ.get("BASH_VERSION"):
            return ShellKind.BASH
        return ShellKind.UNKNOWN

    def config_path(self, kind: ShellKind) -> Path:
        home = self._home
        if kind is ShellKind.ZSH:
            return home / ".zshrc"
        if kind is ShellKind.BASH:
            bash_profile = home / ".bash_profile"
            if self._platform == "darwin" and _exists(bash_profile):
                return bash_profile
            return home / ".bashrc"
        if kind is ShellKind.FISH:
            return home / ".config" / "fish" / "config.fish"
        return home / ".profile"

    def secondary_alias_path(self, kind: ShellKind, primary: Path) -> Path | None:
        if kind.is_fish:
            return None
        try:
            text = primary.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

        for filename in SECONDARY_ALIAS_FILES:
            candidate = self._home / filename
            if _exists(candidate) and _source_pattern(filename).search(text):
                logger.debug("Detected separate aliases file: %s", candidate)
                return candidate
        return None

    def _detect(self) -> ShellProfile:
        kind = self.detect_kind()
        detected = kind is not ShellKind.UNKNOWN
        if not detected:
            logger.warning("Could not determine shell, defaulting to %s", self._home / ".profile")

        primary = self.config_path(kind)
        return ShellProfile(
            shell_kind=kind,
            primary_config_path=primary,
            secondary_alias_path=self.secondary_alias_path(kind, primary),
            detected=detected,
        )


def _exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False
