"""
Tests for shell detection and config path resolution.
"""

from pathlib import Path

import pytest

from aisetup.core.models import ShellKind
from aisetup.core.services.shell_profile import ShellProfileLocator


class TestShellDetection:
    """Tests for ShellProfileLocator.detect_kind."""

    @pytest.mark.parametrize(
        "shell, kind",
        [
            ("/bin/zsh", ShellKind.ZSH),
            ("/usr/local/bin/bash", ShellKind.BASH),
            ("/opt/homebrew/bin/fish", ShellKind.FISH),
            ("/bin/sh", ShellKind.POSIX_SH),
        ],
    )
    def test_login_shell(self, home: Path, shell: str, kind: ShellKind):
        assert ShellProfileLocator(home, environ={"SHELL": shell}).detect_kind() is kind

    def test_unknown_login_shell_falls_back_to_version_markers(self, home: Path):
        env = {"SHELL": "/usr/bin/nu", "ZSH_VERSION": "5.9"}
        assert ShellProfileLocator(home, environ=env).detect_kind() is ShellKind.ZSH

    def test_no_shell_uses_bash_version(self, home: Path):
        env = {"BASH_VERSION": "5.2"}
        assert ShellProfileLocator(home, environ=env).detect_kind() is ShellKind.BASH

    def test_nothing_known(self, home: Path):
        assert ShellProfileLocator(home, environ={}).detect_kind() is ShellKind.UNKNOWN


class TestConfigPaths:
    """Tests for ShellProfileLocator.resolve."""

    def test_zsh(self, home: Path):
        profile = ShellProfileLocator(home, environ={"SHELL": "/bin/zsh"}).resolve()
        assert profile.primary_config_path == home / ".zshrc"
        assert profile.alias_path == home / ".zshrc"
        assert profile.detected is True

    def test_bash_linux(self, home: Path):
        (home / ".bash_profile").write_text("")
        locator = ShellProfileLocator(home, environ={"SHELL": "/bin/bash"}, platform="linux")
        assert locator.resolve().primary_config_path == home / ".bashrc"

    def test_bash_macos_prefers_existing_bash_profile(self, home: Path):
        (home / ".bash_profile").write_text("")
        locator = ShellProfileLocator(home, environ={"SHELL": "/bin/bash"}, platform="darwin")
        assert locator.resolve().primary_config_path == home / ".bash_profile"

    def test_bash_macos_without_bash_profile(self, home: Path):
        locator = ShellProfileLocator(home, environ={"SHELL": "/bin/bash"}, platform="darwin")
        assert locator.resolve().primary_config_path == home / ".bashrc"

    def test_fish(self, home: Path):
        profile = ShellProfileLocator(home, environ={"SHELL": "/usr/bin/fish"}).resolve()
        assert profile.primary_config_path == home / ".config" / "fish" / "config.fish"

    def test_unknown_defaults_to_profile(self, home: Path):
        profile = ShellProfileLocator(home, environ={}).resolve()
        assert profile.shell_kind is ShellKind.UNKNOWN
        assert profile.primary_config_path == home / ".profile"
        assert profile.detected is False

    def test_resolve_is_memoized(self, home: Path):
        env = {"SHELL": "/bin/zsh"}
        locator = ShellProfileLocator(home, environ=env)
        first = locator.resolve()
        env["SHELL"] = "/bin/bash"
        assert locator.resolve() is first


class TestSecondaryAliasFile:
    """Tests for separate aliases file detection."""

    def test_sourced_aliases_file(self, home: Path):
        (home / ".zshrc").write_text("[ -f ~/.aliases ] && source ~/.aliases\n")
        (home / ".aliases").write_text("alias ll='ls -l'\n")
        profile = ShellProfileLocator(home, environ={"SHELL": "/bin/zsh"}).resolve()
        assert profile.secondary_alias_path == home / ".aliases"
        assert profile.alias_path == home / ".aliases"
        assert profile.primary_config_path == home / ".zshrc"

    def test_dot_include_of_alias_file(self, home: Path):
        (home / ".bashrc").write_text('. "$HOME/.alias"\n')
        (home / ".alias").write_text("")
        profile = ShellProfileLocator(home, environ={"SHELL": "/bin/bash"}, platform="linux").resolve()
        assert profile.secondary_alias_path == home / ".alias"

    def test_not_sourced_is_ignored(self, home: Path):
        (home / ".zshrc").write_text("# nothing here\n")
        (home / ".aliases").write_text("")
        profile = ShellProfileLocator(home, environ={"SHELL": "/bin/zsh"}).resolve()
        assert profile.secondary_alias_path is None

    def test_sourced_but_missing_is_ignored(self, home: Path):
        (home / ".zshrc").write_text("source ~/.aliases\n")
        profile = ShellProfileLocator(home, environ={"SHELL": "/bin/zsh"}).resolve()
        assert profile.secondary_alias_path is None

    def test_aliases_source_does_not_select_alias_file(self, home: Path):
        (home / ".zshrc").write_text("source ~/.aliases\n")
        (home / ".alias").write_text("")
        profile = ShellProfileLocator(home, environ={"SHELL": "/bin/zsh"}).resolve()
        assert profile.secondary_alias_path is None
