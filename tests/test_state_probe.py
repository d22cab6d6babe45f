"""
Tests for the StateProbe — read-only presence checks.
"""

from pathlib import Path

from aisetup.adapters.mock import MockPackageManager
from aisetup.core.extensions import CommandExtension
from aisetup.core.models import Alias, EnvVar, ShellKind, ShellProfile, Tool


class TestToolProbe:
    """Tool presence: PATH OR package-manager record."""

    def test_on_path(self, bash_profile, make_probe):
        probe = make_probe(bash_profile, executables={"claude"})
        assert probe.check(Tool(id="claude", package="@anthropic-ai/claude-code"))

    def test_package_record_only(self, bash_profile, make_probe):
        pm = MockPackageManager(installed={"@google/gemini-cli"})
        probe = make_probe(bash_profile, package_manager=pm)
        tool = Tool(id="gemini", package="@google/gemini-cli")
        assert probe.check(tool)
        assert probe.where(tool) == "mock-npm:@google/gemini-cli"

    def test_absent(self, bash_profile, make_probe):
        probe = make_probe(bash_profile)
        assert not probe.check(Tool(id="codex", package="@openai/codex"))

    def test_package_manager_unavailable(self, bash_profile, make_probe):
        pm = MockPackageManager(available=False, installed={"@openai/codex"})
        probe = make_probe(bash_profile, package_manager=pm)
        assert not probe.check(Tool(id="codex", package="@openai/codex"))


class TestEnvVarProbe:
    def test_present_in_primary_config(self, home: Path, bash_profile, make_probe):
        (home / ".bashrc").write_text('export ANTHROPIC_API_KEY="sk"\n')
        assert make_probe(bash_profile).check(EnvVar(id="ANTHROPIC_API_KEY"))

    def test_other_syntax_does_not_count(self, home: Path, make_probe):
        path = home / ".config" / "fish" / "config.fish"
        path.parent.mkdir(parents=True)
        path.write_text('export ANTHROPIC_API_KEY="sk"\n')
        profile = ShellProfile(shell_kind=ShellKind.FISH, primary_config_path=path)
        assert not make_probe(profile).check(EnvVar(id="ANTHROPIC_API_KEY"))

    def test_missing_config(self, bash_profile, make_probe):
        assert not make_probe(bash_profile).check(EnvVar(id="ANTHROPIC_API_KEY"))


class TestAliasProbe:
    """Alias presence: session, then config, then alternate files."""

    alias = Alias(id="yolo", desired_value="claude --dangerously-skip-permissions")

    def test_session_alias(self, bash_profile, make_probe):
        probe = make_probe(bash_profile, session={"yolo"})
        assert probe.where(self.alias) == "session"

    def test_config_alias(self, home: Path, bash_profile, make_probe):
        (home / ".bashrc").write_text('alias yolo="claude"\n')
        assert make_probe(bash_profile).where(self.alias) == str(home / ".bashrc")

    def test_alternate_alias_file(self, home: Path, bash_profile, make_probe):
        (home / ".bash_aliases").write_text('alias yolo="claude"\n')
        assert make_probe(bash_profile).where(self.alias) == str(home / ".bash_aliases")

    def test_absent(self, home: Path, bash_profile, make_probe):
        (home / ".bashrc").write_text('alias yolo-old="claude"\n# alias yolo="x"\n')
        assert not make_probe(bash_profile).check(self.alias)

    def test_alias_in_file_ignores_session(self, home: Path, bash_profile, make_probe):
        probe = make_probe(bash_profile, session={"yolo"})
        assert probe.check(self.alias)
        assert not probe.alias_in_file(home / ".bashrc", "yolo")


class TestExtensionProbe:
    """Extension presence requires ALL marker artifacts."""

    def _extension(self) -> CommandExtension:
        return CommandExtension("demo", ["demo-install"], [".claude/A.md", ".claude/B.md", ".claude/cmds"])

    def test_all_markers(self, home: Path, bash_profile, make_probe):
        (home / ".claude" / "cmds").mkdir(parents=True)
        (home / ".claude" / "A.md").write_text("")
        (home / ".claude" / "B.md").write_text("")
        assert make_probe(bash_profile).check(self._extension())

    def test_partial_install_is_absent(self, home: Path, bash_profile, make_probe):
        (home / ".claude" / "cmds").mkdir(parents=True)
        (home / ".claude" / "A.md").write_text("")
        probe = make_probe(bash_profile)
        assert not probe.check(self._extension())
        assert probe.missing_markers(self._extension()) == [home / ".claude" / "B.md"]

    def test_probe_never_raises(self, bash_profile, make_probe):
        class Broken(CommandExtension):
            def markers(self, home):
                raise PermissionError("denied")

        assert make_probe(bash_profile).check(Broken("x", [], [])) is False
