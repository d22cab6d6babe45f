"""
Tests for the Reconciler and the setup/status use cases.

Every run here uses mock collaborators over a temporary home, so the
full flow (probe, install, edit shell config, registry) runs for real
against the filesystem without touching npm or a shell.
"""

from pathlib import Path

import pytest

from aisetup.adapters.mock import MockCommandRunner, ScriptedPrompter
from aisetup.core.config.defaults import SUPERCLAUDE_PACKAGE
from aisetup.core.config.desired import build_desired_state
from aisetup.core.config.loader import SetupConfig
from aisetup.core.engine.reconciler import Reconciler, generate_run_id
from aisetup.core.persistence.audit import AuditWriter
from aisetup.core.use_cases.setup import build_context, run_setup
from aisetup.core.use_cases.status import get_status

ENV = {"SHELL": "/bin/bash"}
ALL_TOOLS = {"node", "npm", "tmux", "SuperClaude"}


def _run(home, collaborators, force=True, config=None, tmp_path=None):
    desired = build_desired_state(config or SetupConfig(), home)
    ctx = build_context(home, desired, collaborators, force=force, environ=ENV, platform="linux")
    return Reconciler(ctx).run()


def _by_id(report, kind):
    return {r.unit_id: r for r in report.results if r.kind == kind}


class TestForcedRun:
    """A forced run on a fresh machine converges without prompting."""

    def test_fresh_machine(self, home: Path, make_collaborators, with_superclaude):
        collaborators = with_superclaude(make_collaborators(executables=ALL_TOOLS))

        report = _run(home, collaborators)

        tools = _by_id(report, "tool")
        assert tools["node"].status == "present"
        assert {tools[t].status for t in ("claude", "gemini", "codex")} == {"installed"}

        extensions = _by_id(report, "extension")
        assert extensions["custom-commands"].status == "installed"
        assert extensions["SuperClaude"].status == "installed"
        registry = home / ".claude" / "enabled.yaml"
        assert registry.read_text() == "enabled:\n  - SuperClaude\n  - custom-commands\n"

        env = _by_id(report, "env")
        assert {r.status for r in env.values()} == {"skipped"}

        rc = (home / ".bashrc").read_text()
        assert "# AI Workflow Aliases" in rc
        assert 'alias yolo="claude --dangerously-skip-permissions"' in rc
        assert "alias reai-demo=" in rc

        assert report.failures == []
        assert report.status == "ok"

    def test_second_forced_run_keeps_shell_config(self, home: Path, make_collaborators, with_superclaude):
        _run(home, with_superclaude(make_collaborators(executables=ALL_TOOLS)))
        rc_before = (home / ".bashrc").read_bytes()
        registry_before = (home / ".claude" / "enabled.yaml").read_bytes()

        report = _run(
            home,
            with_superclaude(
                make_collaborators(executables=ALL_TOOLS | {"claude", "gemini", "codex"})
            ),
        )

        assert (home / ".bashrc").read_bytes() == rc_before
        assert (home / ".claude" / "enabled.yaml").read_bytes() == registry_before
        assert {r.status for r in _by_id(report, "alias").values()} == {"present"}
        # forced mode refreshes extensions
        assert _by_id(report, "extension")["custom-commands"].status == "installed"

    def test_missing_prerequisite_fails_but_run_continues(self, home: Path, make_collaborators):
        collaborators = make_collaborators(executables={"npm"})

        report = _run(home, collaborators)

        tools = _by_id(report, "tool")
        assert tools["node"].status == "failed"
        assert tools["tmux"].status == "skipped"
        aliases = _by_id(report, "alias")
        assert aliases["yolo"].status == "installed"
        assert aliases["ai"].status == "skipped"
        assert report.status == "partial"
        assert report.registry is not None

    def test_env_value_from_config(self, home: Path, make_collaborators):
        collaborators = make_collaborators(executables=ALL_TOOLS)
        config = SetupConfig(env={"ANTHROPIC_API_KEY": "sk-cfg"})

        report = _run(home, collaborators, config=config)

        assert _by_id(report, "env")["ANTHROPIC_API_KEY"].status == "installed"
        assert 'export ANTHROPIC_API_KEY="sk-cfg"' in (home / ".bashrc").read_text()


    def test_fresh_machine_enables_every_extension(self, home: Path, make_collaborators, with_superclaude):
        collaborators = with_superclaude(make_collaborators())

        report = _run(home, collaborators)

        extensions = _by_id(report, "extension")
        assert extensions["custom-commands"].status == "installed"
        assert extensions["SuperClaude"].status == "installed"
        assert SUPERCLAUDE_PACKAGE in collaborators.package_manager.call_log
        assert (home / ".claude" / "enabled.yaml").read_text() == (
            "enabled:\n  - SuperClaude\n  - custom-commands\n"
        )
        summary = {(u.kind, u.unit_id): u for u in report.summary}
        assert summary[("extension", "SuperClaude")].present
        assert summary[("extension", "SuperClaude")].enabled is True

    def test_installer_without_artifacts_is_not_enabled(self, home: Path, make_collaborators):
        report = _run(home, make_collaborators(executables=ALL_TOOLS))

        superclaude = _by_id(report, "extension")["SuperClaude"]
        assert superclaude.status == "failed"
        assert "4 artifacts missing" in superclaude.reason
        assert (home / ".claude" / "enabled.yaml").read_text() == "enabled:\n  - custom-commands\n"
        summary = {(u.kind, u.unit_id): u for u in report.summary}
        assert summary[("extension", "SuperClaude")].enabled is False

    def test_mock_mode_does_not_claim_installer_extensions(self, home: Path, make_collaborators):
        collaborators = make_collaborators(executables=ALL_TOOLS)
        collaborators.runner = MockCommandRunner(available=ALL_TOOLS, dry_run=True)

        report = _run(home, collaborators)

        superclaude = _by_id(report, "extension")["SuperClaude"]
        assert superclaude.status == "skipped"
        assert superclaude.reason.startswith("[mock] not run")
        assert "SuperClaude" not in (home / ".claude" / "enabled.yaml").read_text()


class TestInteractiveRun:
    def test_declining_everything_changes_nothing(self, home: Path, make_collaborators):
        (home / ".bashrc").write_text("# mine\n")
        prompter = ScriptedPrompter(default_answer=False)
        collaborators = make_collaborators(executables=ALL_TOOLS, prompter=prompter)

        report = _run(home, collaborators, force=False)

        assert (home / ".bashrc").read_text() == "# mine\n"
        assert report.count("installed") == 0
        assert prompter.questions

    def test_migration_and_cleanup(self, home: Path, make_collaborators):
        (home / ".bashrc").write_text('alias aiyolo="custom yolo"\nalias ai-codex="codex"\n')
        collaborators = make_collaborators(executables=ALL_TOOLS, prompter=ScriptedPrompter(default_answer=True))

        report = _run(home, collaborators, force=False)

        rc = (home / ".bashrc").read_text()
        assert 'alias ai-yolo="custom yolo"' in rc
        assert "ai-codex" not in rc
        assert "aiyolo" not in rc
        aliases = [r for r in report.results if r.kind == "alias"]
        assert any(r.unit_id == "ai-yolo" and "renamed" in r.reason for r in aliases)
        assert any(r.unit_id == "ai-codex" and r.reason == "removed (deprecated)" for r in aliases)


class TestRegistryRebuild:
    def test_rebuild_runs_every_time(self, home: Path, make_collaborators):
        registry = home / ".claude" / "enabled.yaml"
        registry.parent.mkdir()
        registry.write_text("enabled:\n- zeta\n  - alpha\n  - alpha\n<<<<<<< HEAD\n")

        report = _run(
            home,
            make_collaborators(prompter=ScriptedPrompter(default_answer=False)),
            force=False,
        )

        assert report.registry_recovered
        assert report.registry.dropped_lines == 1
        assert report.registry.duplicates == 1
        assert registry.read_text() == "enabled:\n  - alpha\n  - zeta\n"

    def test_corruption_is_reported_when_extensions_are_enabled(
        self, home: Path, make_collaborators, with_superclaude
    ):
        registry = home / ".claude" / "enabled.yaml"
        registry.parent.mkdir()
        registry.write_text("enabled:\n- zeta\n  - alpha\n  - alpha\n<<<<<<< HEAD\n")

        report = _run(home, with_superclaude(make_collaborators(executables=ALL_TOOLS)))

        assert _by_id(report, "extension")["SuperClaude"].status == "installed"
        assert report.registry_recovered
        assert report.registry.dropped_lines == 1
        assert report.registry.duplicates == 1
        assert report.to_dict()["registry"]["recovered"] is True
        assert registry.read_text() == (
            "enabled:\n  - SuperClaude\n  - alpha\n  - custom-commands\n  - zeta\n"
        )

    def test_clean_registry_is_not_reported(self, home: Path, make_collaborators, with_superclaude):
        registry = home / ".claude" / "enabled.yaml"
        registry.parent.mkdir()
        registry.write_text("enabled:\n  - alpha\n")

        report = _run(home, with_superclaude(make_collaborators(executables=ALL_TOOLS)))

        assert not report.registry_recovered
        assert report.registry.dropped_lines == 0


class TestUnexpectedErrors:
    def test_unit_exception_is_contained(self, home: Path, make_collaborators, monkeypatch):
        collaborators = make_collaborators(executables=ALL_TOOLS)
        desired = build_desired_state(SetupConfig(), home)
        ctx = build_context(home, desired, collaborators, force=True, environ=ENV, platform="linux")
        reconciler = Reconciler(ctx)

        def _boom(tool):
            raise RuntimeError("boom")

        monkeypatch.setattr(reconciler.tools, "ensure", _boom)
        report = reconciler.run()

        assert all(r.status == "failed" for r in _by_id(report, "tool").values())
        assert _by_id(report, "alias")["yolo"].status == "installed"
        assert report.registry is not None


class TestSummary:
    def test_summary_is_fresh_probe(self, home: Path, make_collaborators):
        report = _run(home, make_collaborators(executables=ALL_TOOLS))
        summary = {(u.kind, u.unit_id): u for u in report.summary}
        assert summary[("alias", "yolo")].present
        assert summary[("alias", "yolo")].where == str(home / ".bashrc")
        assert summary[("extension", "custom-commands")].enabled is True
        assert summary[("env", "ANTHROPIC_API_KEY")].present is False

    def test_report_dict(self, home: Path, make_collaborators):
        data = _run(home, make_collaborators(executables=ALL_TOOLS)).to_dict()
        assert data["mode"] == "forced"
        assert set(data["counts"]) == {"present", "installed", "skipped", "failed"}
        assert data["registry"]["recovered"] is False

    def test_run_ids_are_unique(self):
        assert generate_run_id() != generate_run_id()


class TestUseCases:
    def test_run_setup_writes_audit(self, home: Path, tmp_path: Path, make_collaborators, with_superclaude):
        audit = AuditWriter(path=tmp_path / "audit.ndjson")

        result = run_setup(
            home,
            force=True,
            collaborators=with_superclaude(make_collaborators(executables=ALL_TOOLS)),
            environ=ENV,
            platform="linux",
            audit=audit,
        )

        assert not result.failed
        entries = audit.read_all()
        assert len(entries) == 1
        assert entries[0].run_id == result.report.run_id
        assert entries[0].mode == "forced"
        assert entries[0].shell_kind == "bash"

    def test_run_setup_config_error_touches_nothing(self, home: Path, tmp_path: Path, make_collaborators):
        bad = tmp_path / "bad.yml"
        bad.write_text("unknown: 1\n")

        result = run_setup(
            home,
            config_path=bad,
            force=True,
            collaborators=make_collaborators(),
            environ=ENV,
            audit=AuditWriter(path=tmp_path / "audit.ndjson"),
        )

        assert result.failed
        assert "Invalid configuration" in result.error
        assert list(home.iterdir()) == []

    def test_status_is_read_only(self, home: Path, make_collaborators):
        (home / ".bashrc").write_text('alias yolo="x"\n')

        status = get_status(
            home,
            collaborators=make_collaborators(executables={"node"}),
            environ=ENV,
            platform="linux",
        )

        assert status.error is None
        units = {(u.kind, u.unit_id): u for u in status.units}
        assert units[("tool", "node")].present
        assert units[("alias", "yolo")].present
        assert status.registry_entries == []
        assert not (home / ".claude").exists()
        assert status.to_dict()["summary"]["present"] == status.present_count


@pytest.mark.parametrize("shell,target", [
    ("/usr/bin/zsh", ".zshrc"),
    ("/bin/sh", ".profile"),
])
def test_aliases_follow_shell(home: Path, make_collaborators, shell, target):
    desired = build_desired_state(SetupConfig(), home)
    ctx = build_context(
        home, desired, make_collaborators(executables=ALL_TOOLS), force=True,
        environ={"SHELL": shell}, platform="linux",
    )
    Reconciler(ctx).run()
    assert "alias yolo=" in (home / target).read_text()
