"""
Shared test fixtures and configuration.

Nothing here touches a real shell, npm or the network: every external
collaborator is a double from ``aisetup.adapters.mock``.
"""

from pathlib import Path

import pytest

from aisetup.adapters.mock import MockCommandRunner, MockPackageManager, ScriptedPrompter
from aisetup.adapters.prompt import Confirmer
from aisetup.adapters.session import StaticSessionAliases
from aisetup.core import context
from aisetup.core.models import ShellKind, ShellProfile
from aisetup.core.services.state_probe import StateProbe
from aisetup.core.use_cases.setup import Collaborators


@pytest.fixture(autouse=True)
def _reset_context():
    yield
    context.reset()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def bash_env() -> dict[str, str]:
    return {"SHELL": "/bin/bash"}


@pytest.fixture
def bash_profile(home: Path) -> ShellProfile:
    return ShellProfile(shell_kind=ShellKind.BASH, primary_config_path=home / ".bashrc")


@pytest.fixture
def make_probe(home: Path):
    """Factory for a StateProbe over ``home`` with controllable signals."""

    def _make(
        profile: ShellProfile,
        session: set[str] | None = None,
        executables: set[str] | None = None,
        package_manager: MockPackageManager | None = None,
    ) -> StateProbe:
        runner = MockCommandRunner(available=executables or set())
        return StateProbe(
            profile,
            home,
            session=StaticSessionAliases(session or set()),
            package_manager=package_manager or MockPackageManager(),
            which=runner.which,
        )

    return _make


@pytest.fixture
def forced() -> Confirmer:
    """A forced-mode confirmer whose prompter fails the test if consulted."""
    return Confirmer(ScriptedPrompter(strict=True), force=True)


@pytest.fixture
def make_collaborators():
    """Factory for a full set of run collaborators."""

    def _make(
        executables: set[str] | None = None,
        installed_packages: set[str] | None = None,
        session: set[str] | None = None,
        prompter: ScriptedPrompter | None = None,
        npm_available: bool = True,
    ) -> Collaborators:
        return Collaborators(
            runner=MockCommandRunner(available=executables or set()),
            package_manager=MockPackageManager(
                available=npm_available, installed=installed_packages or ()
            ),
            session=StaticSessionAliases(session or set()),
            prompter=prompter or ScriptedPrompter(strict=True),
        )

    return _make


@pytest.fixture
def with_superclaude(home: Path):
    """Make a mocked SuperClaude installer create its marker files."""
    from aisetup.core.config.defaults import SUPERCLAUDE_MARKERS

    def _create():
        for rel in SUPERCLAUDE_MARKERS:
            path = home / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if rel.endswith(".md"):
                path.write_text("# generated\n")
            else:
                path.mkdir(exist_ok=True)

    def _wire(collaborators: Collaborators) -> Collaborators:
        collaborators.runner.on_run("SuperClaude", _create)
        return collaborators

    return _wire
