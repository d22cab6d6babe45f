"""
Mock adapters — test doubles for every external collaborator.

Used by the test suite and by ``aisetup setup --mock``, which
simulates package installs and installer commands without touching
npm or the network. Shell configuration and the registry are still
written for real.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from aisetup.adapters.base import PackageManager, Prompter
from aisetup.adapters.shell.command import CommandRunner
from aisetup.core.models.result import Receipt


class MockPackageManager(PackageManager):
    """In-memory package manager.

    By default every install succeeds and is remembered, so a later
    ``is_installed`` reports it.
    """

    def __init__(
        self,
        available: bool = True,
        installed: Iterable[str] = (),
        failing: Iterable[str] = (),
    ):
        self._available = available
        self._installed = set(installed)
        self._failing = set(failing)
        self._call_log: list[str] = []

    @property
    def name(self) -> str:
        return "mock-npm"

    @property
    def call_log(self) -> list[str]:
        """Packages ``install`` was called for, in order."""
        return self._call_log

    @property
    def installed(self) -> set[str]:
        return set(self._installed)

    def is_available(self) -> bool:
        return self._available

    def is_installed(self, package: str) -> bool:
        return self._available and package in self._installed

    def set_failure(self, package: str) -> None:
        self._failing.add(package)

    def install(self, package: str) -> Receipt:
        self._call_log.append(package)
        if not self._available:
            return Receipt.skip(self.name, f"install:{package}", reason="mock-npm unavailable")
        if package in self._failing:
            return Receipt.failure(self.name, f"install:{package}", error="Mock failure")
        self._installed.add(package)
        return Receipt.success(
            self.name,
            f"install:{package}",
            output=f"[mock] installed {package}",
            metadata={"mock": True},
        )


class ScriptedPrompter(Prompter):
    """Prompter that replays scripted answers.

    Args:
        answers: Yes/no answers consumed in order. When exhausted,
            ``default_answer`` is used.
        secrets: Secret values consumed in order ('' when exhausted).
        default_answer: Answer once the script runs out.
        strict: Raise on any prompt. For asserting that a run never
            asks anything.
    """

    def __init__(
        self,
        answers: Iterable[bool] = (),
        secrets: Iterable[str] = (),
        default_answer: bool = False,
        strict: bool = False,
    ):
        self._answers = list(answers)
        self._secrets = list(secrets)
        self._default = default_answer
        self._strict = strict
        self.questions: list[str] = []

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        if self._strict:
            raise AssertionError(f"Unexpected prompt: {question}")
        if self._answers:
            return self._answers.pop(0)
        return self._default

    def secret(self, question: str) -> str:
        self.questions.append(question)
        if self._strict:
            raise AssertionError(f"Unexpected prompt: {question}")
        if self._secrets:
            return self._secrets.pop(0)
        return ""


class MockCommandRunner(CommandRunner):
    """Command runner that never spawns a process.

    ``available`` lists the executables ``which`` resolves. None means
    the real PATH is consulted. Side effects of a real installer can
    be simulated with ``on_run``.

    With ``dry_run`` every command without a configured response is
    reported skipped, since nothing it would produce exists afterwards.
    This is what ``aisetup setup --mock`` uses.
    """

    def __init__(self, available: Iterable[str] | None = None, dry_run: bool = False):
        super().__init__()
        self._dry_run = dry_run
        self._available = set(available) if available is not None else None
        self._responses: dict[str, Receipt] = {}
        self._effects: dict[str, Callable[[], None]] = {}
        self._call_log: list[list[str]] = []

    @property
    def call_log(self) -> list[list[str]]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def which(self, executable: str) -> str | None:
        if self._available is None:
            return super().which(executable)
        if executable in self._available:
            return str(Path("/mock/bin") / executable)
        return None

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self._responses[action_id] = Receipt.failure(self.name, action_id, error=error)

    def on_run(self, action_id: str, effect: Callable[[], None]) -> None:
        """Run ``effect`` whenever ``action_id`` succeeds."""
        self._effects[action_id] = effect

    def run(
        self,
        cmd: list[str],
        *,
        action_id: str = "",
        timeout: int | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Receipt:
        action_id = action_id or (cmd[0] if cmd else "")
        self._call_log.append(list(cmd))

        if action_id in self._responses:
            receipt = self._responses[action_id]
        elif self._dry_run:
            receipt = Receipt.skip(
                self.name,
                action_id,
                reason=f"[mock] not run: {' '.join(cmd)}",
                metadata={"mock": True},
            )
        else:
            receipt = Receipt.success(
                self.name,
                action_id,
                output=f"[mock] {' '.join(cmd)}",
                metadata={"mock": True},
            )

        if receipt.ok and action_id in self._effects:
            self._effects[action_id]()
        return receipt
