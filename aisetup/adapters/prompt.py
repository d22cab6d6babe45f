"""
Prompt adapters and the run-wide confirmation gate.

Every mutating decision in a run goes through one ``Confirmer``. In
forced mode it answers yes immediately and the underlying prompter is
never touched, so a forced run performs no terminal I/O at all.
"""

from __future__ import annotations

import logging

import click

from aisetup.adapters.base import Prompter

logger = logging.getLogger(__name__)


class ClickPrompter(Prompter):
    """Terminal prompts via click."""

    def confirm(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)

    def secret(self, question: str) -> str:
        value = click.prompt(
            question,
            default="",
            hide_input=True,
            show_default=False,
        )
        return value.strip()


class AutoApprovePrompter(Prompter):
    """Answers yes to everything and never supplies secrets."""

    def confirm(self, question: str, default: bool = False) -> bool:
        return True

    def secret(self, question: str) -> str:
        return ""


class Confirmer:
    """Single run-wide decision point.

    Args:
        prompter: Collaborator consulted in interactive mode.
        force: Forced mode. Every confirmation is approved and the
            prompter is bypassed.
    """

    def __init__(self, prompter: Prompter, force: bool = False):
        self._prompter = prompter
        self._force = force

    @property
    def force(self) -> bool:
        return self._force

    @property
    def interactive(self) -> bool:
        return not self._force

    def confirm(self, question: str, default: bool = False) -> bool:
        if self._force:
            logger.debug("Forced: %s -> yes", question)
            return True
        answer = self._prompter.confirm(question, default=default)
        logger.debug("Asked: %s -> %s", question, "yes" if answer else "no")
        return answer

    def secret(self, question: str) -> str:
        """Ask for a secret value. Forced mode never asks and returns ''."""
        if self._force:
            return ""
        return self._prompter.secret(question)
