"""
Built-in desired state.

These are code-level constants, not user data. A run builds fresh
units from them (merged with the optional config file) and compares
them against probed reality.
"""

from __future__ import annotations

from pathlib import Path

from aisetup.core.extensions import CommandBundleExtension, CommandExtension, Extension
from aisetup.core.models import Alias, AliasMigration, EnvVar, Tool

# ── Tools ───────────────────────────────────────────────────────

PREREQUISITES: tuple[Tool, ...] = (
    Tool(
        id="node",
        description="Node.js",
        install_hint="Install Node.js from https://nodejs.org/",
    ),
    Tool(
        id="npm",
        description="npm",
        install_hint="npm ships with Node.js: https://nodejs.org/",
    ),
    Tool(
        id="tmux",
        description="tmux",
        required=False,
        install_hint="macOS: brew install tmux | Debian/Ubuntu: sudo apt-get install tmux",
    ),
)

AI_TOOLS: tuple[Tool, ...] = (
    Tool(id="claude", package="@anthropic-ai/claude-code", description="Claude CLI"),
    Tool(id="gemini", package="@google/gemini-cli", description="Gemini CLI"),
    Tool(id="codex", package="@openai/codex", description="Codex CLI", required=False),
)

# ── Environment variables ───────────────────────────────────────

ENV_VARS: tuple[EnvVar, ...] = (
    EnvVar(
        id="ANTHROPIC_API_KEY",
        requires_tool="claude",
        description="Anthropic API key",
        help_url="https://console.anthropic.com/",
    ),
    EnvVar(
        id="GOOGLE_AI_API_KEY",
        requires_tool="gemini",
        description="Google AI API key",
        help_url="https://aistudio.google.com/app/apikey",
    ),
    EnvVar(
        id="OPENAI_API_KEY",
        requires_tool="codex",
        description="OpenAI API key",
        help_url="https://platform.openai.com/api-keys",
    ),
)

# ── Aliases ─────────────────────────────────────────────────────


def _tmux_session(session: str, panes: list[str]) -> str:
    """A detached tmux session with one synchronized pane per command."""
    parts = [f"tmux new-session -d -s {session}", f'send-keys "{panes[0]}" C-m']
    for cmd in panes[1:]:
        parts += ["split-window -h", f'send-keys "{cmd}" C-m']
    parts += [
        "select-layout even-horizontal",
        "set-option -w synchronize-panes on",
        f"attach-session -t {session}",
    ]
    return r" \; ".join(parts)


ALIASES: tuple[Alias, ...] = (
    Alias(
        id="yolo",
        desired_value="claude --dangerously-skip-permissions",
        description="claude --dangerously-skip-permissions",
    ),
    Alias(
        id="ai",
        desired_value=_tmux_session("ai-session", ["claude", "gemini", "zsh"]),
        requires=["tmux"],
        description="Start AI workflow with Claude + Gemini + Terminal",
    ),
    Alias(
        id="reai",
        desired_value="tmux attach-session -t ai-session",
        requires=["tmux"],
        description="Reconnect to AI session",
    ),
    Alias(
        id="ai-yolo",
        desired_value=_tmux_session("ai-yolo-session", ["yolo", "yolo", "zsh"]),
        requires=["tmux"],
        description="Start AI workflow with Yolo mode",
    ),
    Alias(
        id="reai-yolo",
        desired_value="tmux attach-session -t ai-yolo-session",
        requires=["tmux"],
        description="Reconnect to Yolo session",
    ),
    Alias(
        id="ai-demo",
        desired_value=_tmux_session("ai-demo-session", ["claude", "gemini", "codex"]),
        requires=["tmux"],
        description="Start demo session with Claude + Gemini + Codex",
    ),
    Alias(
        id="reai-demo",
        desired_value="tmux attach-session -t ai-demo-session",
        requires=["tmux"],
        description="Reconnect to demo session",
    ),
)

# Earlier releases shipped these names.
MIGRATIONS: tuple[AliasMigration, ...] = (
    AliasMigration(old_id="aiyolo", new_id="ai-yolo"),
    AliasMigration(old_id="reaiyolo", new_id="reai-yolo"),
    AliasMigration(old_id="aidemo", new_id="ai-demo"),
)

DEPRECATED_ALIASES: tuple[str, ...] = (
    "aiyolo",
    "reaiyolo",
    "aidemo",
    "ai-codex",
    "reai-codex",
)

# ── Extensions ──────────────────────────────────────────────────

SUPERCLAUDE_COMMAND = ["SuperClaude", "install", "--quick", "--yes"]
# npm package that puts the SuperClaude installer on PATH
SUPERCLAUDE_PACKAGE = "@bifrost_inc/superclaude"
SUPERCLAUDE_MARKERS = [
    ".claude/CLAUDE.md",
    ".claude/COMMANDS.md",
    ".claude/FLAGS.md",
    ".claude/commands/sc",
]


def default_extensions(
    commands_source: Path,
    superclaude_command: list[str] | None = None,
) -> tuple[Extension, ...]:
    return (
        CommandBundleExtension(
            "custom-commands",
            commands_source,
            display_name="Custom slash commands",
            tags=("commands", "claude"),
        ),
        CommandExtension(
            "SuperClaude",
            superclaude_command or SUPERCLAUDE_COMMAND,
            SUPERCLAUDE_MARKERS,
            display_name="SuperClaude framework",
            tags=("framework", "claude"),
            # a custom installer command is not provided by the npm package
            installer_package=None if superclaude_command else SUPERCLAUDE_PACKAGE,
        ),
    )
