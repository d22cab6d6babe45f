"""
Desired state — the immutable input of a reconcile run.

``build_desired_state`` merges the built-in definitions with the
optional config file. The result is frozen; the engine never edits it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from aisetup.core.config import defaults
from aisetup.core.config.loader import ConfigError, SetupConfig
from aisetup.core.extensions import Extension
from aisetup.core.models import Alias, AliasMigration, EnvVar, Tool
from aisetup.data import COMMANDS_DIR

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(".claude") / "enabled.yaml"


@dataclass(frozen=True)
class DesiredState:
    """Everything a run should converge the machine to."""

    tools: tuple[Tool, ...] = ()
    env_vars: tuple[EnvVar, ...] = ()
    aliases: tuple[Alias, ...] = ()
    migrations: tuple[AliasMigration, ...] = ()
    deprecated_aliases: tuple[str, ...] = ()
    extensions: tuple[Extension, ...] = ()
    env_values: dict[str, str] = field(default_factory=dict)
    registry_path: Path = DEFAULT_REGISTRY_PATH
    skip_tools: frozenset[str] = frozenset()

    def tool(self, tool_id: str) -> Tool | None:
        return next((t for t in self.tools if t.id == tool_id), None)

    def extension(self, extension_id: str) -> Extension | None:
        return next((e for e in self.extensions if e.name == extension_id), None)


def _resolve(home: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else home / path


def build_desired_state(config: SetupConfig, home: Path) -> DesiredState:
    """Merge built-in definitions with user config.

    Config aliases override the command of a built-in alias with the
    same id, or add a new alias.

    Raises:
        ConfigError: If a config alias or env name is invalid.
    """
    aliases = {a.id: a for a in defaults.ALIASES}
    for alias_id, command in config.aliases.items():
        base = aliases.get(alias_id)
        try:
            aliases[alias_id] = Alias(
                id=alias_id,
                desired_value=command,
                requires=base.requires if base else [],
                description=base.description if base else command,
            )
        except ValueError as e:
            raise ConfigError(str(e)) from e

    env_vars = list(defaults.ENV_VARS)
    known = {v.id for v in env_vars}
    for name in config.env:
        if name not in known:
            try:
                env_vars.append(EnvVar(id=name, secret=False))
            except ValueError as e:
                raise ConfigError(str(e)) from e

    commands_source = (
        _resolve(home, config.commands_source) if config.commands_source else COMMANDS_DIR
    )
    registry_path = _resolve(home, config.registry_path or str(DEFAULT_REGISTRY_PATH))

    state = DesiredState(
        tools=defaults.PREREQUISITES + defaults.AI_TOOLS,
        env_vars=tuple(env_vars),
        aliases=tuple(aliases.values()),
        migrations=defaults.MIGRATIONS,
        deprecated_aliases=defaults.DEPRECATED_ALIASES,
        extensions=defaults.default_extensions(commands_source, config.superclaude_command),
        env_values=dict(config.env),
        registry_path=registry_path,
        skip_tools=frozenset(config.skip_tools),
    )
    logger.debug(
        "Desired state: %d tools, %d env vars, %d aliases, %d extensions",
        len(state.tools), len(state.env_vars), len(state.aliases), len(state.extensions),
    )
    return state
