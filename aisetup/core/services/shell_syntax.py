"""
Shell syntax — how env vars and aliases are written and matched.

Two dialects are supported:

    POSIX (sh, bash, zsh, unknown)
        export NAME="value"          matched by ^export NAME=
        alias name="command"         matched by ^alias name=

    fish
        set -x NAME "value"          matched by ^set -x NAME<space>
        alias name 'command'         matched by ^alias name<space> or ^function name

All patterns are anchored at the start of a line, mirroring the
whole-line editing model of ConfigFile.
"""

from __future__ import annotations

import re

from aisetup.core.models.profile import ShellKind

ALIAS_HEADER = "# AI Workflow Aliases"


def _dq(value: str) -> str:
    """Double-quote for POSIX shells, escaping what double quotes expand."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("`", "\\`")
    )
    return f'"{escaped}"'


def _posix_alias_value(command: str) -> str:
    if '"' not in command:
        return f'"{command}"'
    if "'" not in command:
        return f"'{command}'"
    return _dq(command)


def env_line(kind: ShellKind, name: str, value: str) -> str:
    if kind.is_fish:
        return f"set -x {name} {_dq(value)}"
    return f"export {name}={_dq(value)}"


def env_pattern(kind: ShellKind, name: str) -> re.Pattern[str]:
    if kind.is_fish:
        return re.compile(rf"^\s*set\s+-(?:g?x|xg)\s+{re.escape(name)}(?:\s|$)")
    return re.compile(rf"^\s*export\s+{re.escape(name)}=")


def alias_line(kind: ShellKind, name: str, command: str) -> str:
    if kind.is_fish:
        return f"alias {name} '" + command.replace("\\", "\\\\").replace("'", "\\'") + "'"
    return f"alias {name}={_posix_alias_value(command)}"


def alias_pattern(kind: ShellKind, name: str) -> re.Pattern[str]:
    """Pattern for an alias definition line in a file of the given kind."""
    n = re.escape(name)
    if kind.is_fish:
        return re.compile(rf"^\s*(?:alias\s+{n}(?:\s|=)|function\s+{n}(?:\s|$))")
    return re.compile(rf"^\s*alias\s+{n}=")


def alias_prefix(kind: ShellKind, name: str) -> re.Pattern[str]:
    """Pattern for the definition prefix of an alias, up to its name.

    Matches every line ``alias_pattern`` accepts. Group 1 is the
    indentation and group 2 the keyword (``alias``, or ``function`` for
    fish), so a rename keeps both and the bound command after the name
    stays byte-for-byte identical.
    """
    n = re.escape(name)
    if kind.is_fish:
        return re.compile(rf"^(\s*)(alias|function)\s+{n}(?=\s|=|$)")
    return re.compile(rf"^(\s*)(alias)\s+{n}(?==)")


def rename_alias_prefix(kind: ShellKind, old: str, new: str) -> tuple[re.Pattern[str], str]:
    """(pattern, template) for ``ConfigFile.substitute_prefix``."""
    return alias_prefix(kind, old), rf"\g<1>\g<2> {new}"


# Matches ``name`` in ``alias name=...``, ``name=...`` (zsh ``alias``
# output) and ``alias name '...'`` (fish).
_SESSION_ALIAS_RE = re.compile(r"^(?:alias\s+)?([A-Za-z0-9_][A-Za-z0-9_.:+-]*)(?:=|\s)")


def parse_alias_listing(output: str) -> set[str]:
    """Extract alias names from the output of a shell's ``alias`` builtin."""
    names: set[str] = set()
    for line in output.splitlines():
        m = _SESSION_ALIAS_RE.match(line.strip())
        if m:
            names.add(m.group(1))
    return names
