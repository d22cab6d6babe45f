"""
CLI commands for the enabled-extensions registry.

Thin wrappers over ``aisetup.core.persistence.registry_store``.
"""

from __future__ import annotations

import json
import sys

import click

from aisetup.core.persistence.registry_store import RegistryStore


def _store(ctx: click.Context) -> RegistryStore:
    """Registry at the configured path."""
    from aisetup.core.config.desired import build_desired_state
    from aisetup.core.config.loader import ConfigError, find_config_file, load_config

    home = ctx.obj["home"]
    try:
        config = load_config(find_config_file(ctx.obj.get("config_path"), home=home))
        desired = build_desired_state(config, home)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    return RegistryStore(desired.registry_path)


@click.group()
def registry() -> None:
    """Enabled extensions — list, rebuild, enable."""


@registry.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List enabled extensions."""
    store = _store(ctx)
    entries = store.entries()

    if as_json:
        click.echo(json.dumps({"path": str(store.path), "enabled": entries}, indent=2))
        return

    click.secho(f"\n🧩 Enabled extensions ({len(entries)})", fg="cyan", bold=True)
    click.echo(f"   {store.path}")
    for entry in entries:
        click.echo(f"     • {entry}")
    click.echo()


@registry.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def rebuild(ctx: click.Context, as_json: bool) -> None:
    """Rewrite the registry in canonical form, salvaging what is readable."""
    store = _store(ctx)
    try:
        report = store.rebuild()
    except OSError as e:
        click.secho(f"❌ Cannot rewrite {store.path}: {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if report.recovered:
        click.secho(
            f"⚠️  Rebuilt {store.path}: {report.dropped_lines} lines dropped, "
            f"{report.duplicates} duplicates removed",
            fg="yellow",
        )
    else:
        click.secho(f"✅ {store.path} is canonical", fg="green")
    click.echo(f"   Enabled: {', '.join(report.entries) or '(none)'}")


@registry.command()
@click.argument("extension_id")
@click.pass_context
def enable(ctx: click.Context, extension_id: str) -> None:
    """Mark EXTENSION_ID enabled without installing anything."""
    store = _store(ctx)
    try:
        added = store.add(extension_id)
    except OSError as e:
        click.secho(f"❌ Cannot write {store.path}: {e}", fg="red")
        sys.exit(1)

    if added:
        click.secho(f"✅ Enabled {extension_id}", fg="green")
    else:
        click.echo(f"   {extension_id} is already enabled")
