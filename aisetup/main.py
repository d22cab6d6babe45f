"""
AI tools setup — CLI entrypoint.

Usage:
    aisetup --help
    aisetup setup
    aisetup setup --force
    aisetup status
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from aisetup import __version__
from aisetup.core.observability.logging_config import setup_logging

_STATUS_ICONS = {
    "present": ("✓", "green"),
    "installed": ("＋", "cyan"),
    "skipped": ("⊘", "yellow"),
    "failed": ("✗", "red"),
}


@click.group()
@click.version_option(version=__version__, prog_name="aisetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: ~/.config/aisetup/config.yml).",
)
@click.option(
    "--home",
    "home",
    type=click.Path(file_okay=False),
    envvar="AISETUP_HOME",
    default=None,
    hidden=True,
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    home: str | None,
) -> None:
    """AI tools setup — install and configure Claude, Gemini and Codex CLIs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # Register the managed home in core context
    from aisetup.core.context import get_home, set_home

    if home:
        set_home(Path(home).expanduser().resolve())
    ctx.obj["home"] = get_home()

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("AISETUP_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("AISETUP_LOG_FILE"),
        log_file_level=os.environ.get("AISETUP_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Answer yes to everything and refresh installs.")
@click.option("--mock", is_flag=True, help="Simulate package installs (no npm, no installers).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def setup(ctx: click.Context, force: bool, mock: bool, as_json: bool) -> None:
    """Converge this machine onto the AI tools setup.

    Examples:

        aisetup setup

        aisetup setup --force
    """
    from aisetup.core.use_cases.setup import run_setup

    quiet = ctx.obj.get("quiet", False)
    if not as_json and not quiet:
        mode_label = "[mock] " if mock else ""
        click.secho(f"\n🚀 {mode_label}AI Tools Setup", fg="cyan", bold=True)
        if force:
            click.echo("   Forced mode: every question is answered yes.")
        click.echo()

    result = run_setup(
        home=ctx.obj["home"],
        config_path=ctx.obj.get("config_path"),
        force=force,
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.failed else 0)

    if result.error or result.report is None or result.profile is None:
        click.secho(f"❌ {result.error or 'Setup did not run'}", fg="red")
        sys.exit(1)

    report = result.report
    profile = result.profile

    click.echo(f"   Shell: {profile.shell_kind.value}  → {profile.primary_config_path}")
    if profile.secondary_alias_path:
        click.echo(f"   Aliases: {profile.secondary_alias_path}")
    click.echo()

    _print_results(report.results, verbose=ctx.obj.get("verbose", False))

    if report.registry_recovered:
        click.echo()
        click.secho(
            f"   ⚠️  Registry was corrupted and has been rebuilt "
            f"({report.registry.dropped_lines} lines dropped, "
            f"{report.registry.duplicates} duplicates removed)",
            fg="yellow",
        )

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(report.status, "white")
    click.secho(
        f"   Result: {report.count('installed')} installed, {report.count('present')} present, "
        f"{report.count('skipped')} skipped, {report.count('failed')} failed",
        fg=status_color,
        bold=True,
    )

    if not quiet:
        _print_completion(result)

    if report.failures:
        click.echo()
        sys.exit(1)

    click.echo()


def _print_results(results, verbose: bool = False) -> None:
    for r in results:
        icon, color = _STATUS_ICONS[r.status]
        click.secho(f"   {icon} {r.kind:<9} {r.unit_id}", fg=color, nl=False)
        if r.status in ("skipped", "failed") or (verbose and r.reason):
            click.echo(f"  ({r.label}{': ' + r.reason if r.reason else ''})")
        else:
            click.echo(f"  ({r.label})")


def _print_completion(result) -> None:
    profile = result.profile
    desired = result.desired
    summary = {(u.kind, u.unit_id): u for u in result.report.summary}

    click.echo()
    click.secho("🎉 Setup completed!", fg="green", bold=True)
    click.echo(f"   Restart your terminal or run: source {profile.primary_config_path}")

    tmux = summary.get(("tool", "tmux"))
    if tmux is not None and not tmux.present:
        click.secho("   Remember: tmux is not installed! The workflow aliases need it.", fg="yellow")

    click.echo()
    click.secho("   Available aliases:", bold=True)
    width = max((len(a.id) for a in desired.aliases), default=0)
    for alias in desired.aliases:
        click.echo(f"     • {alias.id:<{width}} - {alias.description}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show what is installed right now (read-only)."""
    from aisetup.core.use_cases.status import get_status

    result = get_status(home=ctx.obj["home"], config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n📋 Status ({result.present_count}/{len(result.units)} present)", fg="cyan", bold=True)

    for kind, title in (("tool", "Tools"), ("extension", "Extensions"), ("env", "Environment"), ("alias", "Aliases")):
        units = result.by_kind(kind)
        if not units:
            continue
        click.echo()
        click.secho(f"   {title}:", fg="white", bold=True)
        for unit in units:
            if unit.present:
                click.secho(f"     ✓ {unit.unit_id}", fg="green", nl=False)
                click.echo(f"  → {unit.where}" if ctx.obj.get("verbose") and unit.where else "")
            else:
                click.secho(f"     ✗ {unit.unit_id}", fg="red")
            if unit.enabled is False and unit.present:
                click.secho("       (not marked enabled)", fg="yellow")

    click.echo()
    click.echo(f"   Registry: {result.registry_path}")
    click.echo(f"   Enabled: {', '.join(result.registry_entries) or '(none)'}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def shell(ctx: click.Context, as_json: bool) -> None:
    """Show the detected shell and the files that will be edited."""
    from aisetup.core.services.shell_profile import ShellProfileLocator

    profile = ShellProfileLocator(ctx.obj["home"]).resolve()

    if as_json:
        click.echo(json.dumps(profile.to_dict(), indent=2))
        return

    click.secho(f"\n🐚 Shell: {profile.shell_kind.value}", fg="cyan", bold=True)
    if not profile.detected:
        click.secho("   (could not detect shell, using the POSIX default)", fg="yellow")
    click.echo(f"   Environment variables → {profile.primary_config_path}")
    click.echo(f"   Aliases               → {profile.alias_path}")
    click.echo()


# ── Sub-command groups ──────────────────────────────────────────

from aisetup.ui.cli.history import history  # noqa: E402
from aisetup.ui.cli.registry import registry  # noqa: E402

cli.add_command(registry)
cli.add_command(history)


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
