"""
CLI command for the run ledger.
"""

from __future__ import annotations

import json

import click


@click.command()
@click.option("-n", "count", default=10, show_default=True, help="Number of runs to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent setup runs."""
    from aisetup.core.persistence.audit import AuditWriter

    writer = AuditWriter(home=ctx.obj["home"])
    entries = writer.read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No runs recorded yet.")
        return

    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}
    click.secho(f"\n📜 Last {len(entries)} runs", fg="cyan", bold=True)
    for entry in reversed(entries):
        click.echo(f"   {entry.timestamp}  {entry.mode:<11} ", nl=False)
        click.secho(f"{entry.status:<8}", fg=status_color.get(entry.status, "white"), nl=False)
        click.echo(
            f" +{entry.installed} ={entry.present} ⊘{entry.skipped} ✗{entry.failed}"
            + ("  (registry rebuilt)" if entry.registry_recovered else "")
        )
        for failure in entry.failures:
            click.echo(f"      │ {failure}")
    click.echo()
