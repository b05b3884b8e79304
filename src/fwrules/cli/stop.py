"""CLI command: fwrules stop: tear down every managed chain."""

from __future__ import annotations

import click
from rich.console import Console

from fwrules.cli import fail
from fwrules.exceptions import FwrulesError
from fwrules.service import FirewallService

console = Console(stderr=True)


@click.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Flush built-in chains and delete all non-excluded chains."""
    config = ctx.obj["config"]
    service = FirewallService(config)
    try:
        deleted = service.stop()
    except FwrulesError as e:
        fail(e)

    for family, chains in deleted.items():
        console.print(
            f"[bold]{family.binary}[/bold]: flushed, "
            f"{len(chains)} chain(s) removed"
        )
    if config.dry_run:
        console.print("[dim]dry run: no changes were made[/dim]")
