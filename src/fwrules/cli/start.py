"""CLI commands: fwrules start / restart: tear down, compile and load."""

from __future__ import annotations

import click
from rich.console import Console

from fwrules.cli import fail
from fwrules.config import FirewallConfig
from fwrules.exceptions import FwrulesError
from fwrules.service import FirewallService

console = Console(stderr=True)


@click.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """Tear down live chains, compile the rules and load them."""
    _load(ctx.obj["config"], verb="started")


@click.command()
@click.pass_context
def restart(ctx: click.Context) -> None:
    """Same as start: always begins from a clean slate."""
    _load(ctx.obj["config"], verb="restarted")


def _load(config: FirewallConfig, verb: str) -> None:
    service = FirewallService(config)
    try:
        ruleset = service.start()
    except FwrulesError as e:
        fail(e)

    console.print(
        f"[bold]fwrules[/bold] {verb} in [cyan]{config.policy_mode.value}[/cyan] "
        f"policy mode from [cyan]{config.config_dir}[/cyan]"
    )
    for family in config.enabled_families:
        console.print(f"  {family.binary}: {len(ruleset.plan(family))} command(s)")
    if config.dry_run:
        console.print("[dim]dry run: no changes were made[/dim]")
