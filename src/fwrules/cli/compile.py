"""CLI command: fwrules compile: print the plan without touching live state."""

from __future__ import annotations

import click

from fwrules.cli import fail
from fwrules.exceptions import FwrulesError
from fwrules.service import FirewallService


@click.command(name="compile")
@click.pass_context
def compile_(ctx: click.Context) -> None:
    """Compile rule fragments and print the resulting commands."""
    service = FirewallService(ctx.obj["config"])
    try:
        service.compile(emit=True)
    except FwrulesError as e:
        fail(e)
