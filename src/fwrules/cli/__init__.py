"""CLI entry point: Click group with global options."""

from __future__ import annotations

import logging
import sys

import click

from fwrules import __version__
from fwrules.config import LOG_LEVELS, FirewallConfig, parse_policy_mode
from fwrules.exceptions import FwrulesError
from fwrules.rules.models import ChainRole, PolicyAction

logger = logging.getLogger(__name__)

_ACTIONS = [a.value for a in PolicyAction]


@click.group()
@click.version_option(version=__version__, prog_name="fwrules")
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding *.rules fragments and exclusion files.",
)
@click.option("--ipv6/--no-ipv6", default=None, help="Manage ip6tables as well.")
@click.option("--bridge/--no-bridge", default=None, help="Manage ebtables as well.")
@click.option(
    "--policy-mode",
    type=click.Choice(["true", "pseudo"]),
    default=None,
    help="Set native chain policies (true) or append terminal jumps (pseudo).",
)
@click.option(
    "--input",
    "input_",
    type=click.Choice(_ACTIONS, case_sensitive=False),
    default=None,
    help="Policy for the INPUT chain.",
)
@click.option(
    "--output",
    "output_",
    type=click.Choice(_ACTIONS, case_sensitive=False),
    default=None,
    help="Policy for the OUTPUT chain.",
)
@click.option(
    "--forward",
    "forward_",
    type=click.Choice(_ACTIONS, case_sensitive=False),
    default=None,
    help="Policy for the FORWARD chain.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging threshold.",
)
@click.option("--verbose", "-v", is_flag=True, help="Shortcut for --log-level debug.")
@click.option("--report-illegal", is_flag=True, help="Log every illegal rule line.")
@click.option("--dry-run", is_flag=True, help="Log mutating commands instead of running them.")
@click.pass_context
def main(
    ctx: click.Context,
    config_dir: str | None,
    ipv6: bool | None,
    bridge: bool | None,
    policy_mode: str | None,
    input_: str | None,
    output_: str | None,
    forward_: str | None,
    log_level: str | None,
    verbose: bool,
    report_illegal: bool,
    dry_run: bool,
) -> None:
    """fwrules: compile rule fragments and manage packet-filter chains."""
    ctx.ensure_object(dict)

    cli_level = "debug" if verbose else (log_level.lower() if log_level else None)
    logging.basicConfig(
        level=(cli_level or "warning").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = FirewallConfig.load(config_dir)
    except FwrulesError as e:
        fail(e)

    policies = {}
    for role, value in (
        (ChainRole.INPUT, input_),
        (ChainRole.OUTPUT, output_),
        (ChainRole.FORWARD, forward_),
    ):
        if value:
            policies[role] = PolicyAction(value.upper())

    config = config.with_overrides(
        enable_secondary=ipv6,
        enable_bridge=bridge,
        policy_mode=parse_policy_mode(policy_mode) if policy_mode else None,
        policies=policies,
        log_level=cli_level,
        report_illegal=report_illegal or None,
        dry_run=dry_run or None,
    )
    ctx.obj["config"] = config
    logging.getLogger().setLevel(config.logging_level)


def fail(error: Exception) -> None:
    """Report a fatal error once on stderr and exit non-zero."""
    logger.debug("Aborting", exc_info=error)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _register_commands() -> None:
    from fwrules.cli.compile import compile_  # noqa: F811
    from fwrules.cli.start import restart, start  # noqa: F811
    from fwrules.cli.stop import stop  # noqa: F811

    main.add_command(compile_)
    main.add_command(start)
    main.add_command(restart)
    main.add_command(stop)


_register_commands()
