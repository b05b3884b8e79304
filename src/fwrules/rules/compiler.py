"""Rule compiler: turns the config directory into three ordered command plans."""

from __future__ import annotations

import logging
from typing import TextIO

import click

from fwrules.config import FirewallConfig
from fwrules.rules.classifier import classify, to_command
from fwrules.rules.models import Command, CommandPlan, CompiledRuleset, Family
from fwrules.rules.policy import PolicyPlanner
from fwrules.rules.source import RuleSource
from fwrules.rules.validator import LineValidator

logger = logging.getLogger(__name__)

class RuleCompiler:
    """Builds a fresh CompiledRuleset on every call; no state survives between calls."""

    def __init__(self, config: FirewallConfig) -> None:
        self.config = config
        self.source = RuleSource(config.config_dir)
        self.validator = LineValidator(report_illegal=config.report_illegal)
        self.planner = PolicyPlanner(config.policy_mode, config.policies)

    def compile(self, emit: bool = False, out: TextIO | None = None) -> CompiledRuleset:
        """Compile all fragments.

        Policy commands go first (true mode) or last (pseudo mode) in the
        primary and secondary plans; user lines keep file order and line
        order in between. With ``emit`` the result is also written to
        ``out`` (stdout by default).
        """
        enabled = self.config.enabled_families
        plans: dict[Family, list[Command]] = {family: [] for family in Family}

        for family in enabled:
            plans[family].extend(self.planner.prefix(family))

        for path, lines in self.source:
            for line in self.validator.validate(path.name, lines):
                classified = classify(line)
                if classified.family is None:
                    continue
                if classified.family not in enabled:
                    logger.debug(
                        "Skipping %s:%d: %s is not enabled",
                        classified.source,
                        classified.lineno,
                        classified.family.binary,
                    )
                    continue
                command = to_command(classified)
                if command is not None:
                    plans[classified.family].append(command)

        for family in enabled:
            plans[family].extend(self.planner.suffix(family))

        ruleset = CompiledRuleset(
            primary=CommandPlan(Family.PRIMARY, tuple(plans[Family.PRIMARY])),
            secondary=CommandPlan(Family.SECONDARY, tuple(plans[Family.SECONDARY])),
            bridge=CommandPlan(Family.BRIDGE, tuple(plans[Family.BRIDGE])),
        )
        logger.info(
            "Compiled %d/%d/%d commands (%s mode)",
            len(ruleset.primary),
            len(ruleset.secondary),
            len(ruleset.bridge),
            self.config.policy_mode.value,
        )

        if emit:
            click.echo(render(ruleset), nl=False, file=out)
        return ruleset


def render(ruleset: CompiledRuleset) -> str:
    """Plain-text listing grouped by family; empty plans are left out."""
    chunks: list[str] = []
    for plan in ruleset:
        if not plan.commands:
            continue
        chunks.append(f"# {plan.family.binary}\n")
        chunks.extend(f"{line}\n" for line in plan.rendered())
        chunks.append("\n")
    return "".join(chunks)
