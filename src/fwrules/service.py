"""Firewall service: orchestrates compile, teardown and loading for one run."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fwrules.chains.executor import Executor, SubprocessExecutor
from fwrules.chains.lifecycle import ChainLifecycleManager
from fwrules.config import FirewallConfig
from fwrules.rules.compiler import RuleCompiler
from fwrules.rules.models import Command, CompiledRuleset, Family
from fwrules.rules.policy import reset_commands

logger = logging.getLogger(__name__)


class FirewallService:
    """Runs the strictly sequential validate, plan, teardown, load pipeline.

    The first executor error propagates; nothing is rolled back.
    """

    def __init__(
        self,
        config: FirewallConfig,
        executors: dict[Family, Executor] | None = None,
        on_command: Callable[[Command], None] | None = None,
    ) -> None:
        self._config = config
        if executors is None:
            shared = SubprocessExecutor(dry_run=config.dry_run)
            executors = {family: shared for family in Family}
        self._executors = executors
        self._lifecycle = ChainLifecycleManager(config, executors)
        self._on_command = on_command

    @property
    def config(self) -> FirewallConfig:
        return self._config

    def compile(self, emit: bool = False) -> CompiledRuleset:
        self._config.check()
        return RuleCompiler(self._config).compile(emit=emit)

    def stop(self) -> dict[Family, list[str]]:
        """Tear down every enabled family and reopen its built-in policies."""
        self._config.check()
        deleted: dict[Family, list[str]] = {}
        for family in self._config.enabled_families:
            deleted[family] = self._lifecycle.teardown(family)
            for command in reset_commands(family):
                self._apply(command)
        return deleted

    def start(self) -> CompiledRuleset:
        """Compile, tear down the live state, then load every plan in order.

        Compilation happens first so a configuration error aborts before
        anything is mutated.
        """
        ruleset = self.compile()
        self.stop()
        for family in self._config.enabled_families:
            plan = ruleset.plan(family)
            for command in plan:
                self._apply(command)
            logger.info("Loaded %d %s command(s)", len(plan), family.binary)
        return ruleset

    def restart(self) -> CompiledRuleset:
        return self.start()

    def _apply(self, command: Command) -> None:
        self._executors[command.family].apply(command.family, command)
        if self._on_command:
            self._on_command(command)
