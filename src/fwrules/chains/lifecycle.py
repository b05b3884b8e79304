"""Chain lifecycle: bring a family's live state back to a clean slate."""

from __future__ import annotations

import logging

from fwrules.chains.exclusions import load_exclusions
from fwrules.chains.executor import Executor
from fwrules.config import FirewallConfig
from fwrules.exceptions import ConfigurationError
from fwrules.rules.models import BUILTIN_CHAINS, ChainRole, Family

logger = logging.getLogger(__name__)


class ChainLifecycleManager:
    """Flushes built-in chains, then removes every non-excluded chain in every table.

    Excluded chains are never flushed or deleted, so chains managed by
    other tools can live next to ours. Any executor error propagates and
    aborts the run with the live state partially torn down.
    """

    def __init__(
        self,
        config: FirewallConfig,
        executors: dict[Family, Executor],
    ) -> None:
        self.config = config
        self.executors = executors

    def _executor(self, family: Family) -> Executor:
        if not isinstance(family, Family) or family not in self.executors:
            raise ConfigurationError(f"Not a managed packet-filter family: {family!r}")
        return self.executors[family]

    def teardown(self, family: Family) -> list[tuple[str, str]]:
        """Tear down ``family`` and return the deleted ``(table, chain)`` pairs.

        Every doomed chain is flushed before any of them is deleted, so a
        chain that another user chain jumps to has lost that reference by
        the time ``-X`` reaches it.
        """
        executor = self._executor(family)

        builtins = {"filter": BUILTIN_CHAINS, **family.tables}
        snapshot = {table: executor.enumerate_chains(family, table) for table in builtins}
        exclusions = load_exclusions(self.config.exclude_path(family))
        for table, chains in snapshot.items():
            logger.debug("%s %s chains: %s", family.binary, table, ", ".join(chains))

        for role in ChainRole:
            executor.flush(family, role.value)
        for table, chains in family.tables.items():
            for chain in chains:
                executor.flush_table(family, table, chain)

        doomed: list[tuple[str, str]] = []
        for table, chains in snapshot.items():
            for chain in chains:
                if chain in builtins[table]:
                    continue
                if chain in exclusions:
                    logger.info("Excluding chain %s (%s)", chain, _label(family, table))
                    continue
                doomed.append((table, chain))

        for table, chain in doomed:
            executor.flush(family, chain, table)
        for table, chain in doomed:
            executor.delete(family, chain, table)

        logger.info("Removed %d %s chain(s)", len(doomed), family.binary)
        return doomed


def _label(family: Family, table: str) -> str:
    if table == "filter":
        return family.binary
    return f"{family.binary} -t {table}"
