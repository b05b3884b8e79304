"""Executors: apply commands to the live packet-filter subsystem."""

from __future__ import annotations

import logging
import re
import subprocess
from typing import Protocol

from fwrules.exceptions import SubsystemError
from fwrules.rules.models import Command, Family

logger = logging.getLogger(__name__)

_EBTABLES_CHAIN = re.compile(r"^Bridge chain:\s*([^,\s]+)")

_TIMEOUT = 30


class Executor(Protocol):
    """Protocol for anything that can mutate one family's live state.

    Every method raises SubsystemError on failure.
    """

    def enumerate_chains(self, family: Family, table: str = "filter") -> list[str]: ...

    def flush(self, family: Family, chain: str, table: str = "filter") -> None: ...

    def delete(self, family: Family, chain: str, table: str = "filter") -> None: ...

    def flush_table(self, family: Family, table: str, chain: str | None = None) -> None: ...

    def apply(self, family: Family, command: Command) -> None: ...


class SubprocessExecutor:
    """Runs iptables, ip6tables or ebtables directly, never through a shell.

    With ``dry_run`` the read-only listing still runs but every mutating
    call is only logged.
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def enumerate_chains(self, family: Family, table: str = "filter") -> list[str]:
        if family is Family.BRIDGE:
            output = self._run(family, [*_table_args(table), "-L"], mutating=False)
            return _parse_ebtables_chains(output)
        output = self._run(family, [*_table_args(table), "-S"], mutating=False)
        return _parse_iptables_chains(output)

    def flush(self, family: Family, chain: str, table: str = "filter") -> None:
        self._run(family, [*_table_args(table), "-F", chain])

    def delete(self, family: Family, chain: str, table: str = "filter") -> None:
        self._run(family, [*_table_args(table), "-X", chain])

    def flush_table(self, family: Family, table: str, chain: str | None = None) -> None:
        args = ["-t", table, "-F"]
        if chain:
            args.append(chain)
        self._run(family, args)

    def apply(self, family: Family, command: Command) -> None:
        if command.family is not family:
            raise SubsystemError(
                f"Command for {command.family.binary} handed to {family.binary}",
                argv=[command.family.binary, *command.args],
            )
        self._run(family, list(command.args))

    def _run(self, family: Family, args: list[str], mutating: bool = True) -> str:
        argv = [family.binary, *args]
        if mutating and self.dry_run:
            logger.info("[dry-run] %s", " ".join(argv))
            return ""
        logger.debug("Running %s", " ".join(argv))
        try:
            proc = subprocess.run(
                argv,
                check=True,
                capture_output=True,
                text=True,
                timeout=_TIMEOUT,
            )
        except subprocess.CalledProcessError as e:
            raise SubsystemError(
                f"{' '.join(argv)} failed with exit status {e.returncode}",
                argv=argv,
                returncode=e.returncode,
                stderr=e.stderr or "",
            ) from e
        except FileNotFoundError as e:
            raise SubsystemError(f"{family.binary} not found", argv=argv) from e
        except subprocess.TimeoutExpired as e:
            raise SubsystemError(
                f"{' '.join(argv)} timed out after {_TIMEOUT}s", argv=argv
            ) from e
        return proc.stdout


def _table_args(table: str) -> list[str]:
    """``-t`` is left out for the default filter table."""
    return [] if table == "filter" else ["-t", table]


def _parse_iptables_chains(output: str) -> list[str]:
    """Chain names from ``iptables -S``: ``-P`` for built-ins, ``-N`` for user chains."""
    chains: list[str] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] in ("-P", "-N") and parts[1] not in chains:
            chains.append(parts[1])
    return chains


def _parse_ebtables_chains(output: str) -> list[str]:
    chains: list[str] = []
    for line in output.splitlines():
        m = _EBTABLES_CHAIN.match(line.strip())
        if m and m.group(1) not in chains:
            chains.append(m.group(1))
    return chains
