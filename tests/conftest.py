"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from fwrules.config import FirewallConfig
from fwrules.exceptions import SubsystemError
from fwrules.rules.models import BUILTIN_CHAINS, Command, Family


class FakeExecutor:
    """In-memory stand-in for the live packet-filter subsystem.

    ``chains`` seeds the filter table per family and ``tables`` seeds the
    other tables per ``(family, table)``; unseeded tables hold only their
    built-in chains. ``jumps`` maps a chain to the chains it jumps to, and
    ``delete`` refuses a chain still referenced by an unflushed chain, the
    way iptables answers "Too many links".
    """

    def __init__(
        self,
        chains: dict[Family, list[str]] | None = None,
        fail_on: tuple[str, str] | None = None,
        tables: dict[tuple[Family, str], list[str]] | None = None,
        jumps: dict[str, list[str]] | None = None,
    ) -> None:
        chains = chains or {}
        self.chains = {
            family: list(chains.get(family, ["INPUT", "OUTPUT", "FORWARD"]))
            for family in Family
        }
        self.tables = {
            (family, table): list((tables or {}).get((family, table), builtins))
            for family in Family
            for table, builtins in family.tables.items()
        }
        self.jumps = {src: set(dst) for src, dst in (jumps or {}).items()}
        self.fail_on = fail_on
        self.calls: list[tuple] = []

    def _live(self, family: Family, table: str) -> list[str]:
        if table == "filter":
            return self.chains[family]
        return self.tables[(family, table)]

    def _record(self, *call) -> None:
        if self.fail_on and call[0] == self.fail_on[0] and call[2] == self.fail_on[1]:
            raise SubsystemError(f"{call[0]} {call[2]} failed")
        self.calls.append(call)

    def enumerate_chains(self, family: Family, table: str = "filter") -> list[str]:
        self.calls.append(("enumerate", family, table))
        return list(self._live(family, table))

    def flush(self, family: Family, chain: str, table: str = "filter") -> None:
        self._record("flush", family, _qualify(table, chain))
        self.jumps.pop(chain, None)

    def delete(self, family: Family, chain: str, table: str = "filter") -> None:
        live = self._live(family, table)
        if chain in BUILTIN_CHAINS or chain not in live:
            raise SubsystemError(f"cannot delete {chain}")
        if any(chain in targets for targets in self.jumps.values()):
            raise SubsystemError(f"Too many links. ({chain})")
        self._record("delete", family, _qualify(table, chain))
        live.remove(chain)

    def flush_table(self, family: Family, table: str, chain: str | None = None) -> None:
        self._record("flush_table", family, f"{table}:{chain}")
        self.jumps.pop(chain, None)

    def apply(self, family: Family, command: Command) -> None:
        self._record("apply", family, " ".join(command.args))

    def applied(self, family: Family) -> list[str]:
        return [c[2] for c in self.calls if c[0] == "apply" and c[1] is family]


def _qualify(table: str, chain: str) -> str:
    return chain if table == "filter" else f"{table}:{chain}"


@pytest.fixture
def rules_dir(tmp_path: Path) -> Path:
    d = tmp_path / "fwrules"
    d.mkdir()
    return d


@pytest.fixture
def write_rules(rules_dir: Path) -> Callable[[str, str], Path]:
    def _write(name: str, content: str) -> Path:
        path = rules_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config(rules_dir: Path) -> Callable[..., FirewallConfig]:
    def _make(**overrides) -> FirewallConfig:
        return FirewallConfig(config_dir=rules_dir).with_overrides(**overrides)

    return _make


@pytest.fixture
def fake_executor() -> Callable[..., FakeExecutor]:
    return FakeExecutor
