"""Rule data models: immutable dataclasses shared by the compiler and lifecycle code."""

from __future__ import annotations

import enum
import shlex
from dataclasses import dataclass, field

PLACEHOLDER_SIGIL = "${"


class Family(enum.Enum):
    """Packet-filter family a rule line targets."""

    PRIMARY = "ipt4"
    SECONDARY = "ipt6"
    BRIDGE = "ebt"

    @property
    def placeholder(self) -> str:
        return f"${{{self.value}}}"

    @property
    def binary(self) -> str:
        return _BINARIES[self]

    @property
    def tables(self) -> dict[str, tuple[str, ...]]:
        """Built-in chains of the non-filter tables, keyed by table name."""
        return _TABLES[self]

    @property
    def has_policy(self) -> bool:
        """Bridge filters carry no default-policy or terminal-jump commands."""
        return self is not Family.BRIDGE


_BINARIES = {
    Family.PRIMARY: "iptables",
    Family.SECONDARY: "ip6tables",
    Family.BRIDGE: "ebtables",
}

_TABLES = {
    Family.PRIMARY: {
        "nat": ("PREROUTING", "INPUT", "OUTPUT", "POSTROUTING"),
        "mangle": ("PREROUTING", "INPUT", "FORWARD", "OUTPUT", "POSTROUTING"),
        "raw": ("PREROUTING", "OUTPUT"),
    },
    Family.SECONDARY: {
        "nat": ("PREROUTING", "INPUT", "OUTPUT", "POSTROUTING"),
        "mangle": ("PREROUTING", "INPUT", "FORWARD", "OUTPUT", "POSTROUTING"),
        "raw": ("PREROUTING", "OUTPUT"),
    },
    Family.BRIDGE: {
        "nat": ("PREROUTING", "OUTPUT", "POSTROUTING"),
        "broute": ("BROUTING",),
    },
}


class PolicyAction(enum.Enum):
    """Verdict applied by a default policy or terminal jump."""

    ACCEPT = "ACCEPT"
    DROP = "DROP"
    REJECT = "REJECT"
    QUEUE = "QUEUE"


class ChainRole(enum.Enum):
    """Built-in chains, in the fixed order policy commands are emitted."""

    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    FORWARD = "FORWARD"


BUILTIN_CHAINS: frozenset[str] = frozenset(role.value for role in ChainRole)


class PolicyMode(enum.Enum):
    """How the configured PolicyActions are enforced."""

    TRUE = "true"
    PSEUDO = "pseudo"


@dataclass(frozen=True)
class Command:
    """A validated operation for one family's binary.

    ``args`` never contains the binary itself and is passed to the executor
    as an argv list, so it is never re-interpreted by a shell.
    """

    family: Family
    args: tuple[str, ...]

    def render(self) -> str:
        return shlex.join((self.family.binary, *self.args))


@dataclass(frozen=True)
class RuleLine:
    """A candidate line read from a rule fragment file."""

    text: str
    source: str = ""
    lineno: int = 0
    family: Family | None = None
    valid: bool = True


@dataclass(frozen=True)
class CommandPlan:
    """Ordered commands for a single family."""

    family: Family
    commands: tuple[Command, ...] = ()

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self):
        return iter(self.commands)

    def rendered(self) -> list[str]:
        return [c.render() for c in self.commands]


@dataclass(frozen=True)
class CompiledRuleset:
    """The three per-family plans produced by one compile run."""

    primary: CommandPlan = field(default_factory=lambda: CommandPlan(Family.PRIMARY))
    secondary: CommandPlan = field(
        default_factory=lambda: CommandPlan(Family.SECONDARY)
    )
    bridge: CommandPlan = field(default_factory=lambda: CommandPlan(Family.BRIDGE))

    def plan(self, family: Family) -> CommandPlan:
        return {
            Family.PRIMARY: self.primary,
            Family.SECONDARY: self.secondary,
            Family.BRIDGE: self.bridge,
        }[family]

    def __iter__(self):
        return iter((self.primary, self.secondary, self.bridge))
