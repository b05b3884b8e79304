"""Default-policy and terminal-jump commands for the built-in chains.

In true mode the native chain policy is set before any user rule (``-P``
is not ordered relative to rules). In pseudo mode the built-in chains stay
at ACCEPT and a terminal ``-j`` rule is appended after every user rule, so
its position matters.
"""

from __future__ import annotations

from fwrules.rules.models import (
    ChainRole,
    Command,
    Family,
    PolicyAction,
    PolicyMode,
)


class PolicyPlanner:
    """Produces policy commands from one set of role actions for the whole run."""

    def __init__(
        self,
        mode: PolicyMode,
        policies: dict[ChainRole, PolicyAction],
    ) -> None:
        self.mode = mode
        self.policies = policies

    def _action(self, role: ChainRole) -> PolicyAction:
        return self.policies.get(role, PolicyAction.ACCEPT)

    def policy_commands(self, family: Family) -> list[Command]:
        """Commands for ``family`` in INPUT, OUTPUT, FORWARD order."""
        if not family.has_policy:
            return []
        if self.mode is PolicyMode.TRUE:
            return [
                Command(family, ("-P", role.value, self._action(role).value))
                for role in ChainRole
            ]
        return [
            Command(family, ("-A", role.value, "-j", self._action(role).value))
            for role in ChainRole
        ]

    def prefix(self, family: Family) -> list[Command]:
        if self.mode is PolicyMode.TRUE:
            return self.policy_commands(family)
        return []

    def suffix(self, family: Family) -> list[Command]:
        if self.mode is PolicyMode.PSEUDO:
            return self.policy_commands(family)
        return []


def reset_commands(family: Family) -> list[Command]:
    """Put every built-in chain of ``family`` back to an ACCEPT policy."""
    if not family.has_policy:
        return []
    return [
        Command(family, ("-P", role.value, PolicyAction.ACCEPT.value))
        for role in ChainRole
    ]
