"""Tests for the firewall service pipeline."""

from __future__ import annotations

import pytest

from fwrules.config import FirewallConfig
from fwrules.exceptions import ConfigurationError, SubsystemError
from fwrules.rules.models import ChainRole, Family, PolicyAction, PolicyMode
from fwrules.service import FirewallService


def _service(config, executor, seen=None):
    return FirewallService(
        config,
        executors={family: executor for family in Family},
        on_command=seen.append if seen is not None else None,
    )


def test_start_tears_down_then_loads(write_rules, make_config, fake_executor):
    write_rules("10-base.rules", "${ipt4} -A INPUT -i lo -j ACCEPT\n")
    executor = fake_executor({Family.PRIMARY: ["INPUT", "OUTPUT", "FORWARD", "OLD"]})
    config = make_config(
        policy_mode=PolicyMode.PSEUDO, policies={ChainRole.INPUT: PolicyAction.DROP}
    )

    _service(config, executor).start()

    kinds = [c[0] for c in executor.calls]
    assert kinds.index("delete") < kinds.index("apply")
    assert executor.chains[Family.PRIMARY] == ["INPUT", "OUTPUT", "FORWARD"]
    assert executor.applied(Family.PRIMARY) == [
        "-P INPUT ACCEPT",
        "-P OUTPUT ACCEPT",
        "-P FORWARD ACCEPT",
        "-A INPUT -i lo -j ACCEPT",
        "-A INPUT -j DROP",
        "-A OUTPUT -j ACCEPT",
        "-A FORWARD -j ACCEPT",
    ]


def test_start_only_touches_enabled_families(make_config, fake_executor):
    executor = fake_executor()
    _service(make_config(enable_bridge=True), executor).start()
    families = {c[1] for c in executor.calls}
    assert families == {Family.PRIMARY, Family.BRIDGE}
    assert executor.applied(Family.BRIDGE) == []


def test_stop_resets_policies(make_config, fake_executor):
    executor = fake_executor()
    seen = []
    deleted = _service(make_config(enable_secondary=True), executor, seen).stop()
    assert set(deleted) == {Family.PRIMARY, Family.SECONDARY}
    assert [c.render() for c in seen] == [
        "iptables -P INPUT ACCEPT",
        "iptables -P OUTPUT ACCEPT",
        "iptables -P FORWARD ACCEPT",
        "ip6tables -P INPUT ACCEPT",
        "ip6tables -P OUTPUT ACCEPT",
        "ip6tables -P FORWARD ACCEPT",
    ]


def test_configuration_error_before_mutation(tmp_path, fake_executor):
    executor = fake_executor()
    config = FirewallConfig(config_dir=tmp_path / "missing")
    with pytest.raises(ConfigurationError):
        _service(config, executor).start()
    assert executor.calls == []


def test_subsystem_error_propagates(write_rules, make_config, fake_executor):
    write_rules("10-base.rules", "${ipt4} -A INPUT -i lo -j ACCEPT\n")
    executor = fake_executor(fail_on=("apply", "-A INPUT -i lo -j ACCEPT"))
    with pytest.raises(SubsystemError):
        _service(make_config(policy_mode=PolicyMode.PSEUDO), executor).restart()
    assert executor.applied(Family.PRIMARY)[-1] == "-P FORWARD ACCEPT"
