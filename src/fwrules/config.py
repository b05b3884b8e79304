"""Global configuration: config directory, optional settings file, env vars, defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

from fwrules.exceptions import ConfigurationError
from fwrules.rules.models import ChainRole, Family, PolicyAction, PolicyMode

DEFAULT_CONFIG_DIR = Path("/etc/fwrules")
SETTINGS_FILE = "fwrules.yaml"
RULES_SUFFIX = ".rules"
EXCLUDE_SUFFIX = ".exclude"

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _default_config_dir() -> Path:
    env = os.environ.get("FWRULES_CONFIG_DIR")
    if env:
        return Path(env)
    return DEFAULT_CONFIG_DIR


def _default_policies() -> dict[ChainRole, PolicyAction]:
    return {role: PolicyAction.ACCEPT for role in ChainRole}


@dataclass(frozen=True)
class FirewallConfig:
    """Resolved configuration record handed to the compiler and lifecycle code."""

    config_dir: Path = field(default_factory=_default_config_dir)
    enable_secondary: bool = False
    enable_bridge: bool = False
    policy_mode: PolicyMode = PolicyMode.TRUE
    policies: dict[ChainRole, PolicyAction] = field(default_factory=_default_policies)
    report_illegal: bool = False
    log_level: str = "warning"
    dry_run: bool = False

    @property
    def enabled_families(self) -> tuple[Family, ...]:
        families = [Family.PRIMARY]
        if self.enable_secondary:
            families.append(Family.SECONDARY)
        if self.enable_bridge:
            families.append(Family.BRIDGE)
        return tuple(families)

    def is_enabled(self, family: Family) -> bool:
        return family in self.enabled_families

    def exclude_path(self, family: Family) -> Path:
        return self.config_dir / f"{family.binary}{EXCLUDE_SUFFIX}"

    def with_overrides(self, **changes) -> FirewallConfig:
        """Return a copy with the non-None keyword arguments applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        policies = changes.pop("policies", None)
        config = replace(self, **changes)
        if policies:
            merged = dict(self.policies)
            merged.update(policies)
            config = replace(config, policies=merged)
        return config

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())

    @classmethod
    def load(cls, config_dir: str | Path | None = None) -> FirewallConfig:
        """Load config from defaults, ``fwrules.yaml`` and environment variables."""
        config = cls() if config_dir is None else cls(config_dir=Path(config_dir))

        settings_path = config.config_dir / SETTINGS_FILE
        if settings_path.is_file():
            config = config.with_overrides(**_load_settings(settings_path))

        env_mode = os.environ.get("FWRULES_POLICY_MODE")
        if env_mode:
            config = replace(config, policy_mode=parse_policy_mode(env_mode))

        env_level = os.environ.get("FWRULES_LOG_LEVEL")
        if env_level:
            config = replace(config, log_level=parse_log_level(env_level))

        return config

    def check(self) -> None:
        """Raise ConfigurationError if the config cannot drive a run."""
        if not self.config_dir.is_dir():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )


def parse_policy_action(value: str) -> PolicyAction:
    try:
        return PolicyAction(str(value).upper())
    except ValueError:
        raise ConfigurationError(f"Invalid policy action: {value!r}") from None


def parse_policy_mode(value: str | bool) -> PolicyMode:
    if isinstance(value, bool):
        return PolicyMode.TRUE if value else PolicyMode.PSEUDO
    try:
        return PolicyMode(str(value).lower())
    except ValueError:
        raise ConfigurationError(f"Invalid policy mode: {value!r}") from None


def parse_log_level(value: str) -> str:
    level = str(value).lower()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level: {value!r}")
    return level


def _load_settings(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must be a mapping")

    settings: dict = {}
    if "ipv6" in data:
        settings["enable_secondary"] = bool(data["ipv6"])
    if "bridge" in data:
        settings["enable_bridge"] = bool(data["bridge"])
    if "policy_mode" in data:
        settings["policy_mode"] = parse_policy_mode(data["policy_mode"])
    if "report_illegal" in data:
        settings["report_illegal"] = bool(data["report_illegal"])
    if "log_level" in data:
        settings["log_level"] = parse_log_level(data["log_level"])

    policies_data = data.get("policies", {}) or {}
    if not isinstance(policies_data, dict):
        raise ConfigurationError(f"{path}: 'policies' must be a mapping")
    policies: dict[ChainRole, PolicyAction] = {}
    for role_name, action in policies_data.items():
        try:
            role = ChainRole(str(role_name).upper())
        except ValueError:
            raise ConfigurationError(
                f"{path}: unknown chain {role_name!r} in 'policies'"
            ) from None
        policies[role] = parse_policy_action(action)
    if policies:
        settings["policies"] = policies

    return settings
