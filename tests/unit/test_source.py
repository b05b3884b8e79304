"""Tests for reading rule fragment files."""

from __future__ import annotations

from pathlib import Path

import pytest

from fwrules.exceptions import ConfigurationError
from fwrules.rules.source import RuleSource


def test_files_sorted_and_filtered(rules_dir: Path, write_rules):
    write_rules("20-web.rules", "")
    write_rules("10-base.rules", "")
    write_rules("README", "")
    write_rules("30-old.rules.bak", "")
    (rules_dir / "sub.rules").mkdir()

    names = [p.name for p in RuleSource(rules_dir).files()]
    assert names == ["10-base.rules", "20-web.rules"]


def test_only_placeholder_lines_are_forwarded(rules_dir: Path, write_rules):
    path = write_rules(
        "10-base.rules",
        "# comment\n"
        "\n"
        "${ipt4} -A INPUT -i lo -j ACCEPT\n"
        "echo hello\n"
        "   ${ipt6} -A INPUT -i lo -j ACCEPT   \n",
    )
    lines = RuleSource(rules_dir).read(path)
    assert [(l.lineno, l.text) for l in lines] == [
        (3, "${ipt4} -A INPUT -i lo -j ACCEPT"),
        (5, "${ipt6} -A INPUT -i lo -j ACCEPT"),
    ]
    assert all(l.source == "10-base.rules" for l in lines)


def test_iteration_yields_files_in_order(rules_dir: Path, write_rules):
    write_rules("b.rules", "${ipt4} -A INPUT -j b\n")
    write_rules("a.rules", "${ipt4} -A INPUT -j a\n")
    order = [path.name for path, _ in RuleSource(rules_dir)]
    assert order == ["a.rules", "b.rules"]


def test_missing_directory(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="not found"):
        RuleSource(tmp_path / "missing").files()
