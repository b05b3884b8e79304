"""Metacharacter blacklist that keeps shell-style injection out of the plan.

This is not a grammar check for the packet-filter tools. A line is dropped
when it contains anything that would let it run a second command if it ever
reached a shell.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from fwrules.rules.models import RuleLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IllegalPattern:
    """A forbidden construct and the regex that detects it."""

    name: str
    regex: re.Pattern[str]


ILLEGAL_PATTERNS: list[IllegalPattern] = [
    IllegalPattern(name="statement_separator", regex=re.compile(r";")),
    IllegalPattern(name="command_substitution", regex=re.compile(r"\$\(")),
    IllegalPattern(name="pipe_or_background", regex=re.compile(r"[|&]")),
    IllegalPattern(name="backtick", regex=re.compile(r"`")),
]


def illegal_matches(text: str) -> list[str]:
    """Names of every illegal pattern found in ``text``."""
    return [p.name for p in ILLEGAL_PATTERNS if p.regex.search(text)]


def is_illegal(text: str) -> bool:
    return any(p.regex.search(text) for p in ILLEGAL_PATTERNS)


class LineValidator:
    """Splits candidate lines into safe and illegal ones, reporting the latter."""

    def __init__(self, report_illegal: bool = False) -> None:
        self.report_illegal = report_illegal

    def check(self, line: RuleLine) -> RuleLine:
        """Return ``line`` with its ``valid`` flag set."""
        if not is_illegal(line.text):
            return line
        if self.report_illegal:
            logger.warning(
                "Illegal line %s:%d (%s): %s",
                line.source,
                line.lineno,
                ", ".join(illegal_matches(line.text)),
                line.text,
            )
        return replace(line, valid=False)

    def validate(self, source: str, lines: list[RuleLine]) -> list[RuleLine]:
        """Return only the safe lines of one file.

        A file holding any illegal line is reported once, whether or not
        per-line reporting is enabled.
        """
        checked = [self.check(line) for line in lines]
        dropped = sum(1 for line in checked if not line.valid)
        if dropped:
            logger.warning(
                "Illegal characters found in %s: %d line(s) dropped", source, dropped
            )
        return [line for line in checked if line.valid]
