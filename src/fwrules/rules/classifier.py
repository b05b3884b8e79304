"""Assign safe rule lines to a family and turn them into commands."""

from __future__ import annotations

import logging
import shlex
from dataclasses import replace

from fwrules.rules.models import Command, Family, RuleLine

logger = logging.getLogger(__name__)

_PLACEHOLDERS = {family.placeholder: family for family in Family}


def classify(line: RuleLine) -> RuleLine:
    """Return ``line`` with its family set, or left as None when unrecognized."""
    parts = line.text.split(None, 1)
    if not parts:
        return line
    family = _PLACEHOLDERS.get(parts[0])
    if family is None:
        logger.debug(
            "Discarding %s:%d: unknown placeholder %r", line.source, line.lineno, parts[0]
        )
        return line
    return replace(line, family=family)


def to_command(line: RuleLine) -> Command | None:
    """Build the argv for a classified line; None if it cannot be split."""
    if line.family is None:
        return None
    parts = line.text.split(None, 1)
    rest = parts[1] if len(parts) > 1 else ""
    try:
        args = tuple(shlex.split(rest, comments=False, posix=True))
    except ValueError as e:
        logger.warning(
            "Malformed line %s:%d (%s): %s", line.source, line.lineno, e, line.text
        )
        return None
    if not args:
        logger.debug("Discarding %s:%d: no arguments", line.source, line.lineno)
        return None
    return Command(family=line.family, args=args)
