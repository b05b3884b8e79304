"""Per-family exclusion lists: chains that teardown must leave alone."""

from __future__ import annotations

import logging
from pathlib import Path

from fwrules.rules.models import BUILTIN_CHAINS

logger = logging.getLogger(__name__)


def load_exclusions(path: str | Path) -> frozenset[str]:
    """Read one chain name per line; a missing file is an empty list.

    Blank lines and ``#`` comments are ignored. The built-in chain names
    are always part of the result.
    """
    path = Path(path)
    names: set[str] = set(BUILTIN_CHAINS)
    if not path.is_file():
        logger.debug("No exclusion file at %s", path)
        return frozenset(names)

    listed: set[str] = set()
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.split("#", 1)[0].strip()
        if line:
            listed.add(line)
    logger.debug("Loaded %d exclusions from %s", len(listed), path)
    return frozenset(names | listed)
