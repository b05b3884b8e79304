"""Read candidate rule lines from the ``*.rules`` fragments in the config directory."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from fwrules.config import RULES_SUFFIX
from fwrules.exceptions import ConfigurationError
from fwrules.rules.models import PLACEHOLDER_SIGIL, RuleLine

logger = logging.getLogger(__name__)


class RuleSource:
    """Enumerates rule fragment files and yields their placeholder lines."""

    def __init__(self, directory: str | Path, suffix: str = RULES_SUFFIX) -> None:
        self.directory = Path(directory)
        self.suffix = suffix

    def files(self) -> list[Path]:
        """Fragment files sorted by name, so ``10-base`` runs before ``20-web``."""
        if not self.directory.is_dir():
            raise ConfigurationError(
                f"Configuration directory not found: {self.directory}"
            )
        return sorted(
            p
            for p in self.directory.iterdir()
            if p.suffix == self.suffix and p.is_file()
        )

    def read(self, path: Path) -> list[RuleLine]:
        """Return the lines of one file that start with the placeholder sigil."""
        lines: list[RuleLine] = []
        text = path.read_text(encoding="utf-8", errors="replace")
        for lineno, raw in enumerate(text.splitlines(), start=1):
            stripped = raw.strip()
            if not stripped.startswith(PLACEHOLDER_SIGIL):
                continue
            lines.append(RuleLine(text=stripped, source=path.name, lineno=lineno))
        logger.debug("Read %d candidate lines from %s", len(lines), path)
        return lines

    def __iter__(self) -> Iterator[tuple[Path, list[RuleLine]]]:
        for path in self.files():
            yield path, self.read(path)
