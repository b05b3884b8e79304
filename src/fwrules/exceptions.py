"""Exception hierarchy for fwrules.

Validation findings (illegal or malformed rule lines) are never raised;
they are logged and the line is dropped. Everything here is fatal to the
current run.
"""

from __future__ import annotations


class FwrulesError(Exception):
    """Base exception for all fwrules errors."""


class ConfigurationError(FwrulesError):
    """Raised for bad configuration, before any mutation of live state."""


class SubsystemError(FwrulesError):
    """Raised when a packet-filter binary call fails."""

    def __init__(
        self,
        message: str,
        argv: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.argv = argv or []
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self) -> str:
        msg = super().__str__()
        if self.stderr:
            msg = f"{msg}: {self.stderr.strip()}"
        return msg
