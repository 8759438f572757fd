"""Exception types raised by print-check.

File-level problems (a missing or unreadable PDF) are recorded on the file's
report and the batch continues. Configuration problems abort the invocation
before any file is processed.
"""

from __future__ import annotations


class PrintCheckError(Exception):
    """Base class for all print-check errors."""


class DocumentLoadError(PrintCheckError, ValueError):
    """A PDF could not be opened or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to load PDF {path}: {reason}")
        self.path = path
        self.reason = reason


class CheckExecutionError(PrintCheckError):
    """A check could not complete against a loaded document."""

    def __init__(self, check: str, reason: str) -> None:
        super().__init__(reason)
        self.check = check


class OptionValidationError(PrintCheckError, ValueError):
    """The merged configuration is invalid."""


__all__ = [
    "PrintCheckError",
    "DocumentLoadError",
    "CheckExecutionError",
    "OptionValidationError",
]
