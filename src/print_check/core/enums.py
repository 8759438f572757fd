"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class CheckStatus(str, Enum):
    """Outcome of a check or of a single finding.

    Values are strings to ease serialization and CLI interchange. Members are
    declared in ascending severity order: pass < warn < fail.
    """

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {CheckStatus.PASS: 0, CheckStatus.WARN: 1, CheckStatus.FAIL: 2}


class CheckId(str, Enum):
    """Identifiers of the built-in checks.

    The set is closed; declaration order is the default run order.
    """

    BLEED = "bleed"
    FONTS = "fonts"
    COLORSPACE = "colorspace"
    RESOLUTION = "resolution"
    PDFX = "pdfx"
    TAC = "tac"
    TRANSPARENCY = "transparency"
    PAGESIZE = "pagesize"


class SeverityOverride(str, Enum):
    """Per-check severity adjustment requested by config or CLI."""

    FAIL = "fail"
    WARN = "warn"
    OFF = "off"


class ColorSpaceMode(str, Enum):
    """Expected output color space."""

    CMYK = "cmyk"
    ANY = "any"


class OutputFormat(str, Enum):
    """Report rendering formats."""

    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"


__all__ = ["CheckStatus", "CheckId", "SeverityOverride", "ColorSpaceMode", "OutputFormat"]
