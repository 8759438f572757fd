"""Core utility functions for print-check.

This module provides shared unit conversions and status helpers used across
the project.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Optional, Tuple

from print_check.core.enums import CheckStatus

PT_PER_INCH = 72.0
MM_PER_INCH = 25.4
PT_TO_MM = MM_PER_INCH / PT_PER_INCH

_PAGE_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[xX]\s*(\d+(?:\.\d+)?)\s*$")


def pt_to_mm(points: float) -> float:
    """Convert PDF user-space points to millimetres."""
    return points * PT_TO_MM


def pt_to_inch(points: float) -> float:
    """Convert PDF user-space points to inches."""
    return points / PT_PER_INCH


def worst_status(statuses: Iterable[CheckStatus]) -> CheckStatus:
    """Return the most severe status, or PASS for an empty iterable.

    Examples:
        >>> worst_status([CheckStatus.PASS, CheckStatus.WARN])
        <CheckStatus.WARN: 'warn'>
        >>> worst_status([])
        <CheckStatus.PASS: 'pass'>
    """
    worst = CheckStatus.PASS
    for status in statuses:
        if CheckStatus(status).rank > worst.rank:
            worst = CheckStatus(status)
    return worst


def parse_page_size(value: Optional[str]) -> Optional[Tuple[float, float]]:
    """Parse a ``WxH`` page size in millimetres.

    Args:
        value: String such as ``"210x297"``; None or empty returns None.

    Returns:
        ``(width_mm, height_mm)`` tuple, or None if value is empty.

    Raises:
        ValueError: If the value is not of the form ``WxH``.

    Examples:
        >>> parse_page_size("210x297")
        (210.0, 297.0)
    """
    if value is None or not str(value).strip():
        return None
    match = _PAGE_SIZE_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid page size '{value}'. Expected WxH in millimetres, e.g. 210x297")
    return float(match.group(1)), float(match.group(2))


def format_number(value: float) -> str:
    """Format a number without a trailing ``.0`` for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up.

    Examples:
        >>> round_half_up(2.5)
        3
    """
    return int(math.floor(value + 0.5))


__all__ = [
    "PT_PER_INCH",
    "MM_PER_INCH",
    "PT_TO_MM",
    "pt_to_mm",
    "pt_to_inch",
    "worst_status",
    "parse_page_size",
    "format_number",
    "round_half_up",
]
