"""Severity overrides applied to raw check results."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Union

from print_check.core.enums import CheckStatus, SeverityOverride
from .models import CheckResult


def apply_severity_override(
    result: CheckResult, override: Union[SeverityOverride, str, None]
) -> CheckResult:
    """Downgrade a result according to its check's severity override.

    Args:
        result: Raw result produced by a check.
        override: ``fail`` or None leaves the result untouched; ``warn`` turns a
            failing result into a warning.

    Returns:
        The same object when nothing changes, otherwise a new CheckResult whose
        status is ``warn`` and whose failing details are rewritten to ``warn``.

    Raises:
        ValueError: If override is ``off``. Disabled checks are removed before
            they run and never reach this function.

    Examples:
        >>> failing = CheckResult("Fonts", CheckStatus.FAIL, "1 font(s) not embedded")
        >>> apply_severity_override(failing, "warn").status
        <CheckStatus.WARN: 'warn'>
    """
    level: Optional[SeverityOverride] = SeverityOverride(override) if override else None
    if level is None or level == SeverityOverride.FAIL:
        return result
    if level == SeverityOverride.OFF:
        raise ValueError(f"Check '{result.check}' is disabled and must not be run")

    if result.status != CheckStatus.FAIL:
        return result
    details = tuple(
        replace(d, status=CheckStatus.WARN) if d.status == CheckStatus.FAIL else d
        for d in result.details
    )
    return replace(result, status=CheckStatus.WARN, details=details)


__all__ = ["apply_severity_override"]
