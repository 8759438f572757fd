"""Print-readiness validation for print-check.

This module provides the check engine:

- **Models**: CheckDetail, CheckResult, FileReport, BatchReport - result data structures and renderers
- **Checks**: Individual check implementations (see validation/checks/)
- **Config**: Thresholds, profiles and display names (import from .config)
- **Options**: CheckOptions and the profile/config/CLI resolver
- **Severity**: apply_severity_override() - per-check downgrade of failures
- **Registry**: run_checks(), run_file(), run_batch() - check orchestration and execution

Public API:
    CheckOptions: Canonical options consumed by every check
    resolve: Resolve options, severity and check selection once per invocation
    run_batch: Check a list of PDF files
    BatchReport: Aggregated results with text, JSON and Markdown renderers

Usage:
    >>> from print_check.validation import resolve, run_batch
    >>> resolved = resolve(profile="magazine", cli={"min_dpi": 350})
    >>> report = run_batch(["flyer.pdf"], resolved)
    >>> print(report.to_console())

For implementation details:
    - See validation/checks/__init__.py for check interface conventions
    - See validation/config.py for thresholds and profiles
    - See validation/registry.py for check orchestration
"""

from __future__ import annotations

from print_check.core.enums import CheckId, CheckStatus, SeverityOverride

from .models import BatchReport, CheckDetail, CheckResult, FileReport
from .options import (
    CheckOptions,
    OptionsBuilder,
    ResolvedOptions,
    merge_severity,
    parse_severity_arg,
    resolve,
    select_checks,
)
from .registry import ALL_CHECKS, run_batch, run_checks, run_file
from .severity import apply_severity_override

__all__ = [
    # Data models
    "CheckDetail",
    "CheckResult",
    "FileReport",
    "BatchReport",
    # Options
    "CheckOptions",
    "OptionsBuilder",
    "ResolvedOptions",
    "merge_severity",
    "parse_severity_arg",
    "resolve",
    "select_checks",
    # Runner functions
    "ALL_CHECKS",
    "run_checks",
    "run_file",
    "run_batch",
    "apply_severity_override",
    # Enums
    "CheckId",
    "CheckStatus",
    "SeverityOverride",
]
