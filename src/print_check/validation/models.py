"""Validation data models.

This module defines core data structures for check results:
- CheckDetail: A single finding of a check
- CheckResult: Outcome of a single check against one document
- FileReport: All results for one file (or the file-level error)
- BatchReport: Aggregated file reports with text, JSON and Markdown renderers
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from print_check.core.enums import CheckStatus
from print_check.core.utils import worst_status

_STATUS_ICON = {
    CheckStatus.PASS: "✅",
    CheckStatus.WARN: "⚠️",
    CheckStatus.FAIL: "❌",
}


@dataclass(frozen=True)
class CheckDetail:
    """One finding reported by a check.

    Attributes:
        message: Human-readable description of the finding.
        status: Status of this finding.
        page: 1-based page number, None for document-level findings.

    Examples:
        >>> CheckDetail(message='Font "Helvetica" is not embedded', status=CheckStatus.FAIL, page=1)
    """

    message: str
    status: CheckStatus
    page: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate field constraints."""
        object.__setattr__(self, "status", CheckStatus(self.status))
        if self.page is not None and self.page < 1:
            raise ValueError(f"Invalid page number: {self.page}. Pages are 1-based.")

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {}
        if self.page is not None:
            data["page"] = self.page
        data["message"] = self.message
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class CheckResult:
    """Result of a single check.

    Attributes:
        check: Display name of the check (e.g., "Bleed & Trim").
        status: Overall status; the worst detail status unless the check caps it.
        summary: One-line summary for reports.
        details: Findings in insertion order.

    Examples:
        >>> CheckResult.from_details(
        ...     "Fonts",
        ...     [CheckDetail('Font "Helvetica" is not embedded', CheckStatus.FAIL, page=1)],
        ...     summary="1 font(s) not embedded",
        ... ).status
        <CheckStatus.FAIL: 'fail'>
    """

    check: str
    status: CheckStatus
    summary: str
    details: Tuple[CheckDetail, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", CheckStatus(self.status))
        object.__setattr__(self, "details", tuple(self.details))

    @classmethod
    def from_details(
        cls, check: str, details: Iterable[CheckDetail], summary: str
    ) -> "CheckResult":
        """Build a result whose status is the worst status among details."""
        details = tuple(details)
        return cls(
            check=check,
            status=worst_status(d.status for d in details),
            summary=summary,
            details=details,
        )

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    def to_dict(self) -> Dict[str, object]:
        return {
            "check": self.check,
            "status": self.status.value,
            "summary": self.summary,
            "details": [d.to_dict() for d in self.details],
        }


@dataclass
class FileReport:
    """Check results for one input file.

    Attributes:
        file: File name as shown in reports.
        results: Results in run order (after severity adjustment).
        error: File-level error (not found, unreadable); no results when set.
    """

    file: str
    results: List[CheckResult] = field(default_factory=list)
    error: Optional[str] = None

    def summary(self) -> Dict[str, int]:
        counts = count_by_status(self.results)
        return {
            "passed": counts[CheckStatus.PASS.value],
            "warned": counts[CheckStatus.WARN.value],
            "failed": counts[CheckStatus.FAIL.value],
        }

    def has_failures(self) -> bool:
        """True if any result failed or the file could not be checked."""
        return self.error is not None or any(r.status == CheckStatus.FAIL for r in self.results)

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "file": self.file,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary(),
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    def to_console(self, show_details: bool = False) -> str:
        """Render the console block for this file."""
        rule = "─" * 45
        lines = ["", f" print-check results: {self.file}", rule]

        if self.error is not None:
            lines.append(f" {_STATUS_ICON[CheckStatus.FAIL]} {self.error}")
            lines.append(rule)
            return "\n".join(lines)

        for result in self.results:
            icon = _STATUS_ICON[result.status]
            lines.append(f" {icon} {result.check:<18} {result.summary}")
            if show_details:
                for detail in result.details:
                    prefix = f"Page {detail.page}: " if detail.page is not None else ""
                    lines.append(f"     {_STATUS_ICON[detail.status]} {prefix}{detail.message}")

        lines.append(rule)
        counts = self.summary()
        parts = [
            f"{counts['passed']} passed" if counts["passed"] else "",
            f"{counts['warned']} warned" if counts["warned"] else "",
            f"{counts['failed']} failed" if counts["failed"] else "",
        ]
        lines.append(" " + " · ".join(p for p in parts if p))
        return "\n".join(lines)


@dataclass
class BatchReport:
    """Reports for every file of one invocation."""

    files: List[FileReport] = field(default_factory=list)

    def has_failures(self) -> bool:
        return any(f.has_failures() for f in self.files)

    def totals(self) -> Dict[str, int]:
        totals = {"files": len(self.files), "errors": 0, "passed": 0, "warned": 0, "failed": 0}
        for report in self.files:
            if report.error is not None:
                totals["errors"] += 1
            for key, value in report.summary().items():
                totals[key] += value
        return totals

    def to_json(self) -> str:
        """JSON report: one object for a single file, an array for a batch."""
        payload: object
        if len(self.files) == 1:
            payload = self.files[0].to_dict()
        else:
            payload = [f.to_dict() for f in self.files]
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def to_console(self, show_details: bool = False) -> str:
        blocks = [f.to_console(show_details) for f in self.files]
        if len(self.files) > 1:
            t = self.totals()
            blocks.append(
                f"\nChecked {t['files']} files: {t['passed']} passed, {t['warned']} warned, "
                f"{t['failed']} failed, {t['errors']} unreadable"
            )
        return "\n".join(blocks) + "\n"

    def to_markdown(self) -> str:
        """Generate a Markdown report with one section per file."""
        t = self.totals()
        lines = [
            "# Print Readiness Report",
            "",
            f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "## Summary",
            "",
            f"- **Files:** {t['files']}",
            f"- **Passed:** {t['passed']} ✅",
            f"- **Warned:** {t['warned']} ⚠️" if t["warned"] else f"- **Warned:** {t['warned']}",
            f"- **Failed:** {t['failed']} ❌" if t["failed"] else f"- **Failed:** {t['failed']}",
            "",
        ]
        if t["errors"]:
            lines.insert(-1, f"- **Unreadable files:** {t['errors']} ❌")

        for report in self.files:
            lines.append(f"## {report.file}")
            lines.append("")
            if report.error is not None:
                lines.append(f"❌ {report.error}")
                lines.append("")
                continue
            lines.append("| Check | Status | Summary |")
            lines.append("|---|---|---|")
            for result in report.results:
                lines.append(
                    f"| {result.check} | {_STATUS_ICON[result.status]} {result.status.value} "
                    f"| {result.summary} |"
                )
            lines.append("")
            findings = [r for r in report.results if r.status != CheckStatus.PASS]
            for result in findings:
                lines.append(f"### {_STATUS_ICON[result.status]} {result.check}")
                lines.append("")
                for detail in result.details:
                    if detail.status == CheckStatus.PASS:
                        continue
                    prefix = f"Page {detail.page}: " if detail.page is not None else ""
                    lines.append(f"- {prefix}{detail.message}")
                lines.append("")

        return "\n".join(lines)


def count_by_status(results: Sequence[CheckResult]) -> Dict[str, int]:
    """Count results per status value."""
    counts = {s.value: 0 for s in CheckStatus}
    for r in results:
        counts[r.status.value] += 1
    return counts


__all__ = ["CheckDetail", "CheckResult", "FileReport", "BatchReport", "count_by_status"]
