"""Page size consistency check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from print_check.core.enums import CheckId, CheckStatus
from print_check.core.utils import format_number, pt_to_mm
from print_check.document import DocumentModel
from ..config import CHECK_NAMES, PAGE_SIZE_TOLERANCE_MM
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions


@dataclass(frozen=True)
class PageGeometry:
    width_mm: float
    height_mm: float

    def matches(self, width_mm: float, height_mm: float) -> bool:
        return (
            abs(self.width_mm - width_mm) <= PAGE_SIZE_TOLERANCE_MM
            and abs(self.height_mm - height_mm) <= PAGE_SIZE_TOLERANCE_MM
        )

    def __str__(self) -> str:
        return f"{self.width_mm:.0f} × {self.height_mm:.0f} mm"


def page_geometry(document: DocumentModel, index: int) -> PageGeometry:
    """Trimmed size of a page: TrimBox when it differs from MediaBox, else MediaBox."""
    media = document.media_box(index)
    trim = document.trim_box(index)
    box = trim if trim != media else media
    return PageGeometry(pt_to_mm(box.width), pt_to_mm(box.height))


class PageSizeCheck:
    """Validate page sizes against an expected size or against page 1."""

    check_id = CheckId.PAGESIZE

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        name = CHECK_NAMES[self.check_id]
        pages = [page_geometry(document, i) for i in range(document.page_count)]
        if not pages:
            return CheckResult(name, CheckStatus.PASS, "No pages found")

        expected = options.expected_page_size
        details: List[CheckDetail] = []
        for number, geometry in enumerate(pages, start=1):
            if expected is not None:
                if geometry.matches(*expected):
                    details.append(CheckDetail(f"Page {number}: {geometry}", CheckStatus.PASS, number))
                else:
                    w, h = (format_number(v) for v in expected)
                    details.append(
                        CheckDetail(
                            f"Page {number}: {geometry} (expected {w}x{h} mm)",
                            CheckStatus.FAIL,
                            number,
                        )
                    )
            else:
                reference = pages[0]
                consistent = geometry.matches(reference.width_mm, reference.height_mm)
                status = CheckStatus.PASS if consistent else CheckStatus.WARN
                details.append(CheckDetail(f"Page {number}: {geometry}", status, number))

        result = CheckResult.from_details(name, details, "")
        if result.status == CheckStatus.PASS:
            summary = f"All pages are {pages[0]}"
        elif result.status == CheckStatus.WARN:
            summary = "Inconsistent page sizes detected"
        else:
            summary = "Page size mismatch"
        return CheckResult(name, result.status, summary, result.details)


__all__ = ["PageSizeCheck", "PageGeometry", "page_geometry"]
