"""Bleed and trim geometry check.

A page needs a TrimBox for the finisher to know where to cut, and artwork
extending past it on every side by at least the required bleed.
"""

from __future__ import annotations

from typing import Dict, List

from print_check.core.enums import CheckId, CheckStatus
from print_check.core.utils import format_number, pt_to_mm
from print_check.document import Box, DocumentModel
from ..config import BLEED_EPSILON_MM, CHECK_NAMES
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions


def bleed_margins(trim: Box, reference: Box) -> Dict[str, float]:
    """Return the ``left/right/top/bottom`` margins of trim inside reference, in mm."""
    return {
        "left": pt_to_mm(trim.x0 - reference.x0),
        "right": pt_to_mm(reference.x1 - trim.x1),
        "top": pt_to_mm(reference.y1 - trim.y1),
        "bottom": pt_to_mm(trim.y0 - reference.y0),
    }


class BleedTrimCheck:
    """Validate TrimBox presence and bleed on every page."""

    check_id = CheckId.BLEED

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        required = options.bleed_mm
        details: List[CheckDetail] = []

        for index in range(document.page_count):
            page = index + 1
            media = document.media_box(index)
            trim = document.trim_box(index)
            bleed = document.bleed_box(index)
            has_trim = trim != media
            has_bleed = bleed != media

            if not has_trim and not has_bleed:
                details.append(
                    CheckDetail(
                        "No TrimBox or BleedBox defined (only MediaBox found)", CheckStatus.WARN, page
                    )
                )
                continue
            if not has_trim:
                details.append(CheckDetail("No TrimBox defined", CheckStatus.WARN, page))
                continue

            margins = bleed_margins(trim, bleed if has_bleed else media)
            short = {side: mm for side, mm in margins.items() if mm < required - BLEED_EPSILON_MM}
            if short:
                sides = ", ".join(f"{side}: {mm:.1f}mm" for side, mm in short.items())
                details.append(
                    CheckDetail(
                        f"Insufficient bleed (need {format_number(required)}mm): {sides}",
                        CheckStatus.FAIL,
                        page,
                    )
                )
            else:
                details.append(
                    CheckDetail(f"Bleed OK (min {min(margins.values()):.1f}mm)", CheckStatus.PASS, page)
                )

        result = CheckResult.from_details(CHECK_NAMES[self.check_id], details, "")
        if result.status == CheckStatus.PASS:
            summary = f"All pages have {format_number(required)}mm+ bleed"
        elif result.status == CheckStatus.WARN:
            summary = "TrimBox or BleedBox missing on some pages"
        else:
            summary = "Insufficient bleed on some pages"
        return CheckResult(result.check, result.status, summary, result.details)


__all__ = ["BleedTrimCheck", "bleed_margins"]
