"""PDF/X compliance detection.

Detection only: the check reports the declared PDF/X version and output
intents and never warns or fails.
"""

from __future__ import annotations

from typing import List, Optional

from print_check.core.enums import CheckId, CheckStatus
from print_check.document import DocumentModel
from ..config import CHECK_NAMES
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions

NOT_DETECTED = "No PDF/X compliance detected"


class PdfxComplianceCheck:
    """Report PDF/X version and OutputIntents."""

    check_id = CheckId.PDFX

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        name = CHECK_NAMES[self.check_id]
        details: List[CheckDetail] = []
        version = document.info_string("GTS_PDFXVersion")
        condition: Optional[str] = None

        if version:
            details.append(CheckDetail(f"PDF/X version: {version}", CheckStatus.PASS))

        for intent in document.output_intents():
            subtype = intent["subtype"] or "unknown"
            is_pdfx = subtype.startswith("GTS_PDFX")
            parts = [subtype] + [
                intent[key]
                for key in ("condition_identifier", "info", "registry_name")
                if intent[key]
            ]
            label = "PDF/X OutputIntent" if is_pdfx else "OutputIntent"
            details.append(CheckDetail(f"{label}: {' — '.join(parts)}", CheckStatus.PASS))
            if is_pdfx and intent["condition_identifier"]:
                condition = intent["condition_identifier"]

        if not details:
            return CheckResult(
                name, CheckStatus.PASS, NOT_DETECTED, (CheckDetail(NOT_DETECTED, CheckStatus.PASS),)
            )

        if version and condition:
            summary = f"{version} ({condition})"
        elif version:
            summary = version
        elif condition:
            summary = f"PDF/X ({condition})"
        else:
            summary = NOT_DETECTED
        return CheckResult(name, CheckStatus.PASS, summary, tuple(details))


__all__ = ["PdfxComplianceCheck"]
