"""Transparency check.

Live transparency must be flattened before output on many workflows. The
check reports it page by page and never fails.

An image carrying its own /SMask is reported as a soft mask alongside
ExtGState soft masks. An alpha channel still needs flattening, so it is not
told apart from a luminosity or alpha group mask.
"""

from __future__ import annotations

from typing import List

from print_check.core.enums import CheckId, CheckStatus
from print_check.core.utils import format_number
from print_check.document import Device, DocumentModel, ImageXObject, Matrix
from ..config import CHECK_NAMES
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions


class TransparencyDevice(Device):
    """Records blend modes, alpha values and soft masks on one page."""

    def __init__(self) -> None:
        self.blend_modes: List[str] = []
        self.alphas: List[float] = []
        self.soft_mask = False

    def _alpha(self, alpha: float) -> None:
        if alpha < 1 and alpha not in self.alphas:
            self.alphas.append(alpha)

    def fill_path(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._alpha(alpha)

    def stroke_path(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._alpha(alpha)

    def fill_text(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._alpha(alpha)

    def stroke_text(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._alpha(alpha)

    def fill_image_mask(self, image: ImageXObject, ctm: Matrix, colorspace, color, alpha) -> None:
        self._alpha(alpha)

    def fill_image(self, image: ImageXObject, ctm: Matrix, alpha: float) -> None:
        self._alpha(alpha)

    def begin_group(self, bbox, colorspace, isolated, knockout, blend_mode, alpha) -> None:
        if blend_mode != "Normal" and blend_mode not in self.blend_modes:
            self.blend_modes.append(blend_mode)
        self._alpha(alpha)

    def begin_mask(self, bbox, luminosity, colorspace, color) -> None:
        self.soft_mask = True

    def describe(self) -> List[str]:
        parts = []
        if self.blend_modes:
            parts.append(f"Blend mode ({', '.join(self.blend_modes)})")
        if self.alphas:
            parts.append(f"Alpha transparency ({format_number(min(self.alphas))})")
        if self.soft_mask:
            parts.append("soft mask")
        return parts


class TransparencyCheck:
    """Report pages using blend modes, alpha or soft masks."""

    check_id = CheckId.TRANSPARENCY

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        details: List[CheckDetail] = []
        pages: List[int] = []
        for index in range(document.page_count):
            page = index + 1
            device = TransparencyDevice()
            document.replay(index, device)
            parts = device.describe()
            if parts:
                pages.append(page)
                details.append(CheckDetail(f"Page {page}: {', '.join(parts)}", CheckStatus.WARN, page))

        if pages:
            label = "page" if len(pages) == 1 else "pages"
            summary = f"Transparency detected on {label} {', '.join(str(p) for p in pages)}"
        else:
            summary = "No transparency detected"
        return CheckResult.from_details(CHECK_NAMES[self.check_id], details, summary)


__all__ = ["TransparencyCheck", "TransparencyDevice"]
