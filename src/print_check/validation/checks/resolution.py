"""Image resolution (DPI) check.

The effective resolution of a placement is derived from its transform: the
image's unit square is mapped by the CTM, so the rendered width and height
are the lengths of the CTM's (a, b) and (c, d) columns. Both lengths are
invariant under rotation; shear only lengthens (c, d), which lowers dpi_y.
The smaller of the two axes is reported.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from print_check.core.enums import CheckId, CheckStatus
from print_check.core.utils import pt_to_inch, round_half_up
from print_check.document import Device, DocumentModel, ImageXObject, Matrix
from ..config import CHECK_NAMES, DPI_WARN_RATIO
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions

logger = logging.getLogger(__name__)

MAX_SUMMARY_ITEMS = 3


@dataclass(frozen=True)
class ImagePlacement:
    """One drawing of an image on a page."""

    name: str
    page: int
    pixel_width: int
    pixel_height: int
    ctm: Matrix

    @property
    def rendered_size_pt(self):
        a, b, c, d, _, _ = self.ctm
        return math.hypot(a, b), math.hypot(c, d)

    def effective_dpi(self) -> Optional[float]:
        """``min(dpi_x, dpi_y)``, or None for degenerate placements."""
        width_pt, height_pt = self.rendered_size_pt
        if width_pt <= 0 or height_pt <= 0 or self.pixel_width <= 0 or self.pixel_height <= 0:
            return None
        dpi_x = self.pixel_width / pt_to_inch(width_pt)
        dpi_y = self.pixel_height / pt_to_inch(height_pt)
        return min(dpi_x, dpi_y)


class PlacementDevice(Device):
    """Records raster image placements; stencil masks are not raster content."""

    def __init__(self) -> None:
        self.page = 0
        self.placements: List[ImagePlacement] = []

    def fill_image(self, image: ImageXObject, ctm: Matrix, alpha: float) -> None:
        self.placements.append(
            ImagePlacement(image.name, self.page, image.pixel_width, image.pixel_height, ctm)
        )


class ResolutionCheck:
    """Validate effective image resolution against min_dpi."""

    check_id = CheckId.RESOLUTION

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        name = CHECK_NAMES[self.check_id]
        threshold = options.min_dpi
        warn_floor = threshold * DPI_WARN_RATIO

        device = PlacementDevice()
        for index in range(document.page_count):
            device.page = index + 1
            document.replay(index, device)

        details: List[CheckDetail] = []
        for placement in device.placements:
            dpi = placement.effective_dpi()
            if dpi is None:
                logger.debug(
                    "Skipping degenerate placement of %s on page %d", placement.name, placement.page
                )
                continue
            size = f"{placement.pixel_width}×{placement.pixel_height}px"
            prefix = f'Image "{placement.name}": {round_half_up(dpi)} DPI'
            if dpi < warn_floor:
                details.append(
                    CheckDetail(f"{prefix} ({size}, min: {threshold})", CheckStatus.FAIL, placement.page)
                )
            elif dpi < threshold:
                details.append(
                    CheckDetail(
                        f"{prefix} ({size}, near threshold: {threshold})",
                        CheckStatus.WARN,
                        placement.page,
                    )
                )
            else:
                details.append(CheckDetail(f"{prefix} ({size})", CheckStatus.PASS, placement.page))

        if not details:
            return CheckResult(name, CheckStatus.PASS, "No raster images found")

        result = CheckResult.from_details(name, details, "")
        if result.status == CheckStatus.PASS:
            summary = f"All images meet {threshold} DPI minimum"
        elif result.status == CheckStatus.WARN:
            summary = f"Some images near DPI threshold ({threshold})"
        else:
            failed = [d for d in details if d.status == CheckStatus.FAIL]
            summary = "; ".join(f"Page {d.page}: {d.message}" for d in failed[:MAX_SUMMARY_ITEMS])
        return CheckResult(name, result.status, summary, result.details)


__all__ = ["ResolutionCheck", "ImagePlacement", "PlacementDevice"]
