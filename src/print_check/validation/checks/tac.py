"""Total ink coverage (TAC) check.

TAC is the sum of the four process inks in percent. Vector CMYK colors are
measured directly; CMYK images are sampled at a stride that keeps the number
of evaluated pixels near TAC_MAX_SAMPLES regardless of image size.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from pypdf.errors import PyPdfError

from print_check.core.enums import CheckId, CheckStatus
from print_check.core.utils import format_number, round_half_up
from print_check.document import ColorSpace, Device, DocumentModel, ImageXObject, Matrix
from ..config import CHECK_NAMES, TAC_MAX_SAMPLES, TAC_WARN_RATIO
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions

logger = logging.getLogger(__name__)


def sample_step(pixel_count: int) -> int:
    """Stride between sampled pixels: ``max(1, floor(pixel_count / TAC_MAX_SAMPLES))``.

    Examples:
        >>> sample_step(4000 * 3000)
        1200
    """
    return max(1, pixel_count // TAC_MAX_SAMPLES)


def _is_process_cmyk(colorspace: ColorSpace) -> bool:
    # Indexed over CMYK carries palette indices, not ink values
    return colorspace.is_cmyk and colorspace.family != "Indexed"


def image_max_tac(image: ImageXObject) -> float:
    """Maximum TAC over the sampled pixels of a CMYK image.

    Raises:
        ValueError: If the image data cannot be decoded into CMYK samples.
    """
    pixels = image.sample_pixels(sample_step(image.pixel_count))
    if pixels.size == 0:
        return 0.0
    if pixels.shape[1] < 4:
        raise ValueError(f"Image {image.name}: expected 4 components, got {pixels.shape[1]}")
    return float(pixels[:, :4].sum(axis=1).max() * 100.0)


class InkCoverageDevice(Device):
    """Tracks the highest TAC painted on the current page."""

    def __init__(self) -> None:
        self.page_max = 0.0

    def _record(self, tac: float) -> None:
        if tac > self.page_max:
            self.page_max = tac

    def _vector(self, colorspace: ColorSpace, color: Tuple[float, ...]) -> None:
        if _is_process_cmyk(colorspace) and len(color) >= 4:
            self._record(sum(color[:4]) * 100.0)

    def fill_path(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector(colorspace, color)

    def stroke_path(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector(colorspace, color)

    def fill_text(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector(colorspace, color)

    def stroke_text(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector(colorspace, color)

    def fill_image_mask(self, image: ImageXObject, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector(colorspace, color)

    def fill_image(self, image: ImageXObject, ctm: Matrix, alpha: float) -> None:
        if image.colorspace is None or not _is_process_cmyk(image.colorspace):
            return
        try:
            self._record(image_max_tac(image))
        except (ValueError, OSError, PyPdfError, NotImplementedError) as e:
            logger.warning("Skipping ink coverage of image %s: %s", image.name, e)


class TacCheck:
    """Validate total ink coverage against max_tac."""

    check_id = CheckId.TAC

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        name = CHECK_NAMES[self.check_id]
        limit = options.max_tac
        warn_above = limit * TAC_WARN_RATIO
        limit_text = format_number(limit)

        details: List[CheckDetail] = []
        worst_tac = 0.0
        worst_page = 1
        for index in range(document.page_count):
            page = index + 1
            device = InkCoverageDevice()
            document.replay(index, device)
            page_max = device.page_max
            if page_max > worst_tac:
                worst_tac, worst_page = page_max, page
            if page_max <= 0:
                continue
            if page_max > limit:
                status = CheckStatus.FAIL
            elif page_max > warn_above:
                status = CheckStatus.WARN
            else:
                status = CheckStatus.PASS
            details.append(
                CheckDetail(
                    f"Max TAC: {round_half_up(page_max)}% (limit: {limit_text}%)", status, page
                )
            )

        if worst_tac > limit:
            summary = f"Max TAC: {round_half_up(worst_tac)}% on page {worst_page} (limit: {limit_text}%)"
        else:
            summary = f"All content within TAC limit ({limit_text}%)"
        return CheckResult.from_details(name, details, summary)


__all__ = ["TacCheck", "InkCoverageDevice", "image_max_tac", "sample_step"]
