"""Color space check.

Replays every page and classifies the color space of each painting operation:

- RGB with non-neutral values fails (neutral RGB, r = g = b, separates to K only)
- Separation and DeviceN are collected as spot colors
- Gray and CMYK are fine
- anything else (Lab, unknown families) warns

Findings are reported once per page, usage and color space so that a page
with a thousand RGB fills yields a single detail.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from print_check.core.enums import CheckId, CheckStatus, ColorSpaceMode
from print_check.document import ColorSpace, Device, DocumentModel, ImageXObject, Matrix
from ..config import CHECK_NAMES
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions

NEUTRAL_TOLERANCE = 1e-6


def is_neutral(colorspace: ColorSpace, color: Tuple[float, ...]) -> bool:
    """True for RGB values with equal channels; indexed colors are never neutral."""
    if colorspace.family == "Indexed" or len(color) < 3:
        return False
    return max(color[:3]) - min(color[:3]) <= NEUTRAL_TOLERANCE


class ColorSpaceDevice(Device):
    """Collects color space findings for one page at a time."""

    def __init__(self) -> None:
        self.page = 0
        self.findings: Dict[Tuple[int, str, str], CheckDetail] = {}
        self.rgb_pages: List[int] = []
        self.spot_colors: List[str] = []

    def _add(self, kind: str, colorspace: ColorSpace, message: str, status: CheckStatus) -> None:
        key = (self.page, kind, str(colorspace))
        if key in self.findings:
            return
        self.findings[key] = CheckDetail(message, status, self.page)
        if colorspace.is_rgb and self.page not in self.rgb_pages:
            self.rgb_pages.append(self.page)

    def _add_spots(self, colorspace: ColorSpace) -> None:
        for name in colorspace.colorants:
            if name != "None" and name not in self.spot_colors:
                self.spot_colors.append(name)

    def _vector(self, usage: str, colorspace: ColorSpace, color: Tuple[float, ...]) -> None:
        if colorspace.is_spot:
            self._add_spots(colorspace)
        elif colorspace.is_rgb:
            if not is_neutral(colorspace, color):
                self._add(
                    usage, colorspace, f"RGB color used for {usage} ({colorspace})", CheckStatus.FAIL
                )
        elif not (colorspace.is_gray or colorspace.is_cmyk):
            self._add(
                usage,
                colorspace,
                f'Non-CMYK color space "{colorspace}" used for {usage}',
                CheckStatus.WARN,
            )

    def fill_path(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector("fill", colorspace, color)

    def stroke_path(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector("stroke", colorspace, color)

    def fill_text(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector("text", colorspace, color)

    def stroke_text(self, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector("text", colorspace, color)

    def fill_image_mask(self, image: ImageXObject, ctm: Matrix, colorspace, color, alpha) -> None:
        self._vector("image mask", colorspace, color)

    def fill_image(self, image: ImageXObject, ctm: Matrix, alpha: float) -> None:
        colorspace = image.colorspace
        if colorspace is None:
            return
        kind = f"image {image.name}"
        if colorspace.is_spot:
            self._add_spots(colorspace)
        elif colorspace.is_rgb:
            self._add(kind, colorspace, f'Image "{image.name}" uses RGB color space', CheckStatus.FAIL)
        elif not (colorspace.is_gray or colorspace.is_cmyk):
            self._add(kind, colorspace, f'Image "{image.name}" uses "{colorspace}"', CheckStatus.WARN)


class ColorSpaceCheck:
    """Validate that content is CMYK-compatible."""

    check_id = CheckId.COLORSPACE

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        name = CHECK_NAMES[self.check_id]
        if options.color_space == ColorSpaceMode.ANY:
            return CheckResult(name, CheckStatus.PASS, "Color space check skipped (--color-space any)")

        details: List[CheckDetail] = []
        for intent in document.output_intents():
            details.append(
                CheckDetail(
                    f"OutputIntent: {intent['subtype']} — "
                    f"{intent['condition_identifier'] or 'unknown'}",
                    CheckStatus.PASS,
                )
            )

        device = ColorSpaceDevice()
        for index in range(document.page_count):
            device.page = index + 1
            document.replay(index, device)
        details.extend(device.findings.values())

        if device.spot_colors:
            details.append(
                CheckDetail(f"Spot colors found: {', '.join(device.spot_colors)}", CheckStatus.PASS)
            )

        result = CheckResult.from_details(name, details, "")
        if result.status == CheckStatus.PASS:
            summary = "All color spaces are CMYK-compatible"
        elif device.rgb_pages:
            summary = f"RGB detected on pages {', '.join(str(p) for p in device.rgb_pages)}"
        else:
            summary = "Non-CMYK color spaces detected"
        return CheckResult(name, result.status, summary, result.details)


__all__ = ["ColorSpaceCheck", "ColorSpaceDevice", "is_neutral"]
