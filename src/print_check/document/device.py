"""Drawing device interface for content-stream replay.

``ContentReplayer`` walks a page's content stream and calls one method per
drawing operation on a ``Device``. Checks subclass ``Device`` and override the
handlers they care about; every handler is a no-op by default.

Matrices are 6-tuples ``(a, b, c, d, e, f)`` as in the PDF ``cm`` operator.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .colorspaces import ColorSpace
from .images import ImageXObject

Matrix = Tuple[float, float, float, float, float, float]
Rect = Tuple[float, float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def multiply(m1: Sequence[float], m2: Sequence[float]) -> Matrix:
    """Return ``m1 × m2`` (apply m1 first, then m2)."""
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + b1 * c2,
        a1 * b2 + b1 * d2,
        c1 * a2 + d1 * c2,
        c1 * b2 + d1 * d2,
        e1 * a2 + f1 * c2 + e2,
        e1 * b2 + f1 * d2 + f2,
    )


class Device:
    """No-op drawing device. Override the handlers a check needs."""

    def fill_path(
        self, ctm: Matrix, colorspace: ColorSpace, color: Tuple[float, ...], alpha: float
    ) -> None:
        pass

    def stroke_path(
        self, ctm: Matrix, colorspace: ColorSpace, color: Tuple[float, ...], alpha: float
    ) -> None:
        pass

    def fill_text(
        self, ctm: Matrix, colorspace: ColorSpace, color: Tuple[float, ...], alpha: float
    ) -> None:
        pass

    def stroke_text(
        self, ctm: Matrix, colorspace: ColorSpace, color: Tuple[float, ...], alpha: float
    ) -> None:
        pass

    def fill_image(self, image: ImageXObject, ctm: Matrix, alpha: float) -> None:
        pass

    def fill_image_mask(
        self,
        image: ImageXObject,
        ctm: Matrix,
        colorspace: ColorSpace,
        color: Tuple[float, ...],
        alpha: float,
    ) -> None:
        pass

    def begin_group(
        self,
        bbox: Optional[Rect],
        colorspace: Optional[ColorSpace],
        isolated: bool,
        knockout: bool,
        blend_mode: str,
        alpha: float,
    ) -> None:
        pass

    def end_group(self) -> None:
        pass

    def begin_mask(
        self,
        bbox: Optional[Rect],
        luminosity: bool,
        colorspace: Optional[ColorSpace],
        color: Optional[Tuple[float, ...]],
    ) -> None:
        pass

    def end_mask(self) -> None:
        pass


__all__ = ["Device", "Matrix", "Rect", "IDENTITY", "multiply"]
