"""Color space model.

Color spaces in a PDF are either device names (``/DeviceCMYK``), resource
names resolved through the page's ``/ColorSpace`` dictionary, or arrays whose
first element names the family (``[/ICCBased stream]``,
``[/Separation /PANTONE#20185#20C /DeviceCMYK fn]``). ``parse_colorspace``
normalises all three into a ``ColorSpace`` value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .objects import safe_array, safe_get, safe_get_resolved, safe_name, safe_number, safe_resolve

GRAY = "gray"
RGB = "rgb"
CMYK = "cmyk"

_DEVICE_SPACES = {
    "DeviceGray": (1, GRAY),
    "DeviceRGB": (3, RGB),
    "DeviceCMYK": (4, CMYK),
    "CalGray": (1, GRAY),
    "CalRGB": (3, RGB),
}

# Abbreviations allowed in inline image dictionaries
_INLINE_ABBREVIATIONS = {
    "G": "DeviceGray",
    "RGB": "DeviceRGB",
    "CMYK": "DeviceCMYK",
    "I": "Indexed",
}

_ICC_PROCESS = {1: GRAY, 3: RGB, 4: CMYK}

_MAX_DEPTH = 8


@dataclass(frozen=True)
class ColorSpace:
    """A resolved color space.

    Attributes:
        family: Family name without slash, e.g. "DeviceCMYK", "ICCBased", "Separation".
        components: Number of color components an operator supplies in this space.
        process: "gray", "rgb" or "cmyk" for process color spaces, None otherwise.
        base: Underlying space for Indexed and Pattern spaces.
        colorants: Colorant names for Separation and DeviceN spaces.
    """

    family: str
    components: int
    process: Optional[str] = None
    base: Optional["ColorSpace"] = None
    colorants: Tuple[str, ...] = ()

    @property
    def is_gray(self) -> bool:
        return self._effective_process() == GRAY

    @property
    def is_rgb(self) -> bool:
        return self._effective_process() == RGB

    @property
    def is_cmyk(self) -> bool:
        return self._effective_process() == CMYK

    @property
    def is_spot(self) -> bool:
        return self.family in ("Separation", "DeviceN")

    @property
    def is_pattern(self) -> bool:
        return self.family == "Pattern"

    def _effective_process(self) -> Optional[str]:
        if self.family == "Indexed" and self.base is not None:
            return self.base._effective_process()
        return self.process

    def initial_color(self) -> Tuple[float, ...]:
        """Initial color set by ``cs``/``CS`` (PDF 32000-1, 8.6.8)."""
        if self.process == CMYK:
            return (0.0, 0.0, 0.0, 1.0)
        if self.is_spot:
            return (1.0,) * max(1, self.components)
        return (0.0,) * self.components

    def __str__(self) -> str:
        if self.family == "ICCBased":
            return f"ICCBased({self.components})"
        if self.base is not None:
            return f"{self.family}({self.base})"
        return self.family


DEVICE_GRAY = ColorSpace("DeviceGray", 1, GRAY)
DEVICE_RGB = ColorSpace("DeviceRGB", 3, RGB)
DEVICE_CMYK = ColorSpace("DeviceCMYK", 4, CMYK)
PATTERN = ColorSpace("Pattern", 0)


def _from_name(name: str, resources: Any, depth: int, inline: bool) -> ColorSpace:
    if inline:
        name = _INLINE_ABBREVIATIONS.get(name, name)
    if name in _DEVICE_SPACES:
        components, process = _DEVICE_SPACES[name]
        return ColorSpace(name, components, process)
    if name == "Pattern":
        return PATTERN
    named = safe_get(safe_get_resolved(resources, "ColorSpace"), name)
    if named is not None and depth < _MAX_DEPTH:
        return _parse(named, resources, depth + 1)
    return ColorSpace(name, 0)


def _from_array(arr: Any, resources: Any, depth: int, inline: bool) -> ColorSpace:
    family = safe_name(arr[0]) if len(arr) > 0 else None
    if family is None:
        return ColorSpace("Unknown", 0)
    if inline:
        family = _INLINE_ABBREVIATIONS.get(family, family)

    if family in _DEVICE_SPACES:
        components, process = _DEVICE_SPACES[family]
        return ColorSpace(family, components, process)

    if family == "ICCBased":
        n = int(safe_number(safe_get(arr[1] if len(arr) > 1 else None, "N")) or 0)
        return ColorSpace("ICCBased", n, _ICC_PROCESS.get(n))

    if family == "Indexed":
        base = _parse(arr[1], resources, depth + 1, inline) if len(arr) > 1 else None
        return ColorSpace("Indexed", 1, base=base)

    if family == "Separation":
        colorant = safe_name(arr[1]) if len(arr) > 1 else None
        return ColorSpace("Separation", 1, colorants=(colorant,) if colorant else ())

    if family == "DeviceN":
        names = safe_array(arr[1]) if len(arr) > 1 else None
        colorants = tuple(n for n in (safe_name(x) for x in (names or [])) if n)
        return ColorSpace("DeviceN", len(colorants), colorants=colorants)

    if family == "Pattern":
        base = _parse(arr[1], resources, depth + 1) if len(arr) > 1 else None
        return ColorSpace("Pattern", base.components if base else 0, base=base)

    if family == "Lab":
        return ColorSpace("Lab", 3)

    return ColorSpace(family, 0)


def _parse(obj: Any, resources: Any, depth: int, inline: bool = False) -> ColorSpace:
    if depth > _MAX_DEPTH:
        return ColorSpace("Unknown", 0)
    name = safe_name(obj)
    if name is not None:
        return _from_name(name, resources, depth, inline)
    arr = safe_array(obj)
    if arr is not None:
        return _from_array(arr, resources, depth, inline)
    if safe_resolve(obj) is None:
        return DEVICE_GRAY
    return ColorSpace("Unknown", 0)


def parse_colorspace(obj: Any, resources: Any = None, inline: bool = False) -> ColorSpace:
    """Resolve a color space operand or dictionary entry.

    Args:
        obj: Name, array or indirect reference describing the color space.
        resources: Resource dictionary used to look up named color spaces.
        inline: Accept the inline image abbreviations (``/G``, ``/RGB``,
            ``/CMYK``, ``/I``). Elsewhere those are ordinary resource names.

    Returns:
        The parsed ColorSpace. Unrecognised families keep their name and have
        ``process=None``.

    Examples:
        >>> parse_colorspace(NameObject("/DeviceCMYK")).is_cmyk
        True
    """
    return _parse(obj, resources, 0, inline)


__all__ = [
    "ColorSpace",
    "DEVICE_GRAY",
    "DEVICE_RGB",
    "DEVICE_CMYK",
    "PATTERN",
    "GRAY",
    "RGB",
    "CMYK",
    "parse_colorspace",
]
