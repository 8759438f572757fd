"""Check configuration constants.

This module centralizes check thresholds, built-in profiles and check display
names. Adjust these constants to tune check behavior.

Profiles:
    - "standard": general commercial print
    - "magazine": wider bleed for perfect-bound or saddle-stitched work
    - "newspaper": low-resolution, any color space, no bleed, tight ink limit
    - "large-format": posters and banners viewed from a distance
"""

from __future__ import annotations

from typing import Dict, Optional, Union

from print_check.core.enums import CheckId, ColorSpaceMode
from print_check.core.utils import MM_PER_INCH, PT_PER_INCH

# ============================================================================
# THRESHOLDS
# ============================================================================

# Resolution: below DPI_WARN_RATIO * min_dpi fails, below min_dpi warns
DPI_WARN_RATIO = 0.9

# Ink coverage: above TAC_WARN_RATIO * max_tac warns, above max_tac fails
TAC_WARN_RATIO = 0.9

# Upper bound on pixels sampled per CMYK image
TAC_MAX_SAMPLES = 10_000

# Per-axis tolerance when comparing page sizes (mm)
PAGE_SIZE_TOLERANCE_MM = 0.5

# Bleed margins within this distance of the requirement count as meeting it
BLEED_EPSILON_MM = 1e-6

# ============================================================================
# PROFILES
# ============================================================================

ProfileValues = Dict[str, Union[int, float, str, None]]

DEFAULT_PROFILE = "standard"

PROFILES: Dict[str, ProfileValues] = {
    "standard": {
        "min_dpi": 300,
        "color_space": ColorSpaceMode.CMYK.value,
        "bleed_mm": 3.0,
        "max_tac": 300.0,
        "page_size": None,
    },
    "magazine": {
        "min_dpi": 300,
        "color_space": ColorSpaceMode.CMYK.value,
        "bleed_mm": 5.0,
        "max_tac": 300.0,
        "page_size": None,
    },
    "newspaper": {
        "min_dpi": 150,
        "color_space": ColorSpaceMode.ANY.value,
        "bleed_mm": 0.0,
        "max_tac": 240.0,
        "page_size": None,
    },
    "large-format": {
        "min_dpi": 150,
        "color_space": ColorSpaceMode.CMYK.value,
        "bleed_mm": 5.0,
        "max_tac": 300.0,
        "page_size": None,
    },
}

# ============================================================================
# DISPLAY NAMES
# ============================================================================

CHECK_NAMES: Dict[CheckId, str] = {
    CheckId.BLEED: "Bleed & Trim",
    CheckId.FONTS: "Fonts",
    CheckId.COLORSPACE: "Color Space",
    CheckId.RESOLUTION: "Resolution",
    CheckId.PDFX: "PDF/X Compliance",
    CheckId.TAC: "Total Ink Coverage",
    CheckId.TRANSPARENCY: "Transparency",
    CheckId.PAGESIZE: "Page Size",
}


def get_profile(name: Optional[str]) -> ProfileValues:
    """Get the option values of a built-in profile.

    Args:
        name: Profile name; None selects DEFAULT_PROFILE.

    Returns:
        A copy of the profile's values keyed by CheckOptions field name.

    Raises:
        KeyError: If the profile is not built in.

    Examples:
        >>> get_profile("newspaper")["min_dpi"]
        150
    """
    key = name or DEFAULT_PROFILE
    if key not in PROFILES:
        raise KeyError(f"Unknown profile '{key}'. Available: {', '.join(PROFILES)}")
    return dict(PROFILES[key])


__all__ = [
    "PT_PER_INCH",
    "MM_PER_INCH",
    "DPI_WARN_RATIO",
    "TAC_WARN_RATIO",
    "TAC_MAX_SAMPLES",
    "PAGE_SIZE_TOLERANCE_MM",
    "BLEED_EPSILON_MM",
    "DEFAULT_PROFILE",
    "PROFILES",
    "CHECK_NAMES",
    "get_profile",
]
