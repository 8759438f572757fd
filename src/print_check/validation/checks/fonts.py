"""Font embedding check.

Fonts that are not embedded are substituted at the RIP and reflow or render
with the wrong glyphs. Subset-embedded fonts print correctly but cannot be
edited at the printer, so they only warn.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Set

from print_check.core.enums import CheckId, CheckStatus
from print_check.document import DocumentModel
from print_check.document.objects import (
    safe_array,
    safe_get,
    safe_get_resolved,
    safe_items,
    safe_name,
    safe_resolve,
)
from ..config import CHECK_NAMES
from ..models import CheckDetail, CheckResult
from ..options import CheckOptions

SUBSET_PREFIX = re.compile(r"^[A-Z]{6}\+")

_FONT_FILE_KEYS = ("FontFile", "FontFile2", "FontFile3")


@dataclass(frozen=True)
class FontInfo:
    name: str
    embedded: bool
    subset: bool
    page: int


def has_embedded_program(descriptor: Optional[Any]) -> bool:
    """True if a font descriptor carries an embedded font program stream."""
    return any(safe_get(descriptor, key) is not None for key in _FONT_FILE_KEYS)


def collect_fonts(font_dict: Any, page: int, seen: Set[str]) -> List[FontInfo]:
    """Collect fonts of one page's /Font resource dictionary.

    Args:
        font_dict: The resolved /Font dictionary.
        page: 1-based page number.
        seen: Base font names already reported; updated in place.

    Returns:
        Fonts first seen on this page.
    """
    fonts: List[FontInfo] = []
    for key, value in safe_items(font_dict):
        font = safe_resolve(value)
        if font is None:
            continue
        base_name = safe_name(safe_get(font, "BaseFont")) or key
        if base_name in seen:
            continue
        seen.add(base_name)

        if safe_name(safe_get(font, "Subtype")) == "Type0":
            # Composite font: the program lives on the descendant CIDFont
            for raw in safe_array(safe_get(font, "DescendantFonts")) or []:
                cid_font = safe_resolve(raw)
                if cid_font is None:
                    continue
                cid_name = safe_name(safe_get(cid_font, "BaseFont")) or base_name
                descriptor = safe_get_resolved(cid_font, "FontDescriptor")
                fonts.append(
                    FontInfo(
                        name=cid_name,
                        embedded=has_embedded_program(descriptor),
                        subset=bool(SUBSET_PREFIX.match(cid_name)),
                        page=page,
                    )
                )
            continue

        descriptor = safe_get_resolved(font, "FontDescriptor")
        fonts.append(
            FontInfo(
                name=base_name,
                embedded=has_embedded_program(descriptor),
                subset=bool(SUBSET_PREFIX.match(base_name)),
                page=page,
            )
        )
    return fonts


class FontsCheck:
    """Validate that every font used is embedded."""

    check_id = CheckId.FONTS

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        seen: Set[str] = set()
        fonts: List[FontInfo] = []
        for index in range(document.page_count):
            font_dict = safe_get_resolved(document.resources(index), "Font")
            if font_dict is None:
                continue
            fonts.extend(collect_fonts(font_dict, index + 1, seen))

        not_embedded = [f for f in fonts if not f.embedded]
        subset = [f for f in fonts if f.embedded and f.subset]
        full = [f for f in fonts if f.embedded and not f.subset]

        details = (
            [CheckDetail(f'Font "{f.name}" is not embedded', CheckStatus.FAIL, f.page) for f in not_embedded]
            + [CheckDetail(f'Font "{f.name}" is subset-embedded', CheckStatus.WARN, f.page) for f in subset]
            + [CheckDetail(f'Font "{f.name}" is fully embedded', CheckStatus.PASS, f.page) for f in full]
        )

        if not_embedded:
            summary = f"{len(not_embedded)} font(s) not embedded"
        else:
            summary = f"{len(subset) + len(full)} fonts embedded ({len(subset)} subset)"
        return CheckResult.from_details(CHECK_NAMES[self.check_id], details, summary)


__all__ = ["FontsCheck", "FontInfo", "collect_fonts", "has_embedded_program"]
