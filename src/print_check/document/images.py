"""Raster image access for image XObjects and inline images."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np
from PIL import Image
from pypdf.filters import FlateDecode

from .colorspaces import ColorSpace, parse_colorspace
from .objects import safe_array, safe_bool, safe_get, safe_name, safe_number, safe_resolve

logger = logging.getLogger(__name__)

_INLINE_KEYS = {
    "Width": "W",
    "Height": "H",
    "ColorSpace": "CS",
    "BitsPerComponent": "BPC",
    "ImageMask": "IM",
    "Filter": "F",
    "Decode": "D",
    "DecodeParms": "DP",
}

_INLINE_FILTERS = {
    "Fl": "FlateDecode",
    "DCT": "DCTDecode",
    "AHx": "ASCIIHexDecode",
    "A85": "ASCII85Decode",
    "LZW": "LZWDecode",
    "RL": "RunLengthDecode",
    "CCF": "CCITTFaxDecode",
}

_PIL_FILTERS = ("DCTDecode", "JPXDecode")


def _lookup(d: Any, key: str, inline: bool) -> Optional[Any]:
    value = safe_get(d, key)
    if value is None and inline and key in _INLINE_KEYS:
        value = safe_get(d, _INLINE_KEYS[key])
    return value


def _filter_names(obj: Any) -> List[str]:
    names: List[str] = []
    arr = safe_array(obj)
    items = list(arr) if arr is not None else ([obj] if obj is not None else [])
    for item in items:
        name = safe_name(item)
        if name:
            names.append(_INLINE_FILTERS.get(name, name))
    return names


@dataclass
class ImageXObject:
    """A raster image as placed by ``Do`` or an inline ``BI``/``EI`` block.

    Attributes:
        name: Resource name (``"Im0"``) or ``"inline"``.
        pixel_width: Width in samples.
        pixel_height: Height in samples.
        colorspace: Image color space; None for stencil masks.
        bits_per_component: Bits per color component.
        is_mask: True for stencil masks (``/ImageMask true``).
        has_alpha: True when the image carries ``/SMask`` or ``/SMaskInData``.
    """

    name: str
    pixel_width: int
    pixel_height: int
    colorspace: Optional[ColorSpace]
    bits_per_component: int
    is_mask: bool = False
    has_alpha: bool = False
    filters: List[str] = field(default_factory=list)
    decode: Optional[List[float]] = None
    source: Any = field(default=None, repr=False)
    inline_data: Optional[bytes] = field(default=None, repr=False)
    decode_parms: Any = field(default=None, repr=False)

    @classmethod
    def from_stream(cls, name: str, stream: Any, resources: Any = None) -> "ImageXObject":
        """Build from an image XObject stream."""
        return cls._build(name, stream, resources, inline=False)

    @classmethod
    def from_inline(cls, settings: Any, data: bytes, resources: Any = None) -> "ImageXObject":
        """Build from the settings dictionary and data of an inline image."""
        image = cls._build("inline", settings, resources, inline=True)
        image.inline_data = bytes(data)
        return image

    @classmethod
    def _build(cls, name: str, d: Any, resources: Any, inline: bool) -> "ImageXObject":
        is_mask = bool(safe_bool(_lookup(d, "ImageMask", inline)))
        cs_obj = _lookup(d, "ColorSpace", inline)
        colorspace = None if is_mask else parse_colorspace(cs_obj, resources, inline=inline)
        bpc = int(safe_number(_lookup(d, "BitsPerComponent", inline)) or (1 if is_mask else 8))
        decode_arr = safe_array(_lookup(d, "Decode", inline))
        decode = None
        if decode_arr is not None:
            decode = [safe_number(v) or 0.0 for v in decode_arr]
        has_alpha = safe_get(d, "SMask") is not None or bool(safe_number(safe_get(d, "SMaskInData")))
        return cls(
            name=name,
            pixel_width=int(safe_number(_lookup(d, "Width", inline)) or 0),
            pixel_height=int(safe_number(_lookup(d, "Height", inline)) or 0),
            colorspace=colorspace,
            bits_per_component=bpc,
            is_mask=is_mask,
            has_alpha=has_alpha,
            filters=_filter_names(_lookup(d, "Filter", inline)),
            decode=decode,
            source=d,
            decode_parms=safe_resolve(_lookup(d, "DecodeParms", inline)),
        )

    @property
    def components(self) -> int:
        if self.is_mask or self.colorspace is None:
            return 1
        return max(1, self.colorspace.components)

    @property
    def pixel_count(self) -> int:
        return self.pixel_width * self.pixel_height

    @property
    def sample_max(self) -> int:
        if self.filters and self.filters[-1] in _PIL_FILTERS:
            return 255
        return (1 << self.bits_per_component) - 1

    def _data(self) -> bytes:
        if self.inline_data is None:
            return self.source.get_data()
        data = self.inline_data
        for name in self.filters:
            if name == "FlateDecode":
                data = FlateDecode.decode(data, self.decode_parms)
            elif name in _PIL_FILTERS:
                break
            else:
                raise ValueError(f"Unsupported inline image filter: {name}")
        return data

    def samples(self) -> np.ndarray:
        """Decode the image into raw integer samples.

        Returns:
            Array of shape ``(pixel_count, components)`` holding unnormalised
            sample values in ``[0, sample_max]``.

        Raises:
            ValueError: If the data is truncated or the encoding unsupported.
        """
        n = self.components
        w, h = self.pixel_width, self.pixel_height
        data = self._data()

        if self.filters and self.filters[-1] in _PIL_FILTERS:
            with Image.open(io.BytesIO(data)) as img:
                arr = np.asarray(img)
            return arr.reshape(-1, arr.shape[2] if arr.ndim == 3 else 1)

        bpc = self.bits_per_component
        if bpc == 8:
            flat = np.frombuffer(data, dtype=np.uint8)
        elif bpc == 16:
            flat = np.frombuffer(data[: len(data) - len(data) % 2], dtype=">u2")
        elif bpc in (1, 2, 4):
            row_bytes = (w * n * bpc + 7) // 8
            raw = np.frombuffer(data, dtype=np.uint8)
            if raw.size < row_bytes * h:
                raise ValueError(f"Image {self.name}: truncated sample data")
            bits = np.unpackbits(raw[: row_bytes * h].reshape(h, row_bytes), axis=1)
            bits = bits[:, : w * n * bpc].reshape(h, w * n, bpc)
            weights = 1 << np.arange(bpc - 1, -1, -1)
            flat = (bits * weights).sum(axis=2).astype(np.uint8).reshape(-1)
        else:
            raise ValueError(f"Image {self.name}: unsupported BitsPerComponent {bpc}")

        expected = w * h * n
        if flat.size < expected:
            raise ValueError(
                f"Image {self.name}: expected {expected} samples, got {flat.size}"
            )
        return flat[:expected].reshape(-1, n)

    def sample_pixels(self, step: int) -> np.ndarray:
        """Return every ``step``-th pixel with components normalised to [0, 1].

        A ``/Decode`` array, when present, is applied per component.
        """
        raw = self.samples()[:: max(1, step)]
        values = raw.astype(np.float64) / float(self.sample_max)
        if self.decode and len(self.decode) >= 2 * values.shape[1]:
            lo = np.array(self.decode[0::2][: values.shape[1]])
            hi = np.array(self.decode[1::2][: values.shape[1]])
            values = lo + values * (hi - lo)
        return values


__all__ = ["ImageXObject"]
