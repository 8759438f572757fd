"""Document model provider for print-check.

- **DocumentModel / load_document**: page count, boxes, catalog access
- **ContentReplayer / Device**: content-stream replay with per-operation handlers
- **ColorSpace**: normalised color space description
- **ImageXObject**: raster image metadata and sample access
- **objects**: null-safe accessors for the PDF object graph
"""

from __future__ import annotations

from .colorspaces import ColorSpace, parse_colorspace
from .device import IDENTITY, Device, Matrix, multiply
from .images import ImageXObject
from .interpreter import ContentReplayer
from .model import Box, DocumentModel, load_document

__all__ = [
    "Box",
    "ColorSpace",
    "ContentReplayer",
    "Device",
    "DocumentModel",
    "IDENTITY",
    "ImageXObject",
    "Matrix",
    "load_document",
    "multiply",
    "parse_colorspace",
]
