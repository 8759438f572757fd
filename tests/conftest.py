"""Shared pytest fixtures and helpers for building test PDFs.

PDFs are synthesised with pypdf's PdfWriter and written to tmp_path; no
binary fixtures are checked in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
    PdfObject,
    RectangleObject,
    TextStringObject,
)

from print_check.document import DocumentModel, load_document

A4_WIDTH_PT = 595.276
A4_HEIGHT_PT = 841.89

_COMPONENTS = {"/DeviceGray": 1, "/DeviceRGB": 3, "/DeviceCMYK": 4}


def _key(key: str) -> NameObject:
    return NameObject(key if key.startswith("/") else f"/{key}")


def pdf_value(value: Any) -> PdfObject:
    """Convert plain Python values to pypdf objects.

    Strings starting with "/" become names, other strings text strings.
    """
    if isinstance(value, PdfObject):
        return value
    if isinstance(value, bool):
        return BooleanObject(value)
    if isinstance(value, int):
        return NumberObject(value)
    if isinstance(value, float):
        return FloatObject(value)
    if isinstance(value, str):
        return NameObject(value) if value.startswith("/") else TextStringObject(value)
    if isinstance(value, (list, tuple)):
        return ArrayObject([pdf_value(v) for v in value])
    if isinstance(value, dict):
        return DictionaryObject({_key(k): pdf_value(v) for k, v in value.items()})
    raise TypeError(f"Cannot convert {value!r} to a PDF object")


class PdfBuilder:
    """Small helper around PdfWriter for assembling test documents."""

    def __init__(self) -> None:
        self.writer = PdfWriter()
        self._intents: List[IndirectObject] = []

    def add(self, obj: Any) -> IndirectObject:
        return self.writer._add_object(pdf_value(obj))  # pylint: disable=protected-access

    def stream(self, data: bytes, entries: Optional[Dict[str, Any]] = None) -> IndirectObject:
        stream = DecodedStreamObject()
        stream.set_data(data)
        for key, value in (entries or {}).items():
            stream[_key(key)] = pdf_value(value)
        return self.writer._add_object(stream)  # pylint: disable=protected-access

    def add_page(
        self,
        content: bytes = b"",
        resources: Optional[Dict[str, Any]] = None,
        width: float = A4_WIDTH_PT,
        height: float = A4_HEIGHT_PT,
        trim: Optional[Sequence[float]] = None,
        bleed: Optional[Sequence[float]] = None,
    ) -> Any:
        page = self.writer.add_blank_page(width=width, height=height)
        page[NameObject("/Resources")] = pdf_value(resources or {})
        if content:
            page[NameObject("/Contents")] = self.stream(content)
        if trim is not None:
            page[NameObject("/TrimBox")] = RectangleObject(list(trim))
        if bleed is not None:
            page[NameObject("/BleedBox")] = RectangleObject(list(bleed))
        return page

    def font(self, base_font: str, subtype: str = "/Type1", embedded: bool = False) -> IndirectObject:
        font: Dict[str, Any] = {"Type": "/Font", "Subtype": subtype, "BaseFont": f"/{base_font}"}
        if embedded:
            font["FontDescriptor"] = self.font_descriptor(base_font)
        return self.add(font)

    def font_descriptor(self, base_font: str, key: str = "FontFile2") -> IndirectObject:
        program = self.stream(b"\x00" * 16)
        return self.add({"Type": "/FontDescriptor", "FontName": f"/{base_font}", key: program})

    def image(
        self,
        width: int,
        height: int,
        colorspace: Any = "/DeviceGray",
        bits: int = 8,
        data: Optional[bytes] = None,
        **entries: Any,
    ) -> IndirectObject:
        components = _COMPONENTS.get(colorspace, 1) if isinstance(colorspace, str) else 1
        if data is None:
            data = bytes((width * components * bits + 7) // 8 * height)
        image: Dict[str, Any] = {
            "Type": "/XObject",
            "Subtype": "/Image",
            "Width": width,
            "Height": height,
            "ColorSpace": colorspace,
            "BitsPerComponent": bits,
        }
        image.update(entries)
        return self.stream(data, image)

    def form(self, content: bytes, resources: Optional[Dict[str, Any]] = None, **entries: Any) -> IndirectObject:
        form: Dict[str, Any] = {
            "Type": "/XObject",
            "Subtype": "/Form",
            "BBox": [0, 0, 100, 100],
            "Resources": resources or {},
        }
        form.update(entries)
        return self.stream(content, form)

    def pattern(
        self,
        content: bytes,
        resources: Optional[Dict[str, Any]] = None,
        paint_type: int = 1,
        **entries: Any,
    ) -> IndirectObject:
        """A tiling pattern whose 10x10 cell is drawn by content."""
        pattern: Dict[str, Any] = {
            "Type": "/Pattern",
            "PatternType": 1,
            "PaintType": paint_type,
            "TilingType": 1,
            "BBox": [0, 0, 10, 10],
            "XStep": 10,
            "YStep": 10,
            "Resources": resources or {},
        }
        pattern.update(entries)
        return self.stream(content, pattern)

    def set_info(self, **entries: str) -> None:
        self.writer.add_metadata({f"/{k}": v for k, v in entries.items()})

    def add_output_intent(
        self,
        subtype: str = "/GTS_PDFX",
        condition: Optional[str] = "FOGRA39",
        info: Optional[str] = None,
        registry: Optional[str] = None,
    ) -> None:
        intent: Dict[str, Any] = {"Type": "/OutputIntent", "S": subtype}
        if condition is not None:
            intent["OutputConditionIdentifier"] = condition
        if info is not None:
            intent["Info"] = info
        if registry is not None:
            intent["RegistryName"] = registry
        self._intents.append(self.add(intent))

    def save(self, path: Path) -> Path:
        if self._intents:
            root = self.writer._root_object  # pylint: disable=protected-access
            root[NameObject("/OutputIntents")] = ArrayObject(self._intents)
        with open(path, "wb") as f:
            self.writer.write(f)
        return Path(path)


@pytest.fixture
def pdf() -> PdfBuilder:
    """A fresh PdfBuilder."""
    return PdfBuilder()


@pytest.fixture
def open_pdf(tmp_path):
    """Save a builder to tmp_path and load it as a DocumentModel."""
    opened: List[DocumentModel] = []

    def _open(builder: PdfBuilder, name: str = "test.pdf") -> DocumentModel:
        document = load_document(builder.save(tmp_path / name))
        opened.append(document)
        return document

    yield _open
    for document in opened:
        document.close()


@pytest.fixture
def helvetica_pdf(tmp_path) -> Path:
    """One A4 page with unembedded Helvetica text and only a MediaBox."""
    builder = PdfBuilder()
    builder.add_page(
        content=b"BT /F1 12 Tf 72 720 Td (Hello) Tj ET",
        resources={"Font": {"F1": builder.font("Helvetica")}},
    )
    return builder.save(tmp_path / "helvetica.pdf")
