"""Read-only document model over a pypdf reader.

The model is loaded once per file and shared by every check run against it.
Nothing here mutates the underlying PDF objects.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Union

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from print_check.core.errors import DocumentLoadError
from .device import IDENTITY, Device, Matrix
from .interpreter import ContentReplayer
from .objects import (
    safe_array,
    safe_get,
    safe_get_resolved,
    safe_name,
    safe_resolve,
    safe_string,
)

logger = logging.getLogger(__name__)


class Box(NamedTuple):
    """A page box in PDF points, normalised so that x0 <= x1 and y0 <= y1."""

    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_rectangle(cls, rect: Any) -> "Box":
        left, bottom, right, top = (float(v) for v in (rect[0], rect[1], rect[2], rect[3]))
        return cls(min(left, right), min(bottom, top), max(left, right), max(bottom, top))

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0


class DocumentModel:
    """Page, box, catalog and content access for one loaded PDF.

    Args:
        reader: An open pypdf reader.
        path: Source path, used for messages only.

    Examples:
        >>> with load_document("flyer.pdf") as doc:
        ...     doc.page_count
        2
    """

    def __init__(self, reader: PdfReader, path: Optional[Path] = None):
        self.reader = reader
        self.path = path

    def __enter__(self) -> "DocumentModel":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        close = getattr(self.reader, "close", None)
        if callable(close):
            close()

    @property
    def name(self) -> str:
        return self.path.name if self.path else "<memory>"

    @property
    def page_count(self) -> int:
        return len(self.reader.pages)

    def page(self, index: int) -> Any:
        """Return the page object for a 0-based index."""
        return self.reader.pages[index]

    def resources(self, index: int) -> Optional[Any]:
        """Return the page's (possibly inherited) resource dictionary."""
        return safe_get_resolved(self.page(index), "Resources")

    def media_box(self, index: int) -> Box:
        return Box.from_rectangle(self.page(index).mediabox)

    def trim_box(self, index: int) -> Box:
        """TrimBox, defaulting to CropBox and then MediaBox when absent."""
        return Box.from_rectangle(self.page(index).trimbox)

    def bleed_box(self, index: int) -> Box:
        """BleedBox, defaulting to CropBox and then MediaBox when absent."""
        return Box.from_rectangle(self.page(index).bleedbox)

    @property
    def trailer(self) -> Any:
        return self.reader.trailer

    @property
    def root(self) -> Optional[Any]:
        return safe_get_resolved(self.trailer, "Root")

    @property
    def info(self) -> Optional[Any]:
        return safe_get_resolved(self.trailer, "Info")

    def output_intents(self) -> List[Dict[str, Optional[str]]]:
        """Return the catalog's OutputIntents as plain dictionaries.

        Each entry has ``subtype``, ``condition_identifier``, ``info`` and
        ``registry_name`` keys; missing values are None.
        """
        intents = []
        for raw in safe_array(safe_get(self.root, "OutputIntents")) or []:
            intent = safe_resolve(raw)
            if intent is None:
                continue
            intents.append(
                {
                    "subtype": safe_name(safe_get(intent, "S")),
                    "condition_identifier": safe_string(safe_get(intent, "OutputConditionIdentifier")),
                    "info": safe_string(safe_get(intent, "Info")),
                    "registry_name": safe_string(safe_get(intent, "RegistryName")),
                }
            )
        return intents

    def info_string(self, key: str) -> Optional[str]:
        return safe_string(safe_get(self.info, key))

    def replay(self, index: int, device: Device, ctm: Matrix = IDENTITY) -> None:
        """Replay a page's content stream against a device."""
        ContentReplayer(self.reader, device).run_page(self.page(index), ctm)


def load_document(path: Union[str, Path]) -> DocumentModel:
    """Open a PDF file as a DocumentModel.

    Args:
        path: Path to the PDF file.

    Returns:
        Loaded DocumentModel.

    Raises:
        FileNotFoundError: If the file does not exist.
        DocumentLoadError: If the file cannot be parsed or decrypted.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        reader = PdfReader(path)
        if reader.is_encrypted and not reader.decrypt(""):
            raise DocumentLoadError(str(path), "document is encrypted")
        # Force the page tree to be read so structural damage surfaces here
        page_count = len(reader.pages)
    except DocumentLoadError:
        raise
    except (PyPdfError, OSError, ValueError, KeyError, TypeError) as e:
        raise DocumentLoadError(str(path), str(e) or e.__class__.__name__) from e

    logger.debug("Loaded %s (%d pages)", path, page_count)
    return DocumentModel(reader, path)


__all__ = ["Box", "DocumentModel", "load_document"]
