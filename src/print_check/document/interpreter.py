"""Content-stream replay.

``ContentReplayer`` interprets the operators of a page content stream that
affect what gets painted and with which color, alpha and transform, and
reports each painting operation to a ``Device``. It does not rasterise and
ignores path geometry, clipping and text positioning.

The walk is synchronous and depth-first: form XObjects and the cells of
tiling patterns are replayed inline with their own resources, guarded against
cycles and excessive nesting. Shading patterns are not reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from pypdf import PdfReader
from pypdf.generic import ContentStream

from .colorspaces import DEVICE_CMYK, DEVICE_GRAY, DEVICE_RGB, ColorSpace, parse_colorspace
from .device import IDENTITY, Device, Matrix, Rect, multiply
from .images import ImageXObject
from .objects import (
    object_id,
    safe_array,
    safe_bool,
    safe_get,
    safe_get_resolved,
    safe_name,
    safe_number,
    safe_resolve,
)

logger = logging.getLogger(__name__)

MAX_FORM_DEPTH = 32

# Text rendering modes (Tr) that fill / stroke glyphs
_TEXT_FILL_MODES = {0, 2, 4, 6}
_TEXT_STROKE_MODES = {1, 2, 5, 6}

_FILL_OPS = {"f", "F", "f*"}
_STROKE_OPS = {"S", "s"}
_FILL_STROKE_OPS = {"B", "B*", "b", "b*"}
_TEXT_OPS = {"Tj", "TJ", "'", '"'}

_TILING_PATTERN = 1
_UNCOLORED_PAINT = 2

# Receives the color space and components an uncolored pattern paints with
PaintFn = Callable[[ColorSpace, Tuple[float, ...]], None]


@dataclass
class GraphicsState:
    """The subset of the PDF graphics state that painting depends on."""

    ctm: Matrix = IDENTITY
    fill_cs: ColorSpace = DEVICE_GRAY
    stroke_cs: ColorSpace = DEVICE_GRAY
    fill_color: Tuple[float, ...] = (0.0,)
    stroke_color: Tuple[float, ...] = (0.0,)
    fill_pattern: Optional[str] = None
    stroke_pattern: Optional[str] = None
    fill_alpha: float = 1.0
    stroke_alpha: float = 1.0
    blend_mode: str = "Normal"
    soft_mask: Optional[Any] = None
    text_render: int = 0


def _num(obj: Any, default: float = 0.0) -> float:
    value = safe_number(obj)
    return default if value is None else value


def _matrix(obj: Any) -> Matrix:
    arr = safe_array(obj)
    if arr is None or len(arr) != 6:
        return IDENTITY
    return tuple(_num(v) for v in arr)  # type: ignore[return-value]


def _rect(obj: Any) -> Optional[Rect]:
    arr = safe_array(obj)
    if arr is None or len(arr) != 4:
        return None
    return tuple(_num(v) for v in arr)  # type: ignore[return-value]


class ContentReplayer:
    """Replays content streams of a document against a device.

    Args:
        reader: The pypdf reader owning the streams (needed to decode forms).
        device: Receiver of painting events.
        max_depth: Maximum nesting of forms and pattern cells before one is skipped.

    Examples:
        >>> replayer = ContentReplayer(reader, MyDevice())
        >>> replayer.run_page(reader.pages[0])
    """

    def __init__(self, reader: PdfReader, device: Device, max_depth: int = MAX_FORM_DEPTH):
        self.reader = reader
        self.device = device
        self.max_depth = max_depth
        self._state = GraphicsState()
        self._stack: List[GraphicsState] = []
        self._resources: Any = None
        self._depth = 0
        # CTM at the start of the current content stream; pattern space is relative to it
        self._base_ctm: Matrix = IDENTITY
        self._active_streams: Set[Tuple[int, int]] = set()
        self._ops: Dict[str, Callable[[List[Any]], None]] = {
            "q": self._op_save,
            "Q": self._op_restore,
            "cm": self._op_concat,
            "gs": self._op_extgstate,
            "CS": lambda ops: self._op_set_colorspace(ops, stroke=True),
            "cs": lambda ops: self._op_set_colorspace(ops, stroke=False),
            "SC": lambda ops: self._op_set_color(ops, stroke=True),
            "SCN": lambda ops: self._op_set_color(ops, stroke=True),
            "sc": lambda ops: self._op_set_color(ops, stroke=False),
            "scn": lambda ops: self._op_set_color(ops, stroke=False),
            "G": lambda ops: self._op_device_color(ops, DEVICE_GRAY, stroke=True),
            "g": lambda ops: self._op_device_color(ops, DEVICE_GRAY, stroke=False),
            "RG": lambda ops: self._op_device_color(ops, DEVICE_RGB, stroke=True),
            "rg": lambda ops: self._op_device_color(ops, DEVICE_RGB, stroke=False),
            "K": lambda ops: self._op_device_color(ops, DEVICE_CMYK, stroke=True),
            "k": lambda ops: self._op_device_color(ops, DEVICE_CMYK, stroke=False),
            "Tr": self._op_text_render,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run_page(self, page: Any, ctm: Matrix = IDENTITY) -> None:
        """Replay one page's content stream(s)."""
        contents = page.get_contents()
        if contents is None:
            return
        self._state = GraphicsState(ctm=ctm)
        self._stack = []
        self._base_ctm = ctm
        self._active_streams = set()
        self._execute(contents.operations, safe_get_resolved(page, "Resources"), depth=0)

    def _execute(self, operations: List[Tuple[Any, bytes]], resources: Any, depth: int) -> None:
        saved_resources, saved_depth = self._resources, self._depth
        self._resources = resources
        self._depth = depth
        try:
            for operands, operator in operations:
                op = operator.decode("latin-1") if isinstance(operator, bytes) else str(operator)
                if op == "INLINE IMAGE":
                    self._draw_inline_image(operands)
                elif op in _FILL_OPS:
                    self._fill_path()
                elif op in _STROKE_OPS:
                    self._stroke_path()
                elif op in _FILL_STROKE_OPS:
                    self._fill_path()
                    self._stroke_path()
                elif op in _TEXT_OPS:
                    self._show_text()
                elif op == "Do":
                    self._op_xobject(operands)
                else:
                    handler = self._ops.get(op)
                    if handler is not None:
                        handler(operands)
        finally:
            self._resources = saved_resources
            self._depth = saved_depth

    # ------------------------------------------------------------------
    # Graphics state operators
    # ------------------------------------------------------------------

    def _op_save(self, operands: List[Any]) -> None:
        self._stack.append(replace(self._state))

    def _op_restore(self, operands: List[Any]) -> None:
        if self._stack:
            self._state = self._stack.pop()

    def _op_concat(self, operands: List[Any]) -> None:
        if len(operands) != 6:
            return
        m = tuple(_num(v) for v in operands)
        self._state.ctm = multiply(m, self._state.ctm)

    def _op_extgstate(self, operands: List[Any]) -> None:
        if not operands:
            return
        name = safe_name(operands[0])
        ext = safe_get_resolved(safe_get_resolved(self._resources, "ExtGState"), name or "")
        if ext is None:
            return
        st = self._state
        ca = safe_number(safe_get(ext, "ca"))
        if ca is not None:
            st.fill_alpha = ca
        big_ca = safe_number(safe_get(ext, "CA"))
        if big_ca is not None:
            st.stroke_alpha = big_ca
        bm = safe_get_resolved(ext, "BM")
        bm_name = safe_name(bm)
        if bm_name is None:
            modes = safe_array(bm)
            if modes:
                bm_name = safe_name(modes[0])
        if bm_name is not None:
            st.blend_mode = "Normal" if bm_name == "Compatible" else bm_name
        smask = safe_get_resolved(ext, "SMask")
        if smask is not None:
            st.soft_mask = None if safe_name(smask) == "None" else smask

    def _op_set_colorspace(self, operands: List[Any], stroke: bool) -> None:
        if not operands:
            return
        cs = parse_colorspace(operands[0], self._resources)
        if stroke:
            self._state.stroke_cs = cs
            self._state.stroke_color = cs.initial_color()
            self._state.stroke_pattern = None
        else:
            self._state.fill_cs = cs
            self._state.fill_color = cs.initial_color()
            self._state.fill_pattern = None

    def _op_set_color(self, operands: List[Any], stroke: bool) -> None:
        values = tuple(v for v in (safe_number(o) for o in operands) if v is not None)
        # scn/SCN in a Pattern space end with the pattern's resource name
        pattern = safe_name(operands[-1]) if operands else None
        if stroke:
            self._state.stroke_color = values
            self._state.stroke_pattern = pattern
        else:
            self._state.fill_color = values
            self._state.fill_pattern = pattern

    def _op_device_color(self, operands: List[Any], cs: ColorSpace, stroke: bool) -> None:
        values = tuple(_num(o) for o in operands)
        if stroke:
            self._state.stroke_cs = cs
            self._state.stroke_color = values
        else:
            self._state.fill_cs = cs
            self._state.fill_color = values

    def _op_text_render(self, operands: List[Any]) -> None:
        if operands:
            self._state.text_render = int(_num(operands[0]))

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def _paint(self, emit: Callable[[], None]) -> None:
        """Wrap a painting event in the soft mask and blend group in effect."""
        st = self._state
        if st.soft_mask is not None:
            self._emit_soft_mask(st.soft_mask)
        blended = st.blend_mode != "Normal"
        if blended:
            self.device.begin_group(None, None, False, False, st.blend_mode, 1.0)
        emit()
        if blended:
            self.device.end_group()

    def _emit_soft_mask(self, smask: Any) -> None:
        group = safe_get_resolved(smask, "G")
        luminosity = safe_name(safe_get(smask, "S")) != "Alpha"
        cs_obj = safe_get(safe_get_resolved(group, "Group"), "CS")
        colorspace = parse_colorspace(cs_obj, self._resources) if cs_obj is not None else None
        backdrop = safe_array(safe_get(smask, "BC"))
        color = tuple(_num(v) for v in backdrop) if backdrop is not None else None
        self.device.begin_mask(_rect(safe_get(group, "BBox")), luminosity, colorspace, color)
        self.device.end_mask()

    def _paint_with(
        self,
        colorspace: ColorSpace,
        color: Tuple[float, ...],
        pattern: Optional[str],
        paint: PaintFn,
    ) -> None:
        """Paint in a color space, expanding Pattern colors into what they draw."""
        if colorspace.is_pattern:
            self._paint_pattern(colorspace, color, pattern, paint)
        else:
            paint(colorspace, color)

    def _paint_pattern(
        self,
        colorspace: ColorSpace,
        color: Tuple[float, ...],
        name: Optional[str],
        paint: PaintFn,
    ) -> None:
        if name is None:
            return
        raw = safe_get(safe_get_resolved(self._resources, "Pattern"), name)
        pattern = safe_resolve(raw)
        if pattern is None:
            logger.debug("Pattern /%s not found in resources", name)
            return
        if safe_number(safe_get(pattern, "PatternType")) != _TILING_PATTERN:
            return
        if safe_number(safe_get(pattern, "PaintType")) == _UNCOLORED_PAINT:
            # The cell is a stencil painted with the color given alongside the name
            if colorspace.base is not None:
                paint(colorspace.base, color)
            return

        if self._blocked(name, raw, pattern):
            return
        cell_state = replace(
            self._state,
            ctm=multiply(_matrix(safe_get(pattern, "Matrix")), self._base_ctm),
            fill_cs=DEVICE_GRAY,
            stroke_cs=DEVICE_GRAY,
            fill_color=(0.0,),
            stroke_color=(0.0,),
            fill_pattern=None,
            stroke_pattern=None,
        )
        self._run_nested(raw, pattern, cell_state)

    def _fill_path(self) -> None:
        st = self._state
        self._paint_with(
            st.fill_cs,
            st.fill_color,
            st.fill_pattern,
            lambda cs, color: self._paint(
                lambda: self.device.fill_path(st.ctm, cs, color, st.fill_alpha)
            ),
        )

    def _stroke_path(self) -> None:
        st = self._state
        self._paint_with(
            st.stroke_cs,
            st.stroke_color,
            st.stroke_pattern,
            lambda cs, color: self._paint(
                lambda: self.device.stroke_path(st.ctm, cs, color, st.stroke_alpha)
            ),
        )

    def _show_text(self) -> None:
        st = self._state
        if st.text_render in _TEXT_FILL_MODES:
            self._paint_with(
                st.fill_cs,
                st.fill_color,
                st.fill_pattern,
                lambda cs, color: self._paint(
                    lambda: self.device.fill_text(st.ctm, cs, color, st.fill_alpha)
                ),
            )
        if st.text_render in _TEXT_STROKE_MODES:
            self._paint_with(
                st.stroke_cs,
                st.stroke_color,
                st.stroke_pattern,
                lambda cs, color: self._paint(
                    lambda: self.device.stroke_text(st.ctm, cs, color, st.stroke_alpha)
                ),
            )

    def _draw_image(self, image: ImageXObject) -> None:
        st = self._state
        if image.is_mask:
            self._paint_with(
                st.fill_cs,
                st.fill_color,
                st.fill_pattern,
                lambda cs, color: self._paint(
                    lambda: self.device.fill_image_mask(image, st.ctm, cs, color, st.fill_alpha)
                ),
            )
            return
        if image.has_alpha:
            self.device.begin_mask(None, False, None, None)
            self.device.end_mask()
        self._paint(lambda: self.device.fill_image(image, st.ctm, st.fill_alpha))

    def _draw_inline_image(self, operands: Any) -> None:
        settings = operands.get("settings") if isinstance(operands, dict) else None
        data = operands.get("data", b"") if isinstance(operands, dict) else b""
        if settings is None:
            return
        self._draw_image(ImageXObject.from_inline(settings, data or b"", self._resources))

    # ------------------------------------------------------------------
    # XObjects and nested content
    # ------------------------------------------------------------------

    def _op_xobject(self, operands: List[Any]) -> None:
        if not operands:
            return
        name = safe_name(operands[0])
        if name is None:
            return
        xobjects = safe_get_resolved(self._resources, "XObject")
        raw = safe_get(xobjects, name)
        xobj = safe_get_resolved(xobjects, name)
        if xobj is None:
            logger.debug("XObject /%s not found in resources", name)
            return
        subtype = safe_name(safe_get(xobj, "Subtype"))
        if subtype == "Image":
            self._draw_image(ImageXObject.from_stream(name, xobj, self._resources))
        elif subtype == "Form":
            self._run_form(name, raw, xobj)

    def _blocked(self, name: str, raw: Any, stream: Any) -> bool:
        key = object_id(raw) or object_id(stream)
        if self._depth >= self.max_depth or (key is not None and key in self._active_streams):
            logger.debug("Skipping /%s (cycle or nesting limit)", name)
            return True
        return False

    def _run_nested(self, raw: Any, stream: Any, state: GraphicsState) -> None:
        """Replay a form or pattern cell in its own scope, restoring state afterwards."""
        key = object_id(raw) or object_id(stream)
        saved_state, saved_base = self._state, self._base_ctm
        stack_depth = len(self._stack)
        self._state = state
        self._base_ctm = state.ctm
        if key is not None:
            self._active_streams.add(key)
        try:
            resources = safe_get_resolved(stream, "Resources") or self._resources
            operations = ContentStream(stream, self.reader).operations
            self._execute(operations, resources, self._depth + 1)
        finally:
            if key is not None:
                self._active_streams.discard(key)
            del self._stack[stack_depth:]
            self._state = saved_state
            self._base_ctm = saved_base

    def _run_form(self, name: str, raw: Any, form: Any) -> None:
        if self._blocked(name, raw, form):
            return

        outer = self._state
        form_state = replace(outer)
        form_state.ctm = multiply(_matrix(safe_get(form, "Matrix")), outer.ctm)

        group = safe_get_resolved(form, "Group")
        is_transparency_group = safe_name(safe_get(group, "S")) == "Transparency"
        if is_transparency_group:
            if outer.soft_mask is not None:
                self._emit_soft_mask(outer.soft_mask)
            cs_obj = safe_get(group, "CS")
            self.device.begin_group(
                _rect(safe_get(form, "BBox")),
                parse_colorspace(cs_obj, self._resources) if cs_obj is not None else None,
                bool(safe_bool(safe_get(group, "I"))),
                bool(safe_bool(safe_get(group, "K"))),
                outer.blend_mode,
                outer.fill_alpha,
            )
            # The group is composited with the outer alpha and blend mode
            form_state.fill_alpha = 1.0
            form_state.stroke_alpha = 1.0
            form_state.blend_mode = "Normal"
            form_state.soft_mask = None

        try:
            self._run_nested(raw, form, form_state)
        finally:
            if is_transparency_group:
                self.device.end_group()


__all__ = ["ContentReplayer", "GraphicsState", "MAX_FORM_DEPTH"]
