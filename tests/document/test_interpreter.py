"""Tests for content-stream replay.

A recording device captures every painting event so that the tests can
assert on the transform, color and alpha the replayer reports.
"""

# pylint: disable=redefined-outer-name

import logging

import pytest
from pypdf.generic import DictionaryObject, NameObject

from print_check.document import Device, multiply
from print_check.document.interpreter import MAX_FORM_DEPTH


class RecordingDevice(Device):
    def __init__(self):
        self.events = []

    def fill_path(self, ctm, colorspace, color, alpha):
        self.events.append(("fill", ctm, colorspace.family, color, alpha))

    def stroke_path(self, ctm, colorspace, color, alpha):
        self.events.append(("stroke", ctm, colorspace.family, color, alpha))

    def fill_text(self, ctm, colorspace, color, alpha):
        self.events.append(("text", ctm, colorspace.family, color, alpha))

    def stroke_text(self, ctm, colorspace, color, alpha):
        self.events.append(("stroke_text", ctm, colorspace.family, color, alpha))

    def fill_image(self, image, ctm, alpha):
        self.events.append(("image", image.name, ctm, alpha))

    def fill_image_mask(self, image, ctm, colorspace, color, alpha):
        self.events.append(("mask", image.name, colorspace.family, color))

    def begin_group(self, bbox, colorspace, isolated, knockout, blend_mode, alpha):
        self.events.append(("begin_group", blend_mode, alpha, isolated))

    def end_group(self):
        self.events.append(("end_group",))

    def begin_mask(self, bbox, luminosity, colorspace, color):
        self.events.append(("begin_mask", luminosity))


@pytest.fixture
def replay(pdf, open_pdf):
    def _replay(content, resources=None):
        pdf.add_page(content, resources)
        device = RecordingDevice()
        open_pdf(pdf).replay(0, device)
        return device.events

    return _replay


def test_multiply_applies_left_matrix_first():
    scale = (2.0, 0.0, 0.0, 2.0, 0.0, 0.0)
    translate = (1.0, 0.0, 0.0, 1.0, 10.0, 20.0)

    assert multiply(scale, translate) == (2.0, 0.0, 0.0, 2.0, 10.0, 20.0)
    assert multiply(translate, scale) == (2.0, 0.0, 0.0, 2.0, 20.0, 40.0)


def test_default_fill_is_black_gray(replay):
    events = replay(b"0 0 10 10 re f")
    assert events == [("fill", (1.0, 0.0, 0.0, 1.0, 0.0, 0.0), "DeviceGray", (0.0,), 1.0)]


def test_fill_and_stroke_operators(replay):
    events = replay(b"1 0 0 rg 0 0 1 RG 0 0 10 10 re B")

    assert [(e[0], e[2], e[3]) for e in events] == [
        ("fill", "DeviceRGB", (1.0, 0.0, 0.0)),
        ("stroke", "DeviceRGB", (0.0, 0.0, 1.0)),
    ]


def test_save_restore_scopes_state(replay):
    events = replay(b"q 2 0 0 2 0 0 cm 0 0 0 1 k 0 0 1 1 re f Q 0 0 1 1 re f")

    assert events[0][1] == (2.0, 0.0, 0.0, 2.0, 0.0, 0.0)
    assert events[0][2] == "DeviceCMYK"
    assert events[1][1] == (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    assert events[1][2] == "DeviceGray"


def test_unbalanced_restore_is_ignored(replay):
    events = replay(b"Q Q 0 0 1 1 re f")
    assert len(events) == 1


def test_concatenated_transforms(replay):
    events = replay(b"1 0 0 1 10 20 cm 2 0 0 2 0 0 cm 0 0 1 1 re f")
    assert events[0][1] == (2.0, 0.0, 0.0, 2.0, 10.0, 20.0)


def test_set_colorspace_resets_color(replay):
    events = replay(b"/DeviceCMYK cs 0 0 1 1 re f /DeviceCMYK cs 0.1 0.2 0.3 0.4 sc 0 0 1 1 re f")

    assert events[0][3] == (0.0, 0.0, 0.0, 1.0)
    assert events[1][3] == pytest.approx((0.1, 0.2, 0.3, 0.4))


@pytest.mark.parametrize(
    "mode, kinds",
    [(b"0", ["text"]), (b"1", ["stroke_text"]), (b"2", ["text", "stroke_text"]), (b"3", [])],
    ids=["fill", "stroke", "fill_stroke", "invisible"],
)
def test_text_render_modes(replay, mode, kinds):
    events = replay(b"BT " + mode + b" Tr /F1 12 Tf (Hi) Tj ET")
    assert [e[0] for e in events] == kinds


def test_pattern_fill_is_not_reported(replay):
    events = replay(b"/Pattern cs /P0 scn 0 0 1 1 re f")
    assert events == []


def test_tiling_pattern_cell_is_replayed(pdf, replay):
    tile = pdf.pattern(b"1 0 0 rg 0 0 10 10 re f", Matrix=[1, 0, 0, 1, 5, 5])
    events = replay(
        b"2 0 0 2 0 0 cm /Pattern cs /P0 scn 0 0 100 100 re f",
        {"Pattern": {"P0": tile}},
    )

    # Pattern space is relative to the page, not to the CTM at paint time
    assert events == [("fill", (1.0, 0.0, 0.0, 1.0, 5.0, 5.0), "DeviceRGB", (1.0, 0.0, 0.0), 1.0)]


def test_tiling_pattern_keeps_alpha_and_restores_state(pdf, replay):
    tile = pdf.pattern(b"0 0 0 1 k 0 0 10 10 re f")
    resources = {"Pattern": {"P0": tile}, "ExtGState": {"GS0": {"ca": 0.5}}}
    events = replay(b"/GS0 gs /Pattern cs /P0 scn 0 0 1 1 re f 0.2 g 0 0 1 1 re f", resources)

    assert [(e[2], e[4]) for e in events] == [("DeviceCMYK", 0.5), ("DeviceGray", 0.5)]


def test_stroke_and_text_with_pattern(pdf, replay):
    tile = pdf.pattern(b"0 1 0 rg 0 0 10 10 re f")
    events = replay(
        b"/Pattern CS /P0 SCN 0 0 1 1 re S BT 1 Tr /F1 12 Tf (Hi) Tj ET",
        {"Pattern": {"P0": tile}},
    )

    assert [(e[0], e[2]) for e in events] == [("fill", "DeviceRGB"), ("fill", "DeviceRGB")]


def test_uncolored_pattern_paints_with_underlying_space(pdf, replay):
    tile = pdf.pattern(b"0 0 10 10 re f", paint_type=2)
    resources = {
        "Pattern": {"P0": tile},
        "ColorSpace": {"CS0": ["/Pattern", "/DeviceCMYK"]},
    }
    events = replay(b"/CS0 cs 0 0 0 1 /P0 scn 0 0 1 1 re f", resources)

    assert events == [("fill", (1.0, 0.0, 0.0, 1.0, 0.0, 0.0), "DeviceCMYK", (0.0, 0.0, 0.0, 1.0), 1.0)]


def test_shading_pattern_is_not_reported(pdf, replay):
    shading = pdf.add({"Type": "/Pattern", "PatternType": 2, "Shading": {"ShadingType": 2}})
    events = replay(b"/Pattern cs /P0 scn 0 0 1 1 re f", {"Pattern": {"P0": shading}})

    assert events == []


def test_self_referencing_pattern_is_cut(pdf, open_pdf, caplog):
    tile = pdf.pattern(b"1 0 0 rg 0 0 10 10 re f /Pattern cs /P0 scn 0 0 10 10 re f")
    tile.get_object()[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/Pattern"): DictionaryObject({NameObject("/P0"): tile})}
    )
    pdf.add_page(b"/Pattern cs /P0 scn 0 0 1 1 re f", {"Pattern": {"P0": tile}})
    device = RecordingDevice()

    with caplog.at_level(logging.DEBUG):
        open_pdf(pdf).replay(0, device)

    assert len(device.events) == 1
    assert "cycle or nesting limit" in caplog.text


def test_form_xobject_inherits_and_restores_state(pdf, replay):
    form = pdf.form(b"0 0 1 1 re f 1 0 0 rg", Matrix=[1, 0, 0, 1, 5, 5])
    events = replay(b"0 0 0 1 k /Fm0 Do 0 0 1 1 re f", {"XObject": {"Fm0": form}})

    assert events[0][0] == "fill"
    assert events[0][1] == (1.0, 0.0, 0.0, 1.0, 5.0, 5.0)
    assert events[0][2] == "DeviceCMYK"
    # Color set inside the form does not leak out of it
    assert events[1][2] == "DeviceCMYK"


def test_form_cycle_is_cut(pdf, open_pdf, caplog):
    form = pdf.form(b"0 0 1 1 re f /Fm0 Do")
    form.get_object()[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/XObject"): DictionaryObject({NameObject("/Fm0"): form})}
    )
    pdf.add_page(b"/Fm0 Do", {"XObject": {"Fm0": form}})
    device = RecordingDevice()

    with caplog.at_level(logging.DEBUG):
        open_pdf(pdf).replay(0, device)

    assert len(device.events) == 1
    assert "cycle or nesting limit" in caplog.text


def test_nesting_limit(pdf, open_pdf):
    inner = pdf.form(b"0 0 1 1 re f")
    for _ in range(MAX_FORM_DEPTH + 2):
        inner = pdf.form(b"/Fm0 Do", {"XObject": {"Fm0": inner}})
    pdf.add_page(b"/Fm0 Do", {"XObject": {"Fm0": inner}})
    device = RecordingDevice()

    open_pdf(pdf).replay(0, device)

    assert device.events == []


def test_transparency_group_wraps_form(pdf, replay):
    form = pdf.form(b"0 0 1 1 re f", Group={"S": "/Transparency", "I": True})
    resources = {
        "XObject": {"Fm0": form},
        "ExtGState": {"GS0": {"ca": 0.5, "BM": "/Multiply"}},
    }
    events = replay(b"/GS0 gs /Fm0 Do", resources)

    assert events[0] == ("begin_group", "Multiply", 0.5, True)
    # Inside the group the outer alpha is not applied again
    assert events[1][0] == "fill" and events[1][4] == 1.0
    assert events[2] == ("end_group",)


def test_blend_mode_wraps_painting(replay):
    events = replay(b"/GS0 gs 0 0 1 1 re f", {"ExtGState": {"GS0": {"BM": ["/Screen", "/Normal"]}}})

    assert [e[0] for e in events] == ["begin_group", "fill", "end_group"]
    assert events[0][1] == "Screen"


def test_image_and_stencil_mask(pdf, replay):
    image = pdf.image(4, 4)
    mask = pdf.stream(
        bytes(4),
        {"Type": "/XObject", "Subtype": "/Image", "Width": 4, "Height": 4, "ImageMask": True},
    )
    events = replay(
        b"q 10 0 0 10 0 0 cm /Im0 Do Q 0 0 0 1 k /Im1 Do",
        {"XObject": {"Im0": image, "Im1": mask}},
    )

    assert events[0] == ("image", "Im0", (10.0, 0.0, 0.0, 10.0, 0.0, 0.0), 1.0)
    assert events[1] == ("mask", "Im1", "DeviceCMYK", (0.0, 0.0, 0.0, 1.0))


def test_image_with_smask_emits_mask(pdf, replay):
    image = pdf.image(2, 2, SMask=pdf.image(2, 2))
    events = replay(b"/Im0 Do", {"XObject": {"Im0": image}})

    assert [e[0] for e in events] == ["begin_mask", "image"]


def test_inline_image(replay):
    events = replay(b"q 50 0 0 50 0 0 cm BI /W 2 /H 2 /CS /RGB /BPC 8 ID " + bytes(12) + b" EI Q")

    assert events[0][0] == "image"
    assert events[0][1] == "inline"
    assert events[0][2] == (50.0, 0.0, 0.0, 50.0, 0.0, 0.0)


def test_missing_xobject_is_skipped(replay):
    assert replay(b"/Nope Do 0 0 1 1 re f")[0][0] == "fill"


def test_page_without_contents(pdf, open_pdf):
    pdf.add_page()
    device = RecordingDevice()
    open_pdf(pdf).replay(0, device)

    assert device.events == []

