"""Tests for the ColorSpaceCheck."""

import pytest

from print_check.core.enums import CheckStatus
from print_check.document.colorspaces import DEVICE_RGB, ColorSpace
from print_check.validation.checks.colorspace import ColorSpaceCheck, is_neutral
from print_check.validation.options import CheckOptions

SQUARE = b"0 0 10 10 re f"


def _run(open_pdf, pdf, **options):
    return ColorSpaceCheck().validate(open_pdf(pdf), CheckOptions(**options))


def test_cmyk_and_gray_pass(pdf, open_pdf):
    pdf.add_page(b"0 0 0 1 k " + SQUARE + b" 0.5 g " + SQUARE + b" 0 0 0 1 K 0 0 m 10 10 l S")
    result = _run(open_pdf, pdf)

    assert result.check == "Color Space"
    assert result.status == CheckStatus.PASS
    assert result.summary == "All color spaces are CMYK-compatible"
    assert result.details == ()


@pytest.mark.parametrize(
    "content, usage",
    [
        (b"1 0 0 rg " + SQUARE, "fill"),
        (b"0 1 0 RG 0 0 m 10 10 l S", "stroke"),
        (b"BT 0 0 1 rg /F1 12 Tf (Hi) Tj ET", "text"),
    ],
    ids=["fill", "stroke", "text"],
)
def test_rgb_vector_content_fails(pdf, open_pdf, content, usage):
    pdf.add_page(content)
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.FAIL
    assert result.summary == "RGB detected on pages 1"
    assert result.details[0].message == f"RGB color used for {usage} (DeviceRGB)"
    assert result.details[0].page == 1


def test_neutral_rgb_is_ignored(pdf, open_pdf):
    """Equal RGB channels separate to black only."""
    pdf.add_page(b"0.5 0.5 0.5 rg " + SQUARE + b" 0 0 0 rg " + SQUARE)
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.PASS


def test_findings_are_deduplicated_per_page(pdf, open_pdf):
    pdf.add_page(b"1 0 0 rg " + SQUARE * 50 + b" 0 0 1 rg " + SQUARE)
    pdf.add_page(b"1 0 0 rg " + SQUARE)
    result = _run(open_pdf, pdf)

    assert [(d.page, d.message) for d in result.details] == [
        (1, "RGB color used for fill (DeviceRGB)"),
        (2, "RGB color used for fill (DeviceRGB)"),
    ]
    assert result.summary == "RGB detected on pages 1, 2"


def test_icc_based_rgb_fails(pdf, open_pdf):
    icc = pdf.stream(b"\x00" * 32, {"N": 3})
    pdf.add_page(
        b"/CS0 cs 1 0 0 sc " + SQUARE,
        {"ColorSpace": {"CS0": ["/ICCBased", icc]}},
    )
    result = _run(open_pdf, pdf)

    assert result.details[0].message == "RGB color used for fill (ICCBased(3))"


def test_lab_warns(pdf, open_pdf):
    pdf.add_page(
        b"/CS0 cs 50 0 0 sc " + SQUARE,
        {"ColorSpace": {"CS0": ["/Lab", {"WhitePoint": [0.9505, 1.0, 1.089]}]}},
    )
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.WARN
    assert result.summary == "Non-CMYK color spaces detected"
    assert result.details[0].message == 'Non-CMYK color space "Lab" used for fill'


def test_rgb_image_fails(pdf, open_pdf):
    image = pdf.image(2, 2, colorspace="/DeviceRGB")
    pdf.add_page(b"q 72 0 0 72 0 0 cm /Im0 Do Q", {"XObject": {"Im0": image}})
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.FAIL
    assert result.details[0].message == 'Image "Im0" uses RGB color space'


def test_cmyk_image_passes(pdf, open_pdf):
    image = pdf.image(2, 2, colorspace="/DeviceCMYK")
    pdf.add_page(b"/Im0 Do", {"XObject": {"Im0": image}})
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.PASS


def test_spot_colors_are_listed(pdf, open_pdf):
    tint = {"FunctionType": 2, "Domain": [0, 1], "C0": [0, 0, 0, 0], "C1": [0, 1, 1, 0], "N": 1}
    pdf.add_page(
        b"/CS0 cs 1 sc " + SQUARE + b" /CS1 cs 1 1 sc " + SQUARE,
        {
            "ColorSpace": {
                "CS0": ["/Separation", "/PANTONE185C", "/DeviceCMYK", tint],
                "CS1": ["/DeviceN", ["/Gold", "/None"], "/DeviceCMYK", tint],
            }
        },
    )
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.PASS
    assert result.details[-1].message == "Spot colors found: PANTONE185C, Gold"


def test_output_intent_reported(pdf, open_pdf):
    pdf.add_page(b"0 0 0 1 k " + SQUARE)
    pdf.add_output_intent(condition="FOGRA39")
    result = _run(open_pdf, pdf)

    assert result.details[0].message == "OutputIntent: GTS_PDFX — FOGRA39"
    assert result.details[0].page is None


def test_rgb_inside_form_is_found(pdf, open_pdf):
    form = pdf.form(b"1 0 0 rg " + SQUARE)
    pdf.add_page(b"/Fm0 Do", {"XObject": {"Fm0": form}})
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.FAIL


def test_rgb_inside_tiling_pattern_is_found(pdf, open_pdf):
    tile = pdf.pattern(b"1 0 0 rg " + SQUARE)
    pdf.add_page(b"/Pattern cs /P0 scn 0 0 100 100 re f", {"Pattern": {"P0": tile}})
    result = _run(open_pdf, pdf)

    assert result.status == CheckStatus.FAIL
    assert result.details[0].message == "RGB color used for fill (DeviceRGB)"


def test_any_mode_skips(pdf, open_pdf):
    pdf.add_page(b"1 0 0 rg " + SQUARE)
    result = _run(open_pdf, pdf, color_space="any")

    assert result.status == CheckStatus.PASS
    assert result.summary == "Color space check skipped (--color-space any)"


@pytest.mark.parametrize(
    "colorspace, color, expected",
    [
        (DEVICE_RGB, (0.2, 0.2, 0.2), True),
        (DEVICE_RGB, (0.2, 0.2, 0.3), False),
        (ColorSpace("Indexed", 1, base=DEVICE_RGB), (0.0,), False),
    ],
    ids=["gray_rgb", "colored_rgb", "indexed"],
)
def test_is_neutral(colorspace, color, expected):
    assert is_neutral(colorspace, color) is expected
