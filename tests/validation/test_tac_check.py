"""Tests for the TacCheck and image sampling."""

import logging

import pytest
from pypdf.generic import ByteStringObject

from print_check.core.enums import CheckStatus
from print_check.document import ImageXObject
from print_check.document.objects import safe_get_resolved
from print_check.validation.checks.tac import TacCheck, image_max_tac, sample_step
from print_check.validation.options import CheckOptions

SQUARE = b" 0 0 100 100 re f"


def _run(pdf, open_pdf, **options):
    return TacCheck().validate(open_pdf(pdf), CheckOptions(**options))


def test_vector_fill_over_limit_fails(pdf, open_pdf):
    pdf.add_page(b"0.8 0.7 0.7 0.9 k" + SQUARE)
    result = _run(pdf, open_pdf)

    assert result.check == "Total Ink Coverage"
    assert result.status == CheckStatus.FAIL
    assert result.summary == "Max TAC: 310% on page 1 (limit: 300%)"
    assert [(d.page, d.message) for d in result.details] == [(1, "Max TAC: 310% (limit: 300%)")]


@pytest.mark.parametrize(
    "content, expected",
    [
        (b"0.7 0.7 0.7 0.7 k", CheckStatus.WARN),
        (b"0.6 0.6 0.6 0.6 k", CheckStatus.PASS),
        (b"0 0 0 1 k", CheckStatus.PASS),
    ],
    ids=["above_warn_ratio", "below_warn_ratio", "black"],
)
def test_vector_fill_status(pdf, open_pdf, content, expected):
    pdf.add_page(content + SQUARE)
    result = _run(pdf, open_pdf)

    assert result.status == expected


def test_stroke_color_counts(pdf, open_pdf):
    pdf.add_page(b"1 1 1 1 K 0 0 m 10 10 l S")
    result = _run(pdf, open_pdf)

    assert result.details[0].message == "Max TAC: 400% (limit: 300%)"


def test_tiling_pattern_cell_counts(pdf, open_pdf):
    tile = pdf.pattern(b"1 1 1 1 k 0 0 10 10 re f")
    pdf.add_page(b"/Pattern cs /P0 scn" + SQUARE, {"Pattern": {"P0": tile}})
    result = _run(pdf, open_pdf)

    assert result.status == CheckStatus.FAIL
    assert result.details[0].message == "Max TAC: 400% (limit: 300%)"


def test_non_cmyk_content_has_no_details(pdf, open_pdf):
    pdf.add_page(b"1 0 0 rg" + SQUARE + b" 0.2 g" + SQUARE)
    result = _run(pdf, open_pdf)

    assert result.status == CheckStatus.PASS
    assert result.details == ()
    assert result.summary == "All content within TAC limit (300%)"


def test_worst_page_in_summary(pdf, open_pdf):
    pdf.add_page(b"0.9 0.9 0.9 0.5 k" + SQUARE)
    pdf.add_page(b"1 1 1 0.9 k" + SQUARE)
    result = _run(pdf, open_pdf)

    assert result.summary == "Max TAC: 390% on page 2 (limit: 300%)"
    assert len(result.details) == 2


def test_cmyk_image_is_sampled(pdf, open_pdf):
    data = bytes([255, 255, 255, 0, 0, 0, 0, 255])
    image = pdf.image(2, 1, colorspace="/DeviceCMYK", data=data)
    pdf.add_page(b"/Im0 Do", {"XObject": {"Im0": image}})
    result = _run(pdf, open_pdf, max_tac=280)

    assert result.status == CheckStatus.FAIL
    assert result.details[0].message == "Max TAC: 300% (limit: 280%)"


def test_decode_array_inverts_samples(pdf, open_pdf):
    image = pdf.image(2, 2, colorspace="/DeviceCMYK", Decode=[1, 0, 1, 0, 1, 0, 1, 0])
    pdf.add_page(b"/Im0 Do", {"XObject": {"Im0": image}})
    result = _run(pdf, open_pdf)

    assert result.details[0].message == "Max TAC: 400% (limit: 300%)"


def test_indexed_cmyk_image_is_skipped(pdf, open_pdf):
    palette = ByteStringObject(bytes([255, 255, 255, 255]))
    image = pdf.image(2, 2, colorspace=["/Indexed", "/DeviceCMYK", 0, palette])
    pdf.add_page(b"/Im0 Do", {"XObject": {"Im0": image}})
    result = _run(pdf, open_pdf)

    assert result.details == ()


def test_undecodable_image_logs_warning(pdf, open_pdf, caplog):
    image = pdf.image(10, 10, colorspace="/DeviceCMYK", data=bytes(4))
    pdf.add_page(b"/Im0 Do", {"XObject": {"Im0": image}})

    with caplog.at_level(logging.WARNING):
        result = _run(pdf, open_pdf)

    assert result.status == CheckStatus.PASS
    assert "Skipping ink coverage of image Im0" in caplog.text


def test_large_image_sample_count_is_bounded(pdf, open_pdf):
    pdf.add_page(b"/Im0 Do", {"XObject": {"Im0": pdf.image(200, 200, colorspace="/DeviceCMYK")}})
    document = open_pdf(pdf)
    stream = safe_get_resolved(safe_get_resolved(document.resources(0), "XObject"), "Im0")
    image = ImageXObject.from_stream("Im0", stream)

    pixels = image.sample_pixels(sample_step(image.pixel_count))

    assert pixels.shape == (10_000, 4)
    assert image_max_tac(image) == 0.0


@pytest.mark.parametrize(
    "pixel_count, expected",
    [(0, 1), (9_999, 1), (10_000, 1), (19_999, 1), (20_000, 2), (12_000_000, 1200)],
)
def test_sample_step(pixel_count, expected):
    assert sample_step(pixel_count) == expected
