import base64
from datetime import datetime

import pymupdf as fitz
import pytest

from core.envelope import AnalysisEnvelope, encode_data_uri
from core.errors import EmptyReportRequestError, ImageDecodeError
from core.report import (
    NO_TEXT_PLACEHOLDER,
    REPORT_TITLE,
    TRUNCATION_MARK,
    ReportCompiler,
    ReportState,
    _checked,
    clip_to_fit,
    compile_report,
    prepare_image,
    report_filename,
)

from .conftest import TRANSCRIPTION, make_image, pdf_pages, pdf_text

NOW = datetime(2024, 3, 5, 10, 30)


def test_text_only_report_has_one_page():
    report = compile_report(AnalysisEnvelope(text=TRANSCRIPTION), now=NOW)

    assert report.data.startswith(b"%PDF")
    assert report.page_count == 1
    assert pdf_pages(report.data) == 1
    text = pdf_text(report.data)
    assert REPORT_TITLE in text
    assert "Date: 2024-03-05" in text
    assert "Paracetamol" in text
    assert report.image_error is None


def test_text_and_image_report_has_two_pages(jpeg_bytes):
    envelope = AnalysisEnvelope(text=TRANSCRIPTION, image_data_uri=encode_data_uri(jpeg_bytes, "image/jpeg"))
    report = compile_report(envelope, now=NOW)

    assert report.page_count == 2
    assert pdf_pages(report.data) == 2


def test_image_only_report_uses_placeholder(png_bytes):
    report = compile_report(AnalysisEnvelope(image_data_uri=encode_data_uri(png_bytes, "image/png")), now=NOW)

    assert pdf_pages(report.data) == 2
    assert NO_TEXT_PLACEHOLDER in pdf_text(report.data)


@pytest.mark.parametrize("image", [
    "data:image/png;base64,%%%%",
    "data:image/png;base64," + base64.b64encode(b"definitely not an image").decode(),
    "https://example.com/rx.png",
])
def test_broken_image_degrades_to_one_page(image):
    report = compile_report(AnalysisEnvelope(text=TRANSCRIPTION, image_data_uri=image), now=NOW)

    assert report.page_count == 1
    assert pdf_pages(report.data) == 1
    assert report.image_error


def test_empty_envelope_rejected():
    with pytest.raises(EmptyReportRequestError) as exc:
        compile_report(AnalysisEnvelope())
    assert exc.value.status_code == 400


def test_long_text_stays_on_first_page():
    long_text = "\n".join(f"Medicine Name: Drug {i}\nDosage: 1 tab\nPurpose: Test" for i in range(200))
    report = compile_report(AnalysisEnvelope(text=long_text), now=NOW)

    assert pdf_pages(report.data) == 1
    assert "Drug 0" in pdf_text(report.data)


def test_non_native_formats_are_embedded():
    gif = make_image("GIF")
    report = compile_report(
        AnalysisEnvelope(text="x", image_data_uri=encode_data_uri(gif, "image/gif")), now=NOW
    )
    assert pdf_pages(report.data) == 2


def test_prepare_image_keeps_jpeg_and_converts_others(jpeg_bytes):
    data, size = prepare_image(jpeg_bytes)
    assert data == jpeg_bytes
    assert size == (64, 32)

    converted, _ = prepare_image(make_image("BMP"))
    assert converted.startswith(b"\x89PNG")

    with pytest.raises(ImageDecodeError):
        prepare_image(b"\x00\x01\x02")


def test_filename():
    assert report_filename(1700000000.5) == "prescription_report_1700000000500.pdf"
    report = compile_report(AnalysisEnvelope(text="x"), now=NOW)
    assert report.filename == f"prescription_report_{int(NOW.timestamp() * 1000)}.pdf"


class TestReportCompilerStates:

    def test_happy_path(self, png_bytes):
        compiler = ReportCompiler()
        assert compiler.state is ReportState.EMPTY

        compiler.write_summary_page("text", NOW)
        assert compiler.state is ReportState.WRITING
        compiler.write_image_page(png_bytes)
        assert compiler.state is ReportState.WRITING

        data = compiler.finalize()
        assert compiler.state is ReportState.COMPLETE
        assert compiler.buffer is data
        assert compiler.page_count == 2

    def test_buffer_hidden_until_complete(self):
        compiler = ReportCompiler()
        compiler.write_summary_page("text", NOW)
        with pytest.raises(RuntimeError):
            compiler.buffer
        compiler.discard()

    def test_cannot_finalize_empty(self):
        compiler = ReportCompiler()
        with pytest.raises(RuntimeError):
            compiler.finalize()
        compiler.discard()

    def test_image_page_requires_summary_page(self, png_bytes):
        compiler = ReportCompiler()
        with pytest.raises(RuntimeError):
            compiler.write_image_page(png_bytes)
        compiler.discard()

    def test_no_writes_after_complete(self, png_bytes):
        compiler = ReportCompiler()
        compiler.write_summary_page("text", NOW)
        compiler.finalize()
        with pytest.raises(RuntimeError):
            compiler.write_image_page(png_bytes)
        with pytest.raises(RuntimeError):
            compiler.finalize()

    def test_failed_image_leaves_single_page(self):
        compiler = ReportCompiler()
        compiler.write_summary_page("text", NOW)
        with pytest.raises(ImageDecodeError):
            compiler.write_image_page(b"garbage")
        compiler.finalize()
        assert compiler.page_count == 1


def test_title_and_date_on_first_page_with_image(jpeg_bytes):
    envelope = AnalysisEnvelope(text=TRANSCRIPTION, image_data_uri=encode_data_uri(jpeg_bytes, "image/jpeg"))
    report = compile_report(envelope, now=NOW)

    first = pdf_text(report.data)
    assert first.index(REPORT_TITLE) < first.index("Date: 2024-03-05") < first.index("Paracetamol")


def test_title_shown_above_placeholder(png_bytes):
    report = compile_report(AnalysisEnvelope(image_data_uri=encode_data_uri(png_bytes, "image/png")), now=NOW)
    first = pdf_text(report.data)
    assert REPORT_TITLE in first
    assert first.index(REPORT_TITLE) < first.index(NO_TEXT_PLACEHOLDER)


def test_long_paragraph_after_short_line_is_clipped_not_dropped():
    paragraph = " ".join(f"word{i}" for i in range(2500))
    report = compile_report(AnalysisEnvelope(text="Medicine Name: Amoxicillin\n" + paragraph), now=NOW)

    text = pdf_text(report.data)
    assert pdf_pages(report.data) == 1
    assert "Amoxicillin" in text
    assert "word0" in text
    assert "word2499" not in text
    assert "truncated" in text


def test_clip_to_fit_keeps_whole_text_head():
    rect = fitz.Rect(0, 0, 200, 60)
    clipped = clip_to_fit(rect, "first\n" + "x " * 500)
    assert clipped.startswith("first\nx x")
    assert clipped.endswith(TRUNCATION_MARK)


def test_header_overflow_is_an_error():
    with pytest.raises(RuntimeError, match="title"):
        _checked(-0.15, "title")
    assert _checked(9.85, "title") == 9.85
