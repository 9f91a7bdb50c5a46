# core/report.py
"""
Report compiler - renders an AnalysisEnvelope into a one or two page PDF.

Page 1: title, generation date and the transcription text.
Page 2: the prescription image, only when the envelope carries a decodable one.
A broken image never fails the report; it is logged and the PDF ends after page 1.
"""
import io
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

import pymupdf as fitz
from PIL import Image, UnidentifiedImageError

from core.envelope import AnalysisEnvelope, decode_data_uri
from core.errors import EmptyReportRequestError, ImageDecodeError, ReportGenerationError

logger = logging.getLogger(__name__)

REPORT_TITLE = "Prescription Analysis Report"
NO_TEXT_PLACEHOLDER = "No analysis text available."

# US Letter, points
PAGE_WIDTH, PAGE_HEIGHT = 612, 792
MARGIN = 72
IMAGE_BOX = (450, 300)

BODY_FONT_SIZE = 12
MIN_BODY_FONT_SIZE = 6
TITLE_BOX_HEIGHT = 50
DATE_BOX_HEIGHT = 30
TRUNCATION_MARK = "\n[... truncated ...]"

# Formats PyMuPDF embeds as-is; anything else Pillow can read is re-encoded to PNG
_NATIVE_FORMATS = {"JPEG", "PNG"}


class ReportState(str, Enum):
    EMPTY = "empty"
    WRITING = "writing"
    FINALIZING = "finalizing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class CompiledReport:
    data: bytes
    page_count: int
    filename: str
    image_error: Optional[str] = None

    media_type = "application/pdf"


def prepare_image(data: bytes) -> Tuple[bytes, Tuple[int, int]]:
    """Decode with Pillow to prove the bytes are an image; return embeddable bytes and size."""
    try:
        im = Image.open(io.BytesIO(data))
        im.load()  # force decode
    except UnidentifiedImageError as e:
        raise ImageDecodeError("payload is not a recognised image") from e
    except Exception as e:
        raise ImageDecodeError(f"could not read image: {e}") from e

    if im.format in _NATIVE_FORMATS:
        return data, im.size

    if im.mode not in ("RGB", "RGBA", "L"):
        im = im.convert("RGBA" if "A" in im.getbands() else "RGB")
    out = io.BytesIO()
    im.save(out, format="PNG")
    return out.getvalue(), im.size


def _checked(spare: float, what: str) -> float:
    """insert_textbox writes nothing and returns a negative value when the text overflows its box"""
    if spare < 0:
        raise RuntimeError(f"Report {what} does not fit its box")
    return spare


def _fits(scratch, rect, text: str) -> bool:
    page = scratch.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    return page.insert_textbox(rect, text, fontsize=MIN_BODY_FONT_SIZE, fontname="helv") >= 0


def _largest_prefix(scratch, rect, n: int, build) -> int:
    """Largest k in [0, n] for which build(k) fits `rect`; build must grow with k."""
    lo, hi = 0, n
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if _fits(scratch, rect, build(mid)):
            lo = mid
        else:
            hi = mid - 1
    return lo


def clip_to_fit(rect, text: str) -> str:
    """Longest head of `text` (plus the truncation mark) that fits `rect` at the minimum size.

    Whole lines are kept first, then as many characters of the next line as still fit.
    Sizes are tried on a scratch document; insert_textbox writes whenever the text fits.
    """
    lines = text.split("\n")
    with fitz.open() as scratch:
        keep = _largest_prefix(
            scratch, rect, len(lines),
            lambda k: "\n".join(lines[:k]) + TRUNCATION_MARK,
        )
        head = lines[:keep]
        if keep < len(lines):
            partial = lines[keep]
            chars = _largest_prefix(
                scratch, rect, len(partial),
                lambda k: "\n".join(head + [partial[:k]]) + TRUNCATION_MARK,
            )
            if chars:
                head = head + [partial[:chars]]
    return "\n".join(head) + TRUNCATION_MARK


class ReportCompiler:
    """Accumulates pages into an in-memory PDF.

    EMPTY -> WRITING (page 1) -> [WRITING (page 2)] -> FINALIZING -> COMPLETE.
    The buffer is only readable once COMPLETE and never changes afterwards.
    """

    def __init__(self):
        self.state = ReportState.EMPTY
        self._doc = fitz.open()
        self._buffer: Optional[bytes] = None
        self._page_count = 0

    @property
    def page_count(self) -> int:
        if self._doc is None:
            return self._page_count
        return self._doc.page_count

    @property
    def buffer(self) -> bytes:
        if self.state is not ReportState.COMPLETE:
            raise RuntimeError(f"Report buffer not available in state {self.state.value}")
        return self._buffer

    def _require(self, *states: ReportState):
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise RuntimeError(f"Invalid report state {self.state.value}; expected {allowed}")

    def write_summary_page(self, text: Optional[str], generated_at: datetime):
        self._require(ReportState.EMPTY)
        self.state = ReportState.WRITING
        page = self._doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        right = PAGE_WIDTH - MARGIN

        title_bottom = MARGIN + TITLE_BOX_HEIGHT
        date_bottom = title_bottom + DATE_BOX_HEIGHT

        _checked(page.insert_textbox(
            fitz.Rect(MARGIN, MARGIN, right, title_bottom),
            REPORT_TITLE,
            fontsize=24,
            fontname="helv",
            align=fitz.TEXT_ALIGN_CENTER,
        ), "title")
        _checked(page.insert_textbox(
            fitz.Rect(MARGIN, title_bottom, right, date_bottom),
            f"Date: {generated_at.strftime('%Y-%m-%d')}",
            fontsize=14,
            fontname="helv",
        ), "date")
        self._insert_body(page, fitz.Rect(MARGIN, date_bottom + 20, right, PAGE_HEIGHT - MARGIN),
                          text or NO_TEXT_PLACEHOLDER)

    def _insert_body(self, page, rect, text: str):
        """Shrink the font until the text fits the box; clip the tail at the smallest size."""
        for size in range(BODY_FONT_SIZE, MIN_BODY_FONT_SIZE - 1, -1):
            # negative return means nothing was written
            if page.insert_textbox(rect, text, fontsize=size, fontname="helv") >= 0:
                return

        clipped = clip_to_fit(rect, text)
        logger.warning(f"Report text truncated to {len(clipped) - len(TRUNCATION_MARK)} of {len(text)} characters")
        _checked(page.insert_textbox(rect, clipped, fontsize=MIN_BODY_FONT_SIZE, fontname="helv"), "body text")

    def write_image_page(self, image_bytes: bytes):
        """Add the image page. Raises ImageDecodeError and leaves the document unchanged on failure."""
        self._require(ReportState.WRITING)
        if self._doc.page_count != 1:
            raise RuntimeError("Image page must follow the summary page")

        data, _ = prepare_image(image_bytes)
        box_w, box_h = IMAGE_BOX
        x0 = (PAGE_WIDTH - box_w) / 2
        y0 = (PAGE_HEIGHT - box_h) / 2
        page = self._doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        try:
            page.insert_image(fitz.Rect(x0, y0, x0 + box_w, y0 + box_h),
                              stream=data, keep_proportion=True)
        except Exception as e:
            self._doc.delete_page(-1)
            raise ImageDecodeError(f"could not embed image: {e}") from e

    def finalize(self) -> bytes:
        self._require(ReportState.WRITING)
        self.state = ReportState.FINALIZING
        try:
            self._buffer = self._doc.tobytes(garbage=3, deflate=True)
            self._page_count = self._doc.page_count
        finally:
            self._doc.close()
            self._doc = None
        self.state = ReportState.COMPLETE
        return self._buffer

    def discard(self):
        """Release the document without producing output"""
        if self._doc is not None:
            self._doc.close()
            self._doc = None


def report_filename(now: Optional[float] = None) -> str:
    millis = int((now if now is not None else time.time()) * 1000)
    return f"prescription_report_{millis}.pdf"


def compile_report(envelope: AnalysisEnvelope, now: Optional[datetime] = None) -> CompiledReport:
    """Render the envelope. Rejects an envelope with neither text nor image."""
    if envelope.is_empty:
        raise EmptyReportRequestError()

    now = now or datetime.now()
    image_error = None
    compiler = ReportCompiler()
    try:
        compiler.write_summary_page(envelope.text, now)

        if envelope.image_data_uri:
            try:
                compiler.write_image_page(decode_data_uri(envelope.image_data_uri))
            except ImageDecodeError as e:
                image_error = str(e)
                logger.warning(f"Skipping report image page: {image_error}")

        data = compiler.finalize()
    except Exception as e:
        logger.exception("PDF generation failed")
        compiler.discard()
        raise ReportGenerationError(str(e)) from e

    logger.info(f"Compiled report: {compiler.page_count} page(s), {len(data)} bytes")
    return CompiledReport(
        data=data,
        page_count=compiler.page_count,
        filename=report_filename(now.timestamp()),
        image_error=image_error,
    )
