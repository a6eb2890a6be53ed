"""
High-level utilities for rendering Bedtime Books stories into printable PDFs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import BinaryIO
from xml.sax.saxutils import escape

import requests
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph

from bedtime_books.common.schema import Page, Story

from .image_sources import ImageSource, ImageSourceKind, classify_image_reference

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Story"
DEFAULT_FILENAME = "story"
MOCK_IMAGE_CAPTION = "Mock Image"
FAILED_IMAGE_CAPTION = "Image failed to load"

# Layout constants, in points
MARGIN = 36
TITLE_BAND_HEIGHT = 48
TITLE_FONT_SIZE = 26
TITLE_MIN_FONT_SIZE = 14
TITLE_FONT = "Helvetica-Bold"
TITLE_LEADING_RATIO = 1.2
TITLE_GAP = 12
PANEL_HEIGHT = 90
PANEL_GAP = 16
PANEL_RADIUS = 8
PANEL_PADDING = 12
PAGE_NUMBER_BAND = 14
PAGE_NUMBER_FONT_SIZE = 10
RESERVED_PANEL_HEIGHT = PANEL_HEIGHT + PANEL_GAP + PAGE_NUMBER_BAND

_FILENAME_UNSAFE = re.compile(r"[^a-z0-9\-_.]", re.IGNORECASE | re.ASCII)


def story_pdf_filename(title: str | None) -> str:
    """
    Suggested download name for a story: unsafe characters become ``_``.

    >>> story_pdf_filename("My/Story: Part 1?")
    'My_Story__Part_1_.pdf'
    """
    return f"{_FILENAME_UNSAFE.sub('_', title or DEFAULT_FILENAME)}.pdf"


def fit_title(title: str, available_width: float) -> tuple[int, list[str]]:
    """
    Pick a font size and line breaks so the title fits ``available_width``.

    The title shrinks on a single line down to ``TITLE_MIN_FONT_SIZE``; past that it
    wraps at the minimum size, and words wider than a line are broken between characters.
    """
    for font_size in range(TITLE_FONT_SIZE, TITLE_MIN_FONT_SIZE - 1, -1):
        if pdfmetrics.stringWidth(title, TITLE_FONT, font_size) <= available_width:
            return font_size, [title]

    font_size = TITLE_MIN_FONT_SIZE
    lines: list[str] = []
    for line in simpleSplit(title, TITLE_FONT, font_size, available_width):
        lines.extend(_break_wide_line(line, font_size, available_width))
    return font_size, lines


def _break_wide_line(line: str, font_size: int, available_width: float) -> list[str]:
    if pdfmetrics.stringWidth(line, TITLE_FONT, font_size) <= available_width:
        return [line]
    pieces: list[str] = []
    current = ""
    for char in line:
        if current and pdfmetrics.stringWidth(current + char, TITLE_FONT, font_size) > available_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


@dataclass(frozen=True)
class PageLayoutConfig:
    text_color: colors.Color
    title_color: colors.Color
    panel_fill: colors.Color
    panel_fill_alpha: float
    panel_border: colors.Color
    placeholder_fill: colors.Color
    placeholder_text: colors.Color
    page_number_color: colors.Color


DEFAULT_LAYOUT = PageLayoutConfig(
    text_color=colors.black,
    title_color=colors.black,
    panel_fill=colors.black,
    panel_fill_alpha=0.06,
    panel_border=colors.HexColor("#E5E7EB"),
    placeholder_fill=colors.HexColor("#F3F4F6"),
    placeholder_text=colors.HexColor("#6B7280"),
    page_number_color=colors.HexColor("#6B7280"),
)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float


class StorybookPDFBuilder:
    """
    Render a story into a printable US Letter PDF, one sheet per story page.

    Each sheet carries the illustration on top, a rounded text panel below it and the
    page number in the bottom-right margin. The first sheet also carries the title.
    Image problems never abort the document: they leave the illustration area blank
    or draw a placeholder, and are logged.

    References that are neither data URIs nor http(s) URLs are opened as local files
    unless ``allow_local_files`` is off, in which case they get the failure placeholder.
    """

    def __init__(
        self,
        *,
        page_size: tuple[float, float] = LETTER,
        margin: float = MARGIN,
        layout: PageLayoutConfig = DEFAULT_LAYOUT,
        request_timeout: float | None = None,
        invariant: bool = False,
        session: requests.Session | None = None,
        allow_local_files: bool = True,
    ) -> None:
        self.page_size = page_size
        self.margin = margin
        self.layout = layout
        self.request_timeout = request_timeout
        self.invariant = invariant
        self._http = session or requests
        self.allow_local_files = allow_local_files

        self.body_style = ParagraphStyle(
            name="PanelText",
            fontName="Helvetica",
            fontSize=14,
            leading=18,
            alignment=TA_LEFT,
            textColor=self.layout.text_color,
        )

    def render(self, story: Story) -> bytes:
        """Render the story and return the PDF bytes."""
        buffer = BytesIO()
        self.build(story, buffer)
        return buffer.getvalue()

    def build(self, story: Story, output: Path | str | BinaryIO) -> None:
        """Render the story to a file path or a writable binary stream."""
        if isinstance(output, (str, Path)):
            output_file = Path(output)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            target: str | BinaryIO = str(output_file)
        else:
            target = output

        pdf = canvas.Canvas(
            target,
            pagesize=self.page_size,
            invariant=1 if self.invariant else None,
        )
        pdf.setTitle(story.title or DEFAULT_TITLE)
        width, height = self.page_size

        logger.info("Rendering '%s' (%d pages) to PDF", story.title, len(story.pages))
        for index, page in enumerate(story.pages):
            # The canvas starts on the first sheet already
            if index > 0:
                pdf.showPage()
            self._draw_story_page(pdf, story, page, index, width, height)

        pdf.save()

    # ------------------------------------------------------------------ page rendering

    def _draw_story_page(
        self,
        pdf: canvas.Canvas,
        story: Story,
        page: Page,
        index: int,
        width: float,
        height: float,
    ) -> None:
        page_number = index + 1
        is_first = index == 0

        title_band = 0.0
        if is_first:
            title_band = self._draw_title(pdf, story.title or DEFAULT_TITLE, width, height)

        panel = self._text_panel_box(width)
        image_region = self._image_region(panel, height, title_band=title_band)

        self._draw_image(pdf, page.image_url, image_region, page_number)
        self._draw_text_panel(pdf, page.text, panel, height)
        self._draw_page_number(pdf, page_number, width)
        self._reset_graphics_state(pdf)

    def _text_panel_box(self, width: float) -> Box:
        return Box(
            x=self.margin,
            y=self.margin + PAGE_NUMBER_BAND,
            width=width - 2 * self.margin,
            height=PANEL_HEIGHT,
        )

    def _image_region(self, panel: Box, height: float, *, title_band: float) -> Box:
        bottom = self.margin + RESERVED_PANEL_HEIGHT
        top = height - self.margin - title_band
        return Box(x=panel.x, y=bottom, width=panel.width, height=max(top - bottom, 0))

    def _draw_title(self, pdf: canvas.Canvas, title: str, width: float, height: float) -> float:
        """Draw the centred title and return the height of the band it occupies."""
        font_size, lines = fit_title(title, width - 2 * self.margin)
        leading = font_size * TITLE_LEADING_RATIO

        pdf.saveState()
        pdf.setFillColor(self.layout.title_color)
        pdf.setFont(TITLE_FONT, font_size)
        baseline = height - self.margin - font_size
        for line in lines:
            pdf.drawCentredString(width / 2, baseline, line)
            baseline -= leading
        pdf.restoreState()

        text_height = font_size + (len(lines) - 1) * leading
        return max(TITLE_BAND_HEIGHT, text_height + TITLE_GAP)

    # ------------------------------------------------------------------ images

    def _draw_image(
        self,
        pdf: canvas.Canvas,
        reference: str | None,
        region: Box,
        page_number: int,
    ) -> None:
        source = classify_image_reference(reference)
        if source.kind is ImageSourceKind.ABSENT:
            return

        try:
            if source.kind is ImageSourceKind.EMBEDDED_RASTER:
                self._draw_embedded_raster(pdf, source, region, page_number)
            elif source.kind is ImageSourceKind.EMBEDDED_VECTOR:
                # SVG cannot go through drawImage; mock art gets a flat stand-in
                self._draw_placeholder(pdf, region, MOCK_IMAGE_CAPTION, font_size=24)
            elif source.kind is ImageSourceKind.REMOTE_URL:
                self._draw_remote_image(pdf, source, region)
            elif self.allow_local_files:
                self._draw_image_file(pdf, source.reference, region)
            else:
                logger.warning(
                    "Refusing local image reference for page %d: %s", page_number, source.reference
                )
                self._draw_placeholder(pdf, region, FAILED_IMAGE_CAPTION, font_size=12)
        except Exception:
            logger.exception("Failed to embed image for page %d", page_number)
            self._draw_placeholder(pdf, region, FAILED_IMAGE_CAPTION, font_size=12)

    def _draw_embedded_raster(
        self,
        pdf: canvas.Canvas,
        source: ImageSource,
        region: Box,
        page_number: int,
    ) -> None:
        try:
            data = source.decode_payload()
            self._draw_image_bytes(pdf, data, region)
        except Exception as exc:
            # Undecodable embedded images leave the region blank
            logger.warning("Could not decode embedded image for page %d: %s", page_number, exc)

    def _draw_remote_image(self, pdf: canvas.Canvas, source: ImageSource, region: Box) -> None:
        response = self._http.get(source.reference, timeout=self.request_timeout)
        if not response.ok:
            logger.error(
                "Failed to fetch image from %s: %s", source.reference, response.status_code
            )
            return
        self._draw_image_bytes(pdf, response.content, region)

    def _draw_image_bytes(self, pdf: canvas.Canvas, data: bytes, region: Box) -> None:
        self._draw_image_file(pdf, ImageReader(BytesIO(data)), region)

    @staticmethod
    def _draw_image_file(pdf: canvas.Canvas, image: ImageReader | str, region: Box) -> None:
        pdf.drawImage(
            image,
            region.x,
            region.y,
            region.width,
            region.height,
            preserveAspectRatio=True,
            anchor="c",
            mask="auto",
        )

    def _draw_placeholder(
        self,
        pdf: canvas.Canvas,
        region: Box,
        caption: str,
        *,
        font_size: int,
    ) -> None:
        pdf.saveState()
        pdf.setFillColor(self.layout.placeholder_fill)
        pdf.rect(region.x, region.y, region.width, region.height, stroke=0, fill=1)
        pdf.setFillColor(self.layout.placeholder_text)
        pdf.setFont("Helvetica", font_size)
        pdf.drawCentredString(
            region.x + region.width / 2,
            region.y + region.height / 2 - font_size / 3,
            caption,
        )
        pdf.restoreState()

    # ------------------------------------------------------------------ text and footer

    def _draw_text_panel(self, pdf: canvas.Canvas, text: str, panel: Box, height: float) -> None:
        pdf.saveState()
        pdf.setFillColor(self.layout.panel_fill)
        pdf.setFillAlpha(self.layout.panel_fill_alpha)
        pdf.setStrokeColor(self.layout.panel_border)
        pdf.roundRect(panel.x, panel.y, panel.width, panel.height, PANEL_RADIUS, stroke=1, fill=1)
        pdf.restoreState()

        # Text is never truncated; anything taller than the panel spills below it
        paragraph = Paragraph(escape(text or ""), self.body_style)
        _, text_height = paragraph.wrap(panel.width - 2 * PANEL_PADDING, height)
        paragraph.drawOn(
            pdf,
            panel.x + PANEL_PADDING,
            panel.y + panel.height - PANEL_PADDING - text_height,
        )

    def _draw_page_number(self, pdf: canvas.Canvas, page_number: int, width: float) -> None:
        pdf.saveState()
        pdf.setFont("Helvetica", PAGE_NUMBER_FONT_SIZE)
        pdf.setFillColor(self.layout.page_number_color)
        pdf.drawRightString(width - self.margin, self.margin, str(page_number))
        pdf.restoreState()

    @staticmethod
    def _reset_graphics_state(pdf: canvas.Canvas) -> None:
        pdf.setFillColor(colors.black)
        pdf.setFillAlpha(1)
