#!/usr/bin/env python3
"""
Text-only PDF renderer used when the headless browser is unavailable.
Keeps headings and paragraphs of the stored HTML and drops all styling.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import html
import re
from datetime import date
from io import BytesIO
from typing import List, Tuple

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from .text_utils import extract_text_from_html
from .theme import DEFAULT_BRAND, DEFAULT_SUBTITLE

AMBER = colors.HexColor("#d97706")
BROWN = colors.HexColor("#8b5a3c")
GREY = colors.HexColor("#646464")

_BLOCK = re.compile(r"<(h[1-3]|p|li|blockquote)\b[^>]*>(.*?)</\1>", re.IGNORECASE | re.DOTALL)
_LINE_BREAKING_TAGS = re.compile(r"<br\s*/?>|</?(?:h[1-6]|p|div|section|li|ul|ol|blockquote)\b[^>]*>", re.IGNORECASE)


def _printable(text: str) -> str:
    """Drop characters the standard PDF fonts cannot draw (ornament glyphs, emoji)."""
    return text.encode("cp1252", "ignore").decode("cp1252").strip()


def extract_sections(markup: str) -> List[Tuple[str, str]]:
    """Split HTML into (kind, text) sections in document order.

    kind is 'h1', 'h2', 'h3' or 'paragraph'. When the markup has no block
    structure, every non-empty text line becomes a paragraph.
    """
    sections: List[Tuple[str, str]] = []
    for match in _BLOCK.finditer(markup or ""):
        tag = match.group(1).lower()
        text = _printable(extract_text_from_html(match.group(2)))
        if not text:
            continue
        kind = tag if tag.startswith("h") else "paragraph"
        sections.append((kind, text))

    if not sections:
        plain = _LINE_BREAKING_TAGS.sub("\n", markup or "")
        for line in plain.split("\n"):
            text = _printable(extract_text_from_html(line))
            if text:
                sections.append(("paragraph", text))
    return sections


def _create_styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='GrimoireTitle',
        parent=styles['Title'],
        fontName='Times-Bold',
        fontSize=20,
        leading=26,
        alignment=TA_CENTER,
        textColor=BROWN,
    ))
    styles.add(ParagraphStyle(
        name='GrimoireSubtitle',
        parent=styles['Normal'],
        fontName='Times-Italic',
        fontSize=12,
        alignment=TA_CENTER,
        spaceAfter=12 * mm,
        textColor=GREY,
    ))
    for level, size in (("h1", 16), ("h2", 14), ("h3", 12)):
        styles.add(ParagraphStyle(
            name=f'Grimoire_{level}',
            parent=styles['Heading1'],
            fontName='Times-Bold',
            fontSize=size,
            leading=size + 4,
            spaceBefore=6,
            spaceAfter=4,
            textColor=GREY if level == "h3" else BROWN,
        ))
    styles.add(ParagraphStyle(
        name='GrimoireBody',
        parent=styles['Normal'],
        fontName='Times-Roman',
        fontSize=11,
        leading=15,
        alignment=TA_JUSTIFY,
        spaceAfter=8,
    ))
    return styles


class _NumberedCanvas(canvas.Canvas):
    """Canvas that knows the total page count when drawing footers."""

    brand = DEFAULT_BRAND

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, page_count: int) -> None:
        width, height = A4
        self.saveState()
        self.setStrokeColor(AMBER)
        self.setLineWidth(0.3)
        self.line(20 * mm, 15 * mm, width - 20 * mm, 15 * mm)
        self.setFont('Times-Italic', 9)
        self.setFillColor(GREY)
        self.drawString(20 * mm, 8 * mm, _printable(self.brand))
        self.drawCentredString(width / 2, 8 * mm, date.today().strftime("%d/%m/%Y"))
        self.drawRightString(width - 20 * mm, 8 * mm, f"Página {self._pageNumber} de {page_count}")
        self.restoreState()


def generate_plain_pdf(title: str, content: str, author: str = DEFAULT_BRAND) -> bytes:
    """Render title and HTML content as a plain A4 PDF.

    Args:
        title: Grimoire title
        content: Stored HTML; only headings and paragraphs survive
        author: Brand printed in the subtitle and footer

    Returns:
        PDF document bytes
    """
    styles = _create_styles()
    story = [
        Paragraph(html.escape(_printable(title)), styles['GrimoireTitle']),
        Paragraph(html.escape(_printable(f"{author} - {DEFAULT_SUBTITLE}")), styles['GrimoireSubtitle']),
    ]

    for kind, text in extract_sections(content):
        style = styles['GrimoireBody'] if kind == "paragraph" else styles[f'Grimoire_{kind}']
        story.append(Paragraph(html.escape(text), style))

    story.append(Spacer(1, 6 * mm))

    footer_canvas = type("_BrandedCanvas", (_NumberedCanvas,), {"brand": author})

    with BytesIO() as buffer:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=22 * mm,
            title=title,
            author=author,
        )
        doc.build(story, canvasmaker=footer_canvas)
        return buffer.getvalue()
