"""
PDF report generator — draws a laid-out assessment report with ReportLab.

The heavy lifting (text wrapping, card sizing, page breaks) happens in
report_layout.py. This module only paints the resulting Document onto a
ReportLab canvas, one page at a time:

    model ──ReportLayoutEngine.layout()──▶ Document ──render()──▶ PDF bytes

Placement comes from the layout engine, not Platypus: every card lands
exactly where the Document says, and the canvas just follows it.

Coordinates: the layout works top-down in millimetres; ReportLab works
bottom-up in points. _y() does the flip.
"""

import logging
from datetime import date
from io import BytesIO
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.services.report_layout import (
    CARD_BORDER_COLOR,
    CARD_FILL_COLOR,
    CONTENT_WIDTH,
    MARGIN,
    MUTED_COLOR,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    Document,
    Marker,
    PlacedCard,
    ReportLayoutEngine,
    ReportModel,
    TextItem,
)

logger = logging.getLogger(__name__)

REPORT_FAILURE_MESSAGE = "Failed to generate PDF. Please try again."
CARD_CORNER_RADIUS = 3.0
BADGE_CORNER_RADIUS = 2.0


class ReportGenerationError(Exception):
    """The PDF could not be produced. Carries a user-facing message."""


def _y(value: float) -> float:
    """Top-down mm → ReportLab bottom-up points."""
    return (PAGE_HEIGHT - value) * mm


def _hex(value: str) -> colors.Color:
    return colors.HexColor(value)


class PDFReportGenerator:
    """Renders assessment reports to PDF bytes.

    Usage:
        generator = PDFReportGenerator(ReportLayoutEngine("Xcelerator"))
        pdf_bytes = generator.generate_assessment_report(model)
    """

    def __init__(self, engine: Optional[ReportLayoutEngine] = None):
        self.engine = engine or ReportLayoutEngine()

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    def generate_assessment_report(self, model: ReportModel) -> bytes:
        """Lay out and render the full report. Returns raw PDF bytes."""
        document = self.engine.layout(model)
        return self.render(document)

    def render(self, document: Document) -> bytes:
        buffer = BytesIO()
        canv = canvas.Canvas(buffer, pagesize=A4)
        canv.setTitle(document.title)
        canv.setAuthor(f"{self.engine.product_name} Digital Transformation Portal")

        for page in document.pages:
            for card in page.cards:
                self._draw_card(canv, card)
            for item in page.texts:
                self._draw_text(canv, item)
            self._add_page_number(canv, page.number)
            canv.showPage()

        canv.save()
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # DRAWING
    # ------------------------------------------------------------------

    def _draw_text(self, canv: canvas.Canvas, item: TextItem) -> None:
        canv.setFont(item.font_name, item.font_size)
        canv.setFillColor(_hex(item.color))
        if item.align == "center":
            canv.drawCentredString(item.x * mm, _y(item.y), item.text)
        else:
            canv.drawString(item.x * mm, _y(item.y), item.text)

    def _draw_card(self, canv: canvas.Canvas, card: PlacedCard) -> None:
        layout = card.layout

        canv.setStrokeColor(_hex(CARD_BORDER_COLOR))
        canv.setFillColor(_hex(CARD_FILL_COLOR))
        canv.roundRect(
            MARGIN * mm, _y(card.bottom),
            CONTENT_WIDTH * mm, layout.height * mm,
            CARD_CORNER_RADIUS * mm, stroke=1, fill=1,
        )

        content_top = card.top + layout.padding
        for marker in layout.markers:
            self._draw_marker(canv, marker, content_top)

        for block, line, baseline in card.lines():
            canv.setFont(block.font_name, block.font_size)
            canv.setFillColor(_hex(block.color))
            canv.drawString(block.x * mm, _y(baseline), line)

    def _draw_marker(self, canv: canvas.Canvas, marker: Marker, content_top: float) -> None:
        top = content_top + marker.dy
        canv.setFillColor(_hex(marker.fill))
        if marker.shape == "circle":
            canv.circle(
                (marker.x + marker.width / 2) * mm,
                _y(top + marker.height / 2),
                (marker.width / 2) * mm,
                stroke=0, fill=1,
            )
        else:
            canv.roundRect(
                marker.x * mm, _y(top + marker.height),
                marker.width * mm, marker.height * mm,
                BADGE_CORNER_RADIUS * mm, stroke=0, fill=1,
            )

        canv.setFont("Helvetica", marker.font_size)
        canv.setFillColor(_hex(marker.label_color))
        canv.drawCentredString(
            (marker.x + marker.width / 2) * mm,
            _y(content_top + marker.label_dy),
            marker.label,
        )

    @staticmethod
    def _add_page_number(canv: canvas.Canvas, page_number: int) -> None:
        """Page number centred in the bottom margin."""
        canv.saveState()
        canv.setFont("Helvetica", 8)
        canv.setFillColor(_hex(MUTED_COLOR))
        canv.drawCentredString(
            (PAGE_WIDTH / 2) * mm, _y(PAGE_HEIGHT - MARGIN / 2),
            f"Page {page_number}",
        )
        canv.restoreState()


def build_report_filename(
    file_prefix: str,
    assessment_kind: str,
    generated_on: Optional[date] = None,
) -> str:
    """`{prefix}-assessment-{kind}-{YYYY-MM-DD}.pdf`, dated by generation day."""
    generated_on = generated_on or date.today()
    return f"{file_prefix}-assessment-{assessment_kind}-{generated_on.isoformat()}.pdf"


def export_assessment_pdf(
    model: ReportModel,
    product_name: str,
    file_prefix: str,
    generated_on: Optional[date] = None,
    generator: Optional[PDFReportGenerator] = None,
) -> tuple[str, bytes]:
    """Produce the downloadable report as (filename, pdf_bytes).

    Any failure inside layout or rendering is reported as a single
    ReportGenerationError; no partial document is returned.
    """
    generator = generator or PDFReportGenerator(ReportLayoutEngine(product_name))
    try:
        pdf_bytes = generator.generate_assessment_report(model)
    except Exception as e:
        logger.exception("PDF generation failed for %s assessment", model.assessment_kind)
        raise ReportGenerationError(REPORT_FAILURE_MESSAGE) from e

    return build_report_filename(file_prefix, model.assessment_kind, generated_on), pdf_bytes
