"""
Paginated layout engine for the assessment PDF report.

Turns a ReportModel (scores, answered questions, the tier's action plan,
and any AI recommendations) into a Document: an ordered list of A4 pages,
each holding positioned text and "cards" (rounded boxes containing one
question, the action plan, or one recommendation).

Layout happens in millimetres with the origin at the TOP-left of the page
and y growing downward. The renderer in pdf_report.py flips coordinates
for ReportLab, which works bottom-up in points.

Sizing is two-pass but computed once:
1. measure_*_card() wraps every text field against its fixed width and
   returns a CardLayout whose height is fully determined.
2. The page flow decides where the card goes (new page if it won't fit),
   and the renderer draws from the same CardLayout. Nothing is re-wrapped
   at draw time, so measured and drawn text can't disagree.

Line pitch is font_size × line_height in layout units, and a line's
baseline sits at its slot's top edge; the card padding leaves room for
the first line's ascent.

Sections:
    page 1          title + score summary (fixed positions, no cards)
    new page        Q&A, one card per question in input order
    new page        the action plan card
    new page        recommendations (omitted entirely when there are none)
    wherever fits   two-line footer
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from app.services.questionnaires import display_name, response_label
from app.services.readiness import ActionPlan, ReadinessLevel, get_tier

logger = logging.getLogger(__name__)


# --- Page geometry (mm) ---
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN = 20.0
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
USABLE_HEIGHT = PAGE_HEIGHT - 2 * MARGIN
CARD_GAP = 8.0
FOOTER_HEIGHT = 30.0
SECTION_HEADING_SPACE = 16.0
MARKER_ROW_HEIGHT = 16.0
BADGE_LABEL_INSET = 2.0

# Float sums of pitches drift; a card that fits "exactly" must still fit.
EPSILON = 1e-6

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

# --- Colors ---
TEXT_COLOR = "#000000"
ACCENT_COLOR = "#3b82f6"
MUTED_COLOR = "#6b7280"
CARD_BORDER_COLOR = "#e5e7eb"
CARD_FILL_COLOR = "#ffffff"
MARKER_FILL_COLOR = "#dbeafe"
MARKER_TEXT_COLOR = "#2563eb"
BADGE_TEXT_COLOR = "#ffffff"
PRIORITY_COLORS = {
    "High": "#dc2626",
    "Medium": "#d97706",
}
DEFAULT_PRIORITY_COLOR = "#22c55e"

# Card kinds
QUESTION_CARD = "question"
ACTION_PLAN_CARD = "action_plan"
RECOMMENDATION_CARD = "recommendation"

# Section keys
QUESTIONS_SECTION = "questions"
ACTION_PLAN_SECTION = "action_plan"
RECOMMENDATIONS_SECTION = "recommendations"


# ----------------------------------------------------------------------
# INPUT MODEL
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class QuestionAnswer:
    question_id: int
    question_text: str
    category: str
    answer_value: int = 0  # 0 = unanswered


@dataclass(frozen=True)
class Recommendation:
    title: str = ""
    description: str = ""
    priority: str = ""      # High / Medium / Low
    timeline: str = ""
    impact: str = ""


@dataclass(frozen=True)
class ReportModel:
    """Everything the report shows, already fetched and typed."""
    assessment_kind: str
    total_score: int
    readiness_level: ReadinessLevel
    completion_date: str
    question_answers: tuple[QuestionAnswer, ...]
    action_plan: ActionPlan
    recommendations: tuple[Recommendation, ...] = ()


# ----------------------------------------------------------------------
# GEOMETRY
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class TextBlock:
    """One wrapped text field inside a card.

    `leading` is the distance between consecutive baselines. The block
    occupies `gap_before` of empty space followed by `height`.
    """
    lines: tuple[str, ...]
    x: float
    font_name: str
    font_size: float
    leading: float
    gap_before: float = 0.0
    baseline_offset: float = 0.0
    min_height: float = 0.0
    color: str = TEXT_COLOR

    @property
    def height(self) -> float:
        return max(len(self.lines) * self.leading, self.min_height)

    @property
    def extent(self) -> float:
        return self.gap_before + self.height


@dataclass(frozen=True)
class Marker:
    """A filled shape with a centred label: the ordinal circle or priority badge.

    Offsets are relative to the card's content top (card top + padding).
    """
    shape: str  # "circle" | "badge"
    x: float
    dy: float
    width: float
    height: float
    fill: str
    label: str
    label_color: str
    font_size: float
    label_dy: float


@dataclass(frozen=True)
class CardLayout:
    """Measured geometry of one card, independent of where it lands."""
    kind: str
    index: int
    blocks: tuple[TextBlock, ...]
    padding: float
    min_height: float
    markers: tuple[Marker, ...] = ()
    continued: bool = False

    @property
    def content_height(self) -> float:
        return sum(block.extent for block in self.blocks)

    @property
    def height(self) -> float:
        return max(self.content_height + 2 * self.padding, self.min_height)

    def placed_lines(self, top: float) -> Iterator[tuple[TextBlock, str, float]]:
        """Yield (block, line, baseline_y) for a card whose box starts at `top`."""
        y = top + self.padding
        for block in self.blocks:
            y += block.gap_before
            for i, line in enumerate(block.lines):
                yield block, line, y + block.baseline_offset + i * block.leading
            y += block.height


# ----------------------------------------------------------------------
# OUTPUT DOCUMENT
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class TextItem:
    text: str
    x: float
    y: float  # baseline
    font_name: str
    font_size: float
    color: str = TEXT_COLOR
    align: str = "left"  # "left" | "center"


@dataclass(frozen=True)
class PlacedCard:
    layout: CardLayout
    page_number: int
    top: float

    @property
    def bottom(self) -> float:
        return self.top + self.layout.height

    def lines(self) -> Iterator[tuple[TextBlock, str, float]]:
        return self.layout.placed_lines(self.top)


@dataclass
class Page:
    number: int
    y_position: float = MARGIN
    texts: list[TextItem] = field(default_factory=list)
    cards: list[PlacedCard] = field(default_factory=list)


@dataclass(frozen=True)
class SectionStart:
    name: str
    page_number: int
    y: float


@dataclass
class Document:
    title: str
    pages: list[Page]
    sections: dict[str, SectionStart]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def cards(self, kind: Optional[str] = None) -> list[PlacedCard]:
        """All placed cards in document order, optionally filtered by kind."""
        return [
            card
            for page in self.pages
            for card in page.cards
            if kind is None or card.layout.kind == kind
        ]

    def all_text(self) -> list[str]:
        """Every string that will be drawn, in page order. Handy for tests."""
        out = []
        for page in self.pages:
            out.extend(item.text for item in page.texts)
            for card in page.cards:
                out.extend(marker.label for marker in card.layout.markers)
                out.extend(line for _, line, _ in card.lines())
        return out


# ----------------------------------------------------------------------
# TEXT MEASUREMENT
# ----------------------------------------------------------------------

def text_width(text: str, font_name: str, font_size: float) -> float:
    """Rendered width of `text` in mm (ReportLab measures in points)."""
    return stringWidth(text, font_name, font_size) / mm


def wrap_text(text: Optional[str], font_name: str, font_size: float, max_width: float) -> list[str]:
    """Greedy word wrap against a width in mm.

    Breaks at the last whitespace that keeps the line within max_width.
    Explicit newlines start a new line. A single word wider than the line
    is broken by character so nothing spills outside the card. Empty input
    still yields one (empty) line.
    """
    lines: list[str] = []
    for paragraph in (text or "").split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font_name, font_size) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
            pieces = _break_word(word, font_name, font_size, max_width)
            lines.extend(pieces[:-1])
            current = pieces[-1]

        lines.append(current)
    return lines


def _break_word(word: str, font_name: str, font_size: float, max_width: float) -> list[str]:
    pieces = []
    current = ""
    for char in word:
        if current and text_width(current + char, font_name, font_size) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    pieces.append(current)
    return pieces


def _text(value) -> str:
    return "" if value is None else str(value)


def _field(
    text,
    x: float,
    width: float,
    font_name: str,
    font_size: float,
    line_height: float,
    **kwargs,
) -> TextBlock:
    return TextBlock(
        lines=tuple(wrap_text(_text(text), font_name, font_size, width)),
        x=x,
        font_name=font_name,
        font_size=font_size,
        leading=font_size * line_height,
        **kwargs,
    )


def priority_color(priority: str) -> str:
    """Badge color; unknown priorities get the Low (green) color."""
    return PRIORITY_COLORS.get(priority, DEFAULT_PRIORITY_COLOR)


def fit_label(text: str, font_name: str, font_size: float, max_width: float) -> str:
    """Shorten a single-line label with an ellipsis until it fits max_width."""
    if text_width(text, font_name, font_size) <= max_width:
        return text
    while text and text_width(text + "...", font_name, font_size) > max_width:
        text = text[:-1]
    return text.rstrip() + "..." if text else ""


# ----------------------------------------------------------------------
# CARD MEASUREMENT
# ----------------------------------------------------------------------

def measure_question_card(qa: QuestionAnswer, index: int) -> CardLayout:
    x = MARGIN + 15
    width = CONTENT_WIDTH - 30
    value = qa.answer_value or 0
    blocks = (
        _field(qa.category, x, width, FONT_REGULAR, 10, 1.1, color=ACCENT_COLOR),
        _field(f"Question {qa.question_id}", x, width, FONT_BOLD, 13, 1.1),
        _field(qa.question_text, x, width, FONT_REGULAR, 12, 1.2),
        _field(
            f"Response: {response_label(value)} ({value}/5)",
            x, width, FONT_BOLD, 12, 1.1, gap_before=2,
        ),
    )
    return CardLayout(QUESTION_CARD, index, blocks, padding=6, min_height=30)


def measure_action_plan_card(plan: ActionPlan) -> CardLayout:
    x = MARGIN + 10
    width = CONTENT_WIDTH - 20
    blocks = [
        _field(plan.title, x, width, FONT_BOLD, 14, 1.1),
        _field("What it means:", x, width, FONT_REGULAR, 12, 1.1, gap_before=4),
        _field(plan.meaning, x, width, FONT_REGULAR, 12, 1.2),
        _field("Recommended Next Steps:", x, width, FONT_BOLD, 12, 1.1, gap_before=6),
    ]
    for i, step in enumerate(plan.next_steps):
        blocks.append(_field(
            f"{i + 1}. {_text(step)}",
            MARGIN + 18, CONTENT_WIDTH - 28, FONT_REGULAR, 12, 1.2,
        ))
    return CardLayout(ACTION_PLAN_CARD, 0, tuple(blocks), padding=8, min_height=50)


def measure_recommendation_card(rec: Recommendation, index: int) -> CardLayout:
    text_x = MARGIN + 32
    text_width_mm = CONTENT_WIDTH - 60
    priority = _text(rec.priority)

    markers = (
        Marker(
            shape="circle", x=MARGIN + 15, dy=3, width=10, height=10,
            fill=MARKER_FILL_COLOR, label=str(index + 1),
            label_color=MARKER_TEXT_COLOR, font_size=10, label_dy=9,
        ),
        Marker(
            shape="badge", x=MARGIN + CONTENT_WIDTH - 45, dy=2, width=35, height=10,
            fill=priority_color(priority),
            label=fit_label(priority, FONT_REGULAR, 9, 35 - 2 * BADGE_LABEL_INSET),
            label_color=BADGE_TEXT_COLOR, font_size=9, label_dy=8,
        ),
    )
    title = TextBlock(
        lines=tuple(wrap_text(_text(rec.title), FONT_BOLD, 13, CONTENT_WIDTH - 40)),
        x=MARGIN + 20,
        font_name=FONT_BOLD,
        font_size=13,
        leading=10,
        gap_before=MARKER_ROW_HEIGHT,
        baseline_offset=6,
        min_height=14,
    )
    blocks = (
        title,
        _field("What to do:", text_x, text_width_mm, FONT_BOLD, 12, 1.1, gap_before=6),
        _field(rec.description, text_x, text_width_mm, FONT_REGULAR, 12, 1.2),
        _field(f"Timeline: {_text(rec.timeline)}", text_x, text_width_mm,
               FONT_REGULAR, 12, 1.1, gap_before=2),
        _field(f"Expected Impact: {_text(rec.impact)}", text_x, text_width_mm,
               FONT_REGULAR, 12, 1.1),
    )
    return CardLayout(
        RECOMMENDATION_CARD, index, blocks, padding=10, min_height=30, markers=markers,
    )


def split_card(card: CardLayout, available: float) -> tuple[CardLayout, Optional[CardLayout]]:
    """Cut a card that is taller than `available` into a head that fits and the rest.

    Whole lines move to the continuation card; the continuation keeps the
    card's kind and index, drops the markers, and is flagged `continued`.
    The head always receives at least one line so pagination progresses.
    """
    budget = available - 2 * card.padding
    head: list[TextBlock] = []
    tail: list[TextBlock] = []
    used = 0.0

    for i, block in enumerate(card.blocks):
        if used + block.extent <= budget + EPSILON:
            head.append(block)
            used += block.extent
            continue

        room = budget - used - block.gap_before
        keep = max(int((room + EPSILON) // block.leading), 0)
        while keep > 0 and max(keep * block.leading, block.min_height) > room + EPSILON:
            keep -= 1
        if not head:
            keep = max(keep, 1)

        if keep:
            head.append(replace(block, lines=block.lines[:keep]))
        if block.lines[keep:]:
            tail.append(replace(block, lines=block.lines[keep:], gap_before=0.0))
        tail.extend(card.blocks[i + 1:])
        break

    head_card = replace(card, blocks=tuple(head))
    if not tail:
        return head_card, None
    return head_card, replace(card, blocks=tuple(tail), markers=(), continued=True)


# ----------------------------------------------------------------------
# PAGE FLOW
# ----------------------------------------------------------------------

class _PageFlow:
    """Cursor and page list for a single layout() call."""

    def __init__(self):
        self.pages = [Page(number=1)]

    @property
    def page(self) -> Page:
        return self.pages[-1]

    def new_page(self) -> None:
        self.pages.append(Page(number=len(self.pages) + 1))

    def remaining(self) -> float:
        return PAGE_HEIGHT - MARGIN - self.page.y_position

    def fits(self, height: float) -> bool:
        return height <= self.remaining() + EPSILON

    def ensure_space(self, height: float) -> None:
        if not self.fits(height):
            self.new_page()

    def advance(self, dy: float) -> None:
        self.page.y_position += dy

    def text(
        self,
        text: str,
        x: float,
        font_size: float,
        font_name: str = FONT_REGULAR,
        color: str = TEXT_COLOR,
        align: str = "left",
    ) -> None:
        self.page.texts.append(TextItem(
            text=text, x=x, y=self.page.y_position,
            font_name=font_name, font_size=font_size, color=color, align=align,
        ))

    def place_card(self, layout: CardLayout) -> None:
        pending = [layout]
        while pending:
            card = pending.pop(0)

            # Only break if the page already holds cards; otherwise a
            # section heading would be orphaned on its own page.
            if not self.fits(card.height) and self.page.cards:
                self.new_page()

            if not self.fits(card.height):
                card, rest = split_card(card, self.remaining())
                logger.info(
                    "Card %s #%d taller than a page (%.1fmm), continuing on next page",
                    layout.kind, layout.index, layout.height,
                )
                if rest is not None:
                    pending.insert(0, rest)

            placed = PlacedCard(card, self.page.number, self.page.y_position)
            self.page.cards.append(placed)
            self.page.y_position = placed.bottom + CARD_GAP


# ----------------------------------------------------------------------
# ENGINE
# ----------------------------------------------------------------------

class ReportLayoutEngine:
    """Lays out a ReportModel into pages.

    Usage:
        engine = ReportLayoutEngine(product_name="Xcelerator")
        document = engine.layout(model)
        for page in document.pages:
            ...

    Stateless between calls: every layout() builds its own page flow.
    """

    def __init__(self, product_name: str = "Xcelerator"):
        self.product_name = product_name

    def layout(self, model: ReportModel) -> Document:
        flow = _PageFlow()
        sections: dict[str, SectionStart] = {}

        self._title_page(flow, model)

        flow.new_page()
        sections[QUESTIONS_SECTION] = self._section_heading(
            flow, QUESTIONS_SECTION, "Assessment Questions & Answers",
        )
        for index, qa in enumerate(model.question_answers):
            flow.place_card(measure_question_card(qa, index))

        flow.new_page()
        sections[ACTION_PLAN_SECTION] = self._section_heading(
            flow, ACTION_PLAN_SECTION, "Recommended Next Steps",
        )
        flow.place_card(measure_action_plan_card(model.action_plan))

        if model.recommendations:
            flow.new_page()
            sections[RECOMMENDATIONS_SECTION] = self._section_heading(
                flow, RECOMMENDATIONS_SECTION, "AI-Powered Custom Recommendations",
            )
            flow.text(
                "Customized Recommendations Based on Your Assessment",
                MARGIN, 14, font_name=FONT_BOLD,
            )
            flow.advance(14)
            for index, rec in enumerate(model.recommendations):
                flow.place_card(measure_recommendation_card(rec, index))

        self._footer(flow)

        return Document(
            title=f"{self.product_name} Assessment - {display_name(model.assessment_kind)}",
            pages=flow.pages,
            sections=sections,
        )

    # ------------------------------------------------------------------
    # SECTIONS
    # ------------------------------------------------------------------

    def _title_page(self, flow: _PageFlow, model: ReportModel) -> None:
        center = PAGE_WIDTH / 2
        tier = get_tier(model.readiness_level)

        flow.text(f"{self.product_name} Assessment", center, 24,
                  font_name=FONT_BOLD, align="center")
        flow.advance(20)
        flow.text(f"{display_name(model.assessment_kind)} Assessment", center, 16,
                  font_name=FONT_BOLD, align="center")
        flow.advance(12)
        flow.text(f"Completed on {_text(model.completion_date)}", center, 12,
                  align="center")
        flow.advance(30)

        flow.text("Assessment Results", center, 16, font_name=FONT_BOLD, align="center")
        flow.advance(20)

        flow.text("Total Score:", MARGIN + 50, 14, font_name=FONT_BOLD)
        flow.text(f"{model.total_score}/60", MARGIN + 120, 16,
                  font_name=FONT_BOLD, color=ACCENT_COLOR)
        flow.advance(15)

        flow.text("Readiness Level:", MARGIN + 50, 14, font_name=FONT_BOLD)
        flow.text(model.readiness_level.value, MARGIN + 120, 16,
                  font_name=FONT_BOLD, color=tier.color)
        flow.advance(12)
        flow.text(tier.description, center, 11, color=MUTED_COLOR, align="center")
        flow.advance(18)

    def _section_heading(self, flow: _PageFlow, name: str, title: str) -> SectionStart:
        start = SectionStart(name, flow.page.number, flow.page.y_position)
        flow.text(title, MARGIN, 18, font_name=FONT_BOLD)
        flow.advance(SECTION_HEADING_SPACE)
        return start

    def _footer(self, flow: _PageFlow) -> None:
        flow.ensure_space(FOOTER_HEIGHT)
        center = PAGE_WIDTH / 2
        flow.text(
            f"This assessment was generated by the {self.product_name} "
            "Digital Transformation Portal.",
            center, 10, color=MUTED_COLOR, align="center",
        )
        flow.advance(8)
        flow.text(
            "For more information and detailed recommendations, "
            "please visit the dashboard.",
            center, 10, color=MUTED_COLOR, align="center",
        )
