"""Visual-need detector.

Classifies math question text into a diagram category by keyword
matching. Reading questions never need a visual.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

# Checked in this order; the first match wins
VISUAL_DESCRIPTIONS: dict[str, str] = {
    "area": "Rectangle diagram showing dimensions and area calculation",
    "multiplication": "Visual array or groups showing multiplication concept",
    "division": "Items grouped into equal containers showing division",
    "fraction": "Fraction models showing parts of a whole",
    "geometry": "Geometric shapes and measurements diagram",
    "data": "Bar graph or chart showing data relationships",
    "number_line": "Number line or pattern visualization",
    "measurement": "Measurement tools and length comparison",
    "money": "Coins and bills showing money amounts",
    "time": "Clock face showing time",
    "place_value": "Place value blocks or number representation",
    "counting": "Visual counting representation",
}

MISSING_TEXT_PREVIEW = 80


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class VisualAnalysis:
    """Whether a question needs a diagram, and which kind."""

    needs_visual: bool
    visual_type: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "needs_visual": self.needs_visual,
            "visual_type": self.visual_type,
            "description": self.description,
        }


@dataclass
class VisualCoverageReport:
    """Batch summary of diagram coverage."""

    total_questions: int = 0
    questions_needing_visuals: int = 0
    questions_with_visuals: int = 0
    missing_visuals: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_questions": self.total_questions,
            "questions_needing_visuals": self.questions_needing_visuals,
            "questions_with_visuals": self.questions_with_visuals,
            "missing_visuals": self.missing_visuals,
        }


# =============================================================================
# KEYWORD RULES
# =============================================================================


def _has_any(text: str, *words: str) -> bool:
    return any(w in text for w in words)


def _is_area(text: str, grade: int) -> bool:
    return (
        _has_any(text, "area", "perimeter")
        or ("rectangle" in text and _has_any(text, "length", "width"))
        or ("square" in text and _has_any(text, "side", "feet", "meters"))
        or ("garden" in text and _has_any(text, "feet", "meters"))
    )


def _is_multiplication(text: str, grade: int) -> bool:
    return (
        _has_any(text, "×", "multiply", "product")
        or ("each" in text and "total" in text)
        or ("groups" in text and "items" in text)
        or ("rows" in text and "columns" in text)
        or ("boxes" in text and "contains" in text)
    )


def _is_division(text: str, grade: int) -> bool:
    return (
        _has_any(text, "÷", "divide", "shared equally")
        or ("equal" in text and _has_any(text, "groups", "cases", "boxes"))
        or ("stickers" in text and _has_any(text, "albums", "pages"))
        or ("how many" in text and "each" in text)
    )


def _is_fraction(text: str, grade: int) -> bool:
    return (
        _has_any(text, "fraction", "/", "part", "shaded", "equivalent")
        or ("whole" in text and _has_any(text, "equal", "parts"))
    )


def _is_geometry(text: str, grade: int) -> bool:
    return _has_any(
        text, "shape", "triangle", "circle", "polygon", "angle", "vertex",
        "line segment", "parallel", "perpendicular",
    )


def _is_data(text: str, grade: int) -> bool:
    return _has_any(
        text, "graph", "chart", "data", "pictograph", "table", "survey", "students read",
    )


def _is_number_line(text: str, grade: int) -> bool:
    return _has_any(text, "number line", "pattern", "sequence", "skip count") or (
        grade <= 4 and "count by" in text
    )


def _is_measurement(text: str, grade: int) -> bool:
    return _has_any(
        text, "measure", "inches", "feet", "yards", "centimeter", "meter",
        "length", "distance", "height",
    )


def _is_money(text: str, grade: int) -> bool:
    return _has_any(
        text, "dollar", "cent", "$", "coin", "bill", "penny", "nickel", "dime", "quarter",
    )


def _is_time(text: str, grade: int) -> bool:
    return _has_any(text, "time", "clock", "hour", "minute", "o'clock", "half hour")


def _is_place_value(text: str, grade: int) -> bool:
    return _has_any(
        text, "place value", "hundreds", "tens", "ones", "digit", "expanded form",
    ) or (grade <= 4 and _has_any(text, "round", "nearest"))


def _is_counting(text: str, grade: int) -> bool:
    return _has_any(text, "students", "children", "people") and _has_any(
        text, "total", "altogether", "in all"
    )


_RULES = [
    ("area", _is_area),
    ("multiplication", _is_multiplication),
    ("division", _is_division),
    ("fraction", _is_fraction),
    ("geometry", _is_geometry),
    ("data", _is_data),
    ("number_line", _is_number_line),
    ("measurement", _is_measurement),
    ("money", _is_money),
    ("time", _is_time),
    ("place_value", _is_place_value),
    ("counting", _is_counting),
]


# =============================================================================
# PUBLIC API
# =============================================================================


def should_question_have_visual(text: str, subject: str, grade: int) -> VisualAnalysis:
    """Decide whether a question would benefit from a diagram.

    Args:
        text: Question text
        subject: "math" or "reading"
        grade: Grade level (3-5)

    Returns:
        VisualAnalysis with the first matching category, if any
    """
    if subject != "math":
        return VisualAnalysis(needs_visual=False)

    lowered = (text or "").lower()
    for visual_type, rule in _RULES:
        if rule(lowered, grade):
            return VisualAnalysis(
                needs_visual=True,
                visual_type=visual_type,
                description=VISUAL_DESCRIPTIONS[visual_type],
            )

    return VisualAnalysis(needs_visual=False)


def _field(question: Any, name: str, default: Any = None) -> Any:
    if isinstance(question, dict):
        return question.get(name, default)
    return getattr(question, name, default)


def analyze_questions_for_visuals(questions: list[Any]) -> VisualCoverageReport:
    """Report which math questions need a diagram but have none.

    Accepts Question objects or their dictionary form.
    """
    report = VisualCoverageReport(total_questions=len(questions))

    for question in questions:
        if _field(question, "subject") != "math":
            continue

        text = _field(question, "question_text", "") or ""
        analysis = should_question_have_visual(text, "math", _field(question, "grade", 3))
        if not analysis.needs_visual:
            continue

        report.questions_needing_visuals += 1
        if _field(question, "has_image") or _field(question, "svg_content"):
            report.questions_with_visuals += 1
        else:
            report.missing_visuals.append({
                "id": _field(question, "question_id"),
                "question_text": text[:MISSING_TEXT_PREVIEW] + "...",
                "visual_type": analysis.visual_type,
                "description": analysis.description,
            })

    logger.debug(
        "visual_coverage_analyzed",
        total=report.total_questions,
        missing=len(report.missing_visuals),
    )
    return report
