"""Attach diagrams to generated questions.

The visual detector picks a category, regexes pull the numbers out of
the question text, and the matching catalog diagram is rendered. When a
category has nothing extractable a fixed default is drawn instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from staarkids.core import svg_diagrams
from staarkids.core.question import Question
from staarkids.core.visual_detector import should_question_have_visual

logger = structlog.get_logger(__name__)

UNITS = ("feet", "meters", "inches", "yards", "centimeters", "miles", "kilometers")
# Denominators beyond this are not drawn as fraction bars
MAX_DRAWN_DENOMINATOR = svg_diagrams.MAX_DENOMINATOR

_NUMBER = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?")
_DIMENSION = re.compile(r"(\d+(?:\.\d+)?)\s*(" + "|".join(UNITS) + r"|foot|meter|inch|yard|centimeter)\b")
_DIVISION_SIGN = re.compile(r"(\d+)\s*÷\s*(\d+)")
_INTO_GROUPS = re.compile(r"(\d+)\s+([a-z]+).*?\binto\s+(\d+)\s+(?:equal\s+)?([a-z]+)", re.DOTALL)
_FRACTION = re.compile(r"(\d+)\s*/\s*(\d+)")
_TIME = re.compile(r"\b(\d{1,2}):(\d{2})\b")
_DOLLARS = re.compile(r"\$(\d+)(?:\.(\d{2}))?")
_CENTS = re.compile(r"(\d+)\s*(?:cents?|¢)")
_DATA_PAIR = re.compile(r"([A-Z][a-zA-Z]+)\s*[:\-]\s*(\d+)")

_UNIT_PLURALS = {
    "foot": "feet", "meter": "meters", "inch": "inches",
    "yard": "yards", "centimeter": "centimeters",
}


@dataclass
class VisualResult:
    """Diagram attached to a question, if any."""

    has_image: bool
    visual_type: str | None = None
    image_description: str | None = None
    svg_content: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_image": self.has_image,
            "visual_type": self.visual_type,
            "image_description": self.image_description,
            "svg_content": self.svg_content,
        }


# =============================================================================
# NUMBER EXTRACTION
# =============================================================================


def extract_numbers(text: str) -> list[float]:
    """All numbers in text, commas removed, in order of appearance."""
    return [float(m.replace(",", "")) for m in _NUMBER.findall(text)]


def _whole(value: float) -> int | float:
    return int(value) if value == int(value) else value


def extract_dimensions(text: str) -> list[tuple[float, str]]:
    """(value, unit) pairs such as "12 feet"."""
    return [
        (float(value), _UNIT_PLURALS.get(unit, unit))
        for value, unit in _DIMENSION.findall(text.lower())
    ]


def _coins_for(cents: int) -> list[int]:
    result = []
    for coin in (100, 25, 10, 5, 1):
        count, cents = divmod(cents, coin)
        result.extend([coin] * count)
    return result


# =============================================================================
# PER-CATEGORY BUILDERS
# =============================================================================

# Each builder returns (catalog diagram name, diagram data, description)
Builder = Callable[[str], tuple[str, dict[str, Any], str]]


def _area(text: str) -> tuple[str, dict[str, Any], str]:
    dims = extract_dimensions(text)
    if len(dims) >= 2:
        (length, unit), (width, _) = dims[0], dims[1]
    else:
        length, width, unit = 12, 8, "feet"
    length, width = _whole(length), _whole(width)
    return (
        "rectangle_area",
        {"length": length, "width": width, "unit": unit},
        f"A rectangle with labeled dimensions of {length} {unit} by {width} {unit}",
    )


def _division(text: str) -> tuple[str, dict[str, Any], str]:
    lowered = text.lower()
    item, container = "items", "Group"

    sign = _DIVISION_SIGN.search(lowered)
    into = _INTO_GROUPS.search(lowered)
    if sign:
        total, groups = int(sign.group(1)), int(sign.group(2))
    elif into:
        total, groups = int(into.group(1)), int(into.group(3))
        item = into.group(2)
        container = into.group(4).rstrip("s").capitalize() or container
    else:
        numbers = extract_numbers(text)
        if len(numbers) >= 2 and numbers[1] > 0:
            total, groups = int(numbers[0]), int(numbers[1])
        else:
            total, groups = 24, 6

    if groups <= 0:
        total, groups = 24, 6

    return (
        "equal_groups",
        {"total": total, "groups": groups, "item": item, "container": container},
        f"Division diagram showing {total} {item} divided equally into {groups} groups",
    )


def _multiplication(text: str) -> tuple[str, dict[str, Any], str]:
    numbers = [int(n) for n in extract_numbers(text) if n >= 1 and n == int(n)]
    rows, columns = (numbers[0], numbers[1]) if len(numbers) >= 2 else (6, 4)
    return (
        "multiplication_array",
        {"rows": rows, "columns": columns},
        f"Array showing {rows} groups with {columns} in each group",
    )


def _fraction(text: str) -> tuple[str, dict[str, Any], str]:
    fractions = [
        (int(n), int(d))
        for n, d in _FRACTION.findall(text)
        if 0 < int(d) <= MAX_DRAWN_DENOMINATOR and int(n) <= int(d)
    ]
    if not fractions:
        fractions = [(1, 2), (1, 4)]
    labels = ", ".join(f"{n}/{d}" for n, d in fractions)
    return (
        "fraction_models",
        {"fractions": fractions},
        f"Fraction models showing {labels} of a whole",
    )


def _geometry(text: str) -> tuple[str, dict[str, Any], str]:
    lowered = text.lower()
    shapes = [s for s in svg_diagrams.KNOWN_SHAPES if s in lowered]
    if not shapes:
        shapes = ["triangle", "square", "circle"]
    return (
        "geometric_shapes",
        {"shapes": shapes},
        f"Geometric shapes: {', '.join(shapes)}",
    )


def _data(text: str) -> tuple[str, dict[str, Any], str]:
    pairs = _DATA_PAIR.findall(text)
    if len(pairs) >= 2:
        categories = [name for name, _ in pairs]
        values = [int(v) for _, v in pairs]
    else:
        categories = ["Mon", "Tue", "Wed", "Thu", "Fri"]
        values = [5, 8, 3, 6, 4]
    return (
        "bar_graph",
        {"categories": categories, "values": values, "title": "Data", "y_label": "Count"},
        f"Bar graph comparing {len(categories)} categories",
    )


def _number_line(text: str) -> tuple[str, dict[str, Any], str]:
    numbers = [n for n in extract_numbers(text) if n >= 0]
    end = max(numbers, default=0)
    if end <= 0:
        return (
            "number_line",
            {"start": 0, "end": 10, "marked": []},
            "Number line from 0 to 10",
        )
    end = _whole(end)
    marked = [_whole(n) for n in numbers[:5]]
    return (
        "number_line",
        {"start": 0, "end": end, "marked": marked},
        f"Number line from 0 to {end}",
    )


def _measurement(text: str) -> tuple[str, dict[str, Any], str]:
    dims = extract_dimensions(text)
    length, unit = dims[0] if dims else (6, "inches")
    length = _whole(length)
    return (
        "measurement_ruler",
        {"length": length, "unit": unit},
        f"Ruler measuring {length} {unit}",
    )


def _money(text: str) -> tuple[str, dict[str, Any], str]:
    dollars = _DOLLARS.search(text)
    cents_match = _CENTS.search(text.lower())
    if dollars:
        cents = int(dollars.group(1)) * 100 + int(dollars.group(2) or 0)
    elif cents_match:
        cents = int(cents_match.group(1))
    else:
        cents = 41
    if cents <= 0:
        cents = 41
    return (
        "coins",
        {"amounts": _coins_for(cents)},
        f"Coins showing a total of ${cents // 100}.{cents % 100:02d}",
    )


def _time(text: str) -> tuple[str, dict[str, Any], str]:
    match = _TIME.search(text)
    hour, minute = (int(match.group(1)), int(match.group(2))) if match else (3, 0)
    if hour > 23 or minute > 59:
        hour, minute = 3, 0
    return (
        "clock_face",
        {"hour": hour, "minute": minute},
        f"Clock face showing {hour % 12 or 12}:{minute:02d}",
    )


def _place_value(text: str) -> tuple[str, dict[str, Any], str]:
    candidates = [int(n) for n in extract_numbers(text) if n == int(n) and 0 <= n <= 9999]
    number = max(candidates, default=345)
    return (
        "place_value_blocks",
        {"number": number},
        f"Base-ten blocks representing {number}",
    )


def _counting(text: str) -> tuple[str, dict[str, Any], str]:
    numbers = [int(n) for n in extract_numbers(text) if n == int(n)][:6]
    if not numbers:
        numbers = [12, 8]
    categories = [f"Group {i + 1}" for i in range(len(numbers))]
    return (
        "bar_graph",
        {"categories": categories, "values": numbers, "title": "Counting", "y_label": "Number"},
        f"Counting diagram comparing {len(numbers)} groups",
    )


BUILDERS: dict[str, Builder] = {
    "area": _area,
    "division": _division,
    "multiplication": _multiplication,
    "fraction": _fraction,
    "geometry": _geometry,
    "data": _data,
    "number_line": _number_line,
    "measurement": _measurement,
    "money": _money,
    "time": _time,
    "place_value": _place_value,
    "counting": _counting,
}


# =============================================================================
# PUBLIC API
# =============================================================================


def generate_question_visual(
    question_text: str,
    subject: str,
    grade: int,
    visual_type: str | None = None,
) -> VisualResult:
    """Build the diagram for a question.

    Args:
        question_text: Question text to classify and mine for numbers
        subject: "math" or "reading"; reading never gets an image
        grade: Grade level (3-5)
        visual_type: Force a category instead of detecting one

    Returns:
        VisualResult, with has_image False when no diagram applies
    """
    if subject != "math":
        return VisualResult(has_image=False)

    if visual_type is None:
        analysis = should_question_have_visual(question_text, subject, grade)
        if not analysis.needs_visual:
            return VisualResult(has_image=False)
        visual_type = analysis.visual_type

    builder = BUILDERS.get(visual_type or "")
    if builder is None:
        return VisualResult(
            has_image=True,
            visual_type=visual_type,
            image_description="Mathematical diagram",
            svg_content=svg_diagrams.placeholder(),
        )

    diagram, data, description = builder(question_text)
    try:
        svg = svg_diagrams.render_diagram(diagram, data)
    except svg_diagrams.DiagramError as e:
        logger.warning("visual_extraction_failed", visual_type=visual_type, error=str(e))
        diagram, data, description = builder("")
        svg = svg_diagrams.render_diagram(diagram, data)

    return VisualResult(
        has_image=True,
        visual_type=visual_type,
        image_description=description,
        svg_content=svg,
    )


def attach_visual(question: Question) -> Question:
    """Fill the diagram fields of a question in place and return it."""
    if question.subject != "math":
        question.clear_visual()
        return question

    result = generate_question_visual(question.question_text, question.subject, question.grade)
    question.has_image = result.has_image
    question.image_description = result.image_description
    question.svg_content = result.svg_content
    return question
