"""SVG diagram catalog for math questions.

Every diagram is a complete ``<svg>`` document string with explicit
``width``/``height``/``viewBox``, a ``<title>`` and an ``aria-label`` so
screen readers can describe it. All text is XML-escaped.

Usage:
    from staarkids.core.svg_diagrams import render_diagram

    svg = render_diagram("rectangle_area", {"length": 12, "width": 8})
"""

from __future__ import annotations

import math
from typing import Any, Callable
from xml.sax.saxutils import escape

import structlog

logger = structlog.get_logger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

COLORS = {
    "ink": "#1f2937",
    "fill": "#e5e7eb",
    "accent": "#2563eb",
    "shade": "#93c5fd",
    "mark": "#dc2626",
    "muted": "#6b7280",
}

STYLE = f"""<style>
.shape {{ fill: {COLORS["fill"]}; stroke: {COLORS["ink"]}; stroke-width: 2; }}
.line {{ stroke: {COLORS["ink"]}; stroke-width: 1.5; fill: none; }}
.dim {{ stroke: {COLORS["ink"]}; stroke-width: 1; }}
.dot {{ fill: {COLORS["accent"]}; }}
.label {{ font-family: Arial, sans-serif; font-size: 14px; fill: {COLORS["ink"]}; text-anchor: middle; }}
.small {{ font-family: Arial, sans-serif; font-size: 11px; fill: {COLORS["ink"]}; text-anchor: middle; }}
.title {{ font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: {COLORS["ink"]}; text-anchor: middle; }}
</style>"""

MAX_GROUPS_DRAWN = 12
MAX_DOTS_PER_GROUP = 20
MAX_ARRAY_SIDE = 12
MAX_FRACTIONS = 6
MAX_DENOMINATOR = 24
MAX_SHAPES = 6
MAX_COINS = 10


class DiagramError(ValueError):
    """Raised when diagram parameters are invalid."""

    pass


# =============================================================================
# HELPERS
# =============================================================================


def _n(value: float) -> str:
    """Format a coordinate without trailing zeros."""
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return "0" if text == "-0" else text


def _text(value: Any) -> str:
    return escape(str(value))


def _attr(value: Any) -> str:
    return escape(str(value), {'"': "&quot;"})


def _label(x: float, y: float, text: Any, css: str = "label", extra: str = "") -> str:
    return f'<text x="{_n(x)}" y="{_n(y)}" class="{css}"{extra}>{_text(text)}</text>'


def _document(
    title: str,
    body: list[str],
    view_width: int,
    view_height: int,
    width: int | None = None,
    height: int | None = None,
) -> str:
    """Wrap diagram elements in an accessible SVG document."""
    width = width or view_width
    height = height or view_height
    return "\n".join([
        f'<svg xmlns="{SVG_NS}" width="{width}" height="{height}" '
        f'viewBox="0 0 {view_width} {view_height}" role="img" aria-label="{_attr(title)}">',
        f"<title>{_text(title)}</title>",
        STYLE,
        *body,
        "</svg>",
    ])


def _plural(unit: str) -> str:
    return unit if unit.endswith("s") else f"{unit}s"


# =============================================================================
# AREA AND GROUPING
# =============================================================================


def rectangle_area(
    length: float,
    width: float,
    unit: str = "feet",
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Rectangle scaled to its dimensions with labelled sides and area."""
    if length <= 0 or width <= 0:
        raise DiagramError("Rectangle sides must be positive")

    view_w, view_h = 360, 260
    max_w, max_h = 220.0, 130.0
    scale = min(max_w / length, max_h / width)
    rect_w, rect_h = length * scale, width * scale
    x0 = (view_w - rect_w) / 2
    y0 = 70.0
    area = length * width

    body = [
        f'<rect x="{_n(x0)}" y="{_n(y0)}" width="{_n(rect_w)}" height="{_n(rect_h)}" class="shape"/>',
        # length dimension line above
        f'<line x1="{_n(x0)}" y1="{_n(y0 - 20)}" x2="{_n(x0 + rect_w)}" y2="{_n(y0 - 20)}" class="dim"/>',
        f'<line x1="{_n(x0)}" y1="{_n(y0 - 25)}" x2="{_n(x0)}" y2="{_n(y0 - 15)}" class="dim"/>',
        f'<line x1="{_n(x0 + rect_w)}" y1="{_n(y0 - 25)}" x2="{_n(x0 + rect_w)}" y2="{_n(y0 - 15)}" class="dim"/>',
        _label(x0 + rect_w / 2, y0 - 30, f"{_n(length)} {unit}"),
        # width dimension line on the left
        f'<line x1="{_n(x0 - 20)}" y1="{_n(y0)}" x2="{_n(x0 - 20)}" y2="{_n(y0 + rect_h)}" class="dim"/>',
        f'<line x1="{_n(x0 - 25)}" y1="{_n(y0)}" x2="{_n(x0 - 15)}" y2="{_n(y0)}" class="dim"/>',
        f'<line x1="{_n(x0 - 25)}" y1="{_n(y0 + rect_h)}" x2="{_n(x0 - 15)}" y2="{_n(y0 + rect_h)}" class="dim"/>',
        _label(
            x0 - 30, y0 + rect_h / 2, f"{_n(width)} {unit}",
            extra=f' transform="rotate(-90 {_n(x0 - 30)} {_n(y0 + rect_h / 2)})"',
        ),
        _label(view_w / 2, view_h - 20, f"Area = {_n(length)} × {_n(width)} = {_n(area)} square {unit}"),
    ]
    title = f"Rectangle {_n(length)} {unit} by {_n(width)} {unit} with area {_n(area)} square {unit}"
    return _document(title, body, view_w, view_h, svg_width, svg_height)


def equal_groups(
    total: int,
    groups: int,
    item: str = "stickers",
    container: str = "Album",
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Dashed containers each holding ``total // groups`` dots."""
    if groups <= 0:
        raise DiagramError("Number of groups must be positive")
    if total < 0:
        raise DiagramError("Total must not be negative")

    per_group = total // groups
    drawn = min(groups, MAX_GROUPS_DRAWN)
    cols = min(drawn, 6)
    rows = math.ceil(drawn / cols)
    box_w, box_h, gap = 70, 90, 12

    view_w = max(400, 40 + cols * (box_w + gap))
    view_h = 50 + rows * (box_h + 30) + 40

    body = []
    for g in range(drawn):
        col, row = g % cols, g // cols
        x = 20 + col * (box_w + gap)
        y = 30 + row * (box_h + 30)
        body.append(
            f'<rect x="{x}" y="{y}" width="{box_w}" height="{box_h}" rx="6" '
            f'class="line" stroke-dasharray="5,3"/>'
        )
        dots = min(per_group, MAX_DOTS_PER_GROUP)
        for i in range(dots):
            cx = x + 10 + (i % 5) * 12.5
            cy = y + 12 + (i // 5) * 14
            body.append(f'<circle cx="{_n(cx)}" cy="{_n(cy)}" r="4" class="dot"/>')
        if per_group > MAX_DOTS_PER_GROUP:
            body.append(_label(x + box_w / 2, y + box_h - 8, f"{per_group}", css="small"))
        body.append(_label(x + box_w / 2, y + box_h + 16, f"{container} {g + 1}", css="small"))

    if groups > drawn:
        body.append(_label(view_w - 60, 20, f"+{groups - drawn} more", css="small"))

    body.append(_label(view_w / 2, view_h - 15, f"{total} {item} ÷ {groups} = {per_group} in each"))
    title = f"{total} {item} shared equally into {groups} {_plural(container.lower())}"
    return _document(title, body, view_w, view_h, svg_width, svg_height)


def multiplication_array(
    rows: int,
    columns: int,
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Dot array with row and column counts."""
    if rows <= 0 or columns <= 0:
        raise DiagramError("Array rows and columns must be positive")

    shown_r, shown_c = min(rows, MAX_ARRAY_SIDE), min(columns, MAX_ARRAY_SIDE)
    step = 24
    view_w = max(300, 80 + shown_c * step + 40)
    view_h = 70 + shown_r * step + 50

    body = []
    for r in range(shown_r):
        for c in range(shown_c):
            cx = 80 + c * step
            cy = 60 + r * step
            body.append(f'<circle cx="{cx}" cy="{cy}" r="7" class="dot"/>')

    body.append(_label(80 + (shown_c - 1) * step / 2, 35, f"{columns} columns"))
    body.append(_label(
        45, 60 + (shown_r - 1) * step / 2, f"{rows} rows",
        extra=f' transform="rotate(-90 45 {_n(60 + (shown_r - 1) * step / 2)})"',
    ))
    body.append(_label(view_w / 2, view_h - 15, f"{rows} × {columns} = {rows * columns}"))

    title = f"Array of {rows} rows and {columns} columns showing {rows * columns}"
    return _document(title, body, view_w, view_h, svg_width, svg_height)


# =============================================================================
# DATA AND FRACTIONS
# =============================================================================


def bar_graph(
    categories: list[str],
    values: list[float],
    title: str = "Data",
    y_label: str = "Count",
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Vertical bar graph scaled to the largest value.

    Empty or all-zero data renders the axes only.
    """
    if len(categories) != len(values):
        raise DiagramError("Categories and values must have the same length")

    view_w, view_h = 500, 360
    left, top, right, bottom = 70, 50, 470, 300
    plot_h = bottom - top

    body = [
        _label(view_w / 2, 28, title, css="title"),
        f'<line x1="{left}" y1="{top}" x2="{left}" y2="{bottom}" class="line"/>',
        f'<line x1="{left}" y1="{bottom}" x2="{right}" y2="{bottom}" class="line"/>',
        _label(20, (top + bottom) / 2, y_label, extra=f' transform="rotate(-90 20 {_n((top + bottom) / 2)})"'),
    ]

    max_value = max((v for v in values if v > 0), default=0)
    if max_value > 0:
        slot = (right - left) / len(values)
        bar_w = slot * 0.6
        for i, (name, value) in enumerate(zip(categories, values)):
            bar_h = max(value, 0) / max_value * (plot_h - 20)
            x = left + i * slot + (slot - bar_w) / 2
            y = bottom - bar_h
            body.append(
                f'<rect x="{_n(x)}" y="{_n(y)}" width="{_n(bar_w)}" height="{_n(bar_h)}" '
                f'fill="{COLORS["accent"]}" stroke="{COLORS["ink"]}"/>'
            )
            body.append(_label(x + bar_w / 2, y - 6, _n(value), css="small"))
            body.append(_label(x + bar_w / 2, bottom + 18, name, css="small"))

    summary = ", ".join(f"{c} {_n(v)}" for c, v in zip(categories, values)) or "no data"
    return _document(f"Bar graph: {title} ({summary})", body, view_w, view_h, svg_width, svg_height)


def fraction_models(
    fractions: list[tuple[int, int]],
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """One bar per fraction split into equal parts, numerator parts shaded."""
    if not fractions:
        raise DiagramError("At least one fraction is required")

    shown = fractions[:MAX_FRACTIONS]
    bar_w, bar_h, gap = 300, 40, 30
    view_w = 440
    view_h = 30 + len(shown) * (bar_h + gap) + 10

    body = []
    labels = []
    for i, pair in enumerate(shown):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise DiagramError(f"Fraction must be a numerator/denominator pair: {pair!r}")
        numerator, denominator = int(pair[0]), int(pair[1])
        if not 0 < denominator <= MAX_DENOMINATOR:
            raise DiagramError(f"Denominator must be 1-{MAX_DENOMINATOR}: {denominator}")
        if numerator < 0:
            raise DiagramError(f"Invalid numerator: {numerator}")
        y = 30 + i * (bar_h + gap)
        part_w = bar_w / denominator
        shaded = min(numerator, denominator)
        for p in range(denominator):
            fill = COLORS["shade"] if p < shaded else "white"
            body.append(
                f'<rect x="{_n(20 + p * part_w)}" y="{y}" width="{_n(part_w)}" height="{bar_h}" '
                f'fill="{fill}" stroke="{COLORS["ink"]}" stroke-width="1.5"/>'
            )
        body.append(_label(20 + bar_w + 50, y + bar_h / 2 + 5, f"{numerator}/{denominator}"))
        labels.append(f"{numerator}/{denominator}")

    title = f"Fraction models showing {', '.join(labels)}"
    return _document(title, body, view_w, view_h, svg_width, svg_height)


# =============================================================================
# GEOMETRY
# =============================================================================

KNOWN_SHAPES = ("square", "rectangle", "triangle", "circle", "parallelogram", "trapezoid")


def _shape_element(shape: str, cx: float, cy: float) -> str:
    if shape == "rectangle":
        return f'<rect x="{_n(cx - 45)}" y="{_n(cy - 28)}" width="90" height="56" class="shape"/>'
    if shape == "triangle":
        return f'<polygon points="{_n(cx)},{_n(cy - 40)} {_n(cx - 45)},{_n(cy + 35)} {_n(cx + 45)},{_n(cy + 35)}" class="shape"/>'
    if shape == "circle":
        return f'<circle cx="{_n(cx)}" cy="{_n(cy)}" r="40" class="shape"/>'
    if shape == "parallelogram":
        return f'<polygon points="{_n(cx - 30)},{_n(cy - 30)} {_n(cx + 50)},{_n(cy - 30)} {_n(cx + 30)},{_n(cy + 30)} {_n(cx - 50)},{_n(cy + 30)}" class="shape"/>'
    if shape == "trapezoid":
        return f'<polygon points="{_n(cx - 25)},{_n(cy - 30)} {_n(cx + 25)},{_n(cy - 30)} {_n(cx + 48)},{_n(cy + 30)} {_n(cx - 48)},{_n(cy + 30)}" class="shape"/>'
    return f'<rect x="{_n(cx - 35)}" y="{_n(cy - 35)}" width="70" height="70" class="shape"/>'


def geometric_shapes(
    shapes: list[str],
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Row of labelled shapes. Unknown names are drawn as a square."""
    names = [s.lower() if s.lower() in KNOWN_SHAPES else "square" for s in shapes[:MAX_SHAPES]]
    if not names:
        names = ["square"]

    slot = 125
    view_w = max(300, len(names) * slot + 20)
    view_h = 180

    body = []
    for i, name in enumerate(names):
        cx = 10 + slot * i + slot / 2
        body.append(_shape_element(name, cx, 80))
        body.append(_label(cx, 150, name.capitalize()))

    return _document(f"Shapes: {', '.join(names)}", body, view_w, view_h, svg_width, svg_height)


# =============================================================================
# NUMBER SENSE
# =============================================================================


def number_line(
    start: float,
    end: float,
    marked: list[float] | None = None,
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Number line with ticks, labels and highlighted points.

    Raises:
        DiagramError: If end is not greater than start
    """
    if end <= start:
        raise DiagramError(f"Number line end ({end}) must be greater than start ({start})")

    view_w, view_h = 560, 140
    left, right, axis_y = 40, 520, 70
    span = end - start
    step = max(1, math.ceil(span / 20)) if span >= 1 else span / 4

    def position(value: float) -> float:
        return left + (value - start) / span * (right - left)

    body = [f'<line x1="{left - 10}" y1="{axis_y}" x2="{right + 10}" y2="{axis_y}" class="line"/>']

    ticks = []
    value = start
    while value < end - 1e-9:
        ticks.append(value)
        value += step
    ticks.append(end)

    for tick in ticks:
        x = position(tick)
        body.append(f'<line x1="{_n(x)}" y1="{axis_y - 8}" x2="{_n(x)}" y2="{axis_y + 8}" class="dim"/>')
        body.append(_label(x, axis_y + 28, _n(tick), css="small"))

    points = [p for p in (marked or []) if start <= p <= end]
    for point in points:
        x = position(point)
        body.append(f'<circle cx="{_n(x)}" cy="{axis_y}" r="6" fill="{COLORS["mark"]}"/>')
        body.append(_label(x, axis_y - 16, _n(point), css="small"))

    title = f"Number line from {_n(start)} to {_n(end)}"
    if points:
        title += f" marking {', '.join(_n(p) for p in points)}"
    return _document(title, body, view_w, view_h, svg_width, svg_height)


def clock_face(
    hour: int,
    minute: int = 0,
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Analog clock showing the given time."""
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise DiagramError(f"Invalid time {hour}:{minute:02d}")

    display_hour = hour % 12 or 12
    cx, cy, r = 120, 120, 95
    view_w, view_h = 240, 270

    body = [f'<circle cx="{cx}" cy="{cy}" r="{r}" fill="white" stroke="{COLORS["ink"]}" stroke-width="3"/>']
    for h in range(1, 13):
        angle = math.radians(h * 30 - 90)
        body.append(_label(cx + (r - 18) * math.cos(angle), cy + (r - 18) * math.sin(angle) + 5, h))

    minute_angle = math.radians(minute * 6 - 90)
    hour_angle = math.radians((display_hour % 12) * 30 + minute * 0.5 - 90)
    body.append(
        f'<line x1="{cx}" y1="{cy}" x2="{_n(cx + 50 * math.cos(hour_angle))}" '
        f'y2="{_n(cy + 50 * math.sin(hour_angle))}" stroke="{COLORS["ink"]}" stroke-width="5" stroke-linecap="round"/>'
    )
    body.append(
        f'<line x1="{cx}" y1="{cy}" x2="{_n(cx + 75 * math.cos(minute_angle))}" '
        f'y2="{_n(cy + 75 * math.sin(minute_angle))}" stroke="{COLORS["accent"]}" stroke-width="3" stroke-linecap="round"/>'
    )
    body.append(f'<circle cx="{cx}" cy="{cy}" r="4" fill="{COLORS["ink"]}"/>')

    time_text = f"{display_hour}:{minute:02d}"
    body.append(_label(cx, view_h - 20, time_text))
    return _document(f"Clock showing {time_text}", body, view_w, view_h, svg_width, svg_height)


COIN_NAMES = {1: "penny", 5: "nickel", 10: "dime", 25: "quarter", 50: "half dollar", 100: "dollar coin"}
COIN_RADII = {1: 19, 5: 21, 10: 18, 25: 24, 50: 27, 100: 26}


def _money(cents: int) -> str:
    return f"${cents // 100}.{cents % 100:02d}"


def coins(
    amounts: list[int],
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Row of coins labelled with their values in cents."""
    if any(a <= 0 for a in amounts):
        raise DiagramError("Coin values must be positive")

    shown = amounts[:MAX_COINS]
    view_w = max(300, 40 + len(shown) * 62)
    view_h = 150

    body = []
    for i, cents in enumerate(shown):
        cx = 45 + i * 62
        r = COIN_RADII.get(cents, 22)
        fill = "#d97706" if cents == 1 else "#d1d5db"
        label = "$1" if cents == 100 else f"{cents}¢"
        body.append(f'<circle cx="{cx}" cy="60" r="{r}" fill="{fill}" stroke="{COLORS["ink"]}" stroke-width="2"/>')
        body.append(_label(cx, 65, label, css="small"))

    total = sum(amounts)
    body.append(_label(view_w / 2, view_h - 25, f"Total: {_money(total)}"))
    names = [COIN_NAMES.get(c, f"{c}-cent coin") for c in shown]
    return _document(f"Coins: {', '.join(names)} totaling {_money(total)}", body, view_w, view_h, svg_width, svg_height)


def place_value_blocks(
    number: int,
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Base-ten blocks: thousands cubes, hundreds flats, tens rods, ones."""
    if not 0 <= number <= 9999:
        raise DiagramError("Place value blocks support 0 to 9999")

    thousands, rest = divmod(number, 1000)
    hundreds, rest = divmod(rest, 100)
    tens, ones = divmod(rest, 10)

    view_w, view_h = 620, 260
    body = []
    column_x = [20, 170, 370, 500]
    headers = ["Thousands", "Hundreds", "Tens", "Ones"]
    for x, header, count in zip(column_x, headers, (thousands, hundreds, tens, ones)):
        body.append(_label(x + 50, 25, f"{header}: {count}", css="small"))

    for i in range(thousands):
        x, y = column_x[0] + (i % 3) * 45, 45 + (i // 3) * 45
        body.append(f'<rect x="{x}" y="{y}" width="38" height="38" fill="{COLORS["accent"]}" stroke="{COLORS["ink"]}"/>')
    for i in range(hundreds):
        x, y = column_x[1] + (i % 3) * 62, 45 + (i // 3) * 62
        body.append(f'<rect x="{x}" y="{y}" width="56" height="56" fill="{COLORS["shade"]}" stroke="{COLORS["ink"]}"/>')
    for i in range(tens):
        x = column_x[2] + i * 12
        body.append(f'<rect x="{x}" y="45" width="9" height="90" fill="{COLORS["shade"]}" stroke="{COLORS["ink"]}"/>')
    for i in range(ones):
        x, y = column_x[3] + (i % 5) * 16, 45 + (i // 5) * 16
        body.append(f'<rect x="{x}" y="{y}" width="12" height="12" fill="{COLORS["fill"]}" stroke="{COLORS["ink"]}"/>')

    body.append(_label(view_w / 2, view_h - 15, f"{number} = {thousands} thousands {hundreds} hundreds {tens} tens {ones} ones"))
    return _document(f"Base-ten blocks showing {number}", body, view_w, view_h, svg_width, svg_height)


def measurement_ruler(
    length: float,
    unit: str = "inches",
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Ruler with an object bar measuring ``length`` units."""
    if length <= 0:
        raise DiagramError("Length must be positive")

    marks = max(6, min(12, math.ceil(length)))
    view_w, view_h = 560, 170
    left, right = 30, 530
    spacing = (right - left) / marks
    object_w = min(length, marks) * spacing

    body = [
        f'<rect x="{left}" y="40" width="{_n(object_w)}" height="24" rx="4" fill="{COLORS["shade"]}" stroke="{COLORS["ink"]}"/>',
        f'<rect x="{left}" y="80" width="{right - left}" height="40" fill="#fde68a" stroke="{COLORS["ink"]}"/>',
    ]
    for i in range(marks + 1):
        x = left + i * spacing
        body.append(f'<line x1="{_n(x)}" y1="80" x2="{_n(x)}" y2="98" class="dim"/>')
        body.append(_label(x, 114, i, css="small"))
        if i < marks:
            half = x + spacing / 2
            body.append(f'<line x1="{_n(half)}" y1="80" x2="{_n(half)}" y2="90" class="dim"/>')

    body.append(_label(view_w / 2, view_h - 18, f"Length: {_n(length)} {unit}"))
    return _document(f"Ruler measuring {_n(length)} {unit}", body, view_w, view_h, svg_width, svg_height)


def placeholder(
    label: str = "Mathematical Diagram",
    *,
    svg_width: int | None = None,
    svg_height: int | None = None,
) -> str:
    """Neutral frame used when no specific diagram applies."""
    view_w, view_h = 400, 200
    body = [
        '<rect x="10" y="10" width="380" height="180" rx="8" class="shape"/>',
        _label(view_w / 2, view_h / 2 + 5, label, css="title"),
    ]
    return _document(label, body, view_w, view_h, svg_width, svg_height)


# =============================================================================
# DISPATCH
# =============================================================================

DIAGRAM_TYPES: dict[str, Callable[..., str]] = {
    "rectangle_area": rectangle_area,
    "equal_groups": equal_groups,
    "multiplication_array": multiplication_array,
    "bar_graph": bar_graph,
    "fraction_models": fraction_models,
    "geometric_shapes": geometric_shapes,
    "number_line": number_line,
    "clock_face": clock_face,
    "coins": coins,
    "place_value_blocks": place_value_blocks,
    "measurement_ruler": measurement_ruler,
    "placeholder": placeholder,
}

# Visual categories from the detector map onto catalog entries
DIAGRAM_ALIASES = {
    "area": "rectangle_area",
    "division": "equal_groups",
    "multiplication": "multiplication_array",
    "data": "bar_graph",
    "fraction": "fraction_models",
    "geometry": "geometric_shapes",
    "time": "clock_face",
    "money": "coins",
    "place_value": "place_value_blocks",
    "measurement": "measurement_ruler",
}


def list_diagram_types() -> list[str]:
    return sorted(DIAGRAM_TYPES)


def render_diagram(
    diagram_type: str,
    data: dict[str, Any] | None = None,
    width: int | None = None,
    height: int | None = None,
) -> str:
    """Render a catalog diagram by name.

    Unknown types render the placeholder.

    Raises:
        DiagramError: If the data does not fit the diagram
    """
    data = dict(data or {})
    name = DIAGRAM_ALIASES.get(diagram_type, diagram_type)
    renderer = DIAGRAM_TYPES.get(name)

    if renderer is None:
        logger.debug("unknown_diagram_type", diagram_type=diagram_type)
        return placeholder(
            label=str(data.get("label", "Mathematical Diagram")),
            svg_width=width,
            svg_height=height,
        )

    try:
        return renderer(**data, svg_width=width, svg_height=height)
    except DiagramError:
        raise
    except (TypeError, ValueError, AttributeError) as e:
        raise DiagramError(f"Invalid data for {name}: {e}") from e
