"""Tests for the SVG diagram catalog."""

import xml.etree.ElementTree as ET

import pytest

from staarkids.core.svg_diagrams import (
    DIAGRAM_ALIASES,
    DIAGRAM_TYPES,
    MAX_DENOMINATOR,
    DiagramError,
    bar_graph,
    clock_face,
    equal_groups,
    fraction_models,
    list_diagram_types,
    number_line,
    rectangle_area,
    render_diagram,
)

SVG = "{http://www.w3.org/2000/svg}"

SAMPLE_DATA = {
    "rectangle_area": {"length": 12, "width": 8},
    "equal_groups": {"total": 24, "groups": 6},
    "multiplication_array": {"rows": 3, "columns": 5},
    "bar_graph": {"categories": ["Red", "Blue"], "values": [4, 7]},
    "fraction_models": {"fractions": [[1, 2], [3, 4]]},
    "geometric_shapes": {"shapes": ["triangle", "circle"]},
    "number_line": {"start": 0, "end": 10, "marked": [3, 7]},
    "clock_face": {"hour": 3, "minute": 30},
    "coins": {"amounts": [25, 10, 5, 1]},
    "place_value_blocks": {"number": 345},
    "measurement_ruler": {"length": 6, "unit": "inches"},
    "placeholder": {},
}


def parse(svg: str) -> ET.Element:
    return ET.fromstring(svg)


class TestCatalog:
    """Every catalog entry renders an accessible, well-formed document."""

    def test_sample_data_covers_catalog(self):
        assert set(SAMPLE_DATA) == set(DIAGRAM_TYPES)

    @pytest.mark.parametrize("diagram_type", sorted(SAMPLE_DATA))
    def test_well_formed_and_labelled(self, diagram_type):
        root = parse(render_diagram(diagram_type, SAMPLE_DATA[diagram_type]))

        assert root.tag == f"{SVG}svg"
        assert root.get("width")
        assert root.get("height")
        assert root.get("viewBox", "").startswith("0 0 ")
        assert root.get("aria-label")
        assert root.find(f"{SVG}title") is not None

    def test_list_diagram_types_sorted(self):
        types = list_diagram_types()
        assert types == sorted(types)
        assert "rectangle_area" in types

    def test_aliases_point_at_catalog(self):
        for target in DIAGRAM_ALIASES.values():
            assert target in DIAGRAM_TYPES


class TestRenderDiagram:
    """Tests for render_diagram dispatch."""

    def test_alias_resolves(self):
        svg = render_diagram("area", {"length": 5, "width": 3})
        assert "Area = 5 × 3 = 15 square feet" in svg

    def test_unknown_type_renders_placeholder(self):
        svg = render_diagram("volcano", {"label": "Volcano"})
        root = parse(svg)
        assert root.get("aria-label") == "Volcano"

    def test_size_override(self):
        root = parse(render_diagram("rectangle_area", {"length": 4, "width": 2}, 200, 150))
        assert root.get("width") == "200"
        assert root.get("height") == "150"

    def test_bad_arguments_raise_diagram_error(self):
        with pytest.raises(DiagramError):
            render_diagram("rectangle_area", {"sides": 4})

    def test_diagram_error_is_value_error(self):
        with pytest.raises(ValueError):
            render_diagram("clock_face", {"hour": 25})

    @pytest.mark.parametrize(
        "diagram_type,data",
        [
            ("fraction_models", {"fractions": [[1]]}),
            ("fraction_models", {"fractions": [["one", "two"]]}),
            ("geometric_shapes", {"shapes": [5, "circle"]}),
        ],
    )
    def test_malformed_data_raises_diagram_error(self, diagram_type, data):
        """Bad element types surface as DiagramError rather than a raw crash."""
        with pytest.raises(DiagramError):
            render_diagram(diagram_type, data)


class TestDiagrams:
    """Tests for individual diagrams."""

    def test_rectangle_labels(self):
        svg = rectangle_area(12, 8, "meters")
        assert "12 meters" in svg
        assert "96 square meters" in svg

    def test_rectangle_rejects_zero(self):
        with pytest.raises(DiagramError):
            rectangle_area(0, 8)

    def test_equal_groups_draws_each_group(self):
        root = parse(equal_groups(12, 3, item="cookies", container="Plate"))
        labels = [t.text for t in root.iter(f"{SVG}text")]
        assert "Plate 1" in labels
        assert "Plate 3" in labels
        assert "12 cookies ÷ 3 = 4 in each" in labels

    def test_equal_groups_caps_drawn_groups(self):
        svg = equal_groups(40, 20)
        assert "+8 more" in svg

    def test_equal_groups_rejects_zero_groups(self):
        with pytest.raises(DiagramError):
            equal_groups(10, 0)

    def test_bar_graph_length_mismatch(self):
        with pytest.raises(DiagramError):
            bar_graph(["A", "B"], [1])

    def test_bar_graph_empty_renders_axes(self):
        root = parse(bar_graph([], []))
        assert "no data" in root.get("aria-label")

    def test_number_line_requires_increasing_range(self):
        with pytest.raises(DiagramError):
            number_line(10, 10)

    def test_clock_face_invalid_minute(self):
        with pytest.raises(DiagramError):
            clock_face(3, 60)

    def test_text_is_escaped(self):
        """Labels with markup characters stay well formed."""
        root = parse(bar_graph(["<Cats>", "Dogs & Co"], [3, 5], title="Pets <2024>"))
        assert "Pets <2024>" in root.find(f"{SVG}title").text

    def test_fraction_models_caps_denominator(self):
        """A huge denominator is refused instead of drawing every part."""
        with pytest.raises(DiagramError):
            fraction_models([(1, MAX_DENOMINATOR + 1)])

    def test_fraction_models_draws_largest_denominator(self):
        root = parse(fraction_models([(3, MAX_DENOMINATOR)]))
        assert len(list(root.iter(f"{SVG}rect"))) >= MAX_DENOMINATOR
