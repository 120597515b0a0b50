"""Efficient template question generator.

Fast, deterministic generation: fill a word-problem template with
random numbers, compute the answer and common-error distractors in
code, shuffle the choices and attach a diagram. No LLM calls.

Usage:
    from staarkids.core.template_generator import generate_efficient_question

    question = generate_efficient_question(3, "math", rng=random.Random(7))
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from staarkids.core import svg_diagrams
from staarkids.core.question import Difficulty, Question, build_choices
from staarkids.core.teks import category_for_teks
from staarkids.core.visual_generator import attach_visual

logger = structlog.get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

Picker = Callable[[random.Random, dict[str, Any]], Any]
Diagram = Callable[[dict[str, Any]], tuple[str, dict[str, Any], str]]


class TemplateError(Exception):
    """Raised when a template cannot produce a valid question."""

    pass


@dataclass
class QuestionTemplate:
    """A fill-in word problem.

    ``choices`` lists the correct answer first; choices are shuffled
    when the question is built.
    """

    question_text: str
    choices: list[str]
    explanation: str
    teks_standard: str
    variables: dict[str, Picker] = field(default_factory=dict)
    derive: Callable[[dict[str, Any]], None] | None = None
    diagram: Diagram | None = None
    difficulty: Difficulty = "medium"


# =============================================================================
# HELPERS
# =============================================================================


def substitute(text: str, values: dict[str, Any]) -> str:
    """Replace ``{name}`` placeholders; unknown names are left as-is."""
    return _PLACEHOLDER.sub(
        lambda m: str(values[m.group(1)]) if m.group(1) in values else m.group(0),
        text,
    )


def distinct_distractors(answer: int, candidates: list[int], minimum: int = 1) -> list[int]:
    """Make wrong answers unique, different from the answer and >= minimum.

    Invalid candidates are replaced by the nearest free value around the
    answer (answer+2, answer-2, answer+3, ...).
    """
    used = {answer}
    result = []
    for candidate in candidates:
        offset = 2
        while candidate in used or candidate < minimum:
            for value in (answer + offset, answer - offset):
                if value not in used and value >= minimum:
                    candidate = value
                    break
            offset += 1
        used.add(candidate)
        result.append(candidate)
    return result


def format_decimal(value: float) -> str:
    """Up to three decimal places, trailing zeros dropped."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def _choice_of(*options: Any) -> Picker:
    return lambda rng, values: rng.choice(options)


# =============================================================================
# DERIVED VALUES
# =============================================================================


def _derive_division(v: dict[str, Any]) -> None:
    v["answer"] = v["total"] // v["groups"]
    v["wrong1"], v["wrong2"], v["wrong3"] = distinct_distractors(
        v["answer"], [v["answer"] + 1, v["answer"] - 1, v["groups"]]
    )


def _derive_area(v: dict[str, Any]) -> None:
    v["answer"] = v["length"] * v["width"]
    v["perimeter"], v["wrong1"], v["wrong2"] = distinct_distractors(
        v["answer"],
        [2 * (v["length"] + v["width"]), v["length"] + v["width"], v["answer"] + 10],
    )


def _derive_addition(v: dict[str, Any]) -> None:
    v["answer"] = v["num1"] + v["num2"]
    v["wrong1"], v["wrong2"], v["wrong3"] = distinct_distractors(
        v["answer"], [abs(v["num1"] - v["num2"]), v["answer"] - 10, v["answer"] + 10]
    )


def _derive_multiplication(v: dict[str, Any]) -> None:
    v["answer"] = v["teams"] * v["players"]
    v["addition"], v["wrong1"], v["wrong2"] = distinct_distractors(
        v["answer"], [v["teams"] + v["players"], v["answer"] - 10, v["answer"] + 20]
    )


def _derive_fraction_decimal(v: dict[str, Any]) -> None:
    numerator, denominator = v["fraction"]
    v["numerator"], v["denominator"] = numerator, denominator
    v["answer"] = format_decimal(numerator / denominator)
    # Inverted division and digit-gluing are the usual mistakes
    v["wrong1"] = format_decimal(denominator / numerator)
    v["wrong2"] = f"0.{numerator}{denominator}"
    v["wrong3"] = f"{numerator}.{denominator}"


STORY_PROBLEMS: dict[str, dict[str, str]] = {
    "Lizard Problems": {
        "correct_problem": "Being afraid of the classroom lizard",
        "wrong_problem1": "Not liking the new teacher",
        "wrong_problem2": "Not wanting to sit near Trent",
        "wrong_problem3": "Wanting to change classes",
        "explanation_detail": "is afraid of the classroom lizard",
    },
    "The New School": {
        "correct_problem": "Not knowing anyone at the new school",
        "wrong_problem1": "Losing a lunch box",
        "wrong_problem2": "Missing the school bus",
        "wrong_problem3": "Forgetting a homework assignment",
        "explanation_detail": "feels lonely because everyone at the new school is a stranger",
    },
    "Moving Day": {
        "correct_problem": "Having to leave a best friend behind",
        "wrong_problem1": "Not liking the color of the new house",
        "wrong_problem2": "Being too tired to carry boxes",
        "wrong_problem3": "Losing a favorite toy in the truck",
        "explanation_detail": "is sad about leaving a best friend behind",
    },
    "Best Friends": {
        "correct_problem": "Arguing with a best friend about a game",
        "wrong_problem1": "Getting a bad grade on a test",
        "wrong_problem2": "Being late for soccer practice",
        "wrong_problem3": "Not being allowed to have a pet",
        "explanation_detail": "had an argument with a best friend over a game",
    },
}


def _derive_story_problem(v: dict[str, Any]) -> None:
    v.update(STORY_PROBLEMS[v["title"]])


# =============================================================================
# TEMPLATE CATALOG
# =============================================================================


def _pick_divisible_groups(rng: random.Random, values: dict[str, Any]) -> int:
    options = [g for g in (3, 4, 6, 8) if values["total"] % g == 0]
    return rng.choice(options)


EFFICIENT_QUESTION_TEMPLATES: dict[str, dict[int, dict[str, QuestionTemplate]]] = {
    "math": {
        3: {
            "division": QuestionTemplate(
                question_text=(
                    "Maria has {total} stickers. She wants to put them equally into "
                    "{groups} albums. How many stickers will be in each album?"
                ),
                choices=[
                    "{answer} stickers", "{wrong1} stickers",
                    "{wrong2} stickers", "{wrong3} stickers",
                ],
                explanation="Divide {total} ÷ {groups} = {answer} stickers in each album.",
                teks_standard="3.4K",
                variables={
                    "total": _choice_of(24, 36, 48, 60),
                    "groups": _pick_divisible_groups,
                },
                derive=_derive_division,
                diagram=lambda v: (
                    "equal_groups",
                    {"total": v["total"], "groups": v["groups"], "item": "stickers", "container": "Album"},
                    f"{v['total']} stickers divided equally into {v['groups']} albums",
                ),
            ),
            "area": QuestionTemplate(
                question_text=(
                    "A rectangular garden has a length of {length} feet and a width of "
                    "{width} feet. What is the area of the garden?"
                ),
                choices=[
                    "{answer} square feet", "{perimeter} square feet",
                    "{wrong1} square feet", "{wrong2} square feet",
                ],
                explanation="Area = length × width = {length} × {width} = {answer} square feet.",
                teks_standard="3.6C",
                variables={
                    "length": _choice_of(10, 12, 15, 18),
                    "width": _choice_of(6, 8, 10, 12),
                },
                derive=_derive_area,
                diagram=lambda v: (
                    "rectangle_area",
                    {"length": v["length"], "width": v["width"], "unit": "feet"},
                    f"A rectangular garden {v['length']} feet by {v['width']} feet",
                ),
            ),
            "addition": QuestionTemplate(
                question_text=(
                    "Sarah collected {num1} bottle caps. Jake collected {num2} bottle caps. "
                    "How many bottle caps did they collect altogether?"
                ),
                choices=[
                    "{answer} bottle caps", "{wrong1} bottle caps",
                    "{wrong2} bottle caps", "{wrong3} bottle caps",
                ],
                explanation="Add {num1} + {num2} = {answer} bottle caps total.",
                teks_standard="3.4A",
                variables={
                    "num1": lambda rng, v: rng.randint(100, 299),
                    "num2": lambda rng, v: rng.randint(50, 199),
                },
                derive=_derive_addition,
            ),
        },
        4: {
            "multiplication": QuestionTemplate(
                question_text=(
                    "There are {teams} teams in a hockey league. Each team has {players} "
                    "players. How many players are in the league altogether?"
                ),
                choices=[
                    "{answer} players", "{addition} players",
                    "{wrong1} players", "{wrong2} players",
                ],
                explanation="Multiply {teams} × {players} = {answer} players total.",
                teks_standard="4.4C",
                variables={
                    "teams": _choice_of(15, 20, 25, 30),
                    "players": _choice_of(12, 16, 18, 20),
                },
                derive=_derive_multiplication,
                diagram=lambda v: (
                    "multiplication_array",
                    {"rows": v["teams"], "columns": v["players"]},
                    f"Array of {v['teams']} teams with {v['players']} players each",
                ),
            ),
            "area_large": QuestionTemplate(
                question_text=(
                    "A rectangular playground has a length of {length} meters and a width "
                    "of {width} meters. What is the area of the playground?"
                ),
                choices=[
                    "{answer} square meters", "{perimeter} square meters",
                    "{wrong1} square meters", "{wrong2} square meters",
                ],
                explanation="Area = length × width = {length} × {width} = {answer} square meters.",
                teks_standard="4.5D",
                variables={
                    "length": _choice_of(20, 25, 30, 35),
                    "width": _choice_of(12, 15, 18, 20),
                },
                derive=_derive_area,
                diagram=lambda v: (
                    "rectangle_area",
                    {"length": v["length"], "width": v["width"], "unit": "meters"},
                    f"A rectangular playground {v['length']} meters by {v['width']} meters",
                ),
            ),
        },
        5: {
            "fractions": QuestionTemplate(
                question_text="What is {numerator}/{denominator} written as a decimal?",
                choices=["{answer}", "{wrong1}", "{wrong2}", "{wrong3}"],
                explanation="Divide {numerator} ÷ {denominator} = {answer}.",
                teks_standard="5.2A",
                variables={"fraction": _choice_of((1, 4), (3, 4), (1, 2), (3, 8))},
                derive=_derive_fraction_decimal,
                diagram=lambda v: (
                    "fraction_models",
                    {"fractions": [(v["numerator"], v["denominator"])]},
                    f"Fraction bar showing {v['numerator']}/{v['denominator']}",
                ),
            ),
        },
    },
    "reading": {
        3: {
            "character_problem": QuestionTemplate(
                question_text=(
                    "Based on the story '{title}', what is {character}'s main problem "
                    "at the beginning?"
                ),
                choices=[
                    "{correct_problem}", "{wrong_problem1}",
                    "{wrong_problem2}", "{wrong_problem3}",
                ],
                explanation="The story shows that {character} {explanation_detail}.",
                teks_standard="3.8B",
                variables={
                    "title": _choice_of(*STORY_PROBLEMS),
                    "character": _choice_of("Amy", "Jake", "Maria", "Sam"),
                },
                derive=_derive_story_problem,
            ),
        },
    },
}


# =============================================================================
# GENERATION
# =============================================================================


def _fallback_question(grade: int, subject: str, rng: random.Random) -> Question:
    """Fixed question for grades/subjects without templates."""
    if subject == "math":
        choices, letter = build_choices("14", ["12", "16", "15"], rng)
        return Question(
            grade=grade,
            subject="math",
            teks_standard=f"{grade}.3A",
            question_text="What is 8 + 6?",
            answer_choices=choices,
            correct_answer=letter,
            explanation="Add 8 + 6 = 14.",
            category="Number and Operations",
            method="fallback",
        )

    choices, letter = build_choices(
        "The most important message",
        ["The first sentence", "The character names", "The last word"],
        rng,
    )
    return Question(
        grade=grade,
        subject="reading",
        teks_standard=f"{grade}.6B",
        question_text="What is the main idea of a story?",
        answer_choices=choices,
        correct_answer=letter,
        explanation="The main idea is the central message of the story.",
        category="Reading Comprehension",
        method="fallback",
    )


def _select_template(
    templates: dict[str, QuestionTemplate],
    grade: int,
    subject: str,
    category: str | None,
    rng: random.Random,
) -> tuple[str, QuestionTemplate]:
    names = sorted(templates)
    if category:
        matching = [
            n for n in names
            if category_for_teks(grade, subject, templates[n].teks_standard) == category
        ]
        names = matching or names
    name = rng.choice(names)
    return name, templates[name]


def build_from_template(
    template: QuestionTemplate,
    grade: int,
    subject: str,
    rng: random.Random,
    category: str | None = None,
    include_visual: bool = True,
) -> Question:
    """Draw variables, derive answers and assemble a Question.

    Raises:
        TemplateError: If the drawn values do not give four distinct choices
    """
    values: dict[str, Any] = {}
    for name, picker in template.variables.items():
        values[name] = picker(rng, values)
    if template.derive:
        template.derive(values)

    texts = [substitute(c, values) for c in template.choices]
    try:
        choices, letter = build_choices(texts[0], texts[1:], rng)
    except ValueError as e:
        raise TemplateError(str(e)) from e

    question = Question(
        grade=grade,
        subject=subject,  # type: ignore[arg-type]
        teks_standard=template.teks_standard,
        question_text=substitute(template.question_text, values),
        answer_choices=choices,
        correct_answer=letter,
        explanation=substitute(template.explanation, values),
        difficulty=template.difficulty,
        category=category_for_teks(grade, subject, template.teks_standard) or category,
        method="efficient",
    )

    if subject == "math" and include_visual:
        if template.diagram:
            diagram, data, description = template.diagram(values)
            question.svg_content = svg_diagrams.render_diagram(diagram, data)
            question.image_description = description
            question.has_image = True
        else:
            attach_visual(question)

    return question


def generate_efficient_question(
    grade: int,
    subject: str,
    category: str | None = None,
    rng: random.Random | None = None,
    include_visual: bool = True,
) -> Question:
    """Generate one question instantly from the template catalog.

    Args:
        grade: Grade level (3-5)
        subject: "math" or "reading"
        category: Preferred reporting category, if any template matches
        rng: Random source (seed it for reproducible questions)
        include_visual: Attach a diagram to math questions

    Returns:
        Question with shuffled choices and the correct letter recorded
    """
    rng = rng or random.Random()
    templates = EFFICIENT_QUESTION_TEMPLATES.get(subject, {}).get(grade)
    if not templates:
        logger.debug("no_templates_using_fallback", grade=grade, subject=subject)
        return _fallback_question(grade, subject, rng)

    name, template = _select_template(templates, grade, subject, category, rng)
    question = build_from_template(template, grade, subject, rng, category, include_visual)
    logger.debug("efficient_question_generated", template=name, grade=grade, subject=subject)
    return question
