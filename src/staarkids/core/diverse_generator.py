"""Diverse scenario question generator.

Mixes several question types per subject so a practice set does not
repeat the same template. Math items compute their answers from the
drawn numbers and carry a diagram built from the same numbers.
"""

from __future__ import annotations

import random
from typing import Any, Callable

import structlog

from staarkids.core import svg_diagrams
from staarkids.core.question import Difficulty, Question, build_choices
from staarkids.core.teks import get_random_teks_standard
from staarkids.core.template_generator import TemplateError, distinct_distractors

logger = structlog.get_logger(__name__)

MATH_QUESTION_TYPES = [
    "visual-geometry",
    "word-problem-visual",
    "fractions-visual",
    "measurement-visual",
    "data-analysis-visual",
    "number-operations",
    "algebra-patterns",
]

READING_QUESTION_TYPES = [
    "comprehension-passage",
    "vocabulary-context",
    "literary-analysis",
    "informational-text",
    "author-purpose",
]

QUESTION_TYPE_CATEGORIES = {
    "visual-geometry": "Geometry and Measurement",
    "word-problem-visual": "Number and Operations",
    "fractions-visual": "Number and Operations",
    "measurement-visual": "Geometry and Measurement",
    "data-analysis-visual": "Data Analysis",
    "number-operations": "Number and Operations",
    "algebra-patterns": "Algebraic Reasoning",
    "comprehension-passage": "Reading Comprehension",
    "vocabulary-context": "Reading Comprehension",
    "literary-analysis": "Literary Elements",
    "informational-text": "Genre Features",
    "author-purpose": "Author's Purpose",
}

# Largest addend per grade for number-operations items
GRADE_NUMBER_RANGES = {3: (100, 499), 4: (1000, 4999), 5: (10000, 49999)}


class _Draft:
    """Question parts gathered by a type builder before lettering."""

    def __init__(
        self,
        text: str,
        correct: Any,
        distractors: list[Any],
        explanation: str,
        diagram: tuple[str, dict[str, Any], str] | None = None,
        passage: str | None = None,
        difficulty: Difficulty = "medium",
    ):
        self.text = text
        self.correct = str(correct)
        self.distractors = [str(d) for d in distractors]
        self.explanation = explanation
        self.diagram = diagram
        self.passage = passage
        self.difficulty = difficulty


# =============================================================================
# MATH TYPES
# =============================================================================

QUADRILATERALS = ["square", "rectangle", "parallelogram", "trapezoid"]


def _visual_geometry(grade: int, rng: random.Random) -> _Draft:
    if rng.random() < 0.5:
        shapes = rng.sample(QUADRILATERALS, 3)
        return _Draft(
            text="Look at the shapes below. Which statement is true about all the shapes shown?",
            correct="They are all quadrilaterals",
            distractors=[
                "They are all triangles",
                "They all have equal sides",
                "They all have exactly two right angles",
            ],
            explanation="Each shape has exactly 4 sides, so every shape is a quadrilateral.",
            diagram=("geometric_shapes", {"shapes": shapes}, f"Shapes: {', '.join(shapes)}"),
        )

    length = rng.randint(4, 9 + grade)
    width = rng.randint(2, length - 1)
    perimeter = 2 * (length + width)
    wrong = distinct_distractors(perimeter, [length * width, length + width, perimeter + 2])
    return _Draft(
        text=(
            f"The figure shows a rectangle with a length of {length} units and a width of "
            f"{width} units. What is the perimeter of the rectangle?"
        ),
        correct=f"{perimeter} units",
        distractors=[f"{w} units" for w in wrong],
        explanation=f"Perimeter = 2 × ({length} + {width}) = {perimeter} units.",
        diagram=(
            "rectangle_area",
            {"length": length, "width": width, "unit": "units"},
            f"A rectangle {length} units by {width} units",
        ),
    )


def _word_problem_visual(grade: int, rng: random.Random) -> _Draft:
    if rng.random() < 0.5:
        item = rng.choice(["marbles", "crayons", "cookies", "pencils"])
        groups = rng.randint(3, 8)
        each = rng.randint(3, 4 + grade * 2)
        total = groups * each
        wrong = distinct_distractors(each, [each + 2, each - 2, groups])
        return _Draft(
            text=(
                f"Ana has {total} {item}. She puts them equally into {groups} bags. "
                f"The picture shows how she shared them. How many {item} are in each bag?"
            ),
            correct=f"{each} {item}",
            distractors=[f"{w} {item}" for w in wrong],
            explanation=f"Divide {total} ÷ {groups} = {each} {item} in each bag.",
            diagram=(
                "equal_groups",
                {"total": total, "groups": groups, "item": item, "container": "Bag"},
                f"{total} {item} shared equally into {groups} bags",
            ),
        )

    start = rng.randint(30, 60)
    given = rng.randint(5, 20)
    bought = rng.randint(10, 30)
    answer = start - given + bought
    wrong = distinct_distractors(
        answer, [start + given + bought, start - given - bought, start + bought]
    )
    return _Draft(
        text=(
            f"Tom has {start} marbles. He gives away {given} marbles and then buys "
            f"{bought} more. How many marbles does Tom have now?"
        ),
        correct=f"{answer} marbles",
        distractors=[f"{w} marbles" for w in wrong],
        explanation=f"{start} − {given} = {start - given}, then {start - given} + {bought} = {answer} marbles.",
        diagram=(
            "bar_graph",
            {
                "categories": ["Start", "Gave away", "Bought", "Now"],
                "values": [start, given, bought, answer],
                "title": "Tom's Marbles",
                "y_label": "Marbles",
            },
            "Bar graph of Tom's marble collection",
        ),
    )


def _fractions_visual(grade: int, rng: random.Random) -> _Draft:
    denominator = rng.choice([2, 3, 4, 5, 6])
    numerator = rng.randint(1, denominator - 1)
    factor = rng.choice([2, 3])
    correct = f"{numerator * factor}/{denominator * factor}"
    distractors = [
        f"{numerator}/{denominator * factor}",
        f"{numerator * factor}/{denominator}",
        f"{numerator + factor}/{denominator + factor}",
    ]
    return _Draft(
        text=(
            f"The fraction model shows {numerator}/{denominator} shaded. "
            "Which fraction is equivalent to the shaded part?"
        ),
        correct=correct,
        distractors=distractors,
        explanation=(
            f"Multiply the numerator and denominator by {factor}: "
            f"{numerator}/{denominator} = {correct}."
        ),
        diagram=(
            "fraction_models",
            {"fractions": [(numerator, denominator)]},
            f"Fraction bar with {numerator} of {denominator} equal parts shaded",
        ),
    )


def _measurement_visual(grade: int, rng: random.Random) -> _Draft:
    unit = "feet" if grade == 3 else rng.choice(["feet", "meters"])
    length = rng.randint(8, 12 + grade * 3)
    width = rng.randint(4, length - 2)
    area = length * width
    wrong = distinct_distractors(area, [length + width, 2 * (length + width), area * 2])
    return _Draft(
        text=(
            f"The diagram shows a rectangular garden with a length of {length} {unit} "
            f"and a width of {width} {unit}. What is the area of the garden?"
        ),
        correct=f"{area} square {unit}",
        distractors=[f"{w} square {unit}" for w in wrong],
        explanation=f"Area = length × width = {length} × {width} = {area} square {unit}.",
        diagram=(
            "rectangle_area",
            {"length": length, "width": width, "unit": unit},
            f"A rectangular garden {length} {unit} by {width} {unit}",
        ),
    )


def _data_analysis_visual(grade: int, rng: random.Random) -> _Draft:
    categories = ["1 book", "2 books", "3 books", "4 books"]
    values = [rng.randint(2, 9) for _ in categories]
    if values[2] <= values[0]:
        values[2] = values[0] + rng.randint(1, 5)
    answer = values[2] - values[0]
    wrong = distinct_distractors(answer, [values[2], values[0], values[2] + values[0]])
    return _Draft(
        text=(
            "The bar graph shows the number of books read by students in Ms. Johnson's class. "
            "How many more students read 3 books than read 1 book?"
        ),
        correct=f"{answer} students",
        distractors=[f"{w} students" for w in wrong],
        explanation=(
            f"From the graph, {values[2]} students read 3 books and {values[0]} students read "
            f"1 book. The difference is {values[2]} − {values[0]} = {answer} students."
        ),
        diagram=(
            "bar_graph",
            {
                "categories": categories,
                "values": values,
                "title": "Books Read",
                "y_label": "Students",
            },
            "Bar graph showing number of books read by students",
        ),
    )


def round_to_place(value: int, place: int) -> int:
    """Round half up to a multiple of place, so 250 goes to 300."""
    return (value + place // 2) // place * place


def _number_operations(grade: int, rng: random.Random) -> _Draft:
    low, high = GRADE_NUMBER_RANGES.get(grade, GRADE_NUMBER_RANGES[4])
    first = rng.randint(low, high)
    second = rng.randint(low // 2, high // 2)

    if rng.random() < 0.5:
        answer = first + second
        wrong = distinct_distractors(answer, [answer - 10, answer + 10, answer - 100])
        return _Draft(
            text=(
                f"Sarah collected {first:,} stamps. Her brother gave her {second:,} more "
                "stamps. How many stamps does Sarah have now?"
            ),
            correct=f"{answer:,} stamps",
            distractors=[f"{w:,} stamps" for w in wrong],
            explanation=f"Add {first:,} + {second:,} = {answer:,} stamps.",
        )

    place = 100 if grade == 3 else 1000
    rounded_first = round_to_place(first, place)
    rounded_second = round_to_place(second, place)
    estimate = rounded_first + rounded_second
    truncated = (first // place) * place + (second // place) * place
    wrong = distinct_distractors(
        estimate, [truncated, estimate + place, first + second], minimum=0
    )
    return _Draft(
        text=(
            f"Which is the best estimate of {first:,} + {second:,} when each number is "
            f"rounded to the nearest {place:,}?"
        ),
        correct=f"{estimate:,}",
        distractors=[f"{w:,}" for w in wrong],
        explanation=(
            f"{first:,} rounds to {rounded_first:,} and {second:,} rounds to "
            f"{rounded_second:,}. {rounded_first:,} + {rounded_second:,} = {estimate:,}."
        ),
    )


def _algebra_patterns(grade: int, rng: random.Random) -> _Draft:
    step = rng.randint(2, 3 + grade * 2)
    start = rng.randint(1, 10)
    terms = [start + step * i for i in range(4)]
    answer = start + step * 4
    wrong = distinct_distractors(answer, [answer + 1, answer - 1, answer + step])
    shown = ", ".join(str(t) for t in terms)
    return _Draft(
        text=f"Look at the pattern: {shown}, ___. What number comes next?",
        correct=answer,
        distractors=wrong,
        explanation=f"The pattern increases by {step} each time: {shown}, {answer}.",
        diagram=(
            "number_line",
            {"start": 0, "end": answer + step, "marked": terms},
            f"Number line marking {shown}",
        ),
        difficulty="easy",
    )


# =============================================================================
# READING TYPES
# =============================================================================

STAGE_STORY = (
    "Maya had never been on a stage before. When her teacher asked her to play the lead "
    "role in the spring play, her hands began to shake. At home she practiced her lines in "
    "front of the mirror every night. Her little brother Leo sat on the bed and clapped "
    "after every scene, even when she forgot a word. On the night of the play, Maya peeked "
    "through the curtain and saw the crowded room. Her heart pounded. Then she spotted Leo "
    "in the front row, grinning and giving her a thumbs up. Maya took a deep breath and "
    "walked into the bright lights. She spoke every line clearly. When the curtain closed, "
    "the audience stood and cheered, and Maya could not stop smiling."
)

BUTTERFLY_ARTICLE = (
    "A butterfly does not start its life with wings. It begins as a tiny egg laid on a "
    "leaf. When the egg hatches, a caterpillar crawls out. The caterpillar spends most of "
    "its time eating, and it grows very quickly. After a few weeks, the caterpillar "
    "attaches itself to a branch and forms a hard shell called a chrysalis. Inside the "
    "chrysalis, the caterpillar's body changes in amazing ways. This change is called "
    "metamorphosis. After about two weeks, the shell cracks open. A butterfly slowly climbs "
    "out and rests while its wings dry. Soon it is ready to fly away and find flowers to "
    "drink nectar from. Someday it will lay eggs of its own, and the life cycle will begin "
    "again."
)

BIRDS_ARTICLE = (
    "Every spring, birds return to our town looking for places to build their nests. "
    "Sadly, many of the old trees they once used have been cut down. You can help! "
    "Building a simple birdhouse takes only an afternoon, a few boards, and some nails. "
    "Hang it in a quiet spot away from busy streets, and keep it clean each winter. You "
    "can also put out a shallow dish of fresh water, because birds need water to drink "
    "and bathe. Planting native flowers gives them seeds and insects to eat. When we all "
    "do a small part, our neighborhoods become safe homes for birds. Imagine waking up to "
    "the sound of singing outside your window. Start today and make your yard a place "
    "birds will love."
)

VOCABULARY_ITEMS = [
    ("The enormous elephant trumpeted loudly.", "enormous", "huge", ["tiny", "quiet", "friendly"]),
    ("Leo was thrilled when he won the spelling bee.", "thrilled", "very happy", ["bored", "tired", "confused"]),
    (
        "The path through the forest was narrow, so we walked in a single line.",
        "narrow", "not wide", ["very long", "muddy", "crowded"],
    ),
    (
        "After the long hike, the scouts were exhausted and went straight to bed.",
        "exhausted", "very tired", ["excited", "hungry", "lost"],
    ),
    (
        "The puppy was timid and hid behind the couch when guests arrived.",
        "timid", "shy", ["brave", "playful", "sleepy"],
    ),
]


def _comprehension_passage(grade: int, rng: random.Random) -> _Draft:
    return _Draft(
        text="Based on the story, why does Maya practice her lines in front of the mirror every night?",
        correct="She is nervous about playing the lead role",
        distractors=[
            "She wants to become a teacher",
            "Her brother asked her to practice",
            "She does not know where the stage is",
        ],
        explanation="The story says her hands shook when she got the lead role, so she practiced to feel ready.",
        passage=STAGE_STORY,
    )


def _vocabulary_context(grade: int, rng: random.Random) -> _Draft:
    sentence, word, meaning, wrong = rng.choice(VOCABULARY_ITEMS)
    return _Draft(
        text=f'Read this sentence from the story: "{sentence}" What does the word {word} mean?',
        correct=meaning,
        distractors=wrong,
        explanation=f"The clues in the sentence show that {word} means {meaning}.",
        difficulty="easy",
    )


def _literary_analysis(grade: int, rng: random.Random) -> _Draft:
    return _Draft(
        text="Based on the story, how does Maya change from the beginning to the end?",
        correct="She goes from nervous to confident",
        distractors=[
            "She goes from happy to angry",
            "She stays afraid the whole time",
            "She goes from confident to nervous",
        ],
        explanation="At first her hands shake, but by the end she speaks clearly and smiles.",
        passage=STAGE_STORY,
    )


def _informational_text(grade: int, rng: random.Random) -> _Draft:
    if rng.random() < 0.5:
        return _Draft(
            text="According to the passage, what happens during metamorphosis?",
            correct="A caterpillar's body changes into a butterfly",
            distractors=[
                "A butterfly lays eggs on a leaf",
                "A caterpillar eats many leaves",
                "A butterfly drinks nectar from flowers",
            ],
            explanation="The passage says the change inside the chrysalis is called metamorphosis.",
            passage=BUTTERFLY_ARTICLE,
        )
    return _Draft(
        text="According to the passage, what is a chrysalis?",
        correct="A hard shell the caterpillar forms",
        distractors=["A kind of flower", "A tiny egg on a leaf", "A butterfly's wing"],
        explanation="The passage says the caterpillar forms a hard shell called a chrysalis.",
        passage=BUTTERFLY_ARTICLE,
    )


def _author_purpose(grade: int, rng: random.Random) -> _Draft:
    return _Draft(
        text="Based on the passage, what is the author's main purpose for writing it?",
        correct="To persuade readers to help birds",
        distractors=[
            "To tell a funny story about a bird",
            "To explain how trees are cut down",
            "To describe the history of the town",
        ],
        explanation="The author uses phrases like \"You can help!\" and \"Start today\" to persuade readers.",
        passage=BIRDS_ARTICLE,
    )


QUESTION_TYPE_BUILDERS: dict[str, Callable[[int, random.Random], _Draft]] = {
    "visual-geometry": _visual_geometry,
    "word-problem-visual": _word_problem_visual,
    "fractions-visual": _fractions_visual,
    "measurement-visual": _measurement_visual,
    "data-analysis-visual": _data_analysis_visual,
    "number-operations": _number_operations,
    "algebra-patterns": _algebra_patterns,
    "comprehension-passage": _comprehension_passage,
    "vocabulary-context": _vocabulary_context,
    "literary-analysis": _literary_analysis,
    "informational-text": _informational_text,
    "author-purpose": _author_purpose,
}


# =============================================================================
# PUBLIC API
# =============================================================================


def question_types_for(subject: str) -> list[str]:
    return list(MATH_QUESTION_TYPES if subject == "math" else READING_QUESTION_TYPES)


def generate_question_by_type(
    grade: int,
    subject: str,
    question_type: str,
    rng: random.Random | None = None,
) -> Question:
    """Build one question of a specific type.

    Raises:
        TemplateError: If the type is unknown for the subject or the
            drawn values do not give four distinct choices
    """
    rng = rng or random.Random()
    if question_type not in question_types_for(subject):
        raise TemplateError(f"Unknown {subject} question type: {question_type}")

    draft = QUESTION_TYPE_BUILDERS[question_type](grade, rng)
    category = QUESTION_TYPE_CATEGORIES[question_type]
    teks = get_random_teks_standard(grade, subject, category, rng)

    try:
        choices, letter = build_choices(draft.correct, draft.distractors, rng)
    except ValueError as e:
        raise TemplateError(f"{question_type}: {e}") from e

    question = Question(
        grade=grade,
        subject=subject,  # type: ignore[arg-type]
        teks_standard=teks,
        question_text=draft.text,
        answer_choices=choices,
        correct_answer=letter,
        explanation=draft.explanation,
        difficulty=draft.difficulty,
        category=category,
        passage=draft.passage,
        method="diverse",
    )

    if subject == "math" and draft.diagram:
        diagram, data, description = draft.diagram
        question.svg_content = svg_diagrams.render_diagram(diagram, data)
        question.image_description = description
        question.has_image = True

    return question


def generate_diverse_questions(
    grade: int,
    subject: str,
    count: int = 10,
    rng: random.Random | None = None,
) -> list[Question]:
    """Generate a varied batch, skipping any item that fails.

    Args:
        grade: Grade level (3-5)
        subject: "math" or "reading"
        count: Number of questions to attempt
        rng: Random source

    Returns:
        Generated questions (fewer than count if some failed)
    """
    rng = rng or random.Random()
    types = question_types_for(subject)
    questions: list[Question] = []

    for index in range(count):
        question_type = rng.choice(types)
        try:
            questions.append(generate_question_by_type(grade, subject, question_type, rng))
        except (TemplateError, ValueError) as e:
            logger.warning(
                "diverse_question_failed",
                index=index,
                question_type=question_type,
                error=str(e),
            )

    logger.info("diverse_questions_generated", grade=grade, subject=subject, count=len(questions))
    return questions
