"""CLI commands for the StaarKids generation service.

Commands:
- generate: Generate STAAR-style questions
- detect: Classify question text for a visual
- svg: Render a catalog diagram
- validate: Score questions from a JSON file
- models: Show simulated model stats
- exam: Build one mock exam
- init-exams: Build and store the practice test library
- serve: Run the Web API
"""

import json
import random
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from staarkids.core.exam_generator import ExamGenerationError, build_mock_exam
from staarkids.core.generation_service import (
    GenerationRequest,
    InvalidGenerationRequest,
    generate_questions,
)
from staarkids.core.model_manager import get_model_manager
from staarkids.core.quality_control import (
    get_review_system,
    review_generated_questions,
    validate_question_quality,
)
from staarkids.core.question import Question
from staarkids.core.svg_diagrams import DiagramError, list_diagram_types, render_diagram
from staarkids.core.visual_detector import should_question_have_visual
from staarkids.db.database import init_db
from staarkids.db.exams_repository import insert_exam, initialize_mock_exams

app = typer.Typer(
    name="staar",
    help="STAAR-style question and SVG diagram generation for grades 3-5.",
    no_args_is_help=True,
)

console = Console()


def _rng(seed: int | None) -> random.Random:
    return random.Random(seed) if seed is not None else random.Random()


def _print_question(number: int, question: Question) -> None:
    console.print(f"\n[bold]{number}.[/bold] {question.question_text}")
    for choice in question.answer_choices:
        marker = "[green]✓[/green]" if choice.id == question.correct_answer else " "
        console.print(f"   {marker} {choice.id}) {choice.text}")
    details = f"TEKS {question.teks_standard}"
    if question.category:
        details += f" · {question.category}"
    if question.has_image:
        details += " · diagram"
    console.print(f"   [dim]{details}[/dim]")


@app.command()
def generate(
    grade: int = typer.Option(..., "--grade", "-g", help="Grade level: 3, 4 or 5"),
    subject: str = typer.Option("math", "--subject", "-s", help="Subject: math or reading"),
    count: int = typer.Option(1, "--count", "-n", help="Number of questions"),
    category: str | None = typer.Option(None, "--category", "-c", help="Reporting category"),
    teks: str | None = typer.Option(None, "--teks", help="TEKS standard, e.g. 4.5D"),
    no_visual: bool = typer.Option(False, "--no-visual", help="Strip diagrams"),
    world_class: bool = typer.Option(False, "--world-class", help="Use the simulated model ensemble"),
    authentic: bool = typer.Option(False, "--authentic", help="Use authentic-pattern items"),
    save: bool = typer.Option(False, "--save", help="Store questions in the database"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed"),
) -> None:
    """Generate STAAR-style questions."""
    if save:
        init_db()

    try:
        result = generate_questions(
            GenerationRequest(
                grade=grade,
                subject=subject,
                count=count,
                category=category,
                teks_standard=teks,
                include_visual=not no_visual,
                use_world_class=world_class,
                use_authentic=authentic,
            ),
            rng=_rng(seed),
            persist=save,
        )
    except InvalidGenerationRequest as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    console.print(
        f"[green]✓ {len(result.questions)} question(s)[/green] "
        f"[dim]method:[/dim] {result.method} "
        f"[dim]confidence:[/dim] {result.average_confidence}%"
    )
    for number, question in enumerate(result.questions, start=1):
        _print_question(number, question)


@app.command()
def detect(
    text: str = typer.Argument(..., help="Question text"),
    grade: int = typer.Option(3, "--grade", "-g", help="Grade level"),
    subject: str = typer.Option("math", "--subject", "-s", help="Subject"),
) -> None:
    """Classify question text for a diagram."""
    analysis = should_question_have_visual(text, subject, grade)

    if not analysis.needs_visual:
        console.print("[yellow]No visual needed[/yellow]")
        return

    console.print(f"[green]✓ {analysis.visual_type}[/green]")
    console.print(f"  [dim]description:[/dim] {analysis.description}")


@app.command()
def svg(
    diagram_type: str | None = typer.Argument(None, help="Diagram type, e.g. rectangle_area"),
    data: str = typer.Option("{}", "--data", "-d", help="Diagram data as JSON"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write SVG to this file"),
    width: int | None = typer.Option(None, "--width", help="Width in pixels"),
    height: int | None = typer.Option(None, "--height", help="Height in pixels"),
    list_types: bool = typer.Option(False, "--list", help="List diagram types and exit"),
) -> None:
    """Render a catalog diagram."""
    if list_types:
        for name in list_diagram_types():
            console.print(f"  - {name}")
        return

    if diagram_type is None:
        console.print("[red]✗ Missing diagram type (see --list)[/red]")
        raise typer.Exit(code=1)

    try:
        svg_markup = render_diagram(diagram_type, json.loads(data), width, height)
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ Invalid JSON data: {e}[/red]")
        raise typer.Exit(code=1)
    except DiagramError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(svg_markup)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(svg_markup, encoding="utf-8")
    console.print(f"[green]✓ Wrote {output}[/green]")


@app.command()
def validate(
    file: Path = typer.Argument(..., help="JSON file with a question or a list of questions"),
    enqueue: bool = typer.Option(False, "--enqueue", help="Queue failing questions for review"),
) -> None:
    """Score questions with the quality checks."""
    try:
        raw = json.loads(file.read_text(encoding="utf-8"))
        items = raw if isinstance(raw, list) else [raw]
        questions = [Question.from_dict(item) for item in items]
    except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
        console.print(f"[red]✗ Cannot read questions from {file}: {e}[/red]")
        raise typer.Exit(code=1)

    if enqueue:
        results = review_generated_questions(questions)
    else:
        results = [validate_question_quality(q) for q in questions]

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Valid")
    table.add_column("Score", justify="right")
    table.add_column("Issues")

    for number, result in enumerate(results, start=1):
        table.add_row(
            str(number),
            "[green]yes[/green]" if result.is_valid else "[red]no[/red]",
            f"{result.score:.2f}",
            "; ".join(result.issues) or "-",
        )
    console.print(table)

    if enqueue:
        console.print(f"[dim]review queue:[/dim] {len(get_review_system())}")

    if not all(r.is_valid for r in results):
        raise typer.Exit(code=1)


@app.command()
def models(
    optimize: bool = typer.Option(False, "--optimize", help="Run one optimization pass first"),
) -> None:
    """Show simulated model stats."""
    manager = get_model_manager()
    if optimize:
        optimized = manager.optimize_models()
        console.print(f"[green]✓ Optimized {len(optimized)} model(s)[/green]")

    stats = manager.get_system_stats()
    console.print(
        f"\n[bold]Models:[/bold] {stats['total_models']}  "
        f"[bold]Average accuracy:[/bold] {stats['average_accuracy']}%  "
        f"[bold]Health:[/bold] {stats['system_health']}\n"
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Model")
    table.add_column("Type")
    table.add_column("Accuracy", justify="right")
    table.add_column("Confidence", justify="right")
    for model_id, perf in stats["model_performance"].items():
        table.add_row(model_id, perf["type"], f"{perf['accuracy']}%", f"{perf['confidence']}%")
    console.print(table)


@app.command()
def exam(
    grade: int = typer.Option(..., "--grade", "-g", help="Grade level: 3, 4 or 5"),
    subject: str = typer.Option("math", "--subject", "-s", help="Subject: math or reading"),
    number: int = typer.Option(1, "--number", "-n", help="Practice test number"),
    save: bool = typer.Option(False, "--save", help="Store the exam in the database"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed"),
) -> None:
    """Build one full-length mock exam."""
    try:
        mock = build_mock_exam(grade, subject, number, _rng(seed))
    except ExamGenerationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ {mock.name}[/green]")
    console.print(f"  [dim]questions:[/dim]  {len(mock.questions)}")
    console.print(f"  [dim]time limit:[/dim] {mock.time_limit} min")

    by_category: dict[str, int] = {}
    for question in mock.questions:
        key = question.category or "Uncategorized"
        by_category[key] = by_category.get(key, 0) + 1
    for category, total in by_category.items():
        console.print(f"    {category}: {total}")

    if save:
        init_db()
        exam_id = insert_exam(mock)
        console.print(f"  [dim]exam_id:[/dim]    {exam_id}")


@app.command(name="init-exams")
def init_exams(
    per_subject: int = typer.Option(6, "--per-subject", help="Practice tests per grade and subject"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed"),
) -> None:
    """Build and store any missing practice tests."""
    init_db()
    created = initialize_mock_exams(per_subject, rng=_rng(seed))

    if not created:
        console.print("[yellow]All practice tests already exist[/yellow]")
        return

    console.print(f"[green]✓ Created {len(created)} practice test(s)[/green]")
    for mock in created:
        console.print(f"  - {mock.name}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    uvicorn.run("staarkids.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
