from __future__ import annotations

import random
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from worksheet_engine.learning import (
    RetestMode,
    difficulty_breakdown,
    format_analysis_summary,
    worksheet_to_markdown,
)
from worksheet_engine.system import WorksheetEngine
from worksheet_engine.utils.files import collect_documents, read_document_text

app = typer.Typer(help="Similar questions, auto-tagging and retest worksheets from the command line.")
console = Console()

load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)


def _load_engine(config: Optional[Path], seed: Optional[int] = None) -> WorksheetEngine:
    """Instantiate `WorksheetEngine`, turning config problems into CLI errors."""
    rng = random.Random(seed) if seed is not None else None
    try:
        return WorksheetEngine.from_config(config, rng=rng)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


@app.command()
def similar(
    question_id: str = typer.Argument(..., help="Base question id."),
    top_n: Optional[int] = typer.Option(None, "--top-n", "-n", min=1, help="Number of matches."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """
    List the questions most similar to QUESTION_ID.

    Scores every same-subject question with `SimilarityRanker` and prints the
    survivors above the similarity threshold with their per-axis points.
    """
    engine = _load_engine(config)
    if question_id not in engine.catalog:
        console.print(f"[red]Unknown question id: {question_id}[/red]")
        raise typer.Exit(code=1)

    matches = engine.similar_questions(question_id, top_n)
    if not matches:
        console.print("No similar questions found.")
        return

    table = Table(title=f"Similar to {question_id}")
    for column in ("#", "id", "score", "curriculum", "difficulty", "type", "tags", "rate", "content"):
        table.add_column(column)
    for idx, match in enumerate(matches, start=1):
        parts = match.breakdown
        table.add_row(
            str(idx),
            match.question.id,
            f"{match.score}%",
            str(parts.curriculum),
            str(parts.difficulty),
            str(parts.type),
            str(parts.tags),
            str(parts.correct_rate),
            match.question.content[:40],
        )
    console.print(table)


def _review_document(engine: WorksheetEngine, text: str, name: str, accept_all: bool) -> None:
    review = engine.review_metadata(text, name)
    if not review.pending:
        console.print(f"No metadata suggestions for {name}.")
        return

    table = Table(title=f"Suggestions for {name}")
    for column in ("field", "value", "confidence", "reason"):
        table.add_column(column)
    for suggestion in review.pending:
        table.add_row(suggestion.field.value, suggestion.value, str(suggestion.confidence), suggestion.reason)
    console.print(table)

    if accept_all:
        accepted = review.accept_all()
        console.print(f"Accepted {len(accepted)} suggestion(s); {len(review.pending)} left for review.")
        console.print_json(review.metadata.model_dump_json())


@app.command()
def autotag(
    document: Path = typer.Argument(..., exists=True, readable=True, help="Text file or directory of text files."),
    filename: Optional[str] = typer.Option(None, help="Original upload filename (defaults to the file's name)."),
    accept_all: bool = typer.Option(False, "--accept-all", help="Apply suggestions at or above the bulk threshold."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Suggest exam metadata for extracted document text files."""
    engine = _load_engine(config)
    if document.is_dir():
        paths = collect_documents(document)
        if not paths:
            console.print(f"[yellow]No supported documents under {document}[/yellow]")
            return
        for path in paths:
            _review_document(engine, read_document_text(path), path.name, accept_all)
        return

    try:
        text = read_document_text(document)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="DOCUMENT") from exc
    _review_document(engine, text, filename or document.name, accept_all)


def _load_history(engine: WorksheetEngine, student_id: str, worksheet_id: Optional[str]):
    results = engine.learning_results(student_id, worksheet_id)
    if worksheet_id and not results:
        console.print(f"[red]No submissions by {student_id} for worksheet {worksheet_id}[/red]")
        raise typer.Exit(code=1)
    return results


@app.command()
def analyze(
    student_id: str = typer.Argument(...),
    worksheet_id: Optional[str] = typer.Option(
        None, "--worksheet", "-w", help="Only use submissions of this worksheet."
    ),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Show a student's missed questions, trends and per-difficulty wrong rates."""
    engine = _load_engine(config)
    results = _load_history(engine, student_id, worksheet_id)
    analyses = engine.analyze_wrong_answers(student_id, results)
    console.print(format_analysis_summary(analyses))
    if not analyses:
        return

    preselected = set(engine.composer.default_selection(analyses))
    table = Table(title=f"Wrong answers for {student_id}")
    for column in ("selected", "id", "difficulty", "wrong", "trend", "similar", "last wrong"):
        table.add_column(column)
    for analysis in analyses:
        last_wrong = analysis.last_wrong_at
        table.add_row(
            "x" if analysis.question_id in preselected else "",
            analysis.question_id,
            analysis.question.difficulty.value,
            str(analysis.wrong_count),
            analysis.trend.value,
            str(len(analysis.similar_questions)),
            last_wrong.date().isoformat() if last_wrong else "-",
        )
    console.print(table)

    for result in results:
        rows = difficulty_breakdown(result)
        if rows:
            summary = ", ".join(
                f"{row.difficulty.value} {row.wrong}/{row.total} ({row.wrong_rate}%)" for row in rows
            )
            console.print(f"{result.id}: {summary}")


@app.command()
def retest(
    student_id: str = typer.Argument(...),
    mode: RetestMode = typer.Option(RetestMode.WRONG_ONLY, case_sensitive=False, help="Composition mode."),
    select: Optional[List[str]] = typer.Option(
        None, "--select", "-s", help="Question ids to include (defaults to the top missed questions)."
    ),
    worksheet_id: Optional[str] = typer.Option(
        None, "--worksheet", "-w", help="Retest one submitted worksheet instead of the whole history."
    ),
    title: Optional[str] = typer.Option(None, help="Worksheet title."),
    seed: Optional[int] = typer.Option(None, help="Seed for similar-question shuffling."),
    markdown: Optional[Path] = typer.Option(None, help="Write the worksheet as markdown to this path."),
    answers: bool = typer.Option(False, "--answers", help="Include answers in the markdown."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Compose a retest worksheet from a student's wrong answers."""
    engine = _load_engine(config, seed)
    analyses = engine.analyze_wrong_answers(student_id, _load_history(engine, student_id, worksheet_id))
    if not analyses:
        console.print("[green]Perfect score: no wrong answers, no retest needed.[/green]")
        return

    worksheet = engine.compose_retest(analyses, select or None, mode, title)
    if worksheet is None:
        console.print("[yellow]None of the selected questions were answered incorrectly.[/yellow]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{worksheet.title}[/bold] ({worksheet.description})")
    console.print(f"{worksheet.total_questions} questions, about {worksheet.estimated_time} min")
    mix = ", ".join(
        f"{level.value} {count}" for level, count in worksheet.difficulty_distribution.items() if count
    )
    console.print(f"Difficulty mix: {mix}")
    for idx, question in enumerate(worksheet.questions, start=1):
        marker = "" if question.id in worksheet.source_question_ids else " [dim](added)[/dim]"
        console.print(f"{idx}. {question.id}{marker}")

    if markdown:
        markdown.parent.mkdir(parents=True, exist_ok=True)
        markdown.write_text(worksheet_to_markdown(worksheet, include_answers=answers), encoding="utf-8")
        console.print(f"Saved markdown to {markdown}")


if __name__ == "__main__":
    app()
