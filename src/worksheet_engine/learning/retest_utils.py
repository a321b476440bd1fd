from __future__ import annotations

from typing import Sequence

from worksheet_engine.data_models import MultipleChoiceQuestion

from .models import RetestWorksheet, Trend, WrongAnswerAnalysis
from .wrong_answers import trend_counts

DIFFICULTY_LABELS = {"low": "Low", "medium": "Medium", "high": "High", "highest": "Highest"}


def worksheet_to_markdown(worksheet: RetestWorksheet, include_answers: bool = False) -> str:
    """Convert a retest worksheet to markdown for preview/download."""
    count = worksheet.total_questions
    title = f"{worksheet.title} - {count} Question{'s' if count != 1 else ''}"
    lines: list[str] = [f"# {title}", "", f"_{worksheet.description}_", ""]

    mix = ", ".join(
        f"{DIFFICULTY_LABELS[level.value]} {n}"
        for level, n in worksheet.difficulty_distribution.items()
        if n
    )
    lines.append(f"Estimated time: {worksheet.estimated_time} min | Difficulty mix: {mix}")
    lines.append("")

    sources = set(worksheet.source_question_ids)
    for idx, question in enumerate(worksheet.questions):
        marker = "" if question.id in sources else " (practice)"
        lines.append(f"## Question {idx + 1}{marker}")
        lines.append(question.content)
        lines.append("")
        if isinstance(question, MultipleChoiceQuestion):
            for choice_idx, choice in enumerate(question.choices):
                lines.append(f"{chr(65 + choice_idx)}. {choice}")
            lines.append("")
        if include_answers:
            lines.append(f"**Answer: {question.correct_answer}**")
            lines.append("")
            if question.explanation:
                lines.append(f"**Explanation:** {question.explanation}")
                lines.append("")
        lines.append("---")
        lines.append("")

    return "\n".join(lines)


def format_analysis_summary(analyses: Sequence[WrongAnswerAnalysis]) -> str:
    """One-paragraph summary of a wrong-answer analysis for logs and the CLI."""
    if not analyses:
        return "No wrong answers: perfect score, no retest needed."
    counts = trend_counts(analyses)
    total_misses = sum(analysis.wrong_count for analysis in analyses)
    return (
        f"{len(analyses)} missed question(s), {total_misses} wrong attempt(s). "
        f"Trends: {counts[Trend.IMPROVING]} improving, "
        f"{counts[Trend.DECLINING]} declining, {counts[Trend.STABLE]} stable."
    )
