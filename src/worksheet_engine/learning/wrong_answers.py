from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from worksheet_engine.data_models import DIFFICULTY_LADDER, LearningResult

from .models import Attempt, DifficultyWrongRate, Trend, WrongAnswerAnalysis

RECENT_WINDOW = 3
MIN_RECENT_FOR_TREND = 2
DEFAULT_SELECTION_SIZE = 5


def collect_wrong_attempts(
    results: Iterable[LearningResult],
    student_id: Optional[str] = None,
) -> Dict[str, List[Attempt]]:
    """
    Group every attempt at each question the student has missed at least once.

    Correct attempts at a missed question are kept too, since the trend compares
    correct counts over time. Keys follow the order in which each question was
    first missed; attempts are sorted newest first.
    """
    attempts: Dict[str, List[Attempt]] = {}
    missed: Dict[str, None] = {}
    for result in results:
        if student_id is not None and result.student_id != student_id:
            continue
        for answer in result.answers:
            attempts.setdefault(answer.question_id, []).append(
                Attempt(
                    result_id=result.id,
                    submitted_at=result.submitted_at,
                    is_correct=answer.is_correct,
                )
            )
            if not answer.is_correct:
                missed.setdefault(answer.question_id, None)

    return {
        question_id: sorted(attempts[question_id], key=lambda a: a.submitted_at, reverse=True)
        for question_id in missed
    }


def classify_trend(attempts: Sequence[Attempt]) -> Trend:
    """
    Compare correct answers in the latest three attempts with the three before them.

    `attempts` must be newest first. With fewer than two recent attempts there
    is not enough history and the trend is stable.
    """
    recent = attempts[:RECENT_WINDOW]
    if len(recent) < MIN_RECENT_FOR_TREND:
        return Trend.STABLE
    older = attempts[RECENT_WINDOW : RECENT_WINDOW * 2]
    recent_correct = sum(1 for attempt in recent if attempt.is_correct)
    older_correct = sum(1 for attempt in older if attempt.is_correct)
    if recent_correct > older_correct:
        return Trend.IMPROVING
    if recent_correct < older_correct:
        return Trend.DECLINING
    return Trend.STABLE


def rank_by_wrong_count(analyses: List[WrongAnswerAnalysis]) -> List[WrongAnswerAnalysis]:
    """Most frequently missed first; ties keep their original order."""
    return sorted(analyses, key=lambda analysis: analysis.wrong_count, reverse=True)


def default_selection(
    analyses: Sequence[WrongAnswerAnalysis], limit: int = DEFAULT_SELECTION_SIZE
) -> List[str]:
    """Question ids pre-selected for a retest: the top `limit` most missed."""
    return [analysis.question_id for analysis in analyses[: max(0, limit)]]


def is_perfect_score(analyses: Sequence[WrongAnswerAnalysis]) -> bool:
    return not analyses


def trend_counts(analyses: Iterable[WrongAnswerAnalysis]) -> Dict[Trend, int]:
    counts = {trend: 0 for trend in Trend}
    for analysis in analyses:
        counts[analysis.trend] += 1
    return counts


def difficulty_breakdown(result: LearningResult) -> List[DifficultyWrongRate]:
    """Wrong counts per difficulty for one submission, skipping levels with no misses."""
    rows: List[DifficultyWrongRate] = []
    for level in DIFFICULTY_LADDER:
        stat = result.difficulty_performance.get(level)
        if stat is None or stat.wrong == 0:
            continue
        rows.append(DifficultyWrongRate(difficulty=level, wrong=stat.wrong, total=stat.total))
    return rows
