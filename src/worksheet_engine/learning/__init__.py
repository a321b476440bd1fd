from .models import (
    Attempt,
    DifficultyWrongRate,
    RetestMode,
    RetestWorksheet,
    Trend,
    WrongAnswerAnalysis,
)
from .retest import RetestComposer, difficulty_distribution
from .retest_utils import format_analysis_summary, worksheet_to_markdown
from .wrong_answers import (
    classify_trend,
    collect_wrong_attempts,
    default_selection,
    difficulty_breakdown,
    is_perfect_score,
    trend_counts,
)

__all__ = [
    "Attempt",
    "DifficultyWrongRate",
    "RetestComposer",
    "RetestMode",
    "RetestWorksheet",
    "Trend",
    "WrongAnswerAnalysis",
    "classify_trend",
    "collect_wrong_attempts",
    "default_selection",
    "difficulty_breakdown",
    "difficulty_distribution",
    "format_analysis_summary",
    "is_perfect_score",
    "trend_counts",
    "worksheet_to_markdown",
]
