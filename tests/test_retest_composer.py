"""Tests for composing retest worksheets from wrong answers."""

from __future__ import annotations

import random
from datetime import datetime

import pytest

from worksheet_engine.config.schema import RetestConfig
from worksheet_engine.data_models import Difficulty
from worksheet_engine.learning import RetestComposer, RetestMode, worksheet_to_markdown

SELECTED = ["f-high-1", "f-med-1"]


@pytest.fixture
def composer(retest_catalog):
    return RetestComposer(retest_catalog, rng=random.Random(42))


@pytest.fixture
def analyses(composer, history):
    return composer.analyze_wrong_answers(history, student_id="student-1")


def ids(worksheet):
    return [question.id for question in worksheet.questions]


def test_wrong_only_is_exactly_the_selection(composer, analyses):
    """Test that wrong_only returns the selected questions in analysis order and nothing else."""
    worksheet = composer.compose(analyses, ["f-med-1", "f-high-1"], RetestMode.WRONG_ONLY)

    assert ids(worksheet) == SELECTED
    assert worksheet.source_question_ids == SELECTED
    assert worksheet.added_questions == []
    assert worksheet.estimated_time == 4
    assert worksheet.difficulty_distribution == {
        Difficulty.LOW: 0,
        Difficulty.MEDIUM: 1,
        Difficulty.HIGH: 1,
        Difficulty.HIGHEST: 0,
    }
    assert worksheet.tags == ["retest", "wrong-answer-note", "review"]
    assert worksheet.title == "Retest worksheet"


def test_wrong_only_is_idempotent(composer, analyses):
    first = composer.compose(analyses, SELECTED, "wrong_only")
    second = composer.compose(analyses, SELECTED, "wrong_only")
    assert ids(first) == ids(second)


def test_with_similar_adds_at_most_one_per_selected(composer, analyses):
    """Test that with_similar at most doubles the worksheet and adds no duplicates."""
    worksheet = composer.compose(analyses, SELECTED, RetestMode.WITH_SIMILAR)

    assert ids(worksheet)[:2] == SELECTED
    assert len(SELECTED) <= worksheet.total_questions <= 2 * len(SELECTED)
    assert len(set(ids(worksheet))) == worksheet.total_questions
    for added in worksheet.added_questions:
        assert added.subject.value == "math"
        assert added.curriculum.chapter_id == "ch-frac"
    assert worksheet.estimated_time == 8


def test_with_similar_is_reproducible_with_seed(retest_catalog, history):
    """Test that two composers seeded alike pick the same similar questions."""

    def compose_with(seed):
        composer = RetestComposer(retest_catalog, rng=random.Random(seed))
        analyses = composer.analyze_wrong_answers(history, "student-1")
        return ids(composer.compose(analyses, SELECTED, RetestMode.WITH_SIMILAR))

    assert compose_with(7) == compose_with(7)


def test_shuffle_seed_from_config(retest_catalog, history):
    config = RetestConfig(shuffle_seed=3)
    first = RetestComposer(retest_catalog, config).analyze_wrong_answers(history, "student-1")
    second = RetestComposer(retest_catalog, config).analyze_wrong_answers(history, "student-1")

    assert [[q.id for q in a.similar_questions] for a in first] == [
        [q.id for q in a.similar_questions] for a in second
    ]


def test_adaptive_adds_nearest_easier_question(composer, analyses):
    """Test that adaptive fillers are strictly easier, same chapter and nearest rung first."""
    worksheet = composer.compose(analyses, SELECTED, RetestMode.ADAPTIVE)

    # f-med-1 is already on the sheet, so the high question steps down to f-med-2
    assert ids(worksheet) == ["f-high-1", "f-med-1", "f-med-2", "f-low-1"]
    assert worksheet.estimated_time == 6
    assert worksheet.difficulty_distribution[Difficulty.MEDIUM] == 2


def test_adaptive_fillers_are_strictly_lower(composer, analyses):
    worksheet = composer.compose(analyses, None, RetestMode.ADAPTIVE)

    selected = worksheet.questions[: len(worksheet.source_question_ids)]
    for source, filler in zip(selected, worksheet.added_questions):
        assert filler.difficulty.is_below(source.difficulty)
        assert filler.curriculum.chapter_id == source.curriculum.chapter_id


def test_adaptive_skips_lowest_difficulty(composer, make_result):
    results = [make_result("r1", datetime(2024, 3, 1), [("f-low-1", False)])]
    analyses = composer.analyze_wrong_answers(results)

    worksheet = composer.compose(analyses, None, RetestMode.ADAPTIVE)

    assert ids(worksheet) == ["f-low-1"]


def test_default_selection_is_used_when_none_given(composer, analyses):
    worksheet = composer.compose(analyses)
    assert worksheet.source_question_ids == ["f-high-1", "f-med-1", "l-high-1"]
    assert worksheet.mode is RetestMode.WRONG_ONLY


def test_nothing_selected_returns_none(composer, analyses):
    assert composer.compose(analyses, []) is None
    assert composer.compose(analyses, ["not-a-wrong-answer"]) is None


def test_perfect_score_returns_none(composer):
    assert composer.compose([]) is None


def test_unknown_mode_raises(composer, analyses):
    with pytest.raises(ValueError):
        composer.compose(analyses, SELECTED, "mixed")


def test_custom_time_constants(retest_catalog, analyses):
    config = RetestConfig(
        minutes_per_question=3,
        mode_time_factors={"wrong_only": 1.0, "with_similar": 1.5, "adaptive": 1.5},
    )
    composer = RetestComposer(retest_catalog, config)

    assert composer.compose(analyses, SELECTED, RetestMode.WITH_SIMILAR).estimated_time == 9
    assert composer.compose(analyses, ["f-high-1"], RetestMode.ADAPTIVE).estimated_time == 5


def test_partial_time_factors_fall_back_to_defaults(retest_catalog):
    """Test that overriding one mode's factor leaves the other modes at their defaults."""
    config = RetestConfig(mode_time_factors={"adaptive": 2.0})
    composer = RetestComposer(retest_catalog, config)

    assert set(config.mode_time_factors) == {"wrong_only", "with_similar", "adaptive"}
    assert composer.estimate_minutes(2, RetestMode.WITH_SIMILAR) == 8
    assert composer.estimate_minutes(2, RetestMode.ADAPTIVE) == 8
    assert composer.estimate_minutes(2, RetestMode.WRONG_ONLY) == 4


def test_markdown_export(composer, analyses):
    worksheet = composer.compose(analyses, SELECTED, RetestMode.ADAPTIVE, title="3월 오답 재시험")

    markdown = worksheet_to_markdown(worksheet, include_answers=True)

    assert markdown.startswith("# 3월 오답 재시험 - 4 Questions")
    assert "## Question 3 (practice)" in markdown
    assert "## Question 1 (practice)" not in markdown
    assert "A. A" in markdown
    assert "**Answer: A**" in markdown
    assert "**Answer:" not in worksheet_to_markdown(worksheet)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
