"""Shared fixtures: a small two-chapter math bank and a student's submission history."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence, Tuple

import pytest

from worksheet_engine.catalog import QuestionCatalog
from worksheet_engine.data_models import LearningResult, Question, parse_question


def build_question(
    question_id: str,
    *,
    subject: str = "math",
    type: str = "multiple_choice",
    difficulty: str = "medium",
    chapter: str = "ch1",
    section: str = "s1",
    lesson: str = "l1",
    tags: Sequence[str] = (),
    correct_rate: int = 60,
    source: str = "internal",
) -> Question:
    data = {
        "id": question_id,
        "subject": subject,
        "content": f"Question {question_id}",
        "type": type,
        "difficulty": difficulty,
        "source": source,
        "curriculum": {"chapter_id": chapter, "section_id": section, "lesson_id": lesson},
        "correct_answer": "A",
        "correct_rate": correct_rate,
        "tags": list(tags),
    }
    if type == "multiple_choice":
        data["choices"] = ["A", "B", "C", "D"]
    return parse_question(data)


def build_result(
    result_id: str,
    submitted_at: datetime,
    answers: Iterable[Tuple[str, bool]],
    student_id: str = "student-1",
    worksheet_id: str = "",
) -> LearningResult:
    return LearningResult(
        id=result_id,
        student_id=student_id,
        worksheet_id=worksheet_id,
        submitted_at=submitted_at,
        answers=[
            {"question_id": question_id, "student_answer": "x", "is_correct": is_correct}
            for question_id, is_correct in answers
        ],
    )


@pytest.fixture
def make_question():
    """Factory for questions with sensible defaults."""
    return build_question


@pytest.fixture
def make_result():
    """Factory for graded submissions from (question_id, is_correct) pairs."""
    return build_result


@pytest.fixture
def retest_catalog():
    """Math fractions chapter at every difficulty, a linear-equations chapter and one English question."""
    return QuestionCatalog(
        [
            build_question("f-high-1", difficulty="high", chapter="ch-frac"),
            build_question("f-med-1", difficulty="medium", chapter="ch-frac"),
            build_question("f-med-2", difficulty="medium", chapter="ch-frac"),
            build_question("f-low-1", difficulty="low", chapter="ch-frac"),
            build_question("f-highest-1", difficulty="highest", chapter="ch-frac"),
            build_question("l-high-1", difficulty="high", chapter="ch-lin"),
            build_question("l-med-1", difficulty="medium", chapter="ch-lin"),
            build_question("e-med-1", subject="english", difficulty="medium", chapter="ch-frac"),
        ]
    )


@pytest.fixture
def history():
    """
    Four weekly submissions by student-1 plus one perfect submission by student-2.

    student-1 misses f-high-1 twice then gets it right twice, misses f-med-1
    twice, and misses l-high-1 once after a correct first attempt. r1 and r3
    come from worksheet ws-frac, r2 and r4 from ws-mixed.
    """
    return [
        build_result(
            "r1",
            datetime(2024, 3, 1, 9),
            [("f-high-1", False), ("f-med-1", False), ("l-high-1", True)],
            worksheet_id="ws-frac",
        ),
        build_result(
            "r2",
            datetime(2024, 3, 8, 9),
            [("f-high-1", False), ("l-high-1", False)],
            worksheet_id="ws-mixed",
        ),
        build_result(
            "r3",
            datetime(2024, 3, 15, 9),
            [("f-high-1", True), ("f-med-1", False)],
            worksheet_id="ws-frac",
        ),
        build_result("r4", datetime(2024, 3, 22, 9), [("f-high-1", True)], worksheet_id="ws-mixed"),
        build_result(
            "r5",
            datetime(2024, 3, 22, 10),
            [("f-med-2", True), ("e-med-1", True)],
            student_id="student-2",
        ),
    ]
