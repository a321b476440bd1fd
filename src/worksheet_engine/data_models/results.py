from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import Field

from .question import CamelModel, Difficulty


class AnswerRecord(CamelModel):
    """A student's answer to one question within a submission."""

    question_id: str
    student_answer: str = ""
    is_correct: bool
    time_spent: int = Field(0, ge=0, description="Seconds spent on the question.")


class DifficultyStat(CamelModel):
    correct: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    rate: float = Field(0, ge=0, le=100)

    @property
    def wrong(self) -> int:
        return max(0, self.total - self.correct)


class LearningResult(CamelModel):
    """
    One graded submission of an assignment by a student.

    Created by the submission flow and never mutated afterwards; the engine only
    reads these records.
    """

    id: str
    student_id: str
    assignment_id: str = ""
    worksheet_id: str = ""
    answers: List[AnswerRecord] = Field(default_factory=list)
    submitted_at: datetime
    total_score: float = Field(0, ge=0)
    correct_rate: float = Field(0, ge=0, le=100)
    total_time_spent: int = Field(0, ge=0)
    difficulty_performance: Dict[Difficulty, DifficultyStat] = Field(default_factory=dict)
    grading_status: str = "auto_graded"

    @property
    def wrong_answers(self) -> List[AnswerRecord]:
        return [answer for answer in self.answers if not answer.is_correct]
