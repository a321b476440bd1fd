from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from worksheet_engine.data_models import Difficulty, Question


class Trend(str, Enum):
    """Direction of a student's recent performance on a repeatedly missed question."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class RetestMode(str, Enum):
    """How a retest worksheet is assembled from the selected wrong questions."""

    WRONG_ONLY = "wrong_only"
    WITH_SIMILAR = "with_similar"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class Attempt:
    """One answer to a question, taken from a learning result."""

    result_id: str
    submitted_at: datetime
    is_correct: bool


@dataclass
class WrongAnswerAnalysis:
    """Everything the retest selection screen shows for one missed question."""

    question: Question
    wrong_count: int
    attempts: List[Attempt]  # newest first
    trend: Trend = Trend.STABLE
    similar_questions: List[Question] = field(default_factory=list)

    @property
    def question_id(self) -> str:
        return self.question.id

    @property
    def last_attempt_at(self) -> Optional[datetime]:
        return self.attempts[0].submitted_at if self.attempts else None

    @property
    def last_wrong_at(self) -> Optional[datetime]:
        for attempt in self.attempts:
            if not attempt.is_correct:
                return attempt.submitted_at
        return None


@dataclass
class DifficultyWrongRate:
    """Wrong answers at one difficulty level within a single submission."""

    difficulty: Difficulty
    wrong: int
    total: int

    @property
    def wrong_rate(self) -> int:
        return round(self.wrong / self.total * 100) if self.total else 0


@dataclass
class RetestWorksheet:
    """Remedial worksheet composed from a student's wrong answers."""

    title: str
    description: str
    mode: RetestMode
    questions: List[Question]
    source_question_ids: List[str]
    difficulty_distribution: Dict[Difficulty, int]
    estimated_time: int  # minutes
    tags: List[str] = field(default_factory=list)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def added_questions(self) -> List[Question]:
        """Questions added on top of the selected wrong questions."""
        sources = set(self.source_question_ids)
        return [question for question in self.questions if question.id not in sources]
