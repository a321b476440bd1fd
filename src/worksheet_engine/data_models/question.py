from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class Subject(str, Enum):
    """Subjects covered by the question bank."""

    MATH = "math"
    ENGLISH = "english"
    KOREAN = "korean"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    SHORT_ANSWER = "short_answer"
    ESSAY = "essay"


class QuestionSource(str, Enum):
    INTERNAL = "internal"
    TEXTBOOK = "textbook"
    SCHOOL_EXAM = "school_exam"


class Difficulty(str, Enum):
    """
    Difficulty ladder used for adjacency and step-down comparisons.

    Members compare by value like any ``str`` enum; use ``rank`` (1 for ``low``
    up to 4 for ``highest``) whenever the ordering matters.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"

    @property
    def rank(self) -> int:
        return DIFFICULTY_LADDER.index(self) + 1

    def distance(self, other: "Difficulty") -> int:
        """Number of rungs between two levels on the ladder."""
        return abs(self.rank - other.rank)

    def is_below(self, other: "Difficulty") -> bool:
        return self.rank < other.rank


DIFFICULTY_LADDER: Tuple[Difficulty, ...] = (
    Difficulty.LOW,
    Difficulty.MEDIUM,
    Difficulty.HIGH,
    Difficulty.HIGHEST,
)


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and the camelCase keys of exported data."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class CurriculumPath(CamelModel):
    """Location of a question in a subject's syllabus (chapter > section > lesson)."""

    chapter_id: str = Field(..., min_length=1)
    section_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)

    @property
    def path(self) -> Tuple[str, str, str]:
        return (self.chapter_id, self.section_id, self.lesson_id)


class QuestionBase(CamelModel):
    """Fields shared by every question variant."""

    id: str = Field(..., min_length=1)
    subject: Subject
    content: str
    difficulty: Difficulty
    source: QuestionSource = QuestionSource.INTERNAL
    curriculum: CurriculumPath
    correct_answer: str
    explanation: Optional[str] = None
    correct_rate: int = Field(..., ge=0, le=100, description="Percent of test-takers answering correctly.")
    tags: List[str] = Field(default_factory=list)
    similar_questions: List[str] = Field(
        default_factory=list, description="Precomputed similar question ids; may be stale."
    )

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, value: List[str]) -> List[str]:
        """Tags behave as a set; keep the first occurrence of each."""
        seen: dict[str, None] = {}
        for tag in value:
            tag = tag.strip()
            if tag:
                seen.setdefault(tag, None)
        return list(seen)

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(self.tags)


class MultipleChoiceQuestion(QuestionBase):
    type: Literal["multiple_choice"] = "multiple_choice"
    choices: List[str] = Field(..., min_length=2)


class ShortAnswerQuestion(QuestionBase):
    type: Literal["short_answer"] = "short_answer"


class EssayQuestion(QuestionBase):
    type: Literal["essay"] = "essay"


# Only the multiple-choice variant declares ``choices``; combined with
# ``extra="forbid"`` an essay or short-answer payload carrying choices fails validation.
Question = Annotated[
    Union[MultipleChoiceQuestion, ShortAnswerQuestion, EssayQuestion],
    Field(discriminator="type"),
]

_QUESTION_ADAPTER: TypeAdapter[Question] = TypeAdapter(Question)


def parse_question(data: Any) -> Question:
    """Validate a raw mapping (snake_case or camelCase keys) into the matching question variant."""
    return _QUESTION_ADAPTER.validate_python(data)


def dump_question(question: Question) -> dict[str, Any]:
    """Serialize a question to a JSON-compatible mapping."""
    return question.model_dump(mode="json")
