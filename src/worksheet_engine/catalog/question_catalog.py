from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, model_validator

from worksheet_engine.data_models import (
    Difficulty,
    Question,
    QuestionSource,
    QuestionType,
    Subject,
    parse_question,
)


class QuestionFilter(BaseModel):
    """Question-bank search criteria; unset criteria match everything."""

    subject: Optional[Subject] = None
    difficulty: List[Difficulty] = Field(default_factory=list)
    type: List[QuestionType] = Field(default_factory=list)
    source: List[QuestionSource] = Field(default_factory=list)
    chapter_id: Optional[str] = None
    section_id: Optional[str] = None
    lesson_id: Optional[str] = None
    correct_rate_range: Optional[Tuple[int, int]] = None
    tags: List[str] = Field(default_factory=list)
    search_query: Optional[str] = None

    @model_validator(mode="after")
    def check_rate_range(self) -> "QuestionFilter":
        if self.correct_rate_range is not None:
            low, high = self.correct_rate_range
            if low > high:
                raise ValueError("correct_rate_range lower bound must not exceed upper bound")
        return self

    def matches(self, question: Question) -> bool:
        if self.subject is not None and question.subject != self.subject:
            return False
        if self.difficulty and question.difficulty not in self.difficulty:
            return False
        if self.type and question.type not in self.type:
            return False
        if self.source and question.source not in self.source:
            return False
        curriculum = question.curriculum
        if self.chapter_id and curriculum.chapter_id != self.chapter_id:
            return False
        if self.section_id and curriculum.section_id != self.section_id:
            return False
        if self.lesson_id and curriculum.lesson_id != self.lesson_id:
            return False
        if self.correct_rate_range is not None:
            low, high = self.correct_rate_range
            if not low <= question.correct_rate <= high:
                return False
        # any requested tag is enough
        if self.tags and not question.tag_set.intersection(self.tags):
            return False
        if self.search_query:
            needle = self.search_query.strip().lower()
            haystack = " ".join([question.content, *question.tags]).lower()
            if needle and needle not in haystack:
                return False
        return True


class QuestionCatalog:
    """
    Immutable, ordered snapshot of the question bank.

    The catalog is owned by whatever store produced it; engine components only
    read from it and never assume two snapshots are identical.
    """

    def __init__(self, questions: Iterable[Question]):
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._by_id: Dict[str, Question] = {}
        for question in self._questions:
            if question.id in self._by_id:
                raise ValueError(f"Duplicate question id in catalog: {question.id}")
            self._by_id[question.id] = question

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "QuestionCatalog":
        """Build a catalog from raw mappings, validating each record."""
        return cls(parse_question(record) for record in records)

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def get_all(self) -> Sequence[Question]:
        return self._questions

    def get(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    def by_subject(self, subject: Subject | str) -> List[Question]:
        subject = Subject(subject)
        return [question for question in self._questions if question.subject == subject]

    def filter(self, criteria: QuestionFilter) -> List[Question]:
        return [question for question in self._questions if criteria.matches(question)]
