from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .question import CamelModel, Difficulty, Subject


class MetadataField(str, Enum):
    """Metadata fields the auto-tagger can propose values for."""

    SCHOOL_NAME = "school_name"
    REGION = "region"
    SUBJECT = "subject"
    GRADE = "grade"
    SEMESTER = "semester"
    EXAM_TYPE = "exam_type"
    EXAM_YEAR = "exam_year"
    QUESTION_COUNT = "question_count"


NUMERIC_FIELDS = frozenset({MetadataField.EXAM_YEAR, MetadataField.QUESTION_COUNT})


class ContentMetadata(CamelModel):
    """Descriptive metadata attached to an uploaded exam or worksheet document."""

    school_name: Optional[str] = None
    region: Optional[str] = None
    subject: Subject = Subject.MATH
    grade: str = ""
    semester: Optional[str] = Field(None, description="'1-1', '1-2', '2-1' or '2-2'.")
    exam_year: Optional[int] = None
    exam_type: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    question_count: int = Field(0, ge=0)
    auto_tagged: bool = False


class AutoTagSuggestion(BaseModel):
    """Proposed metadata value awaiting a human accept/reject decision."""

    model_config = ConfigDict(frozen=True)

    field: MetadataField
    value: str
    confidence: int = Field(..., ge=0, le=100)
    reason: str
