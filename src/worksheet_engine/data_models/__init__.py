from .metadata import AutoTagSuggestion, ContentMetadata, MetadataField
from .question import (
    DIFFICULTY_LADDER,
    CurriculumPath,
    Difficulty,
    EssayQuestion,
    MultipleChoiceQuestion,
    Question,
    QuestionSource,
    QuestionType,
    ShortAnswerQuestion,
    Subject,
    dump_question,
    parse_question,
)
from .results import AnswerRecord, DifficultyStat, LearningResult

__all__ = [
    "AnswerRecord",
    "AutoTagSuggestion",
    "ContentMetadata",
    "CurriculumPath",
    "DIFFICULTY_LADDER",
    "Difficulty",
    "DifficultyStat",
    "EssayQuestion",
    "LearningResult",
    "MetadataField",
    "MultipleChoiceQuestion",
    "Question",
    "QuestionSource",
    "QuestionType",
    "ShortAnswerQuestion",
    "Subject",
    "dump_question",
    "parse_question",
]
