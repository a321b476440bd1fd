from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from worksheet_engine.config.schema import DEFAULT_CONFIDENCES
from worksheet_engine.data_models import AutoTagSuggestion, MetadataField, Subject

SCHOOL_PATTERNS = (
    re.compile(r"[가-힣]+(?:초등학교|중학교|고등학교|학교)"),
    re.compile(r"[가-힣]+(?:초|중|고)"),
)

REGION_PATTERNS = (
    re.compile(
        r"서울특별시|서울|부산광역시|부산|대구광역시|대구|인천광역시|인천|"
        r"광주광역시|광주|대전광역시|대전|울산광역시|울산|세종특별자치시|세종"
    ),
    re.compile(r"[가-힣]+시|[가-힣]+구|[가-힣]+군"),
)

SUBJECT_KEYWORDS: Dict[Subject, Tuple[str, ...]] = {
    Subject.MATH: ("수학", "mathematics", "math", "대수", "기하", "확률", "통계", "미적분"),
    Subject.ENGLISH: ("영어", "english", "문법", "grammar", "독해", "reading"),
    Subject.KOREAN: ("국어", "korean", "문학", "작문", "화법", "독서"),
}

GRADE_PATTERNS = (
    re.compile(r"중[1-3]|고[1-3]"),
    # digit guards keep "2023학년도" / "2023년" from reading as a grade
    re.compile(r"(?<!\d)[1-3]학년"),
    re.compile(r"(?<!\d)[1-3]년"),
)

SEMESTER_PATTERNS = (
    (re.compile(r"1학기.*중간|1-1"), "1-1"),
    (re.compile(r"1학기.*기말|1-2"), "1-2"),
    (re.compile(r"2학기.*중간|2-1"), "2-1"),
    (re.compile(r"2학기.*기말|2-2"), "2-2"),
)

EXAM_TYPES = ("중간고사", "기말고사", "모의고사", "단원평가", "월말고사")

YEAR_PATTERN = re.compile(r"(?<!\d)20\d{2}(?!\d)")
EARLIEST_EXAM_YEAR = 2000

NUMBERED_LINE_PATTERN = re.compile(r"^\s*\d+\.(?!\d)", re.MULTILINE)


@dataclass(frozen=True)
class DetectionContext:
    """Inputs shared by every detector for one document."""

    haystack: str  # lower-cased document text + filename
    document_text: str
    current_year: int
    confidences: Dict[MetadataField, int] = field(default_factory=lambda: dict(DEFAULT_CONFIDENCES))

    def suggestion(self, field_name: MetadataField, value: str, reason: str) -> AutoTagSuggestion:
        return AutoTagSuggestion(
            field=field_name,
            value=value,
            confidence=self.confidences.get(field_name, DEFAULT_CONFIDENCES[field_name]),
            reason=reason,
        )


Detector = Callable[[DetectionContext], Optional[AutoTagSuggestion]]


def _first_match(patterns, text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def detect_school_name(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    value = _first_match(SCHOOL_PATTERNS, ctx.haystack)
    if value is None:
        return None
    return ctx.suggestion(MetadataField.SCHOOL_NAME, value, "school name pattern in filename/content")


def detect_region(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    value = _first_match(REGION_PATTERNS, ctx.haystack)
    if value is None:
        return None
    return ctx.suggestion(MetadataField.REGION, value, "region name pattern in filename/content")


def detect_subject(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    for subject, keywords in SUBJECT_KEYWORDS.items():
        for keyword in keywords:
            if keyword in ctx.haystack:
                return ctx.suggestion(MetadataField.SUBJECT, subject.value, f"keyword '{keyword}' found")
    return None


def detect_grade(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    value = _first_match(GRADE_PATTERNS, ctx.haystack)
    if value is None:
        return None
    return ctx.suggestion(MetadataField.GRADE, value, "grade pattern in filename/content")


def detect_semester(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    for pattern, code in SEMESTER_PATTERNS:
        if pattern.search(ctx.haystack):
            return ctx.suggestion(MetadataField.SEMESTER, code, "semester pattern in filename/content")
    return None


def detect_exam_type(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    for exam_type in EXAM_TYPES:
        if exam_type in ctx.haystack:
            return ctx.suggestion(MetadataField.EXAM_TYPE, exam_type, f"keyword '{exam_type}' found")
    return None


def detect_exam_year(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    for match in YEAR_PATTERN.finditer(ctx.haystack):
        year = int(match.group(0))
        if EARLIEST_EXAM_YEAR <= year <= ctx.current_year:
            return ctx.suggestion(MetadataField.EXAM_YEAR, str(year), "year pattern in filename/content")
    return None


def detect_question_count(ctx: DetectionContext) -> Optional[AutoTagSuggestion]:
    count = len(NUMBERED_LINE_PATTERN.findall(ctx.document_text))
    if count == 0:
        return None
    return ctx.suggestion(
        MetadataField.QUESTION_COUNT, str(count), f"{count} numbered question lines found"
    )


DEFAULT_DETECTORS: Tuple[Detector, ...] = (
    detect_school_name,
    detect_region,
    detect_subject,
    detect_grade,
    detect_semester,
    detect_exam_type,
    detect_exam_year,
    detect_question_count,
)
