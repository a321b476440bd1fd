from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from worksheet_engine.config.schema import SimilarityConfig
from worksheet_engine.data_models import Question

logger = logging.getLogger(__name__)

CHAPTER_POINTS = 40
SECTION_POINTS = 20
LESSON_POINTS = 20
SAME_DIFFICULTY_POINTS = 20
ADJACENT_DIFFICULTY_POINTS = 10
SAME_TYPE_POINTS = 15
POINTS_PER_SHARED_TAG = 5
MAX_TAG_POINTS = 15
# (max |correct rate difference|, points), checked in order
CORRECT_RATE_BANDS = ((10, 10), (20, 5))

MAX_REPORTED_SCORE = 100


class ScoreBreakdown(BaseModel):
    """Points earned on each similarity axis."""

    curriculum: int = 0
    difficulty: int = 0
    type: int = 0
    tags: int = 0
    correct_rate: int = 0

    @property
    def total(self) -> int:
        """Unclamped sum of all axes; can exceed 100 for near-duplicates."""
        return self.curriculum + self.difficulty + self.type + self.tags + self.correct_rate


class SimilarityMatch(BaseModel):
    """Ranked candidate paired with its similarity score."""

    question: Question
    score: int = Field(..., ge=0)
    breakdown: ScoreBreakdown


def curriculum_points(base: Question, candidate: Question) -> int:
    """Nested curriculum match: section only counts inside the same chapter, lesson inside the same section."""
    points = 0
    if candidate.curriculum.chapter_id == base.curriculum.chapter_id:
        points += CHAPTER_POINTS
        if candidate.curriculum.section_id == base.curriculum.section_id:
            points += SECTION_POINTS
            if candidate.curriculum.lesson_id == base.curriculum.lesson_id:
                points += LESSON_POINTS
    return points


def difficulty_points(base: Question, candidate: Question) -> int:
    distance = base.difficulty.distance(candidate.difficulty)
    if distance == 0:
        return SAME_DIFFICULTY_POINTS
    if distance == 1:
        return ADJACENT_DIFFICULTY_POINTS
    return 0


def tag_points(base: Question, candidate: Question) -> int:
    shared = base.tag_set & candidate.tag_set
    return min(len(shared) * POINTS_PER_SHARED_TAG, MAX_TAG_POINTS)


def correct_rate_points(base: Question, candidate: Question) -> int:
    diff = abs(base.correct_rate - candidate.correct_rate)
    for limit, points in CORRECT_RATE_BANDS:
        if diff <= limit:
            return points
    return 0


def score_pair(base: Question, candidate: Question) -> ScoreBreakdown:
    """Score `candidate` against `base` on every axis."""
    return ScoreBreakdown(
        curriculum=curriculum_points(base, candidate),
        difficulty=difficulty_points(base, candidate),
        type=SAME_TYPE_POINTS if candidate.type == base.type else 0,
        tags=tag_points(base, candidate),
        correct_rate=correct_rate_points(base, candidate),
    )


class SimilarityRanker:
    """
    Rank catalog questions by heuristic similarity to a base question.

    The score is an additive, weighted-feature affinity: curriculum position,
    difficulty, question type, shared tags and correct-rate proximity. Raw
    totals can exceed 100 (same lesson, difficulty and type alone reach 115),
    so by default the reported score is clamped to 100 and read as a
    percentage; the unclamped total stays available on the breakdown.

    Parameters
    ----------
    config : SimilarityConfig | None
        Threshold, default result size and clamping behaviour. Defaults to
        ``min_score=30``, ``top_n=5``, ``clamp_scores=True``.

    Examples
    --------
    >>> ranker = SimilarityRanker()
    >>> base = catalog.get("q-math-001")
    >>> matches = ranker.rank(base, catalog.by_subject(base.subject), top_n=3)
    >>> [(m.question.id, m.score) for m in matches]
    [('q-math-002', 100), ('q-math-003', 75), ('q-math-004', 70)]
    """

    def __init__(self, config: SimilarityConfig | None = None):
        self.config = config or SimilarityConfig()

    def score(self, base: Question, candidate: Question) -> ScoreBreakdown:
        return score_pair(base, candidate)

    def _reported(self, raw: int) -> int:
        return min(raw, MAX_REPORTED_SCORE) if self.config.clamp_scores else raw

    def rank(
        self,
        base: Optional[Question],
        candidates: Iterable[Question],
        top_n: Optional[int] = None,
    ) -> List[SimilarityMatch]:
        """
        Return up to `top_n` candidates scoring at least `min_score`, best first.

        Candidates from another subject and the base question itself are
        skipped. Sorting is stable, so equal scores keep candidate order.

        Raises
        ------
        ValueError
            If `base` is None or `top_n` is smaller than 1.
        """
        if base is None:
            raise ValueError("A base question is required to rank similar questions.")
        limit = self.config.top_n if top_n is None else top_n
        if limit < 1:
            raise ValueError("top_n must be a positive integer")

        scored: List[tuple[Question, ScoreBreakdown]] = []
        for candidate in candidates:
            if candidate.id == base.id or candidate.subject != base.subject:
                continue
            breakdown = self.score(base, candidate)
            if breakdown.total >= self.config.min_score:
                scored.append((candidate, breakdown))

        # rank on the raw total so clamping never reorders near-duplicates
        scored.sort(key=lambda item: item[1].total, reverse=True)
        matches = [
            SimilarityMatch(
                question=question,
                score=self._reported(breakdown.total),
                breakdown=breakdown,
            )
            for question, breakdown in scored[:limit]
        ]
        logger.debug(
            "Ranked %d of %d surviving candidates for question %s",
            len(matches),
            len(scored),
            base.id,
        )
        return matches


def rank_similar(
    base: Optional[Question],
    candidates: Iterable[Question],
    top_n: int = 5,
    *,
    config: SimilarityConfig | None = None,
) -> List[SimilarityMatch]:
    """Functional shortcut for `SimilarityRanker(config).rank(base, candidates, top_n)`."""
    return SimilarityRanker(config).rank(base, candidates, top_n)
