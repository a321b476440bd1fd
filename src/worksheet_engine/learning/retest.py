from __future__ import annotations

import logging
import math
import random
from typing import Dict, Iterable, List, Optional, Sequence, Set

from worksheet_engine.catalog import QuestionCatalog
from worksheet_engine.config.schema import RetestConfig
from worksheet_engine.data_models import DIFFICULTY_LADDER, Difficulty, LearningResult, Question

from .models import RetestMode, RetestWorksheet, WrongAnswerAnalysis
from .wrong_answers import (
    classify_trend,
    collect_wrong_attempts,
    default_selection,
    rank_by_wrong_count,
)

logger = logging.getLogger(__name__)

MODE_DESCRIPTIONS: Dict[RetestMode, str] = {
    RetestMode.WRONG_ONLY: "Wrong answers only",
    RetestMode.WITH_SIMILAR: "Wrong answers plus one similar question each",
    RetestMode.ADAPTIVE: "Wrong answers plus an easier step-down question each",
}
RETEST_TAGS = ["retest", "wrong-answer-note", "review"]


class RetestComposer:
    """
    Turn a student's wrong answers into a remedial worksheet.

    A composition request runs in two calls. `analyze_wrong_answers` aggregates
    the submission history into one `WrongAnswerAnalysis` per missed question
    (trend, wrong count, up to three same-chapter similar questions), ranked by
    how often the question was missed. `compose` then builds a
    `RetestWorksheet` from the selected questions in one of three modes:

    - ``wrong_only``: exactly the selected questions;
    - ``with_similar``: plus the first attached similar question of each;
    - ``adaptive``: plus one same-chapter question of strictly lower
      difficulty for each, nearest rung first.

    Similar questions are shuffled with `rng`, so pass a seeded
    ``random.Random`` for reproducible output. ``wrong_only`` never uses it.

    Parameters
    ----------
    catalog : QuestionCatalog
        Read-only question snapshot used to resolve ids and find companions.
    config : RetestConfig | None
        Selection size, similar-question count and time estimate constants.
    rng : random.Random | None
        Random source for shuffling; seeded from ``config.shuffle_seed`` when omitted.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        config: RetestConfig | None = None,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.config = config or RetestConfig()
        self.rng = rng or random.Random(self.config.shuffle_seed)

    def analyze_wrong_answers(
        self,
        results: Iterable[LearningResult],
        student_id: Optional[str] = None,
    ) -> List[WrongAnswerAnalysis]:
        """
        Aggregate missed questions across `results`, most missed first.

        Returns an empty list when nothing was answered incorrectly, the
        "perfect score" state. Questions missing from the catalog are skipped.
        """
        analyses: List[WrongAnswerAnalysis] = []
        for question_id, attempts in collect_wrong_attempts(results, student_id).items():
            question = self.catalog.get(question_id)
            if question is None:
                logger.warning("Skipping wrong answer for unknown question %s", question_id)
                continue
            analyses.append(
                WrongAnswerAnalysis(
                    question=question,
                    wrong_count=sum(1 for attempt in attempts if not attempt.is_correct),
                    attempts=attempts,
                    trend=classify_trend(attempts),
                    similar_questions=self.find_similar(question),
                )
            )
        return rank_by_wrong_count(analyses)

    def default_selection(self, analyses: Sequence[WrongAnswerAnalysis]) -> List[str]:
        return default_selection(analyses, self.config.default_selection)

    def find_similar(self, question: Question, count: Optional[int] = None) -> List[Question]:
        """Same subject and chapter, shuffled, first `count` (default from config)."""
        limit = self.config.similar_per_question if count is None else count
        candidates = [
            candidate
            for candidate in self.catalog.by_subject(question.subject)
            if candidate.id != question.id
            and candidate.curriculum.chapter_id == question.curriculum.chapter_id
        ]
        self.rng.shuffle(candidates)
        return candidates[:limit]

    def find_step_down(self, question: Question, exclude: Set[str]) -> Optional[Question]:
        """Easier same-chapter question, nearest lower difficulty first, catalog order within a level."""
        easier = [
            candidate
            for candidate in self.catalog.by_subject(question.subject)
            if candidate.curriculum.chapter_id == question.curriculum.chapter_id
            and candidate.difficulty.is_below(question.difficulty)
            and candidate.id not in exclude
        ]
        if not easier:
            return None
        easier.sort(key=lambda candidate: question.difficulty.rank - candidate.difficulty.rank)
        return easier[0]

    def estimate_minutes(self, selected_count: int, mode: RetestMode) -> int:
        factor = self.config.mode_time_factors[mode.value]
        return math.ceil(selected_count * factor * self.config.minutes_per_question)

    def compose(
        self,
        analyses: Sequence[WrongAnswerAnalysis],
        selected_ids: Optional[Iterable[str]] = None,
        mode: RetestMode | str = RetestMode.WRONG_ONLY,
        title: Optional[str] = None,
    ) -> Optional[RetestWorksheet]:
        """
        Build a retest worksheet from the selected wrong questions.

        `selected_ids` defaults to the pre-selection (top five most missed).
        Ids that are not among `analyses` are ignored. Selected questions keep
        the analysis order and come first; added questions follow. Returns
        None when nothing is selected, including the perfect-score case.

        Raises
        ------
        ValueError
            If `mode` is not a known retest mode.
        """
        mode = RetestMode(mode)
        wanted = set(self.default_selection(analyses) if selected_ids is None else selected_ids)
        selected = [analysis for analysis in analyses if analysis.question_id in wanted]
        if not selected:
            return None

        questions: List[Question] = [analysis.question for analysis in selected]
        taken: Set[str] = {question.id for question in questions}

        if mode is RetestMode.WITH_SIMILAR:
            for analysis in selected:
                companion = next(
                    (q for q in analysis.similar_questions if q.id not in taken), None
                )
                if companion is not None:
                    questions.append(companion)
                    taken.add(companion.id)
        elif mode is RetestMode.ADAPTIVE:
            for analysis in selected:
                filler = self.find_step_down(analysis.question, taken)
                if filler is not None:
                    questions.append(filler)
                    taken.add(filler.id)

        worksheet = RetestWorksheet(
            title=title or self.config.default_title,
            description=MODE_DESCRIPTIONS[mode],
            mode=mode,
            questions=questions,
            source_question_ids=[analysis.question_id for analysis in selected],
            difficulty_distribution=difficulty_distribution(questions),
            estimated_time=self.estimate_minutes(len(selected), mode),
            tags=list(RETEST_TAGS),
        )
        logger.debug(
            "Composed %s retest: %d selected, %d total questions",
            mode.value,
            len(selected),
            worksheet.total_questions,
        )
        return worksheet


def difficulty_distribution(questions: Iterable[Question]) -> Dict[Difficulty, int]:
    counts = {level: 0 for level in DIFFICULTY_LADDER}
    for question in questions:
        counts[question.difficulty] += 1
    return counts
