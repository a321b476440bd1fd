from __future__ import annotations

import random
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from worksheet_engine.catalog import QuestionCatalog
from worksheet_engine.config import Settings, load_settings
from worksheet_engine.data_models import AutoTagSuggestion, ContentMetadata, LearningResult
from worksheet_engine.ingestion import MetadataExtractor, SuggestionReview
from worksheet_engine.learning import RetestComposer, RetestMode, RetestWorksheet, WrongAnswerAnalysis
from worksheet_engine.retrieval import ScoreBreakdown, SimilarityMatch, SimilarityRanker
from worksheet_engine.storage import LearningResultJsonlStore, QuestionJsonlStore
from worksheet_engine.utils.logging import configure_from_settings, get_logger

logger = get_logger(__name__)


class WorksheetEngine:
    """
    Application-state object wiring the question catalog to the three engines.

    The engine owns one catalog snapshot, the configured `SimilarityRanker`,
    `MetadataExtractor` and `RetestComposer`, and the random source the
    composer shuffles with. Callers (CLI, web handlers, notebooks) pass ids and
    raw text in and get plain values back; persisting anything they accept is
    the caller's job, through the JSONL stores or otherwise.

    Attributes
    ----------
    settings : Settings
        Validated configuration loaded from YAML.
    catalog : QuestionCatalog
        Current question snapshot. Replace it with `refresh_catalog`.
    ranker : SimilarityRanker
        Weighted-feature similar-question ranking.
    extractor : MetadataExtractor
        Regex/keyword auto-tagging of uploaded documents.
    composer : RetestComposer
        Wrong-answer analysis and retest composition.
    """

    def __init__(
        self,
        settings: Settings,
        catalog: Optional[QuestionCatalog] = None,
        rng: Optional[random.Random] = None,
        configure_logs: bool = True,
    ):
        self.settings = settings
        if configure_logs:
            configure_from_settings(settings.logging)

        self.question_store = QuestionJsonlStore(settings.paths.questions)
        self.result_store = LearningResultJsonlStore(settings.paths.learning_results)
        self.catalog = catalog if catalog is not None else self.question_store.load_catalog()

        self.rng = rng or random.Random(settings.retest.shuffle_seed)
        self.ranker = SimilarityRanker(settings.similarity)
        self.extractor = MetadataExtractor(settings.tagging)
        self.composer = RetestComposer(self.catalog, settings.retest, rng=self.rng)
        logger.debug("engine_ready", questions=len(self.catalog))

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        *,
        catalog: Optional[QuestionCatalog] = None,
        rng: Optional[random.Random] = None,
    ) -> "WorksheetEngine":
        """Build an engine from a YAML config (or the defaults)."""
        return cls(load_settings(config_path), catalog=catalog, rng=rng)

    def refresh_catalog(self, catalog: Optional[QuestionCatalog] = None) -> QuestionCatalog:
        """Swap in a new catalog snapshot (reloaded from disk when none is given)."""
        self.catalog = catalog if catalog is not None else self.question_store.load_catalog()
        self.composer = RetestComposer(self.catalog, self.settings.retest, rng=self.rng)
        return self.catalog

    # Similar questions -------------------------------------------------

    def similar_questions(self, question_id: str, top_n: Optional[int] = None) -> List[SimilarityMatch]:
        """Rank same-subject questions against `question_id`; unknown ids give an empty list."""
        base = self.catalog.get(question_id)
        if base is None:
            logger.warning("similar_unknown_question", question_id=question_id)
            return []
        matches = self.ranker.rank(base, self.catalog.by_subject(base.subject), top_n)
        logger.info("similar_ranked", question_id=question_id, matches=len(matches))
        return matches

    def explain_similarity(self, base_id: str, candidate_id: str) -> Optional[ScoreBreakdown]:
        base = self.catalog.get(base_id)
        candidate = self.catalog.get(candidate_id)
        if base is None or candidate is None:
            return None
        return self.ranker.score(base, candidate)

    # Auto-tagging ------------------------------------------------------

    def suggest_metadata(self, text: str, filename: str = "") -> List[AutoTagSuggestion]:
        suggestions = self.extractor.suggest(text, filename)
        logger.info("autotag_suggested", filename=filename, suggestions=len(suggestions))
        return suggestions

    def review_metadata(
        self,
        text: str,
        filename: str = "",
        metadata: Optional[ContentMetadata] = None,
    ) -> SuggestionReview:
        """Start an accept/reject review with the configured bulk-accept threshold."""
        return SuggestionReview(
            self.suggest_metadata(text, filename),
            metadata=metadata,
            threshold=self.settings.tagging.bulk_accept_threshold,
        )

    # Retests -----------------------------------------------------------

    def learning_results(self, student_id: str, worksheet_id: Optional[str] = None) -> List[LearningResult]:
        """Stored submissions of `student_id`, limited to one worksheet when `worksheet_id` is set."""
        return self.result_store.for_student(student_id, worksheet_id)

    def analyze_wrong_answers(
        self,
        student_id: str,
        results: Optional[Iterable[LearningResult]] = None,
    ) -> List[WrongAnswerAnalysis]:
        """Analyze the student's history (from the result store unless `results` is given)."""
        history = list(results) if results is not None else self.learning_results(student_id)
        analyses = self.composer.analyze_wrong_answers(history, student_id=student_id)
        logger.info(
            "wrong_answers_analyzed",
            student_id=student_id,
            submissions=len(history),
            missed=len(analyses),
        )
        return analyses

    def compose_retest(
        self,
        analyses: Sequence[WrongAnswerAnalysis],
        selected_ids: Optional[Iterable[str]] = None,
        mode: RetestMode | str = RetestMode.WRONG_ONLY,
        title: Optional[str] = None,
    ) -> Optional[RetestWorksheet]:
        worksheet = self.composer.compose(analyses, selected_ids, mode, title)
        if worksheet is None:
            logger.info("retest_skipped", reason="nothing selected or perfect score")
        else:
            logger.info(
                "retest_composed",
                mode=worksheet.mode.value,
                questions=worksheet.total_questions,
                minutes=worksheet.estimated_time,
            )
        return worksheet
