from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Sequence

from worksheet_engine.config.schema import TaggingConfig
from worksheet_engine.data_models import AutoTagSuggestion

from .detectors import DEFAULT_DETECTORS, DetectionContext, Detector

logger = logging.getLogger(__name__)


class MetadataExtractor:
    """
    Propose exam metadata from an uploaded document's text and filename.

    Runs an ordered battery of independent detectors (school, region, subject,
    grade, semester, exam type, exam year, question count). Each detector looks
    at the lower-cased text + filename and contributes at most one suggestion;
    the first pattern in its family that matches wins. Nothing is applied
    here: suggestions go to a reviewer, see `SuggestionReview`.

    Parameters
    ----------
    config : TaggingConfig | None
        Per-field confidences and an optional pinned "current year".
    detectors : Sequence[Detector] | None
        Detector functions to run, in order. Defaults to `DEFAULT_DETECTORS`;
        pass an extended tuple to add detectors without touching the built-ins.
    today : Callable[[], date] | None
        Clock used for the upper bound of plausible exam years.
    """

    def __init__(
        self,
        config: TaggingConfig | None = None,
        detectors: Optional[Sequence[Detector]] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.config = config or TaggingConfig()
        self.detectors = tuple(detectors) if detectors is not None else DEFAULT_DETECTORS
        self._today = today or date.today

    @property
    def current_year(self) -> int:
        return self.config.current_year or self._today().year

    def suggest(self, text: str, filename: str = "") -> List[AutoTagSuggestion]:
        """Return suggestions in detector order; blank input yields no suggestions."""
        text = text or ""
        filename = filename or ""
        if not text.strip() and not filename.strip():
            return []

        ctx = DetectionContext(
            haystack=f"{text} {filename}".lower(),
            document_text=text,
            current_year=self.current_year,
            confidences=self.config.confidence,
        )
        suggestions: List[AutoTagSuggestion] = []
        for detector in self.detectors:
            suggestion = detector(ctx)
            if suggestion is not None:
                suggestions.append(suggestion)
        logger.debug("Auto-tagging %r produced %d suggestions", filename, len(suggestions))
        return suggestions
