from __future__ import annotations

from typing import Iterable, List, Optional

from worksheet_engine.data_models import AutoTagSuggestion, ContentMetadata, MetadataField
from worksheet_engine.data_models.metadata import NUMERIC_FIELDS

DEFAULT_BULK_ACCEPT_THRESHOLD = 80


def apply_suggestion(metadata: ContentMetadata, suggestion: AutoTagSuggestion) -> ContentMetadata:
    """
    Return a copy of `metadata` with the suggested field overwritten.

    Numeric fields are parsed to integers and the copy is flagged as
    auto-tagged. The result is re-validated, so a malformed value raises
    `pydantic.ValidationError` (or `ValueError` for a non-numeric count/year).
    """
    value: object = suggestion.value
    if suggestion.field in NUMERIC_FIELDS:
        value = int(suggestion.value)
    payload = metadata.model_dump()
    payload[suggestion.field.value] = value
    payload["auto_tagged"] = True
    return ContentMetadata.model_validate(payload)


class SuggestionReview:
    """
    Pending auto-tag suggestions for one document plus the metadata being edited.

    Accepting merges a suggestion into the metadata and drops it from the
    pending list; rejecting only drops it. `accept_all` is the bulk action and
    only takes suggestions at or above the confidence threshold.
    """

    def __init__(
        self,
        suggestions: Iterable[AutoTagSuggestion],
        metadata: Optional[ContentMetadata] = None,
        threshold: int = DEFAULT_BULK_ACCEPT_THRESHOLD,
    ):
        self.pending: List[AutoTagSuggestion] = list(suggestions)
        self.metadata = metadata or ContentMetadata()
        self.threshold = threshold

    def _take(self, suggestion: AutoTagSuggestion) -> None:
        try:
            self.pending.remove(suggestion)
        except ValueError as err:
            raise ValueError(f"Suggestion for {suggestion.field.value} is not pending") from err

    def accept(self, suggestion: AutoTagSuggestion) -> ContentMetadata:
        self._take(suggestion)
        self.metadata = apply_suggestion(self.metadata, suggestion)
        return self.metadata

    def reject(self, suggestion: AutoTagSuggestion) -> None:
        self._take(suggestion)

    def accept_all(self, threshold: Optional[int] = None) -> List[AutoTagSuggestion]:
        """Apply every pending suggestion with confidence >= threshold; return the applied ones."""
        cutoff = self.threshold if threshold is None else threshold
        accepted = [s for s in self.pending if s.confidence >= cutoff]
        for suggestion in accepted:
            self.accept(suggestion)
        return accepted

    def pending_for(self, field: MetadataField) -> List[AutoTagSuggestion]:
        return [s for s in self.pending if s.field == field]
