from .auto_tagger import MetadataExtractor
from .detectors import DEFAULT_DETECTORS, DetectionContext, Detector
from .review import SuggestionReview, apply_suggestion

__all__ = [
    "DEFAULT_DETECTORS",
    "DetectionContext",
    "Detector",
    "MetadataExtractor",
    "SuggestionReview",
    "apply_suggestion",
]
