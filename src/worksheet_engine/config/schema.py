from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from worksheet_engine.data_models import MetadataField


class SimilarityConfig(BaseModel):
    """Controls for similar-question ranking."""

    min_score: int = Field(30, ge=0, description="Raw scores below this are dropped.")
    top_n: int = Field(5, ge=1)
    clamp_scores: bool = Field(True, description="Report scores as a 0-100 percentage.")


DEFAULT_CONFIDENCES: Dict[MetadataField, int] = {
    MetadataField.SCHOOL_NAME: 85,
    MetadataField.REGION: 80,
    MetadataField.SUBJECT: 90,
    MetadataField.GRADE: 85,
    MetadataField.SEMESTER: 80,
    MetadataField.EXAM_TYPE: 95,
    MetadataField.EXAM_YEAR: 90,
    MetadataField.QUESTION_COUNT: 70,
}


class TaggingConfig(BaseModel):
    """Auto-tagging confidences and the bulk-accept cut-off."""

    bulk_accept_threshold: int = Field(80, ge=0, le=100)
    confidence: Dict[MetadataField, int] = Field(default_factory=lambda: dict(DEFAULT_CONFIDENCES))
    current_year: Optional[int] = Field(
        None, ge=2000, description="Pin the latest accepted exam year; defaults to today's year."
    )

    @field_validator("confidence")
    @classmethod
    def fill_confidences(cls, value: Dict[MetadataField, int]) -> Dict[MetadataField, int]:
        """Merge partial overrides onto the defaults and keep every value in 0-100."""
        merged = dict(DEFAULT_CONFIDENCES)
        merged.update(value)
        for field, score in merged.items():
            if not 0 <= score <= 100:
                raise ValueError(f"confidence for {field.value} must be within 0-100")
        return merged


DEFAULT_MODE_TIME_FACTORS: Dict[str, float] = {"wrong_only": 1.0, "with_similar": 2.0, "adaptive": 1.5}


class RetestConfig(BaseModel):
    """Retest worksheet composition defaults."""

    default_selection: int = Field(5, ge=0)
    similar_per_question: int = Field(3, ge=0)
    minutes_per_question: float = Field(2.0, gt=0)
    mode_time_factors: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_MODE_TIME_FACTORS))
    shuffle_seed: Optional[int] = Field(None, description="Seed for similar-question shuffling.")
    default_title: str = "Retest worksheet"

    @field_validator("mode_time_factors")
    @classmethod
    def fill_time_factors(cls, value: Dict[str, float]) -> Dict[str, float]:
        """Merge partial overrides onto the default factors; every factor must be positive."""
        unknown = set(value) - set(DEFAULT_MODE_TIME_FACTORS)
        if unknown:
            raise ValueError(f"Unknown retest modes in mode_time_factors: {sorted(unknown)}")
        merged = dict(DEFAULT_MODE_TIME_FACTORS)
        merged.update(value)
        for mode, factor in merged.items():
            if factor <= 0:
                raise ValueError(f"time factor for {mode} must be positive")
        return merged


class PathsConfig(BaseModel):
    """Where the JSONL question bank and submission history live."""

    questions: Path = Field(Path("data/sample/questions.jsonl"))
    learning_results: Path = Field(Path("data/sample/learning_results.jsonl"))


class LoggingConfig(BaseModel):
    """Controls for engine logging output and format."""

    level: str = Field("INFO")
    use_json: bool = False

    @field_validator("level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class Settings(BaseModel):
    """Top-level project configuration aggregating all sub-settings."""

    project_name: str = Field("Worksheet Engine")
    similarity: SimilarityConfig = Field(default_factory=SimilarityConfig)
    tagging: TaggingConfig = Field(default_factory=TaggingConfig)
    retest: RetestConfig = Field(default_factory=RetestConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
