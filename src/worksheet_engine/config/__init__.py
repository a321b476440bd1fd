from .loader import load_settings
from .schema import (
    LoggingConfig,
    PathsConfig,
    RetestConfig,
    Settings,
    SimilarityConfig,
    TaggingConfig,
)

__all__ = [
    "LoggingConfig",
    "PathsConfig",
    "RetestConfig",
    "Settings",
    "SimilarityConfig",
    "TaggingConfig",
    "load_settings",
]
