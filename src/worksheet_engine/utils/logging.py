from __future__ import annotations

import logging
from typing import List, Optional

import structlog

from worksheet_engine.config.schema import LoggingConfig

ROOT_LOGGER = "worksheet_engine"


def resolve_level(level: str | int) -> int:
    """Map a level name such as ``"debug"`` to its numeric value."""
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    return numeric


def build_processors(json_output: bool) -> List[structlog.types.Processor]:
    processors: List[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    # Korean question text stays readable in JSON output
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    processors.append(renderer)
    return processors


def configure_logging(level: str | int = "INFO", json_output: bool = False) -> None:
    """
    Route stdlib logging and structlog through one level and renderer.

    Engine modules log with ``logging.getLogger(__name__)`` and %-style
    messages; the facade emits key/value events through structlog. Both end
    up on the root handlers installed here.
    """
    numeric_level = resolve_level(level)
    logging.basicConfig(level=numeric_level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger(ROOT_LOGGER).setLevel(numeric_level)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        processors=build_processors(json_output),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def configure_from_settings(config: LoggingConfig) -> None:
    configure_logging(config.level, config.use_json)


def get_logger(name: Optional[str] = None):
    """Return a structlog logger that inherits the global configuration."""
    return structlog.get_logger(name)
