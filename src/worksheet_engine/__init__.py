"""
Worksheet engine.

Similar-question ranking, exam metadata auto-tagging and wrong-answer retest
composition for a teacher/student worksheet platform.
"""

from .config.loader import load_settings

__all__ = ["load_settings"]
