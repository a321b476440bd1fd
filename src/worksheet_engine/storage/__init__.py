from .jsonl_store import JsonlStore, LearningResultJsonlStore, QuestionJsonlStore

__all__ = ["JsonlStore", "LearningResultJsonlStore", "QuestionJsonlStore"]
