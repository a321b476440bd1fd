from .question_catalog import QuestionCatalog, QuestionFilter

__all__ = ["QuestionCatalog", "QuestionFilter"]
