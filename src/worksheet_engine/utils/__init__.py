from .files import collect_documents, read_document_text
from .logging import configure_logging, get_logger

__all__ = ["collect_documents", "configure_logging", "get_logger", "read_document_text"]
