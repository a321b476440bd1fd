from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

# Plain-text exports from the upload/OCR pipeline; binary formats are handled upstream.
SUPPORTED_EXTENSIONS = {".txt", ".md", ".markdown"}


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def read_document_text(path: Path) -> str:
    """Return the text of an extracted document, tolerating stray bytes from OCR output."""
    if not is_supported(path):
        raise ValueError(
            f"Unsupported document type '{path.suffix}'. Expected one of: "
            + ", ".join(sorted(SUPPORTED_EXTENSIONS))
        )
    return path.read_text(encoding="utf-8", errors="replace")


def iter_documents(directory: Path) -> Iterable[Path]:
    """Yield all supported document paths within the given directory tree."""
    for ext in sorted(SUPPORTED_EXTENSIONS):
        yield from directory.rglob(f"*{ext}")


def collect_documents(directory: Path) -> List[Path]:
    """Return supported documents under the directory in a stable order."""
    return sorted(iter_documents(directory))
