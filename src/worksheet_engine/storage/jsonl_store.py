from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from worksheet_engine.catalog import QuestionCatalog
from worksheet_engine.data_models import LearningResult, Question, dump_question, parse_question

RecordT = TypeVar("RecordT")


class JsonlStore(ABC, Generic[RecordT]):
    """
    One-record-per-line JSON persistence keyed by record id.

    Stores are the explicit load/save boundary around the engine: they validate
    on the way in and keep insertion order on the way out.
    """

    def __init__(self, path: Path):
        """Ensure the backing directory exists and record the JSONL filepath."""
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def _decode(self, data: Dict[str, Any]) -> RecordT:
        """Validate one parsed JSON line into a record."""

    @abstractmethod
    def _encode(self, record: RecordT) -> Dict[str, Any]:
        """Serialise a record into a JSON-ready mapping."""

    def _key(self, record: RecordT) -> str:
        return record.id  # type: ignore[attr-defined]

    def load(self) -> List[RecordT]:
        """Read all stored records from disk and validate them."""
        if not self.path.exists():
            return []
        records: List[RecordT] = []
        with self.path.open("r", encoding="utf-8") as handle:
            for line_no, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as err:
                    raise ValueError(f"{self.path}:{line_no}: invalid JSON") from err
                records.append(self._decode(data))
        return records

    def _write(self, records: Iterable[RecordT]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            for record in records:
                handle.write(json.dumps(self._encode(record), ensure_ascii=False))
                handle.write("\n")

    def upsert(self, records: Iterable[RecordT]) -> None:
        """Merge records into storage, replacing existing entries with matching IDs."""
        existing = {self._key(record): record for record in self.load()}
        for record in records:
            existing[self._key(record)] = record
        self._write(existing.values())

    def delete(self, record_ids: Iterable[str]) -> None:
        """Remove records with the provided IDs and rewrite the JSONL file."""
        to_delete = set(record_ids)
        remaining = [record for record in self.load() if self._key(record) not in to_delete]
        self._write(remaining)


class QuestionJsonlStore(JsonlStore[Question]):
    """Question bank persisted as JSONL."""

    def _decode(self, data: Dict[str, Any]) -> Question:
        return parse_question(data)

    def _encode(self, record: Question) -> Dict[str, Any]:
        return dump_question(record)

    def load_catalog(self) -> QuestionCatalog:
        return QuestionCatalog(self.load())


class LearningResultJsonlStore(JsonlStore[LearningResult]):
    """Graded submissions persisted as JSONL."""

    def _decode(self, data: Dict[str, Any]) -> LearningResult:
        return LearningResult.model_validate(data)

    def _encode(self, record: LearningResult) -> Dict[str, Any]:
        return record.model_dump(mode="json")

    def for_student(self, student_id: str, worksheet_id: Optional[str] = None) -> List[LearningResult]:
        """Submissions of one student, optionally scoped to a single worksheet."""
        return [
            result
            for result in self.load()
            if result.student_id == student_id
            and (worksheet_id is None or result.worksheet_id == worksheet_id)
        ]
