"""Tests for the question model, catalog queries and JSONL persistence."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from worksheet_engine.catalog import QuestionCatalog, QuestionFilter
from worksheet_engine.data_models import (
    Difficulty,
    EssayQuestion,
    MultipleChoiceQuestion,
    QuestionType,
    parse_question,
)
from worksheet_engine.storage import JsonlStore, LearningResultJsonlStore, QuestionJsonlStore

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "data" / "sample"


@pytest.fixture
def bank(make_question):
    return QuestionCatalog(
        [
            make_question("m1", difficulty="low", tags=["분수"], correct_rate=90),
            make_question("m2", difficulty="high", type="essay", tags=["방정식"], correct_rate=30, source="textbook"),
            make_question("m3", chapter="ch2", tags=["분수", "통분"], correct_rate=55),
            make_question("e1", subject="english", tags=["시제"], correct_rate=70),
        ]
    )


def test_camel_case_payload_is_accepted():
    """Test that records exported with camelCase keys validate into the right variant."""
    question = parse_question(
        {
            "id": "q1",
            "subject": "math",
            "content": "1 + 1 = ?",
            "type": "multiple_choice",
            "difficulty": "low",
            "curriculum": {"chapterId": "c", "sectionId": "s", "lessonId": "l"},
            "choices": ["1", "2"],
            "correctAnswer": "2",
            "correctRate": 99,
            "tags": ["덧셈", "덧셈", " "],
            "similarQuestions": ["q2"],
        }
    )

    assert isinstance(question, MultipleChoiceQuestion)
    assert question.curriculum.path == ("c", "s", "l")
    assert question.tags == ["덧셈"]
    assert question.similar_questions == ["q2"]


def test_only_multiple_choice_may_carry_choices(make_question):
    data = make_question("q1", type="essay").model_dump()
    assert isinstance(parse_question(data), EssayQuestion)

    data["choices"] = ["a", "b"]
    with pytest.raises(ValidationError):
        parse_question(data)


@pytest.mark.parametrize(
    ("field", "value"),
    [("correct_rate", 101), ("correct_rate", -1), ("difficulty", "extreme"), ("choices", ["only one"])],
)
def test_invalid_questions_are_rejected(make_question, field, value):
    data = make_question("q1").model_dump()
    data[field] = value
    with pytest.raises(ValidationError):
        parse_question(data)


def test_questions_are_immutable(make_question):
    question = make_question("q1")
    with pytest.raises(ValidationError):
        question.correct_rate = 10


def test_difficulty_ladder():
    assert Difficulty.LOW.rank == 1
    assert Difficulty.HIGHEST.rank == 4
    assert Difficulty.HIGH.distance(Difficulty.LOW) == 2
    assert Difficulty.MEDIUM.is_below(Difficulty.HIGH)
    assert not Difficulty.HIGH.is_below(Difficulty.HIGH)


def test_duplicate_ids_are_rejected(make_question):
    with pytest.raises(ValueError, match="Duplicate"):
        QuestionCatalog([make_question("q1"), make_question("q1")])


def test_catalog_lookup(bank):
    assert len(bank) == 4
    assert "m1" in bank
    assert bank.get("missing") is None
    assert [q.id for q in bank.by_subject("math")] == ["m1", "m2", "m3"]
    assert [q.id for q in bank] == ["m1", "m2", "m3", "e1"]


def test_filter_combinations(bank):
    """Test that unset criteria match everything and set ones narrow the result."""
    assert len(bank.filter(QuestionFilter())) == 4
    assert [q.id for q in bank.filter(QuestionFilter(subject="math", tags=["분수"]))] == ["m1", "m3"]
    assert [q.id for q in bank.filter(QuestionFilter(type=[QuestionType.ESSAY]))] == ["m2"]
    assert [q.id for q in bank.filter(QuestionFilter(source=["textbook"]))] == ["m2"]
    assert [q.id for q in bank.filter(QuestionFilter(chapter_id="ch2"))] == ["m3"]
    assert [q.id for q in bank.filter(QuestionFilter(correct_rate_range=(50, 75)))] == ["m3", "e1"]
    assert [q.id for q in bank.filter(QuestionFilter(difficulty=["low", "high"]))] == ["m1", "m2"]
    assert [q.id for q in bank.filter(QuestionFilter(search_query="통분"))] == ["m3"]
    assert [q.id for q in bank.filter(QuestionFilter(search_query="QUESTION E1"))] == ["e1"]


def test_filter_rejects_inverted_rate_range():
    with pytest.raises(ValidationError):
        QuestionFilter(correct_rate_range=(80, 20))


def test_question_store_upsert_and_delete(tmp_path, make_question):
    """Test that upsert replaces by id, keeps insertion order and delete rewrites the file."""
    store = QuestionJsonlStore(tmp_path / "bank" / "questions.jsonl")
    assert store.load() == []

    store.upsert([make_question("q1"), make_question("q2", type="short_answer")])
    store.upsert([make_question("q1", correct_rate=10)])

    loaded = store.load()
    assert [q.id for q in loaded] == ["q1", "q2"]
    assert loaded[0].correct_rate == 10
    assert loaded[1].type == "short_answer"

    store.delete(["q1"])
    assert [q.id for q in store.load_catalog()] == ["q2"]


def test_question_store_keeps_korean_text_readable(tmp_path, make_question):
    store = QuestionJsonlStore(tmp_path / "questions.jsonl")
    store.upsert([make_question("q1", tags=["분수"])])
    assert "분수" in store.path.read_text(encoding="utf-8")


def test_bad_json_line_reports_location(tmp_path, make_question):
    path = tmp_path / "questions.jsonl"
    good = json.dumps(make_question("q1").model_dump(mode="json"))
    path.write_text(good + "\n{broken\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"questions\.jsonl:2"):
        QuestionJsonlStore(path).load()


def test_result_store_filters_by_student(tmp_path, make_result):
    store = LearningResultJsonlStore(tmp_path / "results.jsonl")
    store.upsert(
        [
            make_result("r1", datetime(2024, 3, 1), [("q1", False)]),
            make_result("r2", datetime(2024, 3, 2), [("q1", True)], student_id="student-2"),
        ]
    )

    results = store.for_student("student-1")

    assert [r.id for r in results] == ["r1"]
    assert results[0].wrong_answers[0].question_id == "q1"


def test_result_store_filters_by_worksheet(tmp_path, history):
    store = LearningResultJsonlStore(tmp_path / "results.jsonl")
    store.upsert(history)

    assert [r.id for r in store.for_student("student-1", "ws-mixed")] == ["r2", "r4"]
    assert store.for_student("student-1", "ws-none") == []


def test_base_store_cannot_be_instantiated(tmp_path):
    """Test that the JSONL base class requires a record codec from its subclasses."""
    with pytest.raises(TypeError):
        JsonlStore(tmp_path / "records.jsonl")


def test_sample_data_loads():
    """Test that the bundled sample bank and submissions validate."""
    catalog = QuestionJsonlStore(SAMPLE_DIR / "questions.jsonl").load_catalog()
    results = LearningResultJsonlStore(SAMPLE_DIR / "learning_results.jsonl").load()

    assert len(catalog) > 0
    assert results
    for result in results:
        for answer in result.answers:
            assert answer.question_id in catalog


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
