import pytest

from marksheet.services.marks_ingest import process_marks_csv
from tests.factories import make_student

HEADER = "student_id,subject,marks,max_marks,semester,academic_year\n"


@pytest.fixture
def roster(db):
    return {
        "STU001": make_student(db, "Alice Brown", "alice.brown@student.com", "STU001"),
        "STU002": make_student(db, "Bob Wilson", "bob.wilson@student.com", "STU002"),
    }


def test_rows_are_upserted(db, roster):
    content = (HEADER
               + "STU001,Mathematics,70,100,Fall 2023,2023-2024\n"
               + "STU001,Mathematics,75,100,Fall 2023,2023-2024\n").encode()
    result = process_marks_csv(db, content, "teacher-1")

    assert result["records_processed"] == 2
    assert result["unique_students"] == 1
    docs = list(db.marks.find({}))
    assert len(docs) == 1
    assert docs[0]["marks"] == 75.0
    assert docs[0]["student_id"] == str(roster["STU001"]["_id"])
    assert docs[0]["teacher_id"] == "teacher-1"
    assert "created_at" in docs[0]


def test_invalid_rows_are_skipped(db, roster):
    content = (HEADER
               + "STU001,Mathematics,abc,100,Fall 2023,2023-2024\n"
               + "STU001,,50,100,Fall 2023,2023-2024\n"
               + "STU001,Science,120,100,Fall 2023,2023-2024\n"
               + "STU999,Science,50,100,Fall 2023,2023-2024\n"
               + "STU002,Science,50,,Fall 2023,2023-2024\n").encode()
    result = process_marks_csv(db, content, "teacher-1")

    assert result["records_processed"] == 0
    assert result["records_skipped"] == 5
    assert db.marks.count_documents({}) == 0


def test_non_finite_scores_are_skipped(db, roster):
    content = (HEADER
               + "STU001,Mathematics,nan,100,Fall 2023,2023-2024\n"
               + "STU001,Science,50,inf,Fall 2023,2023-2024\n"
               + "STU002,English,-Infinity,100,Fall 2023,2023-2024\n"
               + "STU002,History,65,100,Fall 2023,2023-2024\n").encode()
    result = process_marks_csv(db, content, "teacher-1")

    assert result["records_processed"] == 1
    assert result["records_skipped"] == 3
    assert [doc["subject"] for doc in db.marks.find({})] == ["History"]


def test_missing_columns_raise(db):
    with pytest.raises(ValueError, match="academic_year"):
        process_marks_csv(db, b"student_id,subject,marks,max_marks,semester\n", "teacher-1")


def test_byte_order_mark_is_ignored(db, roster):
    content = ("\ufeff" + HEADER + "STU002,English,60,100,Fall 2023,2023-2024\n").encode("utf-8")
    assert process_marks_csv(db, content, "teacher-1")["records_processed"] == 1
