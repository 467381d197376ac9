import io
import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from marksheet.utils.helpers import format_percentage

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ALL_MARKS_COLUMNS = [
    "StudentName",
    "StudentEmail",
    "StudentID",
    "Subject",
    "Marks",
    "MaxMarks",
    "Percentage",
    "Semester",
    "AcademicYear",
    "DateAdded",
]

STUDENT_MARKS_COLUMNS = [
    "Subject",
    "Marks",
    "MaxMarks",
    "Percentage",
    "Semester",
    "AcademicYear",
    "DateAdded",
]

# Excel rejects these in sheet titles and caps titles at 31 characters
_SHEET_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")
_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9 _.-]")


def format_date(value: Optional[datetime]) -> str:
    if not isinstance(value, datetime):
        return "Unknown"
    return f"{value.month}/{value.day}/{value.year}"


def sheet_title(name: str) -> str:
    title = _SHEET_FORBIDDEN.sub("", name).strip()
    return (title or "Marks")[:31]


def download_filename(name: str) -> str:
    safe = _FILENAME_UNSAFE.sub("", name).strip() or "student"
    return f"{safe}_marks.xlsx"


def _to_xlsx(df: pd.DataFrame, sheet_name: str) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    buffer.seek(0)
    return buffer.getvalue()


def all_marks_rows(marks: Iterable[Dict[str, Any]], students_by_id: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    rows = []
    for mark in marks:
        student = students_by_id.get(str(mark.get("student_id")))
        rows.append({
            "StudentName": student["name"] if student else "Unknown Student",
            "StudentEmail": student["email"] if student else "Unknown Email",
            "StudentID": student["student_id"] if student else "Unknown ID",
            "Subject": mark["subject"],
            "Marks": mark["marks"],
            "MaxMarks": mark["max_marks"],
            "Percentage": format_percentage(mark["marks"], mark["max_marks"]),
            "Semester": mark["semester"],
            "AcademicYear": mark["academic_year"],
            "DateAdded": format_date(mark.get("created_at")),
        })
    return rows


def student_marks_rows(marks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Per-subject rows followed by a TOTAL row."""
    rows = [
        {
            "Subject": mark["subject"],
            "Marks": mark["marks"],
            "MaxMarks": mark["max_marks"],
            "Percentage": format_percentage(mark["marks"], mark["max_marks"]),
            "Semester": mark["semester"],
            "AcademicYear": mark["academic_year"],
            "DateAdded": format_date(mark.get("created_at")),
        }
        for mark in marks
    ]

    total = sum(mark["marks"] for mark in marks)
    total_max = sum(mark["max_marks"] for mark in marks)
    rows.append({
        "Subject": "TOTAL",
        "Marks": total,
        "MaxMarks": total_max,
        "Percentage": format_percentage(total, total_max),
        "Semester": "",
        "AcademicYear": "",
        "DateAdded": "",
    })
    return rows


def build_all_marks_workbook(rows: List[Dict[str, Any]]) -> bytes:
    df = pd.DataFrame(rows, columns=ALL_MARKS_COLUMNS)
    return _to_xlsx(df, "Student Marks")


def build_student_marks_workbook(student_name: str, rows: List[Dict[str, Any]]) -> bytes:
    df = pd.DataFrame(rows, columns=STUDENT_MARKS_COLUMNS)
    return _to_xlsx(df, sheet_title(f"{student_name} Marks"))
