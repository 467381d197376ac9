import csv
import io
import math

from pymongo.database import Database

from marksheet.core.database import MARKS, STUDENTS
from marksheet.core.logger import get_logger
from marksheet.utils.helpers import utcnow

logger = get_logger("marks_ingest")

REQUIRED_HEADERS = ["student_id", "subject", "marks", "max_marks", "semester", "academic_year"]


def process_marks_csv(db: Database, file_content: bytes, teacher_id: str) -> dict:
    """
    Parses a CSV uploaded by a teacher and upserts one mark per row.
    Expected headers: student_id, subject, marks, max_marks, semester, academic_year
    `student_id` here is the institutional roll number (STU001), not the database id.
    """
    decoded = file_content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(decoded))

    missing = [h for h in REQUIRED_HEADERS if h not in (reader.fieldnames or [])]
    if missing:
        raise ValueError(f"Missing CSV columns: {', '.join(missing)}")

    records_processed = 0
    records_skipped = 0
    students_updated = set()
    # roll number -> student document id
    resolved = {}

    for row in reader:
        roll = (row.get("student_id") or "").strip()
        subject = (row.get("subject") or "").strip()
        semester = (row.get("semester") or "").strip()
        academic_year = (row.get("academic_year") or "").strip()

        try:
            obtained = float(row.get("marks") or "")
            maximum = float(row.get("max_marks") or "")
        except ValueError:
            records_skipped += 1
            continue
        # float() also accepts nan and inf
        if not (math.isfinite(obtained) and math.isfinite(maximum)):
            records_skipped += 1
            continue

        if not roll or not subject or not semester or not academic_year:
            records_skipped += 1
            continue
        if maximum <= 0 or obtained < 0 or obtained > maximum:
            records_skipped += 1
            continue

        if roll not in resolved:
            student = db[STUDENTS].find_one({"student_id": roll}, {"_id": 1})
            resolved[roll] = str(student["_id"]) if student else None
        student_oid = resolved[roll]
        if student_oid is None:
            records_skipped += 1
            continue

        now = utcnow()
        db[MARKS].update_one(
            {
                "student_id": student_oid,
                "subject": subject,
                "semester": semester,
                "academic_year": academic_year,
            },
            {
                "$set": {
                    "marks": obtained,
                    "max_marks": maximum,
                    "teacher_id": teacher_id,
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )
        students_updated.add(student_oid)
        records_processed += 1

    logger.info(
        "CSV ingest by teacher %s: %d processed, %d skipped",
        teacher_id, records_processed, records_skipped,
    )
    return {
        "status": "success",
        "records_processed": records_processed,
        "records_skipped": records_skipped,
        "unique_students": len(students_updated),
    }
