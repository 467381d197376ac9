from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from pymongo import ReturnDocument
from pymongo.database import Database

from marksheet.core.database import MARKS, STUDENTS, get_database
from marksheet.core.logger import get_logger
from marksheet.core.security import require_role
from marksheet.models.marks_schemas import (
    MarkCreate,
    MarkEnvelope,
    MarkListResponse,
    MarkResponse,
    MarksSummary,
    MarkUpdate,
    MarkWithStudent,
    StudentMarksResponse,
    StudentSummary,
    UploadResult,
)
from marksheet.services.excel_export import (
    XLSX_MEDIA_TYPE,
    all_marks_rows,
    build_all_marks_workbook,
    build_student_marks_workbook,
    download_filename,
    student_marks_rows,
)
from marksheet.services.marks_ingest import process_marks_csv
from marksheet.utils.helpers import percentage, serialize_doc, to_object_id, try_object_id, utcnow

router = APIRouter(prefix="/api/marks", tags=["Marks"])
logger = get_logger("marks")

DUPLICATE_MARK = "Mark already exists for this student, subject, semester, and academic year"


def _students_by_id(db: Database) -> dict:
    return {str(doc["_id"]): doc for doc in db[STUDENTS].find({})}


def _ensure_student_access(db: Database, current_user: dict, student_id: str) -> None:
    """Students may only see the record registered under their own email."""
    if current_user.get("role") != "student":
        return
    own = db[STUDENTS].find_one({"email": current_user["email"]}, {"_id": 1})
    if not own or str(own["_id"]) != student_id:
        raise HTTPException(status_code=403, detail="Access denied")


def _load_student(db: Database, student_id: str) -> dict:
    oid = try_object_id(student_id)
    student = db[STUDENTS].find_one({"_id": oid}) if oid else None
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=MarkListResponse)
def get_all_marks(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher"])),
):
    students = _students_by_id(db)
    marks = []
    for doc in db[MARKS].find({}):
        student = students.get(str(doc["student_id"]))
        marks.append(MarkWithStudent(
            **serialize_doc(doc),
            student_name=student["name"] if student else "Unknown Student",
            student_email=student["email"] if student else "Unknown Email",
        ))
    return MarkListResponse(message="Marks retrieved successfully", marks=marks)


@router.post("", response_model=MarkEnvelope, status_code=status.HTTP_201_CREATED)
def add_mark(
    payload: MarkCreate,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["teacher"])),
):
    student = _load_student(db, payload.student_id)
    student_id = str(student["_id"])

    marks = db[MARKS]
    if marks.find_one({
        "student_id": student_id,
        "subject": payload.subject,
        "semester": payload.semester,
        "academic_year": payload.academic_year,
    }):
        raise HTTPException(status_code=400, detail=DUPLICATE_MARK)

    now = utcnow()
    doc = {
        "student_id": student_id,
        "subject": payload.subject,
        "marks": payload.marks,
        "max_marks": payload.max_marks,
        "semester": payload.semester,
        "academic_year": payload.academic_year,
        "teacher_id": str(current_user["_id"]),
        "created_at": now,
        "updated_at": now,
    }
    result = marks.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info("Mark for %s in %s added by %s", student_id, payload.subject, current_user["email"])
    return MarkEnvelope(message="Mark added successfully", mark=MarkResponse(**serialize_doc(doc)))


@router.get("/download")
def download_marks_excel(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher"])),
):
    rows = all_marks_rows(db[MARKS].find({}), _students_by_id(db))
    return _xlsx_response(build_all_marks_workbook(rows), "student_marks.xlsx")


@router.post("/upload", response_model=UploadResult)
async def upload_marks_csv(
    file: UploadFile = File(...),
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["teacher"])),
):
    """
    Endpoint for Teachers to bulk upload marks via CSV.
    Rows that cannot be matched to a student or carry bad scores are skipped.
    """
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed.")

    content = await file.read()
    try:
        return process_marks_csv(db, content, str(current_user["_id"]))
    except (ValueError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/student/{student_id}", response_model=StudentMarksResponse)
def get_marks_by_student(
    student_id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher", "student"])),
):
    _ensure_student_access(db, current_user, student_id)
    student = _load_student(db, student_id)

    marks = list(db[MARKS].find({"student_id": str(student["_id"])}))
    total = sum(m["marks"] for m in marks)
    total_max = sum(m["max_marks"] for m in marks)

    return StudentMarksResponse(
        message="Student marks retrieved successfully",
        student=StudentSummary(**serialize_doc(student)),
        marks=[MarkResponse(**serialize_doc(m)) for m in marks],
        summary=MarksSummary(
            total_marks=total,
            total_max_marks=total_max,
            percentage=percentage(total, total_max),
        ),
    )


@router.get("/student/{student_id}/download")
def download_student_marks_excel(
    student_id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher", "student"])),
):
    _ensure_student_access(db, current_user, student_id)
    student = _load_student(db, student_id)

    rows = student_marks_rows(list(db[MARKS].find({"student_id": str(student["_id"])})))
    content = build_student_marks_workbook(student["name"], rows)
    return _xlsx_response(content, download_filename(student["name"]))


@router.get("/{id}", response_model=MarkEnvelope)
def get_mark(
    id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher"])),
):
    doc = db[MARKS].find_one({"_id": to_object_id(id, "Mark not found")})
    if not doc:
        raise HTTPException(status_code=404, detail="Mark not found")
    return MarkEnvelope(message="Mark retrieved successfully", mark=MarkResponse(**serialize_doc(doc)))


@router.put("/{id}", response_model=MarkEnvelope)
def update_mark(
    id: str,
    updates: MarkUpdate,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["teacher"])),
):
    oid = to_object_id(id, "Mark not found")
    marks = db[MARKS]
    existing = marks.find_one({"_id": oid})
    if not existing:
        raise HTTPException(status_code=404, detail="Mark not found")

    update_data = updates.model_dump(exclude_none=True)

    identity = {
        key: update_data.get(key, existing[key])
        for key in ("subject", "semester", "academic_year")
    }
    if any(identity[key] != existing[key] for key in identity):
        clash = marks.find_one({"student_id": existing["student_id"], **identity, "_id": {"$ne": oid}})
        if clash:
            raise HTTPException(status_code=400, detail=DUPLICATE_MARK)

    update_data["updated_at"] = utcnow()
    updated = marks.find_one_and_update(
        {"_id": oid},
        {"$set": update_data},
        return_document=ReturnDocument.AFTER,
    )
    return MarkEnvelope(message="Mark updated successfully", mark=MarkResponse(**serialize_doc(updated)))


@router.delete("/{id}")
def delete_mark(
    id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["teacher"])),
):
    result = db[MARKS].delete_one({"_id": to_object_id(id, "Mark not found")})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Mark not found")
    return {"message": "Mark deleted successfully"}
