from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from marksheet.core.config import CONFIG
from marksheet.core.database import MARKS, STUDENTS, USERS, get_database
from marksheet.core.logger import get_logger
from marksheet.core.security import get_password_hash, require_role
from marksheet.models.student_schemas import (
    StudentCreate,
    StudentEnvelope,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
)
from marksheet.utils.helpers import serialize_doc, to_object_id, utcnow

router = APIRouter(prefix="/api/students", tags=["Students"])
logger = get_logger("students")

DUPLICATE_STUDENT = "Student with this email or ID already exists"


def _student_response(doc: dict) -> StudentResponse:
    return StudentResponse(**serialize_doc(doc))


@router.get("", response_model=StudentListResponse)
def get_all_students(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher"])),
):
    students = [_student_response(doc) for doc in db[STUDENTS].find({}).sort("student_id", 1)]
    return StudentListResponse(message="Students retrieved successfully", students=students)


@router.get("/me", response_model=StudentEnvelope)
def get_my_student_record(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["student"])),
):
    """Student record linked to the logged-in student account."""
    doc = db[STUDENTS].find_one({"email": current_user["email"]})
    if not doc:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentEnvelope(message="Student retrieved successfully", student=_student_response(doc))


@router.get("/email/{email}", response_model=StudentEnvelope)
def get_student_by_email(
    email: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["student"])),
):
    # Students may only look themselves up
    if email.lower() != current_user["email"].lower():
        raise HTTPException(status_code=403, detail="Access denied")

    doc = db[STUDENTS].find_one({"email": current_user["email"]})
    if not doc:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentEnvelope(message="Student retrieved successfully", student=_student_response(doc))


@router.post("", response_model=StudentEnvelope, status_code=status.HTTP_201_CREATED)
def add_student(
    payload: StudentCreate,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin"])),
):
    students = db[STUDENTS]
    if students.find_one({"$or": [{"email": payload.email}, {"student_id": payload.student_id}]}):
        raise HTTPException(status_code=400, detail=DUPLICATE_STUDENT)

    now = utcnow()
    doc = {
        "name": payload.name,
        "email": payload.email,
        "student_id": payload.student_id,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = students.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail=DUPLICATE_STUDENT)
    doc["_id"] = result.inserted_id

    # Every student gets a login account unless one already exists for the email
    if not db[USERS].find_one({"email": payload.email}):
        db[USERS].insert_one({
            "name": payload.name,
            "email": payload.email,
            "password": get_password_hash(CONFIG.DEFAULT_ACCOUNT_PASSWORD),
            "role": "student",
            "created_at": now,
            "updated_at": now,
        })

    logger.info("Student %s (%s) added by %s", payload.student_id, payload.email, current_user["email"])
    return StudentEnvelope(message="Student added successfully", student=_student_response(doc))


@router.get("/{id}", response_model=StudentEnvelope)
def get_student_by_id(
    id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher"])),
):
    doc = db[STUDENTS].find_one({"_id": to_object_id(id, "Student not found")})
    if not doc:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentEnvelope(message="Student retrieved successfully", student=_student_response(doc))


@router.put("/{id}", response_model=StudentEnvelope)
def update_student(
    id: str,
    updates: StudentUpdate,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin"])),
):
    oid = to_object_id(id, "Student not found")
    students = db[STUDENTS]
    existing = students.find_one({"_id": oid})
    if not existing:
        raise HTTPException(status_code=404, detail="Student not found")

    update_data = updates.model_dump(exclude_none=True)

    clashes = []
    if "email" in update_data:
        clashes.append({"email": update_data["email"]})
    if "student_id" in update_data:
        clashes.append({"student_id": update_data["student_id"]})
    if clashes and students.find_one({"$or": clashes, "_id": {"$ne": oid}}):
        raise HTTPException(status_code=400, detail=DUPLICATE_STUDENT)

    new_email = update_data.get("email")
    if new_email and new_email != existing["email"]:
        other = db[USERS].find_one({"email": new_email})
        if other:
            raise HTTPException(status_code=400, detail="Email already in use by another account")

    update_data["updated_at"] = utcnow()
    try:
        updated = students.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail=DUPLICATE_STUDENT)

    # Keep the student's login account in step
    account_changes = {k: update_data[k] for k in ("name", "email") if k in update_data}
    if account_changes:
        account_changes["updated_at"] = update_data["updated_at"]
        db[USERS].update_one(
            {"email": existing["email"], "role": "student"},
            {"$set": account_changes},
        )

    return StudentEnvelope(message="Student updated successfully", student=_student_response(updated))


@router.delete("/{id}")
def delete_student(
    id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin"])),
):
    oid = to_object_id(id, "Student not found")
    student = db[STUDENTS].find_one({"_id": oid})
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    db[STUDENTS].delete_one({"_id": oid})
    # Not transactional: marks and the login account are removed by follow-up queries
    marks_result = db[MARKS].delete_many({"student_id": str(oid)})
    db[USERS].delete_one({"email": student["email"], "role": "student"})

    logger.info(
        "Student %s deleted with %d marks by %s",
        student.get("student_id"), marks_result.deleted_count, current_user["email"],
    )
    return {"message": "Student and associated marks deleted successfully"}
