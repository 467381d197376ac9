from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from marksheet.core.config import CONFIG
from marksheet.core.database import USERS, get_database
from marksheet.core.logger import get_logger
from marksheet.core.security import get_password_hash, require_role
from marksheet.models.user_schemas import TeacherCreate, TeacherUpdate, UserResponse
from marksheet.utils.helpers import serialize_doc, to_object_id, utcnow

router = APIRouter(
    prefix="/api/teachers",
    tags=["Teachers"],
    dependencies=[Depends(require_role(["admin"]))],
)
logger = get_logger("teachers")


def _find_teacher(db: Database, id: str) -> dict:
    teacher = db[USERS].find_one({"_id": to_object_id(id, "Teacher not found"), "role": "teacher"})
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")
    return teacher


@router.get("", response_model=list[UserResponse])
def list_teachers(db: Database = Depends(get_database)):
    return [UserResponse(**serialize_doc(doc)) for doc in db[USERS].find({"role": "teacher"})]


@router.get("/{id}", response_model=UserResponse)
def get_teacher(id: str, db: Database = Depends(get_database)):
    return UserResponse(**serialize_doc(_find_teacher(db, id)))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherCreate, db: Database = Depends(get_database)):
    if db[USERS].find_one({"email": payload.email}):
        raise HTTPException(status_code=400, detail="User already exists")

    now = utcnow()
    doc = {
        "name": payload.name,
        "email": payload.email,
        "password": get_password_hash(payload.password or CONFIG.DEFAULT_ACCOUNT_PASSWORD),
        "role": "teacher",
        "subject": payload.subject,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = db[USERS].insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")
    doc["_id"] = result.inserted_id

    logger.info("Teacher %s created", payload.email)
    return UserResponse(**serialize_doc(doc))


@router.put("/{id}", response_model=UserResponse)
def update_teacher(id: str, updates: TeacherUpdate, db: Database = Depends(get_database)):
    teacher = _find_teacher(db, id)

    update_data = updates.model_dump(exclude_none=True)
    if "email" in update_data and update_data["email"] != teacher["email"]:
        if db[USERS].find_one({"email": update_data["email"]}):
            raise HTTPException(status_code=400, detail="Email already taken.")
    if "password" in update_data:
        update_data["password"] = get_password_hash(update_data["password"])
    update_data["updated_at"] = utcnow()

    updated = db[USERS].find_one_and_update(
        {"_id": teacher["_id"]},
        {"$set": update_data},
        return_document=ReturnDocument.AFTER,
    )
    return UserResponse(**serialize_doc(updated))


@router.delete("/{id}")
def delete_teacher(id: str, db: Database = Depends(get_database)):
    teacher = _find_teacher(db, id)
    # Marks entered by this teacher are left in place
    db[USERS].delete_one({"_id": teacher["_id"]})
    logger.info("Teacher %s deleted", teacher["email"])
    return {"message": "Teacher deleted successfully"}
