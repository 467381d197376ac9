from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from marksheet.core.database import USERS, get_database
from marksheet.core.security import require_role
from marksheet.models.marks_schemas import DashboardStats, TeacherStats
from marksheet.models.user_schemas import TeacherListResponse, UserResponse
from marksheet.services.dashboard_stats import get_dashboard_stats, get_teacher_stats
from marksheet.utils.helpers import serialize_doc

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats")
def dashboard_stats(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin"])),
):
    return {
        "message": "Dashboard stats retrieved successfully",
        "stats": DashboardStats(**get_dashboard_stats(db)),
    }


@router.get("/teachers", response_model=TeacherListResponse)
def all_teachers(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin"])),
):
    teachers = [UserResponse(**serialize_doc(doc)) for doc in db[USERS].find({"role": "teacher"})]
    return TeacherListResponse(message="Teachers retrieved successfully", teachers=teachers)


@router.get("/teacher/{teacher_id}/stats")
def teacher_stats(
    teacher_id: str,
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin", "teacher"])),
):
    # Teachers only see their own numbers
    if current_user["role"] == "teacher" and str(current_user["_id"]) != teacher_id:
        raise HTTPException(status_code=403, detail="Access denied")

    return {
        "message": "Teacher stats retrieved successfully",
        "stats": TeacherStats(**get_teacher_stats(db, teacher_id)),
    }
