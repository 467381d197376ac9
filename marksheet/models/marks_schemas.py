from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class MarkCreate(BaseModel):
    # Database id of the student document
    student_id: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    marks: float = Field(..., ge=0, allow_inf_nan=False)
    max_marks: float = Field(..., gt=0, allow_inf_nan=False)
    semester: str = Field(..., min_length=1)
    academic_year: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_marks_within_max(self):
        if self.marks > self.max_marks:
            raise ValueError("marks cannot exceed max_marks")
        return self


class MarkUpdate(BaseModel):
    marks: float = Field(..., ge=0, allow_inf_nan=False)
    max_marks: float = Field(..., gt=0, allow_inf_nan=False)
    subject: Optional[str] = Field(None, min_length=1)
    semester: Optional[str] = Field(None, min_length=1)
    academic_year: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_marks_within_max(self):
        if self.marks > self.max_marks:
            raise ValueError("marks cannot exceed max_marks")
        return self


class MarkResponse(BaseModel):
    id: str
    student_id: str
    subject: str
    marks: float
    max_marks: float
    semester: str
    academic_year: str
    teacher_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MarkWithStudent(MarkResponse):
    student_name: str
    student_email: str


class MarkEnvelope(BaseModel):
    message: str
    mark: MarkResponse


class MarkListResponse(BaseModel):
    message: str
    marks: List[MarkWithStudent]


class StudentSummary(BaseModel):
    id: str
    name: str
    email: str
    student_id: str


class MarksSummary(BaseModel):
    total_marks: float
    total_max_marks: float
    percentage: Optional[float] = None


class StudentMarksResponse(BaseModel):
    message: str
    student: StudentSummary
    marks: List[MarkResponse]
    summary: MarksSummary


class UploadResult(BaseModel):
    status: str
    records_processed: int
    records_skipped: int
    unique_students: int


class DashboardStats(BaseModel):
    total_students: int
    total_teachers: int
    total_marks: int
    average_marks: float


class TeacherStats(BaseModel):
    students_handled: int
    marks_entries: int
