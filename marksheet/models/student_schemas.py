from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    # Institutional roll number, e.g. STU001
    student_id: str = Field(..., min_length=1)


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    student_id: Optional[str] = Field(None, min_length=1)


class StudentResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    student_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StudentEnvelope(BaseModel):
    message: str
    student: StudentResponse


class StudentListResponse(BaseModel):
    message: str
    students: List[StudentResponse]
