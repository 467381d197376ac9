from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class RoleEnum(str, Enum):
    admin = "admin"
    teacher = "teacher"
    student = "student"


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: RoleEnum


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: RoleEnum
    subject: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class TeacherCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    # Falls back to the configured default password when omitted
    password: Optional[str] = Field(None, min_length=6)
    subject: Optional[str] = None


class TeacherUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    subject: Optional[str] = None


class TeacherListResponse(BaseModel):
    message: str
    teachers: List[UserResponse]
