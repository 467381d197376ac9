# marksheet/models/__init__.py

from .user_schemas import RoleEnum, UserResponse
from .student_schemas import StudentResponse
from .marks_schemas import MarkResponse

__all__ = [
    "RoleEnum",
    "UserResponse",
    "StudentResponse",
    "MarkResponse",
]
