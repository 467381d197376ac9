import os
import random
import sys

# Ensure marksheet package is importable when run from a checkout
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from marksheet.core.database import MARKS, STUDENTS, USERS, ensure_indexes, get_database
from marksheet.core.security import get_password_hash
from marksheet.utils.helpers import utcnow

SUBJECTS = ["Mathematics", "Science", "English", "History", "Geography"]
SEMESTERS = ["Fall 2023", "Spring 2024"]
ACADEMIC_YEAR = "2023-2024"

TEACHERS = [
    ("John Smith", "john.smith@school.com"),
    ("Sarah Johnson", "sarah.johnson@school.com"),
]

STUDENTS_SEED = [
    ("Alice Brown", "alice.brown@student.com", "STU001"),
    ("Bob Wilson", "bob.wilson@student.com", "STU002"),
    ("Carol Davis", "carol.davis@student.com", "STU003"),
    ("David Miller", "david.miller@student.com", "STU004"),
    ("Emma Garcia", "emma.garcia@student.com", "STU005"),
]


def seed(db, rng=None) -> dict:
    rng = rng or random.Random()
    now = utcnow()

    for name in (USERS, STUDENTS, MARKS):
        db[name].delete_many({})
    ensure_indexes(db)

    db[USERS].insert_one({
        "name": "Admin User",
        "email": "admin@school.com",
        "password": get_password_hash("admin123"),
        "role": "admin",
        "created_at": now,
        "updated_at": now,
    })

    teacher_password = get_password_hash("teacher123")
    teacher_ids = []
    for name, email in TEACHERS:
        result = db[USERS].insert_one({
            "name": name,
            "email": email,
            "password": teacher_password,
            "role": "teacher",
            "created_at": now,
            "updated_at": now,
        })
        teacher_ids.append(str(result.inserted_id))

    student_password = get_password_hash("admin123")
    marks = []
    for i, (name, email, roll) in enumerate(STUDENTS_SEED):
        db[USERS].insert_one({
            "name": name,
            "email": email,
            "password": student_password,
            "role": "student",
            "created_at": now,
            "updated_at": now,
        })
        result = db[STUDENTS].insert_one({
            "name": name,
            "email": email,
            "student_id": roll,
            "created_at": now,
            "updated_at": now,
        })
        student_oid = str(result.inserted_id)
        teacher_id = teacher_ids[i % 2]

        for subject in SUBJECTS:
            for semester in SEMESTERS:
                marks.append({
                    "student_id": student_oid,
                    "subject": subject,
                    "marks": float(rng.randint(70, 99)),
                    "max_marks": 100.0,
                    "semester": semester,
                    "academic_year": ACADEMIC_YEAR,
                    "teacher_id": teacher_id,
                    "created_at": now,
                    "updated_at": now,
                })

    db[MARKS].insert_many(marks)
    return {
        "users": db[USERS].count_documents({}),
        "students": db[STUDENTS].count_documents({}),
        "marks": db[MARKS].count_documents({}),
    }


def main():
    print("Seeding MongoDB...")
    counts = seed(get_database())
    print(f"Done: {counts}")

    print("\nSample login credentials:")
    print("Admin: admin@school.com / admin123")
    for name, email in TEACHERS:
        print(f"Teacher {name}: {email} / teacher123")
    print("\nStudents (password admin123):")
    for name, email, _ in STUDENTS_SEED:
        print(f"{name}: {email}")


if __name__ == "__main__":
    main()
