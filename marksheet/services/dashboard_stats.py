from pymongo.database import Database

from marksheet.core.database import MARKS, STUDENTS, USERS


def get_dashboard_stats(db: Database) -> dict:
    """
    Headline counts for the admin dashboard.
    average_marks is the mean of each mark's percentage, not of raw scores.
    """
    total_students = db[STUDENTS].count_documents({})
    total_teachers = db[USERS].count_documents({"role": "teacher"})
    total_marks = db[MARKS].count_documents({})

    ratios = [
        doc["marks"] / doc["max_marks"]
        for doc in db[MARKS].find({}, {"marks": 1, "max_marks": 1})
        if doc.get("max_marks")
    ]
    average_marks = sum(ratios) / len(ratios) * 100 if ratios else 0.0

    return {
        "total_students": total_students,
        "total_teachers": total_teachers,
        "total_marks": total_marks,
        "average_marks": round(average_marks, 2),
    }


def get_teacher_stats(db: Database, teacher_id: str) -> dict:
    students_handled = db[MARKS].distinct("student_id", {"teacher_id": teacher_id})
    marks_entries = db[MARKS].count_documents({"teacher_id": teacher_id})
    return {
        "students_handled": len(students_handled),
        "marks_entries": marks_entries,
    }
