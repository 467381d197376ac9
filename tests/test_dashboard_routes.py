from tests.factories import auth_header, make_mark, make_user


def test_dashboard_stats(client, db, student, other_student, teacher, admin_headers):
    make_user(db, "Sarah Johnson", "sarah.johnson@school.com", "teacher")
    make_mark(db, student, teacher, marks=80, max_marks=100)
    make_mark(db, other_student, teacher, marks=45, max_marks=50, subject="Science")

    res = client.get("/api/dashboard/stats", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["stats"] == {
        "total_students": 2,
        "total_teachers": 2,
        "total_marks": 2,
        "average_marks": 85.0,
    }


def test_dashboard_stats_empty(client, admin_headers):
    stats = client.get("/api/dashboard/stats", headers=admin_headers).json()["stats"]
    assert stats["total_marks"] == 0
    assert stats["average_marks"] == 0.0


def test_dashboard_stats_admin_only(client, teacher_headers):
    assert client.get("/api/dashboard/stats", headers=teacher_headers).status_code == 403


def test_teachers_listing(client, teacher, admin_headers):
    res = client.get("/api/dashboard/teachers", headers=admin_headers)
    teachers = res.json()["teachers"]
    assert [t["email"] for t in teachers] == ["john.smith@school.com"]
    assert "password" not in teachers[0]


def test_teacher_stats(client, db, student, other_student, teacher, teacher_headers, admin_headers):
    make_mark(db, student, teacher, subject="Mathematics")
    make_mark(db, student, teacher, subject="Science")
    make_mark(db, other_student, teacher, subject="Mathematics")

    url = f"/api/dashboard/teacher/{teacher['_id']}/stats"
    own = client.get(url, headers=teacher_headers)
    assert own.status_code == 200
    assert own.json()["stats"] == {"students_handled": 2, "marks_entries": 3}

    assert client.get(url, headers=admin_headers).json()["stats"]["marks_entries"] == 3


def test_teacher_cannot_read_colleague_stats(client, db, teacher_headers):
    colleague = make_user(db, "Sarah Johnson", "sarah.johnson@school.com", "teacher")
    res = client.get(f"/api/dashboard/teacher/{colleague['_id']}/stats", headers=teacher_headers)
    assert res.status_code == 403


def test_students_have_no_dashboard(client, db, teacher):
    pupil = make_user(db, "Alice Brown", "alice.brown@student.com", "student")
    res = client.get(f"/api/dashboard/teacher/{teacher['_id']}/stats", headers=auth_header(pupil))
    assert res.status_code == 403
