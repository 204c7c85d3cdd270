import pytest

from app.models.course.course import Course, Module
from app.models.enrollment.enrollment import Enrollment

MODULE = {"title": "Intro", "youtubeUrl": "https://youtu.be/abc123", "duration": 30}


@pytest.fixture
def course(storage):
    return storage.create_course(Course(
        title="Engine Basics",
        description="How combustion engines work",
        category="mechanics",
        modules=[
            Module(title="Pistons", youtube_url="https://youtu.be/p1", duration=60, order_index=1),
            Module(title="Valves", youtube_url="https://youtu.be/v1", duration=60, order_index=0),
        ],
    ))


@pytest.fixture
def student(make_user, course):
    return make_user("student", "stu", first_name="Stu", last_name="Dent", enrolled_courses=[course.id])


@pytest.fixture
def pending(make_user):
    return make_user("student", "newbie", is_approved=False)


def test_check_setup(client, student):
    assert client.post("/api/mongo/auth/check-setup", json={"email": "stu@example.com"}).json() == {"hasSetup": True}
    assert client.post("/api/mongo/auth/check-setup", json={"email": "x@example.com"}).json() == {"hasSetup": False}


def test_complete_setup_issues_token_for_pending_student(client, storage):
    response = client.post("/api/mongo/auth/complete-setup", json={
        "username": "learner", "email": "learner@example.com", "password": "secret123",
        "firstName": "Lea", "profileImageUrl": "https://img.example.com/lea.png",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"]["role"] == "student"
    assert body["user"]["isApproved"] is False
    assert body["user"]["avatar"] == "https://img.example.com/lea.png"
    assert "password" not in body["user"]

    again = client.post("/api/mongo/auth/complete-setup", json={
        "username": "other", "email": "learner@example.com", "password": "secret123",
    })
    assert again.status_code == 400


def test_register_and_login_by_username(client):
    registered = client.post("/api/mongo/auth/register", json={
        "username": "learner", "email": "learner@example.com", "password": "secret123",
    })
    assert registered.status_code == 201
    assert "token" not in registered.json()

    login = client.post("/api/mongo/auth/login", json={"username": "learner", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["token"]

    me = client.get("/api/mongo/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "learner"
    assert client.post("/api/mongo/auth/login", json={"username": "learner", "password": "nope"}).status_code == 401


def test_pending_students_are_held_back(client, pending, course):
    _, headers = pending
    response = client.get("/api/mongo/courses", headers=headers)

    assert response.status_code == 403
    assert response.json() == {"message": "Access denied. Your account is pending approval.", "requiresApproval": True}


def test_students_only_see_enrolled_courses(client, storage, student, course, admin):
    other = storage.create_course(Course(title="Detailing", description="Paint care", category="care"))
    _, headers = student

    assert [c["_id"] for c in client.get("/api/mongo/courses", headers=headers).json()] == [course.id]
    assert client.get(f"/api/mongo/courses/{course.id}", headers=headers).status_code == 200
    denied = client.get(f"/api/mongo/courses/{other.id}", headers=headers)
    assert denied.status_code == 403
    assert denied.json() == {"message": "Access denied. You are not enrolled in this course."}

    admin_courses = client.get("/api/mongo/courses", params={"category": "all"}, headers=admin[1]).json()
    assert len(admin_courses) == 2
    assert len(client.get("/api/mongo/courses", params={"category": "care"}, headers=admin[1]).json()) == 1


def test_course_crud_is_admin_only(client, admin, student):
    _, headers = admin
    payload = {"title": "Brakes", "description": "Stopping power", "category": "mechanics", "modules": [MODULE]}

    assert client.post("/api/mongo/courses", json=payload, headers=student[1]).status_code == 403
    created = client.post("/api/mongo/courses", json=payload, headers=headers)
    assert created.status_code == 201
    course = created.json()
    assert course["videoCount"] == 1
    assert course["duration"] == 30
    assert course["modules"][0]["orderIndex"] == 0

    updated = client.put(f"/api/mongo/courses/{course['_id']}", json={"title": "Brake Systems"}, headers=headers)
    assert updated.json()["title"] == "Brake Systems"

    assert client.delete(f"/api/mongo/courses/{course['_id']}", headers=headers).status_code == 200
    assert [c["title"] for c in client.get("/api/mongo/courses", headers=headers).json()] == ["Engine Basics"]
    assert client.put("/api/mongo/courses/64b7f0c2a1b2c3d4e5f60718", json={"title": "x"}, headers=headers).status_code == 404


def test_modules_and_notes(client, admin, course):
    _, headers = admin

    added = client.post(f"/api/mongo/courses/{course.id}/modules", json=MODULE, headers=headers)
    assert added.status_code == 200
    assert added.json()["modules"][-1]["orderIndex"] == 2

    bad = client.post(f"/api/mongo/courses/{course.id}/modules", json={**MODULE, "youtubeUrl": "https://vimeo.com/1"}, headers=headers)
    assert bad.status_code == 400

    modules = client.get(f"/api/mongo/courses/{course.id}/modules").json()
    assert [m["title"] for m in modules] == ["Valves", "Pistons", "Intro"]

    note = {"title": "Torque chart", "pdfUrl": "https://files.example.com/torque.pdf"}
    assert client.post(f"/api/mongo/courses/{course.id}/notes", json=note, headers=headers).status_code == 200
    notes = client.get(f"/api/mongo/courses/{course.id}/notes").json()
    assert notes[0]["fileSize"] == "Unknown"
    assert client.get("/api/mongo/courses/64b7f0c2a1b2c3d4e5f60718/notes").status_code == 404


def test_enrollment_flow(client, storage, make_user, course):
    user, headers = make_user("student", "enrollee")
    payload = {"userId": user.id, "courseId": course.id}

    created = client.post("/api/mongo/enrollments", json=payload, headers=headers)
    assert created.status_code == 201
    assert created.json()["course"]["title"] == "Engine Basics"
    assert course.id in storage.get_user(user.id).enrolled_courses

    duplicate = client.post("/api/mongo/enrollments", json=payload, headers=headers)
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "Already enrolled in this course"}

    progress = client.put(f"/api/mongo/enrollments/{user.id}/{course.id}/progress", json={"progress": 100}, headers=headers)
    assert progress.status_code == 200
    assert progress.json()["isCompleted"] is True
    assert progress.json()["completedAt"] is not None

    listed = client.get(f"/api/mongo/users/{user.id}/enrollments", headers=headers).json()
    assert listed[0]["progress"] == 100


def test_students_cannot_enroll_others(client, student, make_user, course):
    other, _ = make_user("student", "someone")
    _, headers = student

    assert client.post("/api/mongo/enrollments", json={"userId": other.id, "courseId": course.id}, headers=headers).status_code == 403
    assert client.put(f"/api/mongo/enrollments/{other.id}/{course.id}/progress", json={"progress": 5}, headers=headers).status_code == 403


def test_progress_for_missing_enrollment(client, admin, course):
    _, headers = admin
    response = client.put(f"/api/mongo/enrollments/nobody/{course.id}/progress", json={"progress": 10}, headers=headers)

    assert response.status_code == 404


def test_user_stats(client, storage, student, course):
    user, headers = student
    storage.create_enrollment(Enrollment(student_id=user.id, course_id=course.id, progress=75))

    stats = client.get(f"/api/mongo/users/{user.id}/stats", headers=headers).json()

    # 120 minutes at 75% is 90 minutes
    assert stats == {"enrolledCourses": 1, "completedCourses": 0, "hoursLearned": 1, "averageScore": 0}


def test_students_only_read_their_own_stats(client, student, admin):
    _, headers = student
    admin_user, _ = admin

    assert client.get(f"/api/mongo/users/{admin_user.id}/stats", headers=headers).status_code == 403


def test_users_routes_need_a_token(client, student):
    user, headers = student

    assert client.get("/api/mongo/users").status_code == 401
    assert client.get(f"/api/mongo/users/{user.id}", headers=headers).json()["username"] == "stu"
    assert client.get("/api/mongo/users/64b7f0c2a1b2c3d4e5f60718", headers=headers).status_code == 404


def test_admin_approves_with_courses(client, storage, admin, pending, course):
    user, student_headers = pending
    _, headers = admin

    response = client.post(f"/api/mongo/admin/approve-user/{user.id}", json={"courseIds": [course.id]}, headers=headers)

    assert response.status_code == 200
    approved = response.json()["user"]
    assert approved["isApproved"] is True
    assert approved["approvedCourses"] == [course.id]
    assert approved["enrolledCourses"] == [course.id]
    assert storage.get_enrollment(user.id, course.id) is not None
    assert client.get("/api/mongo/courses", headers=student_headers).status_code == 200


def test_admin_approves_without_body(client, admin, pending):
    user, _ = pending
    response = client.post(f"/api/mongo/admin/approve-user/{user.id}", headers=admin[1])

    assert response.status_code == 200
    assert response.json()["user"]["approvedCourses"] == []


def test_pending_approvals_and_reject(client, storage, admin, pending, student):
    user, _ = pending
    _, headers = admin

    assert [u["username"] for u in client.get("/api/mongo/admin/pending-approvals", headers=headers).json()] == ["newbie"]
    assert client.post(f"/api/mongo/admin/reject-user/{user.id}", headers=headers).status_code == 200
    assert storage.get_user(user.id) is None
    assert client.post(f"/api/mongo/admin/reject-user/{user.id}", headers=headers).status_code == 404


def test_admin_routes_reject_non_admins(client, student):
    response = client.get("/api/mongo/admin/users", headers=student[1])

    assert response.status_code == 403
    assert response.json() == {"message": "Admin access required"}


def test_approval_suspend_and_courses(client, admin, student, course):
    user, _ = student
    _, headers = admin

    revoked = client.put(f"/api/mongo/admin/users/{user.id}/approval", json={"isApproved": False}, headers=headers)
    assert revoked.json()["message"] == "User rejected successfully"
    assert revoked.json()["user"]["isApproved"] is False

    suspended = client.put(f"/api/mongo/admin/users/{user.id}/suspend", json={"coursesToRemove": [course.id]}, headers=headers)
    assert suspended.json()["user"]["enrolledCourses"] == []

    restored = client.put(f"/api/mongo/admin/users/{user.id}/courses", json={"enrolledCourses": [course.id]}, headers=headers)
    assert restored.json()["user"]["enrolledCourses"] == [course.id]

    assert client.put("/api/mongo/admin/users/64b7f0c2a1b2c3d4e5f60718/courses", json={"enrolledCourses": []}, headers=headers).status_code == 404


def test_course_update_orders_replacement_modules(client, admin, course):
    _, headers = admin
    kept = course.sorted_modules()[0]
    modules = [
        {"_id": kept.id, "title": kept.title, "youtubeUrl": kept.youtube_url, "duration": kept.duration},
        {"title": "Timing belts", "youtubeUrl": "https://youtu.be/t1", "duration": 15},
    ]

    response = client.put(f"/api/mongo/courses/{course.id}", json={"modules": modules}, headers=headers)

    assert response.status_code == 200
    updated = response.json()["modules"]
    assert [(m["title"], m["orderIndex"]) for m in updated] == [("Valves", 0), ("Timing belts", 1)]
    assert updated[0]["_id"] == kept.id
    assert updated[1]["_id"]
