import math
from typing import List, Optional

from app.database.storage import Storage
from app.models.assessment.assessment import CourseTest, GradeResult
from app.models.car.car import Car
from app.models.enrollment.enrollment import Enrollment
from app.models.inventory.inventory import InventoryLog
from app.models.user.user import User


def refresh_dealer_rating(storage: Storage, dealer_id: str):
    """Recompute a dealer's rating (mean of its reviews, 2 decimals) and review count."""
    reviews = storage.get_reviews_by_dealer(dealer_id)
    if not reviews:
        return
    rating = round(sum(r.rating for r in reviews) / len(reviews), 2)
    storage.update_dealer_rating(dealer_id, rating, len(reviews))


def dealer_summary(storage: Storage, dealer_id: str) -> dict:
    dealer = storage.get_dealer(dealer_id)
    listed = storage.get_cars_by_dealer(dealer_id)
    sales = storage.get_sales_by_dealer(dealer_id)
    completed = [s for s in sales if s.status == "completed"]
    return {
        "dealerId": dealer_id,
        "carsListed": len(listed),
        "carsSold": len(completed),
        "totalSales": len([s for s in sales if s.status != "cancelled"]),
        "totalRevenue": round(sum(s.sale_price for s in completed), 2),
        "pendingSales": len([s for s in sales if s.status == "pending"]),
        "rating": dealer.rating if dealer else 0,
    }


def score_percent(result: GradeResult) -> float:
    if not result.max_score:
        return 0
    return result.score / result.max_score * 100


def average_percent(results: List[GradeResult]) -> int:
    if not results:
        return 0
    return round(sum(score_percent(r) for r in results) / len(results))


def user_stats(storage: Storage, user_id: str) -> dict:
    enrollments = storage.list_enrollments(user_id)
    minutes = 0.0
    for enrollment in enrollments:
        course = storage.get_course(enrollment.course_id)
        if course:
            minutes += course.duration * enrollment.progress / 100
    results = [
        r for r in (t.result_for(user_id) for t in storage.list_tests()) if r is not None
    ]
    return {
        "enrolledCourses": len(enrollments),
        "completedCourses": len([e for e in enrollments if e.is_completed]),
        "hoursLearned": math.floor(minutes / 60),
        "averageScore": average_percent(results),
    }


def admin_stats(storage: Storage) -> dict:
    tests = storage.list_tests()
    results = [r for t in tests for r in t.results]
    return {
        "totalUsers": len(storage.list_users(is_active=True)),
        "activeCourses": storage.count_courses(),
        "activeTests": len(tests),
        "testsCompleted": len(results),
        "averageScore": average_percent(results),
    }


def course_ref(storage: Storage, course_id: str) -> Optional[dict]:
    course = storage.get_course(course_id)
    return course.summary() if course else None


def result_row(storage: Storage, test: CourseTest, result: Optional[GradeResult]) -> dict:
    return {
        "testId": test.id,
        "testTitle": test.title,
        "course": course_ref(storage, test.course_id),
        "maxScore": test.max_score,
        "result": result.model_dump(mode="json", by_alias=True) if result else None,
    }


def student_results(storage: Storage, student_id: str) -> List[dict]:
    """One row per active test, `result` is None where the student has no grade."""
    return [result_row(storage, t, t.result_for(student_id)) for t in storage.list_tests()]


def my_results(storage: Storage, student: User) -> List[dict]:
    rows = []
    for test in storage.list_tests():
        result = test.result_for(student.id)
        if result is None:
            continue
        rows.append({
            "testId": test.id,
            "testTitle": test.title,
            "course": course_ref(storage, test.course_id),
            "maxScore": test.max_score,
            "score": result.score,
            "grade": result.grade,
            "completedAt": result.completed_at.isoformat(),
            "timeSpent": result.time_spent,
        })
    return rows


def log_inventory(
    storage: Storage,
    action: str,
    car: Car,
    old_data: Optional[dict] = None,
    new_data: Optional[dict] = None,
    notes: Optional[str] = None,
) -> InventoryLog:
    return storage.create_inventory_log(InventoryLog(
        dealer_id=car.dealer_id,
        car_id=car.id,
        action=action,
        old_data=old_data,
        new_data=new_data,
        notes=notes,
    ))


def enroll_student(storage: Storage, student: User, course_id: str) -> Enrollment:
    """Enrollment for `student` in `course_id`, created if missing. Keeps the user's enrolledCourses in step."""
    enrollment = storage.get_enrollment(student.id, course_id)
    if enrollment is None:
        enrollment = storage.create_enrollment(Enrollment(student_id=student.id, course_id=course_id))
    if course_id not in student.enrolled_courses:
        storage.update_user(student.id, {"enrolled_courses": [*student.enrolled_courses, course_id]})
    return enrollment


def enrollment_view(storage: Storage, enrollment: Enrollment) -> dict:
    course = storage.get_course(enrollment.course_id)
    view = enrollment.model_dump(mode="json", by_alias=True)
    view["course"] = course.model_dump(
        mode="json",
        by_alias=True,
        include={"id", "title", "description", "category", "thumbnail", "duration", "video_count"},
    ) if course else None
    return view
