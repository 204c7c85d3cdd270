import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.assessment.assessment import CourseTest, CourseTestCreate, GradeResult, ResultCreate
from app.models.user.user import User
from app.services.json import dump, return_json, return_message
from app.utilities.helper import course_ref, my_results, student_results
from app.utilities.security import get_current_user, require_admin

logger = logging.getLogger(__name__)

assessment_router = APIRouter(
    prefix="/api/mongo",
    tags=["Tests"],
)


@assessment_router.get("/tests")
async def get_tests(
    course_id: Optional[str] = Query(None, alias="courseId"),
    storage: Storage = Depends(get_storage),
):
    try:
        tests = []
        for test in storage.list_tests(course_id=course_id):
            tests.append({**test.redacted(), "course": course_ref(storage, test.course_id)})
        return return_json(tests)
    except Exception as e:
        logger.exception(f"Error fetching tests: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch tests")


# Answer keys are only shown to admins
@assessment_router.get("/tests/{test_id}")
async def get_test(
    test_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        test = storage.get_test(test_id)
        if not test:
            raise HTTPException(status_code=404, detail="Test not found")
        view = dump(test) if current_user.role == "admin" else test.redacted()
        return return_json({**view, "course": course_ref(storage, test.course_id)})
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching test: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch test")


@assessment_router.post("/tests")
async def create_test(
    data: CourseTestCreate,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        if not storage.get_course(data.course_id):
            raise HTTPException(status_code=404, detail="Course not found")
        test = storage.create_test(CourseTest.model_validate(data.model_dump()))
        logger.info(f"📝 Test {test.title} created for course {test.course_id}")
        return return_json(test, 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error creating test: {e}")
        raise HTTPException(status_code=500, detail="Failed to create test")


# Admin grading: one result per student, a new grade replaces the old one
@assessment_router.post("/tests/{test_id}/results")
async def save_result(
    test_id: str,
    data: ResultCreate,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        test = storage.get_test(test_id)
        if not test:
            raise HTTPException(status_code=404, detail="Test not found")
        if not storage.get_user(data.student_id):
            raise HTTPException(status_code=404, detail="Student not found")

        test = storage.save_test_result(test_id, GradeResult(
            student_id=data.student_id,
            score=data.score,
            max_score=test.max_score,
            grade=data.grade,
            answers=data.answers,
            time_spent=data.time_spent,
        ))
        return return_message("Grade saved successfully", test=dump(test))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error saving test result: {e}")
        raise HTTPException(status_code=500, detail="Failed to add test result")


@assessment_router.get("/students/by-username/{username}")
async def get_student_by_username(username: str, storage: Storage = Depends(get_storage)):
    try:
        student = storage.get_user_by_username(username)
        if not student or student.role != "student":
            raise HTTPException(status_code=404, detail="Student not found")
        return return_json({
            "_id": student.id,
            "username": student.username,
            "email": student.email,
            "firstName": student.first_name,
            "lastName": student.last_name,
        })
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching student: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch student")


@assessment_router.get("/student/my-results")
async def get_my_results(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if current_user.role != "student":
            raise HTTPException(status_code=403, detail="Student access required")
        return return_json(my_results(storage, current_user))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching test results: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch test results")


@assessment_router.get("/students/{student_id}/test-results")
async def get_student_test_results(
    student_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if current_user.role == "student" and current_user.id != student_id:
            raise HTTPException(status_code=403, detail="Access denied")
        return return_json(student_results(storage, student_id))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching student test results: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch student test results")
