import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.base import utcnow
from app.models.course.course import Course, CourseCreate, CourseUpdate, Module, ModuleCreate, Note, NoteCreate
from app.models.enrollment.enrollment import EnrollmentCreate, ProgressUpdate
from app.models.user.user import User
from app.services.json import dump_all, return_json, return_message
from app.utilities.helper import enroll_student, enrollment_view
from app.utilities.security import get_current_user, require_admin

logger = logging.getLogger(__name__)

course_router = APIRouter(
    prefix="/api/mongo",
    tags=["Courses"],
)


async def approved_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_approved and current_user.role != "admin":
        raise HTTPException(
            status_code=403,
            detail={"message": "Access denied. Your account is pending approval.", "requiresApproval": True},
        )
    return current_user


def build_modules(modules, start: int = 0):
    """Modules without an explicit orderIndex are placed after the existing ones."""
    built = []
    for i, m in enumerate(modules):
        data = m.model_dump(exclude_none=True)
        data.setdefault("order_index", start + i)
        built.append(Module.model_validate(data))
    return built


def find_course(storage: Storage, course_id: str) -> Course:
    course = storage.get_course(course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


@course_router.get("/courses")
async def get_courses(
    category: Optional[str] = Query(None),
    current_user: User = Depends(approved_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if category == "all":
            category = None
        # students only see the courses they are enrolled in
        course_ids = current_user.enrolled_courses if current_user.role == "student" else None
        return return_json(dump_all(storage.list_courses(category=category, course_ids=course_ids)))
    except Exception as e:
        logger.exception(f"Error fetching courses: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch courses")


@course_router.get("/courses/{course_id}")
async def get_course(
    course_id: str,
    current_user: User = Depends(approved_user),
    storage: Storage = Depends(get_storage),
):
    try:
        course = find_course(storage, course_id)
        if current_user.role == "student" and course_id not in current_user.enrolled_courses:
            raise HTTPException(status_code=403, detail="Access denied. You are not enrolled in this course.")
        return return_json(course)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching course: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch course")


@course_router.post("/courses")
async def create_course(
    data: CourseCreate,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        course = storage.create_course(Course(
            title=data.title,
            description=data.description,
            category=data.category,
            thumbnail=data.thumbnail,
            level=data.level,
            price=data.price,
            instructor_id=current_user.id,
            modules=build_modules(data.modules),
            notes=[Note.model_validate(n.model_dump()) for n in data.notes],
        ))
        logger.info(f"📚 Course {course.title} created by {current_user.username}")
        return return_json(course, 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error creating course: {e}")
        raise HTTPException(status_code=500, detail="Failed to create course")


@course_router.put("/courses/{course_id}")
async def update_course(
    course_id: str,
    data: CourseUpdate,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        find_course(storage, course_id)
        updates = data.model_dump(exclude_none=True, exclude={"modules"})
        if data.modules is not None:
            updates["modules"] = [m.model_dump() for m in build_modules(data.modules)]
        course = storage.update_course(course_id, updates)
        return return_json(course)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error updating course: {e}")
        raise HTTPException(status_code=500, detail="Failed to update course")


# Courses are deactivated, never removed
@course_router.delete("/courses/{course_id}")
async def delete_course(
    course_id: str,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        find_course(storage, course_id)
        storage.update_course(course_id, {"is_active": False})
        return return_message("Course deleted successfully")
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error deleting course: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete course")


@course_router.post("/courses/{course_id}/modules")
async def add_module(
    course_id: str,
    data: ModuleCreate,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        course = find_course(storage, course_id)
        module = build_modules([data], start=len(course.modules))[0]
        return return_json(storage.add_module(course_id, module))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error adding module: {e}")
        raise HTTPException(status_code=500, detail="Failed to add module")


@course_router.post("/courses/{course_id}/notes")
async def add_note(
    course_id: str,
    data: NoteCreate,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        find_course(storage, course_id)
        return return_json(storage.add_note(course_id, Note.model_validate(data.model_dump())))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error adding note: {e}")
        raise HTTPException(status_code=500, detail="Failed to add note")


@course_router.get("/courses/{course_id}/modules")
async def get_modules(course_id: str, storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(find_course(storage, course_id).sorted_modules()))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching modules: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch modules")


@course_router.get("/courses/{course_id}/notes")
async def get_notes(course_id: str, storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(find_course(storage, course_id).notes))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching notes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch notes")


# Enrollments
@course_router.post("/enrollments")
async def create_enrollment(
    data: EnrollmentCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if current_user.role == "student" and current_user.id != data.user_id:
            raise HTTPException(status_code=403, detail="Access denied")
        student = storage.get_user(data.user_id)
        if not student:
            raise HTTPException(status_code=404, detail="User not found")
        find_course(storage, data.course_id)
        if storage.get_enrollment(data.user_id, data.course_id):
            raise HTTPException(status_code=400, detail="Already enrolled in this course")

        enrollment = enroll_student(storage, student, data.course_id)
        return return_json(enrollment_view(storage, enrollment), 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error creating enrollment: {e}")
        raise HTTPException(status_code=500, detail="Failed to create enrollment")


@course_router.put("/enrollments/{student_id}/{course_id}/progress")
async def update_progress(
    student_id: str,
    course_id: str,
    data: ProgressUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if current_user.role == "student" and current_user.id != student_id:
            raise HTTPException(status_code=403, detail="Access denied")
        updates = {"progress": data.progress}
        if data.progress >= 100:
            updates.update({"is_completed": True, "completed_at": utcnow()})

        enrollment = storage.update_enrollment(student_id, course_id, updates)
        if not enrollment:
            raise HTTPException(status_code=404, detail="Enrollment not found")
        return return_json(enrollment)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error updating progress: {e}")
        raise HTTPException(status_code=500, detail="Failed to update progress")
