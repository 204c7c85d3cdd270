import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.base import utcnow
from app.models.user.user import ApprovalUpdate, ApproveUserRequest, EnrolledCoursesUpdate, SuspendRequest, User
from app.services.json import dump_all, return_json, return_message
from app.utilities.helper import admin_stats, enroll_student, student_results
from app.utilities.security import require_admin

logger = logging.getLogger(__name__)

admin_router = APIRouter(
    prefix="/api/mongo/admin",
    tags=["Learning Admin"],
    dependencies=[Depends(require_admin)],
)


def find_user(storage: Storage, user_id: str) -> User:
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@admin_router.get("/student-results")
async def get_student_results(storage: Storage = Depends(get_storage)):
    try:
        return return_json([
            {
                "student": {
                    "_id": student.id,
                    "firstName": student.first_name,
                    "lastName": student.last_name,
                    "email": student.email,
                },
                "testResults": student_results(storage, student.id),
            }
            for student in storage.list_users(role="student", is_active=True)
        ])
    except Exception as e:
        logger.exception(f"Error fetching student results: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch student results")


@admin_router.get("/pending-approvals")
async def get_pending_approvals(storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.list_users(role="student", is_approved=False)))
    except Exception as e:
        logger.exception(f"Error fetching pending approvals: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch pending approvals")


# Approved courses are also enrolled so the student sees them straight away
@admin_router.post("/approve-user/{user_id}")
async def approve_user(
    user_id: str,
    data: Optional[ApproveUserRequest] = None,
    current_user: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        find_user(storage, user_id)
        course_ids = data.course_ids if data else []
        user = storage.update_user(user_id, {
            "is_approved": True,
            "approved_by": current_user.id,
            "approved_at": utcnow(),
            "approved_courses": course_ids,
        })
        for course_id in course_ids:
            enroll_student(storage, user, course_id)
            user = storage.get_user(user_id)
        logger.info(f"✅ {current_user.username} approved {user.username} for {len(course_ids)} course(s)")
        return return_message("User approved successfully", user=user.public())
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error approving user: {e}")
        raise HTTPException(status_code=500, detail="Failed to approve user")


@admin_router.post("/reject-user/{user_id}")
async def reject_user(user_id: str, storage: Storage = Depends(get_storage)):
    try:
        if not storage.delete_user(user_id):
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"🗑️ Rejected and removed user {user_id}")
        return return_message("User rejected and removed")
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error rejecting user: {e}")
        raise HTTPException(status_code=500, detail="Failed to reject user")


@admin_router.get("/stats")
async def get_admin_stats(storage: Storage = Depends(get_storage)):
    try:
        return return_json(admin_stats(storage))
    except Exception as e:
        logger.exception(f"Error fetching admin stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch admin stats")


@admin_router.get("/users")
async def get_all_users(storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.list_users()))
    except Exception as e:
        logger.exception(f"Error fetching users: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch users")


@admin_router.put("/users/{user_id}/approval")
async def update_approval(user_id: str, data: ApprovalUpdate, storage: Storage = Depends(get_storage)):
    try:
        find_user(storage, user_id)
        updates = {"is_approved": data.is_approved}
        if data.is_approved and data.enrolled_courses:
            updates["enrolled_courses"] = data.enrolled_courses
        user = storage.update_user(user_id, updates)
        outcome = "approved and enrolled in courses" if data.is_approved else "rejected"
        return return_message(f"User {outcome} successfully", user=user.public())
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error updating user approval: {e}")
        raise HTTPException(status_code=500, detail="Failed to update user approval")


@admin_router.put("/users/{user_id}/suspend")
async def suspend_user(user_id: str, data: SuspendRequest, storage: Storage = Depends(get_storage)):
    try:
        user = find_user(storage, user_id)
        remaining = [c for c in user.enrolled_courses if c not in data.courses_to_remove]
        user = storage.update_user(user_id, {"enrolled_courses": remaining})
        return return_message("User suspended from selected courses successfully", user=user.public())
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error suspending user: {e}")
        raise HTTPException(status_code=500, detail="Failed to suspend user")


@admin_router.put("/users/{user_id}/courses")
async def update_user_courses(user_id: str, data: EnrolledCoursesUpdate, storage: Storage = Depends(get_storage)):
    try:
        find_user(storage, user_id)
        user = storage.update_user(user_id, {"enrolled_courses": data.enrolled_courses})
        return return_message("User courses updated successfully", user=user.public())
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error updating user courses: {e}")
        raise HTTPException(status_code=500, detail="Failed to update user courses")
