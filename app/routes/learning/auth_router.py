import logging
from fastapi import APIRouter, Depends, HTTPException

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.user.user import CheckSetupRequest, CompleteSetupRequest, LearnerLogin, LearnerRegister, User
from app.services.json import dump_all, return_json, return_message
from app.utilities.helper import enrollment_view, user_stats
from app.utilities.security import get_current_user, hash_password, token_for, verify_password

logger = logging.getLogger(__name__)

learning_auth_router = APIRouter(
    prefix="/api/mongo",
    tags=["Learning Auth"],
)


def account_exists(storage: Storage, email: str, username: str) -> bool:
    return bool(storage.get_user_by_email(email) or storage.get_user_by_username(username))


def new_student(data: LearnerRegister, avatar: str = None) -> User:
    """Students start unapproved until an admin lets them in."""
    return User(
        username=data.username,
        email=data.email,
        password=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        avatar=avatar,
        role="student",
        is_approved=False,
    )


@learning_auth_router.post("/auth/check-setup")
async def check_setup(data: CheckSetupRequest, storage: Storage = Depends(get_storage)):
    try:
        return return_json({"hasSetup": storage.get_user_by_email(data.email) is not None})
    except Exception as e:
        logger.exception(f"Setup check error: {e}")
        raise HTTPException(status_code=500, detail="Failed to check setup status")


@learning_auth_router.post("/auth/complete-setup")
async def complete_setup(data: CompleteSetupRequest, storage: Storage = Depends(get_storage)):
    try:
        if account_exists(storage, data.email, data.username):
            raise HTTPException(status_code=400, detail="Account already exists with this email or username")

        user = storage.create_user(new_student(data, data.profile_image_url))
        logger.info(f"📝 Student {user.username} completed setup, pending approval")
        return return_message(
            "Account setup complete! Your account is pending approval.", 201,
            token=token_for(user), user=user.public(),
        )
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Account setup error: {e}")
        raise HTTPException(status_code=500, detail="Account setup failed")


@learning_auth_router.post("/auth/register")
async def register_student(data: LearnerRegister, storage: Storage = Depends(get_storage)):
    try:
        if account_exists(storage, data.email, data.username):
            raise HTTPException(status_code=400, detail="User already exists with this email or username")

        user = storage.create_user(new_student(data))
        logger.info(f"📝 Student {user.username} registered, pending approval")
        return return_message(
            "Registration successful! Your account is pending approval.", 201, user=user.public()
        )
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Student registration error: {e}")
        raise HTTPException(status_code=500, detail="Registration failed")


@learning_auth_router.post("/auth/login")
async def login_student(data: LearnerLogin, storage: Storage = Depends(get_storage)):
    try:
        user = storage.get_user_by_username(data.username)
        if not user or not verify_password(data.password, user.password):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return return_json({"user": user.public(), "token": token_for(user)})
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Login error: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@learning_auth_router.get("/auth/user")
async def current_learner(current_user: User = Depends(get_current_user)):
    return return_json(current_user)


# Users
@learning_auth_router.get("/users")
async def get_users(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        return return_json(dump_all(storage.list_users()))
    except Exception as e:
        logger.exception(f"Error fetching users: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch users")


@learning_auth_router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        user = storage.get_user(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return return_json(user)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching user: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user")


@learning_auth_router.get("/users/{user_id}/enrollments")
async def get_user_enrollments(
    user_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        return return_json([enrollment_view(storage, e) for e in storage.list_enrollments(user_id)])
    except Exception as e:
        logger.exception(f"Error fetching enrollments: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch enrollments")


# Students can only see their own stats
@learning_auth_router.get("/users/{user_id}/stats")
async def get_user_stats(
    user_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if current_user.role == "student" and current_user.id != user_id:
            raise HTTPException(status_code=403, detail="Access denied")
        return return_json(user_stats(storage, user_id))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching user stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user stats")
