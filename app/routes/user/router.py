import logging
from fastapi import APIRouter, Depends, HTTPException

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.user.user import LoginRequest, ProfileUpdate, RegisterRequest, User
from app.services.json import return_json, return_message
from app.utilities.security import get_current_user, hash_password, token_for, verify_password

logger = logging.getLogger(__name__)

auth_router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
)


# Register a buyer or seller
@auth_router.post("/register")
async def register(data: RegisterRequest, storage: Storage = Depends(get_storage)):
    try:
        if storage.get_user_by_email(data.email) or storage.get_user_by_username(data.username):
            raise HTTPException(status_code=400, detail="User already exists")

        user = storage.create_user(User(
            username=data.username,
            email=data.email,
            password=hash_password(data.password),
            role=data.role,
        ))
        logger.info(f"🆕 Registered {user.role} {user.username}")
        return return_message(
            "User registered successfully", 201, token=token_for(user), user=user.public()
        )
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Registration error: {e}")
        raise HTTPException(status_code=500, detail="Registration failed")


# User login
@auth_router.post("/login")
async def login(data: LoginRequest, storage: Storage = Depends(get_storage)):
    try:
        user = storage.get_user_by_email(data.email)
        if not user or not verify_password(data.password, user.password):
            raise HTTPException(status_code=401, detail="Invalid credentials")

        logger.info(f"🔑 Login successful for user: {user.username} role: {user.role}")
        return return_message("Login successful", token=token_for(user), user=user.public())
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Login error: {e}")
        raise HTTPException(status_code=500, detail="Login failed")


@auth_router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return return_json(current_user)


# Tokens are stateless, the client discards its copy
@auth_router.post("/logout")
async def logout():
    return return_message("Logout successful")


@auth_router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        updates = data.model_dump(exclude_none=True)
        if "email" in updates:
            existing = storage.get_user_by_email(updates["email"])
            if existing and existing.id != current_user.id:
                raise HTTPException(status_code=400, detail="Email already in use")
        if "username" in updates:
            existing = storage.get_user_by_username(updates["username"])
            if existing and existing.id != current_user.id:
                raise HTTPException(status_code=400, detail="Username already in use")

        user = storage.update_user(current_user.id, updates)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return return_message("Profile updated successfully", user=user.public())
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Profile update error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update profile")
