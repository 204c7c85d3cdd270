from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional
from pydantic import EmailStr, Field

from app.models.base import ApiModel, Document


# Define available roles using Enum
class Role(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    STUDENT = "student"


class User(Document):
    username: str
    email: EmailStr
    password: str
    role: Role = Role.BUYER
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    is_approved: bool = True
    is_active: bool = True
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_courses: List[str] = Field(default_factory=list)
    enrolled_courses: List[str] = Field(default_factory=list)

    def public(self) -> dict:
        """JSON-ready representation without the password hash."""
        return self.model_dump(mode="json", by_alias=True, exclude={"password"})


# Marketplace auth
class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=3, description="Username")
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, description="Password")
    role: Literal["buyer", "seller"] = "buyer"


class LoginRequest(ApiModel):
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, description="Password")


class ProfileUpdate(ApiModel):
    username: Optional[str] = Field(None, min_length=3)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


# E-learning auth
class CheckSetupRequest(ApiModel):
    email: EmailStr


class LearnerRegister(ApiModel):
    username: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class CompleteSetupRequest(LearnerRegister):
    profile_image_url: Optional[str] = None


class LearnerLogin(ApiModel):
    username: str
    password: str


# Admin user management
class ApproveUserRequest(ApiModel):
    course_ids: List[str] = Field(default_factory=list)


class ApprovalUpdate(ApiModel):
    is_approved: bool
    enrolled_courses: List[str] = Field(default_factory=list)


class SuspendRequest(ApiModel):
    courses_to_remove: List[str]


class EnrolledCoursesUpdate(ApiModel):
    enrolled_courses: List[str]
