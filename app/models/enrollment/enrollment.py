from datetime import datetime
from typing import Optional
from pydantic import Field

from app.models.base import ApiModel, Document, utcnow


class EnrollmentCreate(ApiModel):
    user_id: str
    course_id: str


class ProgressUpdate(ApiModel):
    progress: float = Field(..., ge=0, le=100)


class Enrollment(Document):
    student_id: str
    course_id: str
    progress: float = 0
    is_completed: bool = False
    enrolled_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
