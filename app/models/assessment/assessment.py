from datetime import datetime
from typing import Any, List, Optional
from pydantic import Field

from app.models.base import ApiModel, Document, utcnow


class Question(ApiModel):
    question: str
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[str] = None
    points: int = Field(1, ge=0)


class GradeResult(ApiModel):
    student_id: str
    score: float
    max_score: float = 100
    grade: str
    answers: List[Any] = Field(default_factory=list)
    time_spent: int = 0
    completed_at: datetime = Field(default_factory=utcnow)


class CourseTestCreate(ApiModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    course_id: str = Field(..., min_length=1)
    questions: List[Question] = Field(default_factory=list)
    time_limit: int = Field(60, ge=1, description="Minutes")
    passing_score: float = Field(60, ge=0, le=100)
    attempts: int = Field(3, ge=1)
    max_score: float = Field(100, gt=0)


class CourseTest(Document, CourseTestCreate):
    is_active: bool = True
    results: List[GradeResult] = Field(default_factory=list)

    def result_for(self, student_id: str) -> Optional[GradeResult]:
        for result in self.results:
            if result.student_id == student_id:
                return result
        return None

    def redacted(self) -> dict:
        """Listing view: no correct answers, no submitted answers."""
        data = self.model_dump(mode="json", by_alias=True)
        for question in data["questions"]:
            question.pop("correctAnswer", None)
        for result in data["results"]:
            result.pop("answers", None)
        return data


class ResultCreate(ApiModel):
    student_id: str = Field(..., min_length=1)
    score: float = Field(..., ge=0)
    grade: str = Field(..., min_length=1)
    answers: List[Any] = Field(default_factory=list)
    time_spent: int = Field(0, ge=0)
