import re
from enum import Enum
from typing import List, Optional
from pydantic import Field, computed_field, field_validator

from app.models.base import ApiModel, Document, new_id

YOUTUBE_URL = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/.+")
HTTP_URL = re.compile(r"^https?://.+")


class Level(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ModuleCreate(ApiModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    youtube_url: str
    duration: int = Field(..., ge=1, description="Minutes")
    order_index: Optional[int] = Field(None, ge=0)

    @field_validator("youtube_url")
    @classmethod
    def validate_youtube_url(cls, v):
        if not YOUTUBE_URL.match(v):
            raise ValueError("Please enter a valid YouTube URL (youtube.com or youtu.be)")
        return v


class Module(ModuleCreate):
    id: str = Field(default_factory=new_id, alias="_id")
    order_index: int = Field(0, ge=0)


class ModuleEdit(ModuleCreate):
    """A module in a course update; keeps its id when it already has one."""

    id: Optional[str] = Field(None, alias="_id")


class NoteCreate(ApiModel):
    title: str = Field(..., min_length=1)
    pdf_url: str
    file_size: str = "Unknown"

    @field_validator("pdf_url")
    @classmethod
    def validate_pdf_url(cls, v):
        if not HTTP_URL.match(v):
            raise ValueError("Please enter a valid URL")
        return v


class Note(NoteCreate):
    id: str = Field(default_factory=new_id, alias="_id")


class CourseCreate(ApiModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    level: Level = Level.BEGINNER
    price: float = Field(0, ge=0)
    modules: List[ModuleCreate] = Field(default_factory=list)
    notes: List[NoteCreate] = Field(default_factory=list)


class CourseUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    thumbnail: Optional[str] = None
    level: Optional[Level] = None
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    modules: Optional[List[ModuleEdit]] = None
    notes: Optional[List[Note]] = None


class Course(Document):
    title: str
    description: str
    category: str
    thumbnail: Optional[str] = None
    level: Level = Level.BEGINNER
    price: float = 0
    instructor_id: Optional[str] = None
    is_active: bool = True
    modules: List[Module] = Field(default_factory=list)
    notes: List[Note] = Field(default_factory=list)

    @computed_field
    @property
    def video_count(self) -> int:
        return len(self.modules)

    @computed_field
    @property
    def duration(self) -> int:
        """Total minutes of video across modules."""
        return sum(m.duration for m in self.modules)

    def sorted_modules(self) -> List[Module]:
        return sorted(self.modules, key=lambda m: m.order_index)

    def summary(self) -> dict:
        return {"_id": self.id, "title": self.title, "category": self.category}
