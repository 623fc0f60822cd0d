from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class CourseVersionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    credits: int = Field(ge=0, le=40)
    prerequisites: list[str] = Field(default_factory=list, max_length=200)
    # Informational only; a newly created version is always the active one.
    is_active: bool = True

    @field_validator("prerequisites", mode="before")
    @classmethod
    def default_prerequisites(cls, value):
        return [] if value is None else value


class CourseVersionOut(BaseModel):
    id: str
    course_id: str
    version: int
    title: str
    description: str
    credits: int
    prerequisites: list[str]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CourseVersionCreated(BaseModel):
    id: str


class CourseVersionArchiveResult(BaseModel):
    id: str
    archived: bool
    changed: bool
