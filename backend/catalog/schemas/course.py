from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _clean_prerequisite_codes(value: list[str]) -> list[str]:
    cleaned: list[str] = []
    for item in value:
        if not item.strip():
            raise ValueError("prerequisite codes must not be blank")
        cleaned.append(item)
    return cleaned


class CourseBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    credits: int = Field(default=3, ge=0, le=40)
    prerequisites: list[str] = Field(default_factory=list, max_length=200)

    @field_validator("code")
    @classmethod
    def strip_code(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("code must not be blank")
        return stripped

    @field_validator("prerequisites")
    @classmethod
    def validate_prerequisites(cls, value: list[str]) -> list[str]:
        return _clean_prerequisite_codes(value)


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    credits: int | None = Field(default=None, ge=0, le=40)
    prerequisites: list[str] | None = Field(default=None, max_length=200)

    @field_validator("code", "title", "description", "credits", "prerequisites", mode="before")
    @classmethod
    def reject_explicit_null(cls, value):
        # Omit a field to leave it unchanged; every course column is NOT NULL.
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @field_validator("code")
    @classmethod
    def strip_code(cls, value: str | None) -> str | None:
        if value is None:
            return value
        stripped = value.strip()
        if not stripped:
            raise ValueError("code must not be blank")
        return stripped

    @field_validator("prerequisites")
    @classmethod
    def validate_prerequisites(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return value
        return _clean_prerequisite_codes(value)


class CourseOut(BaseModel):
    id: str
    code: str
    title: str
    description: str
    credits: int
    prerequisites: list[str]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
