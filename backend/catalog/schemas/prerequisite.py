from pydantic import BaseModel


class PrerequisiteGraphOut(BaseModel):
    course_id: str
    start_code: str
    adjacency: dict[str, list[str]]


class PrerequisiteValidation(BaseModel):
    valid: bool
    cycle: list[str] | None = None
    reason: str | None = None

    @classmethod
    def ok(cls) -> "PrerequisiteValidation":
        return cls(valid=True)

    @classmethod
    def cycle_found(cls, cycle: list[str]) -> "PrerequisiteValidation":
        return cls(valid=False, cycle=cycle)

    @classmethod
    def depth_exceeded(cls, max_depth: int, start_code: str) -> "PrerequisiteValidation":
        return cls(valid=False, reason=f"Exceeded max depth ({max_depth}) starting from {start_code}")


class DependentCourseOut(BaseModel):
    id: str
    code: str
    title: str
    matched: list[str]
