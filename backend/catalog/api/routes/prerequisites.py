from fastapi import APIRouter, Depends, Query

from catalog.api.deps import get_store
from catalog.core.config import get_settings
from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.accessor import EntityAccessor
from catalog.models.course import Course
from catalog.schemas.prerequisite import DependentCourseOut, PrerequisiteGraphOut, PrerequisiteValidation
from catalog.services.dependents import find_dependent_courses
from catalog.services.prerequisite_graph import (
    DEFAULT_MAX_DEPTH,
    build_prerequisite_graph,
    validate_prerequisite_chain,
)

router = APIRouter()

settings = get_settings()


@router.get("/courses/{course_id}/prerequisites/graph", response_model=PrerequisiteGraphOut)
def get_prerequisite_graph(course_id: str, store: EntityAccessor = Depends(get_store)) -> PrerequisiteGraphOut:
    course = store.get_by_id(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    adjacency = build_prerequisite_graph(store, course_id)
    return PrerequisiteGraphOut(course_id=course_id, start_code=course.code, adjacency=adjacency)


@router.get("/courses/{course_id}/prerequisites/validation", response_model=PrerequisiteValidation)
def validate_prerequisites(
    course_id: str,
    max_depth: int = Query(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=settings.prerequisite_validation_max_depth_limit,
    ),
    store: EntityAccessor = Depends(get_store),
) -> PrerequisiteValidation:
    return validate_prerequisite_chain(store, course_id, max_depth=max_depth)


@router.get("/courses/{course_id}/dependents", response_model=list[DependentCourseOut])
def list_dependents(
    course_id: str,
    code: str | None = Query(default=None, max_length=50),
    store: EntityAccessor = Depends(get_store),
) -> list[DependentCourseOut]:
    return find_dependent_courses(store, course_id, candidate_code=code)
