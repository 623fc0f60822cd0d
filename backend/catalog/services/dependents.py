from __future__ import annotations

from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.accessor import EntityAccessor
from catalog.models.course import Course
from catalog.schemas.prerequisite import DependentCourseOut


def _normalize_code(value: str) -> str:
    return value.strip().lower()


def find_dependent_courses(
    store: EntityAccessor,
    course_id: str,
    candidate_code: str | None = None,
) -> list[DependentCourseOut]:
    """Courses listing the target code as a prerequisite.

    The target is ``candidate_code`` when it is not blank, otherwise the code of
    the course itself. Matching ignores case and surrounding whitespace; the
    matched entries are returned as stored.
    """
    course = store.get_by_id(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)

    target_code = (candidate_code or "").strip() or course.code
    target = _normalize_code(target_code)

    dependents: list[DependentCourseOut] = []
    for candidate in store.scan_all(Course):
        if candidate.id == course_id or not isinstance(candidate.prerequisites, list):
            continue
        matched = [
            item
            for item in candidate.prerequisites
            if isinstance(item, str) and _normalize_code(item) == target
        ]
        if matched:
            dependents.append(
                DependentCourseOut(id=candidate.id, code=candidate.code, title=candidate.title, matched=matched)
            )
    return dependents
