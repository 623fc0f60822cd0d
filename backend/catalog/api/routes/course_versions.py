from fastapi import APIRouter, Depends, status

from catalog.api.deps import get_actor_id, get_store
from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.accessor import EntityAccessor
from catalog.schemas.version import (
    CourseVersionArchiveResult,
    CourseVersionCreate,
    CourseVersionCreated,
    CourseVersionOut,
)
from catalog.services.course_versions import (
    archive_course_version,
    create_course_version,
    get_active_course_version,
    list_course_versions,
)

router = APIRouter()


@router.get("/courses/{course_id}/versions", response_model=list[CourseVersionOut])
def list_versions(course_id: str, store: EntityAccessor = Depends(get_store)) -> list[CourseVersionOut]:
    return list_course_versions(store, course_id)


@router.post(
    "/courses/{course_id}/versions",
    response_model=CourseVersionCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_version(
    course_id: str,
    payload: CourseVersionCreate,
    actor_id: str | None = Depends(get_actor_id),
    store: EntityAccessor = Depends(get_store),
) -> CourseVersionCreated:
    version_id = create_course_version(store, course_id, payload, actor_id=actor_id)
    return CourseVersionCreated(id=version_id)


@router.get("/courses/{course_id}/versions/active", response_model=CourseVersionOut)
def get_active_version(course_id: str, store: EntityAccessor = Depends(get_store)) -> CourseVersionOut:
    current = get_active_course_version(store, course_id)
    if current is None:
        raise ResourceNotFoundError("Active course version for course", course_id)
    return current


@router.post("/course-versions/{version_id}/archive", response_model=CourseVersionArchiveResult)
def archive_version(
    version_id: str,
    actor_id: str | None = Depends(get_actor_id),
    store: EntityAccessor = Depends(get_store),
) -> CourseVersionArchiveResult:
    changed = archive_course_version(store, version_id, actor_id=actor_id)
    return CourseVersionArchiveResult(id=version_id, archived=True, changed=changed)
