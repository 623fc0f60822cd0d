from fastapi import APIRouter, Depends, HTTPException, status
from catalog.api.deps import get_actor_id, get_store
from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.accessor import EntityAccessor
from catalog.models.course import Course
from catalog.schemas.course import CourseCreate, CourseOut, CourseUpdate
from catalog.services.audit import log_activity

router = APIRouter()


def _get_course_or_404(store: EntityAccessor, course_id: str) -> Course:
    course = store.get_by_id(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return course


@router.get("/", response_model=list[CourseOut])
def list_courses(store: EntityAccessor = Depends(get_store)) -> list[CourseOut]:
    return store.list_by_index(Course, order_by=Course.code)


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: str, store: EntityAccessor = Depends(get_store)) -> CourseOut:
    return _get_course_or_404(store, course_id)


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    actor_id: str | None = Depends(get_actor_id),
    store: EntityAccessor = Depends(get_store),
) -> CourseOut:
    existing = store.get_by_index(Course, Course.code == payload.code)
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists")
    course_id = store.insert(Course, **payload.model_dump())
    log_activity(
        store.db,
        actor_id=actor_id,
        action="course.created",
        entity_type="course",
        entity_id=course_id,
        details={
            "code": payload.code,
            "title": payload.title,
            "credits": payload.credits,
            "prerequisites_count": len(payload.prerequisites),
        },
    )
    store.db.commit()
    return _get_course_or_404(store, course_id)


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str,
    payload: CourseUpdate,
    actor_id: str | None = Depends(get_actor_id),
    store: EntityAccessor = Depends(get_store),
) -> CourseOut:
    course = _get_course_or_404(store, course_id)

    data = payload.model_dump(exclude_unset=True)
    if "code" in data:
        existing = store.get_by_index(Course, Course.code == data["code"], Course.id != course_id)
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists")

    if data:
        previous = {
            "code": course.code,
            "title": course.title,
            "credits": course.credits,
            "prerequisites_count": len(course.prerequisites or []),
        }
        try:
            store.patch(Course, course_id, **data)
            log_activity(
                store.db,
                actor_id=actor_id,
                action="course.updated",
                entity_type="course",
                entity_id=course_id,
                details={"changed_fields": sorted(data.keys()), "previous": previous},
            )
            store.db.commit()
        except Exception:
            store.db.rollback()
            raise
        store.db.refresh(course)
    return course


@router.delete("/{course_id}")
def delete_course(
    course_id: str,
    actor_id: str | None = Depends(get_actor_id),
    store: EntityAccessor = Depends(get_store),
) -> dict:
    course = _get_course_or_404(store, course_id)
    log_activity(
        store.db,
        actor_id=actor_id,
        action="course.deleted",
        entity_type="course",
        entity_id=course_id,
        details={"code": course.code},
    )
    store.db.delete(course)
    store.db.commit()
    return {"success": True}
