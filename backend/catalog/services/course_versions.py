"""Append-only version history of course catalog definitions.

Each course has at most one active version. Creating a version deactivates
whatever is currently active and inserts the successor already active; the two
writes are committed together while the course is locked, both in-process and
at the row level on databases that support ``SELECT ... FOR UPDATE``.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from threading import Lock

from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.accessor import EntityAccessor
from catalog.models.course import Course
from catalog.models.course_version import CourseVersion
from catalog.schemas.version import CourseVersionCreate
from catalog.services.audit import log_activity

logger = logging.getLogger(__name__)


class CourseLockRegistry:
    def __init__(self) -> None:
        self._locks: dict[str, Lock] = {}
        self._guard = Lock()

    def lock_for(self, course_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(course_id)
            if lock is None:
                lock = Lock()
                self._locks[course_id] = lock
            return lock

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


_course_locks = CourseLockRegistry()


def clear_course_locks() -> None:
    _course_locks.clear()


def create_course_version(
    store: EntityAccessor,
    course_id: str,
    payload: CourseVersionCreate,
    *,
    actor_id: str | None = None,
) -> str:
    """Snapshot ``payload`` as the next version of a course and make it active.

    The ``is_active`` flag of the payload is ignored. Any active versions found
    are deactivated first, including more than one if an earlier writer left
    the history inconsistent. Commits before returning the new version id.
    """
    with _course_locks.lock_for(course_id):
        try:
            course = store.lock_row(Course, course_id)
            if course is None:
                raise ResourceNotFoundError("Course", course_id)
            course_code = course.code

            existing = store.list_by_index(CourseVersion, CourseVersion.course_id == course_id)
            next_version = max((item.version for item in existing), default=0) + 1

            active_versions = [item for item in existing if item.is_active]
            if len(active_versions) > 1:
                logger.warning(
                    "Course %s had %d active versions; deactivating all before creating v%d",
                    course_code,
                    len(active_versions),
                    next_version,
                )
            for item in active_versions:
                store.patch(CourseVersion, item.id, is_active=False)

            version_id = store.insert(
                CourseVersion,
                course_id=course_id,
                version=next_version,
                title=payload.title,
                description=payload.description,
                credits=payload.credits,
                prerequisites=list(payload.prerequisites or []),
                is_active=True,
                created_at=datetime.now(timezone.utc),
            )
            log_activity(
                store.db,
                actor_id=actor_id,
                action="course_version.created",
                entity_type="course_version",
                entity_id=version_id,
                details={
                    "course_id": course_id,
                    "course_code": course_code,
                    "version": next_version,
                    "deactivated_version_ids": [item.id for item in active_versions],
                },
            )
            store.db.commit()
        except Exception:
            store.db.rollback()
            raise

    logger.info("Created version %d of course %s (%s)", next_version, course_code, version_id)
    return version_id


def list_course_versions(store: EntityAccessor, course_id: str) -> list[CourseVersion]:
    # An unknown course simply has no versions.
    return store.list_by_index(
        CourseVersion,
        CourseVersion.course_id == course_id,
        order_by=CourseVersion.version.asc(),
    )


def get_active_course_version(store: EntityAccessor, course_id: str) -> CourseVersion | None:
    current = store.get_by_index(
        CourseVersion,
        CourseVersion.course_id == course_id,
        CourseVersion.is_active.is_(True),
    )
    if current is not None:
        return current

    # Fall back to a linear scan when the compound lookup comes back empty.
    versions = store.list_by_index(CourseVersion, CourseVersion.course_id == course_id)
    current = next((item for item in versions if item.is_active), None)
    if current is not None:
        logger.warning("Active version of course %s found only by full scan", course_id)
    return current


def archive_course_version(
    store: EntityAccessor,
    version_id: str,
    *,
    actor_id: str | None = None,
) -> bool:
    """Deactivate a version. Returns False when it was already inactive."""
    course_version = store.get_by_id(CourseVersion, version_id)
    if course_version is None:
        raise ResourceNotFoundError("CourseVersion", version_id)

    if not course_version.is_active:
        return False

    try:
        store.patch(CourseVersion, version_id, is_active=False)
        log_activity(
            store.db,
            actor_id=actor_id,
            action="course_version.archived",
            entity_type="course_version",
            entity_id=version_id,
            details={"course_id": course_version.course_id, "version": course_version.version},
        )
        store.db.commit()
    except Exception:
        store.db.rollback()
        raise

    logger.info("Archived version %d of course %s", course_version.version, course_version.course_id)
    return True
