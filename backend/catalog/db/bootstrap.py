from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from catalog.db.base import Base
from catalog.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "courses": {"id", "code", "title", "credits", "prerequisites"},
    "course_versions": {"id", "course_id", "version", "prerequisites", "is_active", "created_at"},
    "activity_logs": {"id", "action", "entity_type", "entity_id", "details"},
}


def _ensure_course_prerequisites_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "courses" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("courses")}
        if "prerequisites" in column_names:
            return

        logger.info("Adding missing courses.prerequisites column")
        if connection.dialect.name == "postgresql":
            connection.execute(
                text("ALTER TABLE courses ADD COLUMN prerequisites JSONB NOT NULL DEFAULT '[]'::jsonb")
            )
            return

        connection.execute(text("ALTER TABLE courses ADD COLUMN prerequisites JSON NOT NULL DEFAULT '[]'"))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_course_prerequisites_column()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
