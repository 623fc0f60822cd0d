import os

# Point the application engine at an in-memory database before it is imported.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.api.deps import get_db
from catalog.db.accessor import EntityAccessor
from catalog.db.base import Base
from catalog.main import app
from catalog.models.course import Course
from catalog.services.course_versions import clear_course_locks


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db):
    return EntityAccessor(db)


@pytest.fixture()
def add_course(db):
    def _add(code, prerequisites=None, title=None, credits=3):
        course = Course(
            code=code,
            title=title or f"{code} title",
            description="",
            credits=credits,
            prerequisites=[] if prerequisites is None else prerequisites,
        )
        db.add(course)
        db.commit()
        return course.id

    return _add


@pytest.fixture()
def client(session_factory):
    clear_course_locks()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_course_locks()
