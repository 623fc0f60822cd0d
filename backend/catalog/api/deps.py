from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from catalog.db.accessor import EntityAccessor
from catalog.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> EntityAccessor:
    return EntityAccessor(db)


def get_actor_id(x_actor_id: str | None = Header(default=None, max_length=100)) -> str | None:
    # Authentication happens upstream; the gateway forwards the caller's id.
    if x_actor_id is None:
        return None
    return x_actor_id.strip() or None
