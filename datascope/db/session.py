from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from datascope.settings import get_settings


_db_url = get_settings().resolved_db_url()

# SQLite connections are shared across the threadpool FastAPI runs sync routes on.
engine = create_engine(_db_url, connect_args={"check_same_thread": False} if _db_url.startswith("sqlite") else {})

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Request-scoped session carrying the caller's UserContext.

    ``bind_scope_user`` leaves the snapshot on ``request.state``; copying it to
    ``Session.info["scope_user"]`` is what lets the interceptor in
    ``datascope.db.filters`` scope queries issued through this session.
    """

    db = SessionLocal()
    try:
        user = getattr(getattr(request, "state", None), "scope_user", None)
        if user is not None:
            db.info["scope_user"] = user
        yield db
    finally:
        db.close()
