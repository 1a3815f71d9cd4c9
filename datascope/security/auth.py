from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from datascope.models.scope import User
from datascope.scope.types import UserContext
from datascope.settings import Settings

logger = logging.getLogger(__name__)


def _reject(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def extract_user_id(request: Request, settings: Settings) -> int | None:
    """
    Read the caller's user id from the configured bearer header.

    The demo token is the numeric id of a row in ``sys_user``. Returns None
    when the header is absent so anonymous requests reach routes that do not
    need a scope user; a present but malformed header is a 400.
    """

    raw = request.headers.get(settings.authorization_header)
    if raw is None or raw == "":
        logger.debug("No credentials on %s %s", request.method, request.url.path)
        return None

    scheme, _, token = raw.partition(" ")
    if scheme != settings.bearer_prefix:
        logger.warning("Rejected credentials with scheme %r on %s %s", scheme, request.method, request.url.path)
        raise _reject(f"Invalid {settings.authorization_header}. Expected '{settings.bearer_prefix} <token>'.")

    token = token.strip()
    if not token.isdigit():
        logger.warning("Rejected non-numeric bearer token on %s %s", request.method, request.url.path)
        raise _reject("Bearer token must be a numeric user id.")

    return int(token)


def load_user(db: Session, user_id: int) -> User:
    """Fetch an active user together with the department and roles the scope snapshot needs."""

    stmt = (
        select(User)
        .where(User.id == user_id, User.is_active.is_(True))
        .options(selectinload(User.department), selectinload(User.roles))
    )
    user = db.scalars(stmt).one_or_none()
    if user is None:
        logger.info("Unknown or inactive user id=%s", user_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")
    return user


def to_user_context(user: User) -> UserContext:
    """Snapshot of a loaded user in the form the data scope resolver reads."""

    roles = sorted(user.roles, key=lambda r: r.id)
    return UserContext(
        user_id=user.id,
        dept_id=str(user.dept_id),
        role_id=",".join(str(r.id) for r in roles),
        tenant_id=user.tenant_id,
        account=user.account,
        user_name=user.name,
        role_name=",".join(r.name for r in roles),
    )
