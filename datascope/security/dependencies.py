from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from datascope.db.session import get_db
from datascope.scope.cache import InMemoryScopeCache
from datascope.scope.types import UserContext
from datascope.security.auth import extract_user_id, load_user, to_user_context
from datascope.settings import Settings, get_settings


def get_scope_cache(request: Request) -> InMemoryScopeCache:
    cache = getattr(request.app.state, "scope_cache", None)
    if cache is None:
        raise RuntimeError("Scope cache not initialized. Did app startup run?")
    return cache


def get_current_user(request: Request) -> UserContext:
    user = getattr(request.state, "scope_user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def bind_scope_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global dependency: resolve the caller into a ``UserContext``.

    Every route requires a user; route handlers need no changes because
    ``get_db`` hands the context to the data scope listeners.
    """

    user_id = extract_user_id(request, settings)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id")

    request.state.scope_user = to_user_context(load_user(db, user_id))


def require_role(role_name: str) -> Callable[[UserContext], UserContext]:
    def dependency(user: UserContext = Depends(get_current_user)) -> UserContext:
        roles = {r.strip() for r in (user.role_name or "").split(",")}
        if role_name not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient role. Required: {role_name}",
            )
        return user

    return dependency
