from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from datascope.db.session import get_db
from datascope.models.scope import ScopeData
from datascope.schemas.scope import ScopeRuleOut
from datascope.scope.cache import InMemoryScopeCache
from datascope.security.dependencies import get_scope_cache, require_role

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_role("administrator"))])


@router.get("/scope-rules", response_model=list[ScopeRuleOut])
def list_scope_rules(db: Session = Depends(get_db)) -> list[ScopeData]:
    stmt = select(ScopeData).where(ScopeData.is_deleted.is_(False)).order_by(ScopeData.id)
    return list(db.scalars(stmt).all())


@router.post("/scope-cache/clear", status_code=204)
def clear_scope_cache(cache: InMemoryScopeCache = Depends(get_scope_cache)) -> None:
    # Rule edits made directly in the store become visible after this.
    cache.clear()
